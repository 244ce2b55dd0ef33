"""
Custom exception classes for the task board.

Every exception carries a stable machine-readable ``code`` (what the client
switches on) and the HTTP status it maps to at the API boundary.
"""

from typing import Any, Optional

from fastapi import status


class TaskBoardException(Exception):
    """Base exception for the task board application."""

    code = "ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        code: Optional[str] = None,
    ):
        if code is not None:
            self.code = code
        self.message = message or self.code
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "detail": self.message}
        payload.update(self.details)
        return payload


class InvalidInput(TaskBoardException):
    """Raised when input validation fails."""

    code = "INVALID_BODY"
    status_code = status.HTTP_400_BAD_REQUEST


class MissingMemberId(TaskBoardException):
    """Raised when a request carries no member identity."""

    code = "MISSING_MEMBER_ID"
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(TaskBoardException):
    """Raised when the caller is not a member of the project."""

    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN


class ResourceNotFound(TaskBoardException):
    """Raised when a requested resource is not found."""

    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class TasksNotInProject(TaskBoardException):
    """A layout batch referenced tasks that are unknown or belong elsewhere."""

    code = "TASKS_NOT_IN_PROJECT"
    status_code = status.HTTP_400_BAD_REQUEST


class AssigneeNotInProject(TaskBoardException):
    code = "ASSIGNEE_NOT_IN_PROJECT"
    status_code = status.HTTP_400_BAD_REQUEST


class StoreContention(TaskBoardException):
    """The store stayed locked through every retry."""

    code = "STORE_CONTENTION"
    status_code = status.HTTP_409_CONFLICT


class InviteCodeGenerationFailed(TaskBoardException):
    code = "INVITE_CODE_GENERATION_FAILED"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def project_not_found(project_id: Any = None) -> ResourceNotFound:
    message = f"Project '{project_id}' not found" if project_id else "Project not found"
    return ResourceNotFound(message, code="PROJECT_NOT_FOUND")


def task_not_found(task_id: Any) -> ResourceNotFound:
    return ResourceNotFound(f"Task '{task_id}' not found", code="TASK_NOT_FOUND")
