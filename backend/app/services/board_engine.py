"""
Board ordering engine: the write side of the board.

Each (project, status) pair is one column. Tasks are appended at the end of
their column, moved by client-submitted layouts, patched field by field and
deleted without touching their siblings. Display order is never trusted to be
contiguous; ``app.services.layout`` re-derives it on every read.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app import models
from app.core.exceptions import AssigneeNotInProject, InvalidInput, TasksNotInProject, task_not_found
from app.core.logging import get_logger
from app.db import begin_write, run_with_retry
from app.schemas import LayoutItem, TaskStatus
from app.services.project_service import assert_member_in_project, get_membership

logger = get_logger(__name__)

PATCHABLE_FIELDS = ("title", "description", "status", "order", "due_date", "assignee_id")


def _lock_project(db: Session, project_id: str) -> None:
    """Serialize writers on one project for the rest of the transaction.

    Emits SELECT ... FOR UPDATE on server databases; SQLite already holds the
    database write lock from BEGIN IMMEDIATE and drops the clause.
    """
    (
        db.query(models.Project.id)
        .filter(models.Project.id == project_id)
        .with_for_update()
        .one_or_none()
    )


def _ensure_assignee(db: Session, project_id: str, assignee_id: Optional[str]) -> None:
    if assignee_id and get_membership(db, project_id, assignee_id) is None:
        raise AssigneeNotInProject(
            "Assignee is not a member of this project", details={"assigneeId": assignee_id}
        )


def next_order(db: Session, project_id: str, status: TaskStatus | str) -> int:
    """One past the largest order in the column, or 0 for an empty column."""
    current = (
        db.query(func.max(models.Task.order))
        .filter(
            models.Task.project_id == project_id,
            models.Task.status == TaskStatus(status).value,
        )
        .scalar()
    )
    return 0 if current is None else current + 1


def append_task(
    db: Session,
    project_id: str,
    creator_id: str,
    *,
    title: str,
    description: Optional[str] = None,
    status: TaskStatus | str = TaskStatus.TODO,
    due_date: Optional[datetime] = None,
    assignee_id: Optional[str] = None,
) -> models.Task:
    """Insert a task at the end of its column.

    The membership check, the max(order) read and the insert share one write
    transaction, so two concurrent appends to the same column cannot both see
    the same maximum.
    """
    status = TaskStatus(status)

    def _insert() -> models.Task:
        begin_write(db)
        _lock_project(db, project_id)
        assert_member_in_project(db, project_id, creator_id)
        _ensure_assignee(db, project_id, assignee_id)
        task = models.Task(
            project_id=project_id,
            title=title,
            description=description,
            status=status.value,
            order=next_order(db, project_id, status),
            due_date=due_date,
            assignee_id=assignee_id,
            creator_id=creator_id,
        )
        db.add(task)
        db.commit()
        return task

    task = run_with_retry(db, "append_task", _insert)
    logger.info("task_appended", project_id=project_id, task_id=task.id, status=task.status, order=task.order)
    return task


def apply_layout(
    db: Session,
    project_id: str,
    items: Iterable[LayoutItem],
    *,
    member_id: Optional[str] = None,
) -> int:
    """Persist a client layout: every (status, order) pair or none of them.

    Every id must be unique within the batch and belong to ``project_id``.
    Orders are written as given; the engine does not renumber. When
    ``member_id`` is given, membership is checked inside the same transaction.
    """
    items = list(items)
    ids = [item.id for item in items]

    def _commit() -> int:
        begin_write(db)
        _lock_project(db, project_id)
        if member_id is not None:
            assert_member_in_project(db, project_id, member_id)
        if not items:
            db.commit()
            return 0

        tasks = db.query(models.Task).filter(models.Task.id.in_(ids)).all()
        by_id = {task.id: task for task in tasks}
        foreign = sorted(
            {i for i in ids if i not in by_id or by_id[i].project_id != project_id}
        )
        if foreign or len(set(ids)) != len(ids):
            logger.warning(
                "layout_rejected", project_id=project_id, submitted=len(ids), foreign=len(foreign)
            )
            raise TasksNotInProject(
                "Layout references tasks outside this project", details={"taskIds": foreign}
            )
        for item in items:
            task = by_id[item.id]
            task.status = TaskStatus(item.status).value
            task.order = item.order
        db.commit()
        return len(items)

    updated = run_with_retry(db, "apply_layout", _commit)
    logger.info("layout_applied", project_id=project_id, updated=updated)
    return updated


def get_task_for_member(db: Session, task_id: str, member_id: str) -> models.Task:
    task = db.get(models.Task, task_id)
    if task is None:
        raise task_not_found(task_id)
    assert_member_in_project(db, task.project_id, member_id)
    return task


def patch_task(db: Session, task_id: str, member_id: str, changes: dict[str, Any]) -> models.Task:
    """Apply a partial update. ``changes`` holds only the keys the client sent."""
    unknown = set(changes) - set(PATCHABLE_FIELDS)
    if unknown:
        raise InvalidInput(
            "Unsupported task fields", details={"fields": sorted(unknown)}
        )

    def _update() -> models.Task:
        begin_write(db)
        task = get_task_for_member(db, task_id, member_id)
        # validated before any attribute is touched, so a rejected patch changes nothing
        if "assignee_id" in changes:
            _ensure_assignee(db, task.project_id, changes["assignee_id"])

        for name, value in changes.items():
            if name == "status" and value is not None:
                value = TaskStatus(value).value
            setattr(task, name, value)
        db.commit()
        return task

    task = run_with_retry(db, "patch_task", _update)
    logger.info("task_patched", task_id=task.id, fields=sorted(changes))
    return task


def delete_task(db: Session, task_id: str, member_id: str) -> bool:
    """Remove a task. Siblings keep their orders; unknown ids are a no-op."""

    def _delete() -> Optional[str]:
        begin_write(db)
        task = db.get(models.Task, task_id)
        if task is None:
            db.commit()
            return None
        assert_member_in_project(db, task.project_id, member_id)
        project_id = task.project_id
        db.delete(task)
        db.commit()
        return project_id

    project_id = run_with_retry(db, "delete_task", _delete)
    if project_id is None:
        return False
    logger.info("task_deleted", task_id=task_id, project_id=project_id)
    return True
