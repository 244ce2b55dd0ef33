# Enums for the task board
from enum import Enum


class TaskStatus(str, Enum):
    """Board column a task sits in"""

    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"


class ProjectRole(str, Enum):
    """Role of project member"""

    OWNER = "OWNER"
    MEMBER = "MEMBER"


# Column order on the board, left to right
STATUSES: tuple[TaskStatus, ...] = (TaskStatus.TODO, TaskStatus.DOING, TaskStatus.DONE)


__all__ = [
    "TaskStatus",
    "ProjectRole",
    "STATUSES",
]
