from .board import BoardColumns, BoardMe, BoardResponse, LayoutItem, LayoutUpdate, OkResponse
from .enums import STATUSES, ProjectRole, TaskStatus
from .project import (
    BoardMemberRead,
    MemberRead,
    MembersResponse,
    ProjectCreate,
    ProjectJoin,
    ProjectMembershipResponse,
    ProjectRead,
)
from .task import TaskCreate, TaskPatch, TaskRead, TaskResponse

__all__ = [
    "BoardColumns",
    "BoardMe",
    "BoardMemberRead",
    "BoardResponse",
    "LayoutItem",
    "LayoutUpdate",
    "MemberRead",
    "MembersResponse",
    "OkResponse",
    "ProjectCreate",
    "ProjectJoin",
    "ProjectMembershipResponse",
    "ProjectRead",
    "ProjectRole",
    "STATUSES",
    "TaskCreate",
    "TaskPatch",
    "TaskRead",
    "TaskResponse",
    "TaskStatus",
]
