from typing import List

from pydantic import ConfigDict, Field

from app.core.settings import settings
from app.schemas.base import CamelModel
from app.schemas.enums import TaskStatus
from app.schemas.project import BoardMemberRead, ProjectRead
from app.schemas.task import MAX_ORDER, NonEmptyId, TaskRead


class LayoutItem(CamelModel):
    id: NonEmptyId
    status: TaskStatus
    order: int = Field(ge=0, le=MAX_ORDER)


class LayoutUpdate(CamelModel):
    tasks: List[LayoutItem] = Field(max_length=settings.max_layout_items)


class BoardColumns(CamelModel):
    """Tasks grouped per status, each column renumbered 0..n-1."""

    # keys are the status values themselves
    model_config = ConfigDict(alias_generator=None)

    TODO: List[TaskRead] = Field(default_factory=list)
    DOING: List[TaskRead] = Field(default_factory=list)
    DONE: List[TaskRead] = Field(default_factory=list)


class BoardMe(CamelModel):
    member_id: str


class BoardResponse(CamelModel):
    project: ProjectRead
    me: BoardMe
    members: List[BoardMemberRead]
    tasks: List[TaskRead]
    columns: BoardColumns


class OkResponse(CamelModel):
    ok: bool = True
