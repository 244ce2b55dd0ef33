from typing import Annotated, Optional

from pydantic import ConfigDict, Field, StringConstraints, model_validator

from app.schemas.base import CamelModel, UtcDatetime
from app.schemas.enums import TaskStatus

MAX_ORDER = 1_000_000

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=2000)]
NonEmptyId = Annotated[str, StringConstraints(min_length=1)]


class TaskCreate(CamelModel):
    title: Title
    description: Optional[Description] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[UtcDatetime] = None
    assignee_id: Optional[NonEmptyId] = None


class TaskPatch(CamelModel):
    """Partial update. Only keys present in the body are applied; ``null`` clears."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[Title] = None
    description: Optional[Description] = None
    status: Optional[TaskStatus] = None
    order: Optional[int] = Field(default=None, ge=0, le=MAX_ORDER)
    due_date: Optional[UtcDatetime] = None
    assignee_id: Optional[NonEmptyId] = None

    @model_validator(mode="after")
    def _not_empty(self) -> "TaskPatch":
        if not self.model_fields_set:
            raise ValueError("EMPTY_BODY")
        for name in ("title", "status", "order"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields explicitly sent by the client, keyed by attribute name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class TaskRead(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    order: int
    due_date: Optional[UtcDatetime] = None
    assignee_id: Optional[str] = None
    creator_id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TaskResponse(CamelModel):
    task: TaskRead
