from typing import Annotated, List, Optional

from pydantic import Field, StringConstraints, field_validator

from app.schemas.base import CamelModel, UtcDatetime
from app.schemas.enums import ProjectRole

ProjectName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=80)]
DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=40)]


class ProjectCreate(CamelModel):
    project_name: ProjectName
    display_name: DisplayName


class ProjectJoin(CamelModel):
    invite_code: Annotated[str, StringConstraints(strip_whitespace=True, min_length=4, max_length=32)]
    display_name: DisplayName

    @field_validator("invite_code")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class ProjectRead(CamelModel):
    id: str
    name: str
    invite_code: str
    updated_at: Optional[UtcDatetime] = None


class MemberRead(CamelModel):
    id: str
    display_name: str


class BoardMemberRead(MemberRead):
    role: ProjectRole


class ProjectMembershipResponse(CamelModel):
    """Returned by create and join: the client stores ``member.id``."""

    project: ProjectRead
    member: MemberRead


class MembersResponse(CamelModel):
    members: List[BoardMemberRead] = Field(default_factory=list)
