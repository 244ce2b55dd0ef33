from .member import Member
from .project import Project
from .project_member import ProjectMember
from .task import Task

__all__ = [
    "Member",
    "Project",
    "ProjectMember",
    "Task",
]
