from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import models
from app.core.exceptions import InviteCodeGenerationFailed, PermissionDenied, project_not_found
from app.core.logging import get_logger
from app.core.settings import settings
from app.db import begin_write, run_with_retry
from app.schemas import (
    BoardColumns,
    BoardMe,
    BoardMemberRead,
    BoardResponse,
    ProjectRead,
    ProjectRole,
    TaskRead,
)
from app.services.invite import generate_invite_code
from app.services.layout import to_read_columns

logger = get_logger(__name__)


def create_project(
    db: Session,
    project_name: str,
    display_name: str,
    *,
    code_factory: Callable[[], str] = generate_invite_code,
    attempts: Optional[int] = None,
) -> tuple[models.Project, models.Member]:
    """
    Create a project, its creator and the creator's OWNER membership.

    Invite codes are random, so a collision with an existing code is retried
    with a fresh one; each try runs in a savepoint so the member row survives
    a failed insert.
    """
    attempts = attempts or settings.invite_code_attempts

    def _create() -> tuple[models.Project, models.Member]:
        begin_write(db)
        member = models.Member(display_name=display_name)
        db.add(member)
        db.flush()

        for attempt in range(1, attempts + 1):
            code = code_factory()
            try:
                with db.begin_nested():
                    project = models.Project(name=project_name, invite_code=code)
                    project.memberships.append(
                        models.ProjectMember(member_id=member.id, role=ProjectRole.OWNER.value)
                    )
                    db.add(project)
                    db.flush()
            except IntegrityError:
                logger.info("invite_code_collision", attempt=attempt)
                continue
            db.commit()
            return project, member

        logger.error("invite_code_generation_failed", attempts=attempts)
        raise InviteCodeGenerationFailed(
            "Could not generate a unique invite code", details={"attempts": attempts}
        )

    project, member = run_with_retry(db, "create_project", _create)
    logger.info("project_created", project_id=project.id, owner_id=member.id)
    return project, member


def join_project(
    db: Session, invite_code: str, display_name: str
) -> tuple[models.Project, models.Member]:
    def _join() -> tuple[models.Project, models.Member]:
        begin_write(db)
        project = (
            db.query(models.Project)
            .filter(models.Project.invite_code == invite_code.upper())
            .first()
        )
        if project is None:
            raise project_not_found()

        member = models.Member(display_name=display_name)
        db.add(member)
        db.flush()
        db.add(
            models.ProjectMember(
                project_id=project.id, member_id=member.id, role=ProjectRole.MEMBER.value
            )
        )
        db.commit()
        return project, member

    project, member = run_with_retry(db, "join_project", _join)
    logger.info("project_joined", project_id=project.id, member_id=member.id)
    return project, member


def get_membership(db: Session, project_id: str, member_id: str) -> models.ProjectMember | None:
    return db.get(models.ProjectMember, (project_id, member_id))


def assert_member_in_project(db: Session, project_id: str, member_id: str) -> models.ProjectMember:
    membership = get_membership(db, project_id, member_id)
    if membership is None:
        raise PermissionDenied(
            "Not a member of this project", details={"projectId": project_id}
        )
    return membership


def list_members(db: Session, project_id: str) -> list[BoardMemberRead]:
    rows = (
        db.query(models.ProjectMember, models.Member)
        .join(models.Member, models.Member.id == models.ProjectMember.member_id)
        .filter(models.ProjectMember.project_id == project_id)
        .order_by(models.ProjectMember.joined_at.asc())
        .all()
    )
    return [
        BoardMemberRead(id=member.id, display_name=member.display_name, role=link.role)
        for link, member in rows
    ]


def load_board(db: Session, project_id: str, member_id: str) -> BoardResponse:
    # membership first: an unknown project looks the same as a foreign one
    assert_member_in_project(db, project_id, member_id)

    project = db.get(models.Project, project_id)
    if project is None:
        raise project_not_found(project_id)

    tasks = (
        db.query(models.Task)
        .filter(models.Task.project_id == project_id)
        .order_by(
            models.Task.status.asc(),
            models.Task.order.asc(),
            models.Task.created_at.asc(),
        )
        .all()
    )
    columns = to_read_columns(tasks)

    return BoardResponse(
        project=ProjectRead.model_validate(project),
        me=BoardMe(member_id=member_id),
        members=list_members(db, project_id),
        tasks=[TaskRead.model_validate(t) for t in tasks],
        columns=BoardColumns(**{status.value: items for status, items in columns.items()}),
    )
