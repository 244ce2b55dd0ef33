from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Tuple

from app import models
from app.core.logging import get_logger
from app.db import Store, begin_write, create_store
from app.schemas import TaskStatus
from app.services import board_engine, project_service

logger = get_logger(__name__)

DEMO_PROJECT_NAME = "DEMO_Board"

DEMO_TASKS = [
    ("Write the onboarding checklist", TaskStatus.TODO),
    ("Collect feedback from the first sprint", TaskStatus.TODO),
    ("Review the release notes", TaskStatus.DOING),
    ("Set up the staging database", TaskStatus.DONE),
]


def _clear_demo(db) -> None:
    begin_write(db)
    demo_projects = db.query(models.Project).filter(models.Project.name == DEMO_PROJECT_NAME).all()
    member_ids = set()
    for project in demo_projects:
        member_ids.update(link.member_id for link in project.memberships)
        db.delete(project)
    db.flush()
    if member_ids:
        db.query(models.Member).filter(models.Member.id.in_(member_ids)).delete(synchronize_session=False)
    db.commit()


def seed_demo_board(store: Store | None = None) -> Tuple[models.Project, models.Member]:
    """Create a demo board with an owner, a second member and a few tasks."""
    store = store or create_store()
    store.create_all()
    db = store.session()
    try:
        _clear_demo(db)

        project, owner = project_service.create_project(db, DEMO_PROJECT_NAME, "Demo Owner")
        _, teammate = project_service.join_project(db, project.invite_code, "Demo Teammate")

        due = datetime.now(timezone.utc) + timedelta(days=7)
        for index, (title, status) in enumerate(DEMO_TASKS):
            board_engine.append_task(
                db,
                project.id,
                owner.id,
                title=title,
                status=status,
                due_date=due if status is TaskStatus.TODO else None,
                assignee_id=teammate.id if index % 2 else owner.id,
            )

        logger.info("demo_board_seeded", project_id=project.id, invite_code=project.invite_code)
        return project, owner
    finally:
        db.close()
