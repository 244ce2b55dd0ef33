from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.rate_limit import RATE_LIMITS, limiter
from app.db import get_db
from app.routers.auth import get_current_member_id
from app.schemas import (
    BoardResponse,
    LayoutUpdate,
    MemberRead,
    MembersResponse,
    OkResponse,
    ProjectCreate,
    ProjectJoin,
    ProjectMembershipResponse,
    ProjectRead,
    TaskCreate,
    TaskRead,
    TaskResponse,
    TaskStatus,
)
from app.services import board_engine, project_service

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _membership_response(project, member) -> ProjectMembershipResponse:
    return ProjectMembershipResponse(
        project=ProjectRead.model_validate(project),
        member=MemberRead.model_validate(member),
    )


@router.post("", response_model=ProjectMembershipResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["project_operations"])
def create_project(
    request: Request,
    payload: ProjectCreate,
    db: Session = Depends(get_db),
) -> ProjectMembershipResponse:
    """
    Create a board. The caller becomes its OWNER and receives a fresh member id.

    - **projectName**: 1-80 characters
    - **displayName**: 1-40 characters
    """
    project, member = project_service.create_project(db, payload.project_name, payload.display_name)
    return _membership_response(project, member)


@router.post("/join", response_model=ProjectMembershipResponse)
@limiter.limit(RATE_LIMITS["project_operations"])
def join_project(
    request: Request,
    payload: ProjectJoin,
    db: Session = Depends(get_db),
) -> ProjectMembershipResponse:
    """Join a board by invite code (case-insensitive) as a new MEMBER."""
    project, member = project_service.join_project(db, payload.invite_code, payload.display_name)
    return _membership_response(project, member)


@router.get("/{project_id}/board", response_model=BoardResponse)
@limiter.limit(RATE_LIMITS["read_operations"])
def get_board(
    request: Request,
    project_id: str,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id),
) -> BoardResponse:
    return project_service.load_board(db, project_id, member_id)


@router.put("/{project_id}/board", response_model=OkResponse)
@limiter.limit(RATE_LIMITS["board_writes"])
def update_board_layout(
    request: Request,
    project_id: str,
    payload: LayoutUpdate,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id),
) -> OkResponse:
    """
    Atomically store the (status, order) of the listed tasks.

    The client sends its whole renumbered board; unknown or foreign ids
    reject the batch without changing anything.
    """
    board_engine.apply_layout(db, project_id, payload.tasks, member_id=member_id)
    return OkResponse()


@router.post("/{project_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["task_writes"])
def create_task(
    request: Request,
    project_id: str,
    payload: TaskCreate,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id),
) -> TaskResponse:
    task = board_engine.append_task(
        db,
        project_id,
        member_id,
        title=payload.title,
        description=payload.description,
        status=payload.status or TaskStatus.TODO,
        due_date=payload.due_date,
        assignee_id=payload.assignee_id,
    )
    return TaskResponse(task=TaskRead.model_validate(task))


@router.get("/{project_id}/members", response_model=MembersResponse)
@limiter.limit(RATE_LIMITS["read_operations"])
def list_project_members(
    request: Request,
    project_id: str,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id),
) -> MembersResponse:
    project_service.assert_member_in_project(db, project_id, member_id)
    return MembersResponse(members=project_service.list_members(db, project_id))
