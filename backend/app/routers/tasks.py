from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.rate_limit import RATE_LIMITS, limiter
from app.db import get_db
from app.routers.auth import get_current_member_id
from app.schemas import OkResponse, TaskPatch, TaskRead, TaskResponse
from app.services import board_engine

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.patch("/{task_id}", response_model=TaskResponse)
@limiter.limit(RATE_LIMITS["task_writes"])
def patch_task(
    request: Request,
    task_id: str,
    payload: TaskPatch,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id),
) -> TaskResponse:
    task = board_engine.patch_task(db, task_id, member_id, payload.changes())
    return TaskResponse(task=TaskRead.model_validate(task))


@router.delete("/{task_id}", response_model=OkResponse)
@limiter.limit(RATE_LIMITS["task_writes"])
def delete_task(
    request: Request,
    task_id: str,
    db: Session = Depends(get_db),
    member_id: str = Depends(get_current_member_id),
) -> OkResponse:
    # deleting twice is fine: the second call finds nothing and still answers ok
    board_engine.delete_task(db, task_id, member_id)
    return OkResponse()
