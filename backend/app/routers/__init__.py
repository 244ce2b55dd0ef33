from fastapi import APIRouter

from . import auth, projects, tasks

api_router = APIRouter()
api_router.include_router(projects.router)
api_router.include_router(tasks.router)

__all__ = [
    "api_router",
    "auth",
    "projects",
    "tasks",
]
