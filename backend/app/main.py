from contextlib import asynccontextmanager
from typing import Optional

from app.core.exceptions import TaskBoardException
from app.core.logging import configure_logging, get_logger
from app.core.middleware import RequestLoggingMiddleware
from app.core.rate_limit import limiter
from app.core.settings import settings
from app.db import Store, create_store, get_db
from app.routers import api_router
from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

# Configure structured logging at module load
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.
    Creates the schema on startup and releases pooled connections on shutdown.
    """
    store: Store = app.state.store
    logger.info("application_starting", environment=settings.environment)
    if store.sqlite_path:
        logger.info("using_sqlite_database", path=store.sqlite_path)
    else:
        logger.info("using_database", url=store.engine.url.render_as_string(hide_password=True))
    store.create_all()
    logger.info("database_tables_created")

    yield

    store.dispose()
    logger.info("application_shutdown")


async def task_board_error_handler(request: Request, exc: TaskBoardException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "INVALID_BODY", "details": jsonable_encoder(exc.errors())},
    )


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # SlowAPIMiddleware calls this directly, so it must stay synchronous
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": "RATE_LIMITED", "detail": f"Rate limit exceeded: {exc.detail}"},
    )


def create_app(store: Optional[Store] = None) -> FastAPI:
    """Build the application around one store handle.

    The store is created once here (or passed in by tests and scripts) and
    reaches request handlers through ``app.state.store`` / ``get_db``.
    """
    app = FastAPI(title="Task Board Backend", version="0.1.0", lifespan=lifespan)
    app.state.store = store or create_store()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Member-Id"],
    )

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    # Request logging (must be added after other middleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(TaskBoardException, task_board_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

    @app.get("/health")
    def health_check():
        """Basic health check endpoint."""
        return {"status": "ok", "service": "taskboard-backend"}

    @app.get("/health/ready")
    def readiness_check(db: Session = Depends(get_db)):
        """Readiness check - verifies database connectivity."""
        try:
            db.execute(text("SELECT 1"))
            return {"status": "ready", "database": "connected"}
        except SQLAlchemyError as e:
            logger.warning("readiness_check_failed", error=str(e))
            return {"status": "not_ready", "database": "disconnected", "error": str(e)}

    app.include_router(api_router)
    return app


app = create_app()
