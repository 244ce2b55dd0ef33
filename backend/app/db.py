# backend/app/db.py

import time
from dataclasses import dataclass
from datetime import timezone
from pathlib import Path
from typing import Callable, Iterator, Tuple, TypeVar

from app.core.exceptions import StoreContention
from app.core.logging import get_logger
from app.core.settings import settings
from sqlalchemy import DateTime, create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator
from starlette.requests import Request

logger = get_logger(__name__)

Base = declarative_base()

T = TypeVar("T")

# Postgres SQLSTATEs for serialization failure / deadlock
_RETRYABLE_PGCODES = {"40001", "40P01"}
_RETRYABLE_MESSAGES = ("database is locked", "database table is locked", "deadlock", "could not serialize")


def _normalize_db_url(raw_url: str) -> Tuple[str, str | None]:
    """
    Ensure sqlite URLs are absolute so we don't accidentally create multiple files
    when running commands from different working directories.
    """
    url = make_url(raw_url)
    resolved_path: str | None = None

    if url.drivername.startswith("sqlite") and url.database not in (None, "", ":memory:"):
        path = Path(url.database)
        if not path.is_absolute():
            # backend/app/db.py -> backend/
            base_dir = Path(__file__).resolve().parents[1]
            path = (base_dir / path).resolve()
        resolved_path = str(path)
        url = url.set(database=resolved_path)

    # render_as_string with hide_password=False to keep real password (str(url) masks it with ***)
    return url.render_as_string(hide_password=False), resolved_path


IMMEDIATE_OPTION = "sqlite_immediate"


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetimes stored as UTC.

    SQLite keeps no offset, so values are converted to UTC on the way in and
    tagged as UTC on the way out; naive input is taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def _install_sqlite_locking(engine: Engine, busy_timeout_seconds: float) -> None:
    """Own SQLite transaction boundaries so writers can take the lock up front.

    pysqlite defers BEGIN until the first write, so a "read max(order), then
    insert" sequence could interleave between two connections. Reads keep a
    deferred BEGIN; connections opened by ``begin_write`` emit BEGIN IMMEDIATE,
    which serializes writers. The busy timeout makes the second writer wait
    instead of failing straight away.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # let SQLAlchemy's "begin" event own the transaction boundaries
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_seconds * 1000)}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(IMMEDIATE_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


@dataclass
class Store:
    """The process-wide store handle: one engine plus its session factory."""

    engine: Engine
    session_factory: sessionmaker
    sqlite_path: str | None = None

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self) -> None:
        import app.models  # noqa: F401 - register tables on Base.metadata

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        import app.models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def create_store(
    db_url: str | None = None,
    *,
    busy_timeout_seconds: float | None = None,
    echo: bool = False,
) -> Store:
    url, sqlite_path = _normalize_db_url(db_url or settings.db_url)
    busy_timeout = (
        settings.sqlite_busy_timeout_seconds if busy_timeout_seconds is None else busy_timeout_seconds
    )

    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False, "timeout": busy_timeout} if is_sqlite else {}
    engine = create_engine(url, echo=echo, future=True, connect_args=connect_args)
    if is_sqlite:
        _install_sqlite_locking(engine, busy_timeout)

    session_factory = sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True
    )
    return Store(engine=engine, session_factory=session_factory, sqlite_path=sqlite_path)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.store.session()
    try:
        yield db
    finally:
        db.close()


def is_contention_error(exc: OperationalError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) in _RETRYABLE_PGCODES:
        return True
    message = str(orig if orig is not None else exc).lower()
    return any(fragment in message for fragment in _RETRYABLE_MESSAGES)


def begin_write(db: Session) -> None:
    """Open the session's write transaction.

    An open read transaction is committed first. On SQLite the new one starts
    with BEGIN IMMEDIATE, so a held lock surfaces here as "database is locked";
    other databases ignore the option and rely on row locks.
    """
    if db.in_transaction():
        db.commit()
    db.connection(execution_options={IMMEDIATE_OPTION: True})


def run_with_retry(db: Session, operation: str, fn: Callable[[], T]) -> T:
    """Run ``fn`` (which must commit its own transaction), retrying on lock contention.

    ``fn`` should call ``begin_write`` first so that acquiring the lock is part
    of the retried unit. Every failed attempt is rolled back before the next
    one, so a retry starts from the committed state. Any other error is rolled
    back and re-raised.
    """
    attempts = max(1, settings.store_retry_attempts)
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except OperationalError as exc:
            db.rollback()
            if not is_contention_error(exc):
                raise
            if attempt == attempts:
                logger.warning("store_contention_exhausted", operation=operation, attempts=attempts)
                raise StoreContention(
                    f"Store stayed busy during '{operation}'",
                    details={"operation": operation, "attempts": attempts},
                ) from exc
            logger.info("store_contention_retry", operation=operation, attempt=attempt)
            time.sleep(settings.store_retry_backoff_seconds * attempt)
        except Exception:
            db.rollback()
            raise
    raise AssertionError("unreachable")
