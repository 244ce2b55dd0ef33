import sqlite3
import threading

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.core.exceptions import StoreContention
from app.core.settings import settings
from app.db import create_store, is_contention_error, run_with_retry
from app.main import create_app
from app.services import board_engine, project_service

from .utils import auth, column_titles, create_project, create_task, get_board


def _locked() -> OperationalError:
    return OperationalError("INSERT INTO task", {}, sqlite3.OperationalError("database is locked"))


class _FakePgError(Exception):
    pgcode = "40001"


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(settings, "store_retry_backoff_seconds", 0.0)
    monkeypatch.setattr(settings, "store_retry_attempts", 3)


def test_contention_errors_are_recognised():
    assert is_contention_error(_locked())
    assert is_contention_error(OperationalError("UPDATE task", {}, _FakePgError("serialization failure")))
    assert not is_contention_error(
        OperationalError("SELECT 1", {}, sqlite3.OperationalError("no such table: task"))
    )


def test_retries_until_success(db):
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise _locked()
        return "done"

    assert run_with_retry(db, "append_task", flaky) == "done"
    assert len(attempts) == 3


def test_exhausted_retries_raise_store_contention(db):
    def always_locked():
        raise _locked()

    with pytest.raises(StoreContention) as exc_info:
        run_with_retry(db, "apply_layout", always_locked)
    assert exc_info.value.status_code == 409
    assert exc_info.value.details == {"operation": "apply_layout", "attempts": 3}


def test_other_errors_are_not_retried(db):
    attempts = []

    def broken():
        attempts.append(1)
        raise OperationalError("SELECT 1", {}, sqlite3.OperationalError("no such table: task"))

    with pytest.raises(OperationalError):
        run_with_retry(db, "append_task", broken)

    def failing():
        attempts.append(1)
        raise KeyError("boom")

    with pytest.raises(KeyError):
        run_with_retry(db, "append_task", failing)
    assert len(attempts) == 2


class TestHeldWriteLock:
    """Another connection holds the SQLite write lock while requests arrive."""

    @pytest.fixture()
    def locked_store(self, tmp_path):
        store = create_store(f"sqlite:///{tmp_path / 'locked.db'}", busy_timeout_seconds=0.2)
        store.create_all()
        yield store
        store.dispose()

    @pytest.fixture()
    def locked_client(self, locked_store):
        with TestClient(create_app(locked_store)) as c:
            yield c

    @staticmethod
    def _hold_lock(store) -> sqlite3.Connection:
        conn = sqlite3.connect(store.sqlite_path, isolation_level=None, check_same_thread=False)
        conn.execute("BEGIN IMMEDIATE")
        return conn

    def test_writes_answer_409_and_reads_still_work(self, locked_store, locked_client):
        project, owner_id = create_project(locked_client)
        task = create_task(locked_client, project["id"], owner_id, "A")

        holder = self._hold_lock(locked_store)
        try:
            resp = locked_client.post(
                f"/api/projects/{project['id']}/tasks", json={"title": "B"}, headers=auth(owner_id)
            )
            assert resp.status_code == 409
            body = resp.json()
            assert body["error"] == "STORE_CONTENTION"
            assert body["operation"] == "append_task"
            assert body["attempts"] == 3

            resp = locked_client.put(
                f"/api/projects/{project['id']}/board",
                json={"tasks": [{"id": task["id"], "status": "DONE", "order": 0}]},
                headers=auth(owner_id),
            )
            assert resp.status_code == 409
            assert resp.json()["operation"] == "apply_layout"

            resp = locked_client.patch(f"/api/tasks/{task['id']}", json={"title": "A2"}, headers=auth(owner_id))
            assert resp.status_code == 409

            board = get_board(locked_client, project["id"], owner_id)
            assert column_titles(board, "TODO") == ["A"]
            assert locked_client.get("/health/ready").json()["status"] == "ready"
        finally:
            holder.rollback()
            holder.close()

        create_task(locked_client, project["id"], owner_id, "B")
        assert column_titles(get_board(locked_client, project["id"], owner_id), "TODO") == ["A", "B"]

    def test_lock_released_between_attempts_lets_the_write_through(self, locked_store, monkeypatch):
        monkeypatch.setattr(settings, "store_retry_attempts", 10)
        session = locked_store.session()
        try:
            project, owner = project_service.create_project(session, "Busy Board", "Owner")

            holder = self._hold_lock(locked_store)
            release = threading.Timer(0.3, holder.rollback)
            release.start()
            try:
                task = board_engine.append_task(session, project.id, owner.id, title="Late")
            finally:
                release.join()
                holder.close()
        finally:
            session.close()

        assert task.order == 0
