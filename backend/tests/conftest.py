# tests/conftest.py

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Добавляем корень backend в PYTHONPATH, чтобы импортировался пакет app
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.core.rate_limit import limiter  # noqa: E402
from app.db import create_store  # noqa: E402
from app.main import create_app  # noqa: E402


@pytest.fixture()
def store(tmp_path):
    """
    Отдельная SQLite-база на каждый тест, чтобы тесты не влияли друг на друга.
    A file (not :memory:) so that worker threads share it.
    """
    test_store = create_store(f"sqlite:///{tmp_path / 'taskboard-test.db'}", busy_timeout_seconds=10)
    test_store.create_all()
    yield test_store
    test_store.dispose()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    # Сброс rate limiter storage для изоляции тестов
    limiter.reset()
    yield


@pytest.fixture()
def db(store):
    session = store.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(store) -> TestClient:
    """
    Фикстура HTTP-клиента для тестирования FastAPI-приложения.
    """
    with TestClient(create_app(store)) as c:
        yield c
