# backend/app/core/settings.py

import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # URL базы данных для SQLAlchemy
    db_url: str = "sqlite:///./taskboard.db"

    # Флаг debug-режима (цветные логи, SQL в лог)
    app_debug: bool = True

    # Простое обозначение окружения
    environment: str = "dev"

    # Флаг тестового режима (можно переопределить переменной окружения TESTING=1)
    testing: bool = False

    # Comma-separated list of origins allowed by CORS
    allowed_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Invite code collisions are retried this many times before giving up
    invite_code_attempts: int = 8

    # Append / layout commits retried on lock contention
    store_retry_attempts: int = 3
    store_retry_backoff_seconds: float = 0.05

    # How long a SQLite connection waits on a held write lock
    sqlite_busy_timeout_seconds: float = 30.0

    max_layout_items: int = 2000

    # Настройки pydantic-settings (v2)
    model_config = SettingsConfigDict(
        env_file=".env",              # читаем переменные из .env
        env_file_encoding="utf-8",
        extra="ignore",               # игнорируем любые лишние переменные
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


settings = Settings()

# Авто-определение тестового режима, если запущен pytest
if os.getenv("PYTEST_CURRENT_TEST"):
    settings.testing = True
