"""
Client-side board cache with optimistic writes and polling.

The cache is the client's working copy of one board. Local edits are applied
immediately and then sent to the server; a poll result never replaces the
cache while a write is in flight or when a local edit happened after the poll
started. Any failed write is followed by a forced refetch, so the server
state always wins in the end.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

from app.client.api import ApiError, BoardApi
from app.core.logging import get_logger
from app.schemas import TaskRead, TaskStatus
from app.services.layout import (
    Columns,
    append_task,
    empty_columns,
    flatten_layout,
    group_and_sort,
    move_task,
    normalize_orders,
    remove_task,
    replace_task,
)

logger = get_logger(__name__)

POLL_TICK_SECONDS = 2.0
MIN_REFRESH_INTERVAL_SECONDS = 5.0


class BoardSync:
    def __init__(
        self,
        api: BoardApi,
        project_id: str,
        *,
        clock: Callable[[], float] = time.monotonic,
        min_refresh_interval: float = MIN_REFRESH_INTERVAL_SECONDS,
    ):
        self.api = api
        self.project_id = project_id
        self.clock = clock
        self.min_refresh_interval = min_refresh_interval

        self.columns: Columns = empty_columns()
        self.project: Optional[dict] = None
        self.members: list[dict] = []
        self.error: Optional[str] = None
        self.write_in_flight = False
        self.last_loaded_at: Optional[float] = None

        # bumped by every local edit; the server has confirmed up to _confirmed_version
        self._local_version = 0
        self._confirmed_version = 0
        self._lock = threading.RLock()

    @property
    def dirty(self) -> bool:
        return self._local_version != self._confirmed_version

    # Reads

    def refresh(self, *, force: bool = False) -> bool:
        """Fetch the board and replace the cache. Returns False when the result was dropped."""
        started_version = self._local_version
        try:
            board = self.api.get_board(self.project_id)
        except ApiError as exc:
            self.error = exc.code
            logger.warning("board_refresh_failed", project_id=self.project_id, error=exc.code)
            return False

        with self._lock:
            stale = self.write_in_flight or self._local_version != started_version
            if stale and not force:
                logger.debug("board_refresh_dropped", project_id=self.project_id)
                return False
            tasks = [TaskRead.model_validate(t) for t in board["tasks"]]
            self.columns = normalize_orders(group_and_sort(tasks))
            self.project = board["project"]
            self.members = board["members"]
            self._confirmed_version = self._local_version
            self.last_loaded_at = self.clock()
            self.error = None
        return True

    def poll(self) -> bool:
        """One polling tick: refetch unless a write is pending or the last load is recent."""
        if self.write_in_flight:
            return False
        if (
            self.last_loaded_at is not None
            and self.clock() - self.last_loaded_at < self.min_refresh_interval
        ):
            return False
        return self.refresh()

    def run_polling(self, stop: threading.Event, tick: float = POLL_TICK_SECONDS) -> None:
        while not stop.wait(tick):
            self.poll()

    # Optimistic writes

    def move(self, task_id: str, status: TaskStatus | str, index: int) -> bool:
        """Drag-and-drop: move locally, then submit the whole renumbered board."""
        with self._lock:
            self.columns = move_task(self.columns, task_id, TaskStatus(status), index)
            self._local_version += 1
            layout = flatten_layout(self.columns)
        return self._write(lambda: self.api.put_layout(self.project_id, layout)) is not None

    def add_task(self, title: str, status: TaskStatus | str = TaskStatus.TODO, **fields: Any) -> Optional[TaskRead]:
        body = self._write(
            lambda: self.api.create_task(self.project_id, title, status=TaskStatus(status).value, **fields)
        )
        if body is None:
            return None
        task = TaskRead.model_validate(body)
        with self._lock:
            self.columns = append_task(self.columns, task)
        return task

    def edit_task(self, task_id: str, **fields: Any) -> Optional[TaskRead]:
        body = self._write(lambda: self.api.patch_task(task_id, **fields))
        if body is None:
            return None
        task = TaskRead.model_validate(body)
        if {"status", "order"} & set(fields):
            # the server placed it; local positions are stale
            self.refresh(force=True)
            return task
        with self._lock:
            self.columns = replace_task(self.columns, task)
        return task

    def delete_task(self, task_id: str) -> bool:
        if self._write(lambda: self.api.delete_task(task_id)) is None:
            return False
        with self._lock:
            self.columns = remove_task(self.columns, task_id)
        return True

    def _write(self, action: Callable[[], Any]) -> Any:
        with self._lock:
            self.write_in_flight = True
            version = self._local_version
        try:
            result = action()
        except ApiError as exc:
            logger.warning("board_write_failed", project_id=self.project_id, error=exc.code)
            with self._lock:
                self.write_in_flight = False
            # local state can no longer be trusted
            self.refresh(force=True)
            self.error = exc.code
            return None
        with self._lock:
            self.write_in_flight = False
            self._confirmed_version = max(self._confirmed_version, version)
            self.error = None
        return result
