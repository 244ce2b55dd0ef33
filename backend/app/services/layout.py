"""
Pure board layout helpers.

A board is three columns (TODO, DOING, DONE). Stored ``order`` values only
have to be sortable; everything shown to a user or sent back as a layout is
derived here by sorting and renumbering each column 0..n-1.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Protocol, TypeVar

from app.schemas.enums import STATUSES, TaskStatus
from app.schemas.task import TaskRead


class Orderable(Protocol):
    id: Any
    status: Any
    order: int
    created_at: datetime


T = TypeVar("T", bound=Orderable)

Columns = Dict[TaskStatus, List[TaskRead]]


def empty_columns() -> Dict[TaskStatus, list]:
    return {status: [] for status in STATUSES}


def _created_key(value: datetime | None) -> float:
    if value is None:
        return 0.0
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def sort_key(task: Orderable) -> tuple:
    return (task.order, _created_key(task.created_at), str(task.id))


def group_and_sort(tasks: Iterable[T]) -> Dict[TaskStatus, List[T]]:
    """Partition tasks by status and sort each column.

    Sorted by ``order``, ties broken by creation time and then id, so the
    result is a total order even when stored orders collide.
    """
    columns: Dict[TaskStatus, List[T]] = empty_columns()
    for task in tasks:
        columns[TaskStatus(task.status)].append(task)
    for status in STATUSES:
        columns[status].sort(key=sort_key)
    return columns


def normalize_orders(columns: Columns) -> Columns:
    """Renumber every column 0..n-1 and stamp each task with its column's status."""
    result: Columns = empty_columns()
    for status in STATUSES:
        result[status] = [
            task
            if task.status == status and task.order == index
            else task.model_copy(update={"status": status, "order": index})
            for index, task in enumerate(columns.get(status, []))
        ]
    return result


def flatten_layout(columns: Columns) -> List[dict]:
    """Build the full layout payload ``[{id, status, order}]`` for a board PUT."""
    updates: List[dict] = []
    for status in STATUSES:
        for index, task in enumerate(columns.get(status, [])):
            updates.append({"id": task.id, "status": status.value, "order": index})
    return updates


def find_column(columns: Columns, task_id: str) -> TaskStatus | None:
    for status in STATUSES:
        if any(task.id == task_id for task in columns.get(status, [])):
            return status
    return None


def move_task(columns: Columns, task_id: str, status: TaskStatus, index: int) -> Columns:
    """Move a task to ``index`` in the ``status`` column (within or across columns).

    The index is clamped to the target column; the result is normalized.
    Raises KeyError when the task is not on the board.
    """
    source = find_column(columns, task_id)
    if source is None:
        raise KeyError(task_id)

    moved: Columns = {s: list(columns.get(s, [])) for s in STATUSES}
    position = next(i for i, task in enumerate(moved[source]) if task.id == task_id)
    task = moved[source].pop(position)

    target = moved[TaskStatus(status)]
    index = max(0, min(index, len(target)))
    target.insert(index, task)
    return normalize_orders(moved)


def remove_task(columns: Columns, task_id: str) -> Columns:
    remaining = {s: [t for t in columns.get(s, []) if t.id != task_id] for s in STATUSES}
    return normalize_orders(remaining)


def append_task(columns: Columns, task: TaskRead) -> Columns:
    status = TaskStatus(task.status)
    extended = {s: list(columns.get(s, [])) for s in STATUSES}
    extended[status].append(task)
    return normalize_orders(extended)


def replace_task(columns: Columns, task: TaskRead) -> Columns:
    """Swap in a fresh copy of a task, keeping its current column position."""
    return {
        s: [
            task.model_copy(update={"status": existing.status, "order": existing.order})
            if existing.id == task.id
            else existing
            for existing in columns.get(s, [])
        ]
        for s in STATUSES
    }


def to_read_columns(tasks: Iterable[Any]) -> Columns:
    """ORM rows -> normalized columns of ``TaskRead``."""
    grouped = group_and_sort(tasks)
    return normalize_orders(
        {status: [TaskRead.model_validate(t) for t in grouped[status]] for status in STATUSES}
    )
