"""Persistence: JSON encoding of the task snapshot and a file-backed slot for it.

The on-disk layout is a JSON array of task records with camelCase keys and
``startDate``/``endDate`` as ISO-8601 UTC timestamps, e.g.::

    [{"id": "1704067200000", "name": "Design", "startDate": "2024-01-01T00:00:00.000Z",
      "endDate": "2024-01-05T00:00:00.000Z", "duration": 5, "progress": 0,
      "category": "planning", "dependencies": [], "description": "", "assignee": ""}]
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path
from typing import Any

from pmplanner import log
from pmplanner.dates import calculate_duration
from pmplanner.errors import StorageDecodeError
from pmplanner.io_utils import PathLike, read_text, write_text
from pmplanner.store import TaskStore
from pmplanner.tasks.model import Category, Task


class FileBackend:
    """Single-slot text storage on disk: ``load()`` the last ``save()``."""

    def __init__(self, path: PathLike) -> None:
        self.path = path if isinstance(path, Path) else Path(path)

    def load(self) -> str | None:
        if not self.path.is_file():
            return None
        try:
            return read_text(self.path)
        except (OSError, UnicodeDecodeError) as exc:
            log.warn(f"Could not read {self.path}: {exc}")
            return None

    def save(self, text: str) -> None:
        try:
            write_text(self.path, text)
        except OSError as exc:
            log.warn(f"Could not save tasks to {self.path}: {exc}")
            return
        log.debug(f"Saved tasks to {self.path}")


# ── encoding ─────────────────────────────────────────────────────


def encode_timestamp(value: date) -> str:
    day = value.date() if isinstance(value, datetime) else value
    return f"{day.isoformat()}T00:00:00.000Z"


def decode_timestamp(raw: Any) -> date:
    """Calendar date of an ISO timestamp or bare ``YYYY-MM-DD`` string."""
    if not isinstance(raw, str) or not raw.strip():
        raise StorageDecodeError(f"Expected an ISO date string, got {raw!r}")
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise StorageDecodeError(f"Invalid date {raw!r}") from exc


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "name": task.name,
        "startDate": encode_timestamp(task.start_date),
        "endDate": encode_timestamp(task.end_date),
        "duration": task.duration,
        "progress": task.progress,
        "category": task.category.value,
        "dependencies": list(task.dependencies),
        "description": task.description,
        "assignee": task.assignee,
    }


def task_from_record(raw: Any) -> Task:
    if not isinstance(raw, dict):
        raise StorageDecodeError(f"Task record must be an object, got {type(raw).__name__}")
    try:
        task_id = raw["id"]
        name = raw["name"]
        start = decode_timestamp(raw["startDate"])
        end = decode_timestamp(raw["endDate"])
    except KeyError as exc:
        raise StorageDecodeError(f"Task record missing field {exc.args[0]!r}") from exc

    deps = raw.get("dependencies") or []
    if not isinstance(deps, list):
        raise StorageDecodeError(f"Task {task_id}: dependencies must be a list")
    try:
        progress = int(raw.get("progress") or 0)
    except (TypeError, ValueError) as exc:
        raise StorageDecodeError(f"Task {task_id}: invalid progress {raw.get('progress')!r}") from exc

    return Task(
        id=str(task_id),
        name=str(name),
        start_date=start,
        end_date=end,
        duration=calculate_duration(start, end),
        progress=progress,
        category=Category.parse(raw.get("category")),
        dependencies=tuple(str(d) for d in deps),
        description=str(raw.get("description") or ""),
        assignee=str(raw.get("assignee") or ""),
    )


def encode_tasks(tasks: Iterable[Task]) -> str:
    return json.dumps([task_to_record(t) for t in tasks], indent=2) + "\n"


def decode_tasks(text: str) -> list[Task]:
    """Parse persisted state. Raises ``StorageDecodeError`` on malformed content."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StorageDecodeError(f"Stored tasks are not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise StorageDecodeError("Stored tasks must be a JSON array")
    tasks = [task_from_record(item) for item in data]
    latest = {t.id: i for i, t in enumerate(tasks)}
    if len(latest) == len(tasks):
        return tasks
    for i, t in enumerate(tasks):
        if latest[t.id] != i:
            log.warn(f"Dropping earlier record for duplicate task id {t.id} ({t.name})")
    return [t for i, t in enumerate(tasks) if latest[t.id] == i]


# ── store helpers ────────────────────────────────────────────────


def load_store(backend: FileBackend) -> TaskStore:
    """Build the store from persisted state; no state or bad state means empty."""
    text = backend.load()
    if text is None:
        return TaskStore()
    try:
        tasks = decode_tasks(text)
    except StorageDecodeError as exc:
        log.warn(f"Ignoring unreadable task data in {backend.path}: {exc}")
        return TaskStore()
    log.debug(f"Loaded {len(tasks)} task(s) from {backend.path}")
    return TaskStore(tasks)


def save_store(backend: FileBackend, store: TaskStore) -> None:
    backend.save(encode_tasks(store.tasks))
