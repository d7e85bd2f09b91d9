"""Task store: the aggregate that owns every task and applies user commands.

Usage::

    store = TaskStore()
    store.create(draft)             # fresh id, progress 0
    store.update(tid, draft)        # full overwrite, duration recomputed
    store.patch(tid, name="x")      # partial overwrite
    store.set_progress(tid, 50)
    store.shift(tid, 3)             # move both dates, keep duration
    store.delete(tid)               # also scrubs tid from every dependency list

Each command returns the new immutable snapshot. Saving it is the caller's
job (see ``pmplanner.storage.save_store``).
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date
from typing import Any

from pmplanner import log
from pmplanner.dates import DateRange, add_days, calculate_duration, get_date_range
from pmplanner.errors import TaskNotFoundError
from pmplanner.tasks.model import Category, Task, TaskDraft, TaskStats
from pmplanner.tasks.validate import validate_task_dependencies

Snapshot = tuple[Task, ...]

_PATCHABLE = frozenset(
    {"name", "start_date", "end_date", "progress", "category", "dependencies", "description", "assignee"}
)


def _time_based_id() -> str:
    return str(time.time_ns() // 1_000_000)


class TaskStore:
    def __init__(
        self,
        tasks: Iterable[Task] = (),
        *,
        id_factory: Callable[[], str] = _time_based_id,
    ) -> None:
        self._tasks: Snapshot = tuple(tasks)
        self._id_factory = id_factory

    # ── queries ──────────────────────────────────────────────────

    @property
    def tasks(self) -> Snapshot:
        return self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self):
        return iter(self._tasks)

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def require(self, task_id: str) -> Task:
        task = self.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def stats(self) -> TaskStats:
        return TaskStats.from_tasks(self._tasks)

    def date_range(self, today: date | None = None) -> DateRange:
        return get_date_range(self._tasks, today=today)

    def diagnostics(self) -> list[str]:
        return validate_task_dependencies(self._tasks)

    # ── commands ─────────────────────────────────────────────────

    def create(self, draft: TaskDraft) -> Snapshot:
        task = Task(
            id=self._next_id(),
            name=draft.name,
            start_date=draft.start_date,
            end_date=draft.end_date,
            duration=calculate_duration(draft.start_date, draft.end_date),
            progress=0,
            category=Category.parse(draft.category),
            dependencies=tuple(draft.dependencies),
            description=draft.description,
            assignee=draft.assignee,
        )
        self._tasks = self._tasks + (task,)
        log.debug(f"Task {task.id}: created ({task.name})")
        return self._tasks

    def update(self, task_id: str, draft: TaskDraft) -> Snapshot:
        """Overwrite every form field of *task_id*; id and progress are kept."""
        return self.patch(
            task_id,
            name=draft.name,
            start_date=draft.start_date,
            end_date=draft.end_date,
            category=draft.category,
            description=draft.description,
            assignee=draft.assignee,
            dependencies=draft.dependencies,
        )

    def patch(self, task_id: str, **changes: Any) -> Snapshot:
        unknown = set(changes) - _PATCHABLE
        if unknown:
            raise TypeError(f"Cannot update task field(s): {', '.join(sorted(unknown))}")
        if "category" in changes:
            changes["category"] = Category.parse(changes["category"])
        if "dependencies" in changes:
            changes["dependencies"] = tuple(changes["dependencies"])
        return self._replace(task_id, lambda t: _with_duration(replace(t, **changes)))

    def set_progress(self, task_id: str, progress: int) -> Snapshot:
        return self._replace(task_id, lambda t: replace(t, progress=progress))

    def shift(self, task_id: str, days: int) -> Snapshot:
        """Reschedule *task_id* by *days* (negative moves it earlier)."""
        return self._replace(
            task_id,
            lambda t: replace(
                t,
                start_date=add_days(t.start_date, days),
                end_date=add_days(t.end_date, days),
            ),
        )

    def delete(self, task_id: str) -> Snapshot:
        self.require(task_id)
        remaining: list[Task] = []
        for t in self._tasks:
            if t.id == task_id:
                continue
            if t.depends_on(task_id):
                t = replace(t, dependencies=tuple(d for d in t.dependencies if d != task_id))
            remaining.append(t)
        self._tasks = tuple(remaining)
        log.debug(f"Task {task_id}: deleted, dependency references scrubbed")
        return self._tasks

    # ── internals ────────────────────────────────────────────────

    def _replace(self, task_id: str, change: Callable[[Task], Task]) -> Snapshot:
        self.require(task_id)
        self._tasks = tuple(change(t) if t.id == task_id else t for t in self._tasks)
        log.debug(f"Task {task_id}: updated")
        return self._tasks

    def _next_id(self) -> str:
        taken = {t.id for t in self._tasks}
        candidate = self._id_factory()
        while candidate in taken:
            candidate = str(int(candidate) + 1) if candidate.isdigit() else f"{candidate}-1"
        return candidate


def _with_duration(task: Task) -> Task:
    return replace(task, duration=calculate_duration(task.start_date, task.end_date))
