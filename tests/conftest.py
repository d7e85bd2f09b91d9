"""Shared fixtures for pm-planner tests.

File handling in tests:
- Use tmp_path for any directory or file creation so tests are isolated and cleaned up.
- Use pmplanner.io_utils read_text/write_text for consistent UTF-8 I/O.
"""

from __future__ import annotations

import itertools
from datetime import date
from pathlib import Path

import pytest

from pmplanner import log
from pmplanner.dates import calculate_duration
from pmplanner.store import TaskStore
from pmplanner.tasks.model import Category, Task


def _make_task(
    id: str,
    name: str = "",
    start: date | str = date(2024, 1, 1),
    end: date | str | None = None,
    progress: int = 0,
    category: Category | str = Category.DEVELOPMENT,
    dependencies: list[str] | tuple[str, ...] | None = None,
    description: str = "",
    assignee: str = "",
) -> Task:
    start_date = date.fromisoformat(start) if isinstance(start, str) else start
    if end is None:
        end_date = start_date
    else:
        end_date = date.fromisoformat(end) if isinstance(end, str) else end
    return Task(
        id=id,
        name=name or f"Task {id}",
        start_date=start_date,
        end_date=end_date,
        duration=calculate_duration(start_date, end_date),
        progress=progress,
        category=Category.parse(category),
        dependencies=tuple(dependencies or ()),
        description=description,
        assignee=assignee,
    )


def _counter_ids():
    counter = itertools.count(1)
    return lambda: str(next(counter))


@pytest.fixture
def make_task():
    """Factory fixture that creates Task instances (dates may be ISO strings)."""
    return _make_task


@pytest.fixture
def make_store():
    """Factory fixture for a TaskStore with predictable ids ("1", "2", ...)."""

    def _make(tasks: list[Task] | None = None) -> TaskStore:
        return TaskStore(tasks or [], id_factory=_counter_ids())

    return _make


@pytest.fixture
def store_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point PM_PLANNER_STORE at a fresh file under tmp_path."""
    path = tmp_path / "tasks.json"
    monkeypatch.setenv("PM_PLANNER_STORE", str(path))
    return path


@pytest.fixture(autouse=True)
def _reset_verbose():
    yield
    log.set_verbose(False)
