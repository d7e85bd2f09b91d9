"""Task, TaskDraft and TaskStats data models shared by the store, validator and views."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class Category(str, Enum):
    PLANNING = "planning"
    DEVELOPMENT = "development"
    TESTING = "testing"
    DEPLOYMENT = "deployment"

    @classmethod
    def parse(cls, value: object) -> Category:
        """Map a raw value onto a category; anything unrecognised is development."""
        raw = value.value if isinstance(value, Category) else str(value or "").strip().lower()
        match raw:
            case "planning":
                return cls.PLANNING
            case "development":
                return cls.DEVELOPMENT
            case "testing":
                return cls.TESTING
            case "deployment":
                return cls.DEPLOYMENT
            case _:
                return cls.DEVELOPMENT


class DependencyType(str, Enum):
    """Dependency relations; only finish-to-start is ever evaluated."""

    FINISH_TO_START = "finish-to-start"
    START_TO_START = "start-to-start"
    FINISH_TO_FINISH = "finish-to-finish"
    START_TO_FINISH = "start-to-finish"


@dataclass(frozen=True)
class Task:
    id: str
    name: str
    start_date: date
    end_date: date
    duration: int = 1
    progress: int = 0
    category: Category = Category.DEVELOPMENT
    dependencies: tuple[str, ...] = ()
    description: str = ""
    assignee: str = ""

    def depends_on(self, task_id: str) -> bool:
        return task_id in self.dependencies


@dataclass(frozen=True)
class TaskDraft:
    """User-submitted fields for creating or fully editing a task."""

    name: str
    start_date: date
    end_date: date
    category: Category = Category.DEVELOPMENT
    description: str = ""
    assignee: str = ""
    dependencies: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TaskStats:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    not_started: int = 0

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> TaskStats:
        items = list(tasks)
        return cls(
            total=len(items),
            completed=sum(1 for t in items if t.progress == 100),
            in_progress=sum(1 for t in items if 0 < t.progress < 100),
            not_started=sum(1 for t in items if t.progress == 0),
        )
