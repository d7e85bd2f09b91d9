"""Horizontal layout of task bars against a timeline, plus category styling."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from pmplanner.dates import days_between
from pmplanner.errors import LayoutError
from pmplanner.tasks.model import Category, Task


@dataclass(frozen=True)
class TaskPosition:
    left: float
    width: float

    @property
    def right(self) -> float:
        return self.left + self.width


@dataclass(frozen=True)
class DependencyLink:
    """Arrow from the end of a dependency's bar to the start of its dependent's bar."""

    from_id: str
    to_id: str
    start_x: float
    end_x: float


@dataclass(frozen=True)
class CategoryStyle:
    fill: str
    border: str
    text: str


_CATEGORY_STYLES: dict[Category, CategoryStyle] = {
    Category.PLANNING: CategoryStyle(fill="#3B82F6", border="#2563EB", text="#1E3A8A"),
    Category.DEVELOPMENT: CategoryStyle(fill="#22C55E", border="#16A34A", text="#14532D"),
    Category.TESTING: CategoryStyle(fill="#F59E0B", border="#D97706", text="#78350F"),
    Category.DEPLOYMENT: CategoryStyle(fill="#EF4444", border="#DC2626", text="#7F1D1D"),
}

_CATEGORY_LABELS: dict[Category, str] = {
    Category.PLANNING: "Planning",
    Category.DEVELOPMENT: "Development",
    Category.TESTING: "Testing",
    Category.DEPLOYMENT: "Deployment",
}


def category_style(category: object) -> CategoryStyle:
    """Colours for *category*; unknown values get the development colours."""
    return _CATEGORY_STYLES[Category.parse(category)]


def category_label(category: object) -> str:
    return _CATEGORY_LABELS[Category.parse(category)]


def day_width(timeline_start: date, timeline_end: date, container_width: float) -> float:
    total_days = days_between(timeline_end, timeline_start)
    if total_days <= 0:
        raise LayoutError(
            f"Timeline must span at least one day (got {timeline_start} .. {timeline_end})"
        )
    return container_width / total_days


def calculate_task_position(
    task: Task,
    timeline_start: date,
    timeline_end: date,
    container_width: float,
) -> TaskPosition:
    """Map *task* onto ``[0, container_width]``.

    Bars starting before the window are pinned to the left edge and every bar
    is at least one day wide, so inverted or zero-length tasks stay visible.
    """
    unit = day_width(timeline_start, timeline_end, container_width)
    start_offset = days_between(task.start_date, timeline_start)
    task_days = days_between(task.end_date, task.start_date) + 1
    return TaskPosition(
        left=max(0.0, start_offset * unit),
        width=max(unit, task_days * unit),
    )


def dependency_links(
    tasks: Iterable[Task],
    timeline_start: date,
    timeline_end: date,
    container_width: float,
) -> list[DependencyLink]:
    """Forward-pointing arrows for every resolvable dependency edge.

    Edges whose arrow would point backwards (the dependency ends at or after
    the dependent's bar starts) are left out; the validator reports those.
    """
    items = list(tasks)
    by_id = {t.id: t for t in items}
    positions: dict[str, TaskPosition] = {}

    def _pos(task: Task) -> TaskPosition:
        if task.id not in positions:
            positions[task.id] = calculate_task_position(
                task, timeline_start, timeline_end, container_width
            )
        return positions[task.id]

    links: list[DependencyLink] = []
    for task in items:
        for dep_id in task.dependencies:
            dep = by_id.get(dep_id)
            if dep is None:
                continue
            start_x = _pos(dep).right
            end_x = _pos(task).left
            if start_x < end_x:
                links.append(DependencyLink(dep.id, task.id, start_x, end_x))
    return links
