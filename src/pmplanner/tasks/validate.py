"""Advisory finish-to-start checks over a task snapshot."""

from __future__ import annotations

from collections.abc import Iterable

from pmplanner import log
from pmplanner.tasks.model import Task


def dependency_message(task: Task, dependency: Task) -> str:
    return f'Task "{task.name}" cannot start before its dependency "{dependency.name}" ends'


def validate_task_dependencies(tasks: Iterable[Task]) -> list[str]:
    """Return one diagnostic per dependency that does not finish before its dependent starts.

    Messages follow task order, then each task's dependency order. Ids that
    point at nothing are skipped. Cycles are not detected as such; each edge
    is judged on its own dates. Nothing here blocks an edit.
    """
    items = list(tasks)
    by_id: dict[str, Task] = {}
    for task in items:
        by_id[task.id] = task

    errors: list[str] = []
    for task in items:
        for dep_id in task.dependencies:
            dep = by_id.get(dep_id)
            if dep is None:
                log.debug(f"Task {task.id}: ignoring unknown dependency {dep_id}")
                continue
            if dep.end_date >= task.start_date:
                errors.append(dependency_message(task, dep))
    return errors
