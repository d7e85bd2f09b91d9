"""Exception types raised by the planner core and handled at the CLI boundary."""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for errors the CLI reports and exits on."""


class TaskNotFoundError(PlannerError, KeyError):
    """A command referenced a task id that is not in the store."""

    def __init__(self, task_id: str) -> None:
        super().__init__(task_id)
        self.task_id = task_id

    def __str__(self) -> str:
        return f"Task id {self.task_id} not found."


class StorageDecodeError(PlannerError):
    """Persisted state could not be decoded into tasks."""


class LayoutError(PlannerError, ValueError):
    """The timeline window cannot be used to scale a layout."""


class ExportError(PlannerError):
    """Rendering or writing the PDF snapshot failed."""
