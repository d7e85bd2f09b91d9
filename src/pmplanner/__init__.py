"""PM Planner: tasks, dependencies and Gantt charts from the terminal."""

from pmplanner.config import VERSION

__version__ = VERSION
