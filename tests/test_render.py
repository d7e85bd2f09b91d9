"""Tests for pmplanner.render: terminal views."""

from __future__ import annotations

from datetime import date

import pytest
from rich.console import Console

from pmplanner.dates import DateRange
from pmplanner.errors import LayoutError
from pmplanner.render import (
    BAR_CHAR,
    gantt_bar,
    render_diagnostics,
    render_gantt,
    render_stats,
    render_task_list,
)
from pmplanner.tasks.model import TaskStats

WINDOW = DateRange(date(2024, 1, 1), date(2024, 1, 11))


def _console() -> Console:
    return Console(record=True, width=160, color_system=None)


class TestGanttBar:
    def test_bar_position_in_cells(self, make_task):
        row = gantt_bar(make_task("1", start="2024-01-03", end="2024-01-05", progress=40), WINDOW, 20)
        plain = row.plain
        assert plain.index(BAR_CHAR) == 4
        assert plain.count(BAR_CHAR) == 6
        assert plain.endswith(" 40%")

    def test_bar_clamped_to_width(self, make_task):
        row = gantt_bar(make_task("1", start="2024-03-01", end="2024-03-20"), WINDOW, 20)
        timeline = row.plain[:20]
        assert len(timeline) == 20
        assert timeline.count(BAR_CHAR) == 1

    def test_at_least_one_cell(self, make_task):
        row = gantt_bar(make_task("1", start="2024-01-01"), WINDOW, 5)
        assert row.plain.count(BAR_CHAR) >= 1


class TestRenderGantt:
    def test_empty(self):
        console = _console()
        render_gantt([], WINDOW, 40, console=console)
        assert "No tasks to display" in console.export_text()

    def test_rows_and_labels(self, make_task):
        console = _console()
        tasks = [
            make_task("1", "Design", start="2024-01-01", end="2024-01-03"),
            make_task("2", "Build", start="2024-01-04", end="2024-01-04"),
        ]
        render_gantt(tasks, WINDOW, 40, console=console)
        out = console.export_text()
        assert "Design" in out
        assert "Build" in out
        assert "3 days" in out
        assert "1 day" in out
        assert "Jan 01, 2024" in out

    def test_zero_length_window_raises(self, make_task):
        with pytest.raises(LayoutError):
            render_gantt([make_task("1")], DateRange(date(2024, 1, 1), date(2024, 1, 1)), 40, console=_console())


class TestOtherViews:
    def test_stats(self):
        console = _console()
        render_stats(TaskStats(total=4, completed=1, in_progress=2, not_started=1), console=console)
        out = console.export_text()
        for label in ("Total Tasks", "Completed", "In Progress", "Not Started"):
            assert label in out

    def test_diagnostics_block(self):
        console = _console()
        render_diagnostics(["one", "two"], console=console)
        out = console.export_text()
        assert "Dependency Issues:" in out
        assert "• one" in out and "• two" in out

    def test_no_diagnostics_prints_nothing(self):
        console = _console()
        render_diagnostics([], console=console)
        assert console.export_text() == ""

    def test_task_list(self, make_task):
        console = _console()
        tasks = [
            make_task("1", "Design", category="planning", assignee="ana"),
            make_task("2", "Build", dependencies=["1", "ghost"], progress=50),
        ]
        render_task_list(tasks, console=console)
        out = console.export_text()
        assert "Planning" in out
        assert "ana" in out
        assert "50%" in out
        assert "Design, ghost" in out

    def test_task_list_empty(self):
        console = _console()
        render_task_list([], console=console)
        assert "No tasks yet" in console.export_text()
