"""Terminal views: stats counters, dependency issues, task list and text Gantt chart."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from pmplanner import log
from pmplanner.dates import DateRange, calculate_duration, format_date, format_display_date
from pmplanner.layout import calculate_task_position, category_label, category_style
from pmplanner.tasks.model import Task, TaskStats

BAR_CHAR = "█"
MIN_TIMELINE_WIDTH = 10


def _console(console: Console | None) -> Console:
    return console if console is not None else log.console


def _plural_days(n: int) -> str:
    return f"{n} day" if n == 1 else f"{n} days"


# ── stats & diagnostics ─────────────────────────────────────────


def build_stats_table(stats: TaskStats) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Total Tasks", justify="right")
    table.add_column("Completed", justify="right", style="green")
    table.add_column("In Progress", justify="right", style="yellow")
    table.add_column("Not Started", justify="right", style="dim")
    table.add_row(str(stats.total), str(stats.completed), str(stats.in_progress), str(stats.not_started))
    return table


def render_stats(stats: TaskStats, console: Console | None = None) -> None:
    _console(console).print(build_stats_table(stats))


def render_diagnostics(messages: Sequence[str], console: Console | None = None) -> None:
    if not messages:
        return
    out = _console(console)
    out.print("[bold red]Dependency Issues:[/bold red]")
    for msg in messages:
        out.print(Text(f"  • {msg}", style="red"))


# ── list view ───────────────────────────────────────────────────


def build_task_table(tasks: Sequence[Task]) -> Table:
    names = {t.id: t.name for t in tasks}
    table = Table(show_header=True, header_style="bold", expand=False)
    table.add_column("ID", style="bold blue", no_wrap=True)
    table.add_column("Task")
    table.add_column("Category", no_wrap=True)
    table.add_column("Start", no_wrap=True)
    table.add_column("End", no_wrap=True)
    table.add_column("Duration", justify="right", no_wrap=True)
    table.add_column("Progress", justify="right", no_wrap=True)
    table.add_column("Assignee")
    table.add_column("Depends on")

    for t in tasks:
        style = category_style(t.category)
        title = Text(t.name, style="bold")
        if t.description:
            title.append(f"\n{t.description}", style="dim")
        deps = ", ".join(names.get(d, d) for d in t.dependencies)
        table.add_row(
            t.id,
            title,
            Text(category_label(t.category), style=style.fill),
            format_date(t.start_date),
            format_date(t.end_date),
            _plural_days(t.duration),
            f"{t.progress}%",
            t.assignee or "-",
            deps or "-",
        )
    return table


def render_task_list(tasks: Sequence[Task], console: Console | None = None) -> None:
    out = _console(console)
    if not tasks:
        out.print("[dim]No tasks yet. Add one with 'pm-planner add'.[/dim]")
        return
    out.print(build_task_table(tasks))


# ── gantt view ──────────────────────────────────────────────────


def gantt_bar(task: Task, timeline: DateRange, width: int) -> Text:
    """One timeline row: the task bar placed by the layout engine, in characters."""
    pos = calculate_task_position(task, timeline.start, timeline.end, width)
    left = min(int(round(pos.left)), width - 1)
    cells = max(1, min(int(round(pos.width)), width - left))
    style = category_style(task.category)

    row = Text(" " * left)
    row.append(BAR_CHAR * cells, style=style.fill)
    row.append(" " * (width - left - cells))
    row.append(f" {task.progress:>3}%", style="bold")
    return row


def gantt_header(timeline: DateRange, width: int) -> Text:
    start = format_display_date(timeline.start)
    end = format_display_date(timeline.end)
    gap = max(1, width - len(start) - len(end))
    return Text(f"{start}{' ' * gap}{end}", style="bold")


def render_gantt(
    tasks: Sequence[Task],
    timeline: DateRange,
    width: int,
    console: Console | None = None,
) -> None:
    out = _console(console)
    if not tasks:
        out.print("No tasks to display")
        out.print("[dim]Add tasks to see the Gantt chart[/dim]")
        return

    width = max(MIN_TIMELINE_WIDTH, width)
    table = Table(show_header=True, header_style="bold", show_lines=False, pad_edge=False)
    table.add_column("Tasks", no_wrap=True, overflow="ellipsis", max_width=32)
    table.add_column(gantt_header(timeline, width), no_wrap=True)

    for t in tasks:
        label = Text(t.name, style="bold")
        label.append(
            f"\n{format_display_date(t.start_date)} - {format_display_date(t.end_date)}"
            f"\n{_plural_days(calculate_duration(t.start_date, t.end_date))}",
            style="dim",
        )
        table.add_row(label, gantt_bar(t, timeline, width))
    out.print(table)
