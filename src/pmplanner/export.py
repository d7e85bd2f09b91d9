"""PDF snapshot of the Gantt chart, rendered with matplotlib.

The chart is drawn in the same horizontal coordinate space as the terminal
view (``calculate_task_position`` against ``chart_width`` units) and split
over landscape A4 pages of ``rows_per_page`` tasks each.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.backends.backend_pdf import PdfPages  # noqa: E402
from matplotlib.patches import Rectangle  # noqa: E402

from pmplanner import log  # noqa: E402
from pmplanner.config import DEFAULT_CHART_WIDTH, DEFAULT_ROWS_PER_PAGE  # noqa: E402
from pmplanner.dates import DateRange, each_day, format_date, format_display_date, is_weekend  # noqa: E402
from pmplanner.errors import ExportError  # noqa: E402
from pmplanner.layout import (  # noqa: E402
    calculate_task_position,
    category_style,
    day_width,
    dependency_links,
)
from pmplanner.tasks.model import Task  # noqa: E402

TITLE = "Project Timeline - Gantt Chart"
A4_LANDSCAPE = (11.69, 8.27)
WEEKEND_COLOR = "#F3F4F6"
GRID_COLOR = "#E5E7EB"
ARROW_COLOR = "#6B7280"
BAR_HEIGHT = 0.64


def export_filename(today: date | None = None) -> str:
    return f"gantt-chart-{format_date(today or date.today())}.pdf"


def paginate(tasks: Sequence[Task], rows_per_page: int) -> list[list[Task]]:
    size = max(1, rows_per_page)
    return [list(tasks[i:i + size]) for i in range(0, len(tasks), size)]


def _tick_days(timeline: DateRange) -> list[tuple[int, date]]:
    days = each_day(timeline.start, timeline.end)
    if len(days) <= 31:
        return list(enumerate(days))
    return [(i, d) for i, d in enumerate(days) if d.weekday() == 0]


def _plot_page(
    fig,
    ax,
    unit: float,
    page: list[Task],
    all_tasks: Sequence[Task],
    timeline: DateRange,
    chart_width: float,
    page_no: int,
    page_count: int,
) -> None:
    fig.suptitle(TITLE, x=0.02, ha="left", fontsize=16, fontweight="bold")
    ax.set_title(
        f"{format_display_date(timeline.start)} - {format_display_date(timeline.end)}"
        f"    (page {page_no} of {page_count})",
        loc="left",
        fontsize=9,
        color=ARROW_COLOR,
    )

    ax.set_xlim(0, chart_width)
    ax.set_ylim(len(page) - 0.5, -0.5)

    for i, day in enumerate(each_day(timeline.start, timeline.end)):
        if is_weekend(day):
            ax.axvspan(i * unit, (i + 1) * unit, color=WEEKEND_COLOR, zorder=0)

    ticks = _tick_days(timeline)
    ax.set_xticks([i * unit for i, _ in ticks])
    ax.set_xticklabels([d.strftime("%b %d") for _, d in ticks], fontsize=7, rotation=45, ha="right")
    ax.grid(axis="x", color=GRID_COLOR, linewidth=0.5)

    ax.set_yticks(range(len(page)))
    ax.set_yticklabels(
        [f"{t.name}\n{t.duration} day{'s' if t.duration != 1 else ''}" for t in page],
        fontsize=8,
    )

    rows: dict[str, int] = {}
    for row, task in enumerate(page):
        rows[task.id] = row
        pos = calculate_task_position(task, timeline.start, timeline.end, chart_width)
        style = category_style(task.category)
        top = row - BAR_HEIGHT / 2
        ax.add_patch(
            Rectangle(
                (pos.left, top),
                pos.width,
                BAR_HEIGHT,
                facecolor=style.fill,
                edgecolor=style.border,
                linewidth=1.5,
                zorder=2,
            )
        )
        progress = max(0, min(100, task.progress))
        if progress:
            ax.add_patch(
                Rectangle(
                    (pos.left, row + BAR_HEIGHT / 2 - 0.08),
                    pos.width * progress / 100,
                    0.08,
                    facecolor="white",
                    alpha=0.5,
                    zorder=3,
                )
            )
        ax.text(
            pos.left + unit * 0.2,
            row,
            f"{task.name}  {task.progress}%",
            va="center",
            ha="left",
            fontsize=7,
            color="white",
            fontweight="bold",
            clip_on=True,
            zorder=4,
        )

    for link in dependency_links(all_tasks, timeline.start, timeline.end, chart_width):
        if link.from_id not in rows or link.to_id not in rows:
            continue
        ax.annotate(
            "",
            xy=(link.end_x, rows[link.to_id]),
            xytext=(link.start_x, rows[link.from_id]),
            arrowprops={"arrowstyle": "->", "color": ARROW_COLOR, "linewidth": 1.5},
            zorder=5,
        )

    fig.tight_layout()


def _draw_page(
    page: list[Task],
    all_tasks: Sequence[Task],
    timeline: DateRange,
    chart_width: float,
    page_no: int,
    page_count: int,
):
    unit = day_width(timeline.start, timeline.end, chart_width)
    fig, ax = plt.subplots(figsize=A4_LANDSCAPE)
    try:
        _plot_page(fig, ax, unit, page, all_tasks, timeline, chart_width, page_no, page_count)
    except Exception:
        plt.close(fig)
        raise
    return fig


def export_pdf(
    tasks: Sequence[Task],
    timeline: DateRange,
    output_dir: Path,
    *,
    chart_width: float = DEFAULT_CHART_WIDTH,
    rows_per_page: int = DEFAULT_ROWS_PER_PAGE,
    today: date | None = None,
) -> Path:
    """Write ``gantt-chart-<date>.pdf`` into *output_dir* and return its path."""
    if not tasks:
        raise ExportError("No tasks to export")

    out = Path(output_dir) / export_filename(today)
    pages = paginate(tasks, rows_per_page)
    log.debug(f"Exporting {len(tasks)} task(s) on {len(pages)} page(s) to {out}")

    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        with PdfPages(out, metadata={"Title": TITLE}) as pdf:
            for n, page in enumerate(pages, start=1):
                fig = _draw_page(page, tasks, timeline, chart_width, n, len(pages))
                try:
                    pdf.savefig(fig)
                finally:
                    plt.close(fig)
    except (OSError, ValueError, RuntimeError) as exc:
        raise ExportError(f"Failed to export PDF: {exc}") from exc
    return out
