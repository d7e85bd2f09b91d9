"""PM Planner CLI.

Installed as ``pm-planner`` console_script via pipx / pip.
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import click

from pmplanner import __version__
from pmplanner import log as glog
from pmplanner.config import Config
from pmplanner.dates import parse_date
from pmplanner.errors import PlannerError
from pmplanner.storage import FileBackend, load_store, save_store
from pmplanner.store import TaskStore
from pmplanner.tasks.model import Category, TaskDraft

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

CATEGORY_CHOICE = click.Choice([c.value for c in Category], case_sensitive=False)
LABEL_COLUMN_WIDTH = 45


class DateParam(click.ParamType):
    """``YYYY-MM-DD`` on the command line, ``datetime.date`` in the callback."""

    name = "date"

    def convert(self, value, param, ctx):
        if isinstance(value, date):
            return value
        try:
            return parse_date(value)
        except ValueError:
            self.fail(f"{value!r} is not a valid date (expected YYYY-MM-DD).", param, ctx)


DATE = DateParam()


# ── helpers ──────────────────────────────────────────────────────


def _fail(msg: str) -> None:
    glog.error(msg)
    sys.exit(1)


def _open(cfg: Config) -> tuple[FileBackend, TaskStore]:
    backend = FileBackend(cfg.store_file)
    return backend, load_store(backend)


def _commit(backend: FileBackend, store: TaskStore) -> None:
    """Persist the snapshot, then surface any dependency timing conflicts."""
    save_store(backend, store)
    glog.warn_each(store.diagnostics())


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise click.BadParameter(
            f"End date {end} is before start date {start}.", param_hint="--end"
        )


def _check_dependencies(
    store: TaskStore,
    deps: tuple[str, ...],
    self_id: str = "",
    known: tuple[str, ...] = (),
    param_hint: str = "--depends-on",
) -> tuple[str, ...]:
    """De-duplicate *deps*; ids outside *known* must name another existing task."""
    ordered: list[str] = []
    for dep in deps:
        if dep not in known:
            if dep == self_id:
                raise click.BadParameter("A task cannot depend on itself.", param_hint=param_hint)
            if store.get(dep) is None:
                raise click.BadParameter(f"Unknown task id: {dep}.", param_hint=param_hint)
        if dep not in ordered:
            ordered.append(dep)
    return tuple(ordered)


def _check_name(name: str) -> str:
    stripped = name.strip()
    if not stripped:
        raise click.BadParameter("Task name cannot be empty.", param_hint="NAME")
    return stripped


def _toggle(current: tuple[str, ...], ids: tuple[str, ...]) -> tuple[str, ...]:
    deps = list(current)
    for tid in ids:
        if tid in deps:
            deps.remove(tid)
        else:
            deps.append(tid)
    return tuple(deps)


# ── group ────────────────────────────────────────────────────────


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--store",
    "store_path",
    default="",
    help="Task file (default: $PM_PLANNER_STORE or ./pm-planner-tasks.json)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="pm-planner")
@click.pass_context
def main(ctx: click.Context, store_path: str, verbose: bool) -> None:
    """PM Planner: plan tasks, dependencies and Gantt charts.

    \b
    EXAMPLES:
      pm-planner add "Design" --start 2024-01-01 --end 2024-01-05 -c planning
      pm-planner add "Build" --start 2024-01-08 --end 2024-01-19 -d <id>
      pm-planner progress <id> 50
      pm-planner gantt
      pm-planner export --output-dir reports/
    """
    glog.set_verbose(verbose)
    ctx.obj = Config(store_path=store_path, verbose=verbose)


# ── mutations ────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.option("--start", "start_date", type=DATE, default=None, help="Start date YYYY-MM-DD (default: today)")
@click.option("--end", "end_date", type=DATE, default=None, help="End date YYYY-MM-DD (default: start date)")
@click.option("-c", "--category", type=CATEGORY_CHOICE, default=Category.DEVELOPMENT.value, show_default=True)
@click.option("--description", default="", help="Free-text description")
@click.option("-a", "--assignee", default="", help="Who works on it")
@click.option("-d", "--depends-on", "depends_on", multiple=True, help="Id of a task that must finish first (repeatable)")
@click.pass_obj
def add(
    cfg: Config,
    name: str,
    start_date: date | None,
    end_date: date | None,
    category: str,
    description: str,
    assignee: str,
    depends_on: tuple[str, ...],
) -> None:
    """Create a task."""
    start = start_date or date.today()
    end = end_date or start
    _check_range(start, end)

    backend, store = _open(cfg)
    draft = TaskDraft(
        name=_check_name(name),
        start_date=start,
        end_date=end,
        category=Category.parse(category),
        description=description,
        assignee=assignee,
        dependencies=_check_dependencies(store, depends_on),
    )
    task = store.create(draft)[-1]
    _commit(backend, store)
    glog.success(f"Added task {task.id}: {task.name} ({task.duration} day{'s' if task.duration != 1 else ''})")


@main.command()
@click.argument("task_id")
@click.option("--name", default=None, help="New name")
@click.option("--start", "start_date", type=DATE, default=None, help="New start date")
@click.option("--end", "end_date", type=DATE, default=None, help="New end date")
@click.option("-c", "--category", type=CATEGORY_CHOICE, default=None)
@click.option("--description", default=None)
@click.option("-a", "--assignee", default=None)
@click.option("-d", "--depends-on", "depends_on", multiple=True, help="Replace dependencies (repeatable)")
@click.option("-t", "--toggle-dep", "toggle_dep", multiple=True, help="Add or remove one dependency (repeatable)")
@click.option("--clear-deps", is_flag=True, help="Remove every dependency")
@click.pass_obj
def edit(
    cfg: Config,
    task_id: str,
    name: str | None,
    start_date: date | None,
    end_date: date | None,
    category: str | None,
    description: str | None,
    assignee: str | None,
    depends_on: tuple[str, ...],
    toggle_dep: tuple[str, ...],
    clear_deps: bool,
) -> None:
    """Change fields of an existing task."""
    backend, store = _open(cfg)
    current = store.get(task_id)
    if current is None:
        _fail(f"Task id {task_id} not found.")
        return

    changes: dict[str, object] = {}
    if name is not None:
        changes["name"] = _check_name(name)
    if start_date is not None or end_date is not None:
        start = start_date or current.start_date
        end = end_date or current.end_date
        _check_range(start, end)
        changes["start_date"] = start
        changes["end_date"] = end
    if category is not None:
        changes["category"] = category
    if description is not None:
        changes["description"] = description
    if assignee is not None:
        changes["assignee"] = assignee

    deps = current.dependencies
    if clear_deps:
        deps = ()
    if depends_on:
        deps = depends_on
    if toggle_dep:
        deps = _toggle(deps, toggle_dep)
    if deps != current.dependencies:
        changes["dependencies"] = _check_dependencies(
            store,
            deps,
            self_id=task_id,
            known=current.dependencies,
            param_hint="--toggle-dep" if toggle_dep and not depends_on else "--depends-on",
        )

    if not changes:
        glog.info("Nothing to change.")
        return

    store.patch(task_id, **changes)
    _commit(backend, store)
    glog.success(f"Updated task {task_id}.")


@main.command("rm")
@click.argument("task_id")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def remove(cfg: Config, task_id: str, yes: bool) -> None:
    """Delete a task and drop it from every dependency list."""
    backend, store = _open(cfg)
    task = store.get(task_id)
    if task is None:
        _fail(f"Task id {task_id} not found.")
        return
    if not yes and not click.confirm(f'Are you sure you want to delete "{task.name}"?', default=False):
        glog.info("Cancelled.")
        return
    store.delete(task_id)
    _commit(backend, store)
    glog.success(f"Task {task_id} removed.")


@main.command()
@click.argument("task_id")
@click.argument("percent", type=click.IntRange(0, 100))
@click.pass_obj
def progress(cfg: Config, task_id: str, percent: int) -> None:
    """Set a task's progress (0-100)."""
    backend, store = _open(cfg)
    try:
        store.set_progress(task_id, percent)
    except PlannerError as exc:
        _fail(str(exc))
    _commit(backend, store)
    glog.success(f"Task {task_id} at {percent}%.")


@main.command()
@click.argument("task_id")
@click.argument("days", type=int)
@click.pass_obj
def shift(cfg: Config, task_id: str, days: int) -> None:
    """Move a task DAYS days later (negative: earlier), keeping its duration."""
    backend, store = _open(cfg)
    try:
        store.shift(task_id, days)
    except PlannerError as exc:
        _fail(str(exc))
    _commit(backend, store)
    task = store.require(task_id)
    glog.success(f"Task {task_id} now runs {task.start_date} .. {task.end_date}.")


# ── views ────────────────────────────────────────────────────────


@main.command("list")
@click.pass_obj
def list_tasks(cfg: Config) -> None:
    """Show every task as a table."""
    from pmplanner.render import render_diagnostics, render_task_list

    _, store = _open(cfg)
    render_diagnostics(store.diagnostics())
    render_task_list(store.tasks)


@main.command()
@click.option("--width", type=click.IntRange(min=10), default=None, help="Timeline width in characters")
@click.pass_obj
def gantt(cfg: Config, width: int | None) -> None:
    """Show the Gantt chart."""
    from pmplanner.render import MIN_TIMELINE_WIDTH, render_diagnostics, render_gantt

    _, store = _open(cfg)
    if width is None:
        width = max(MIN_TIMELINE_WIDTH, glog.console.width - LABEL_COLUMN_WIDTH)
    render_diagnostics(store.diagnostics())
    try:
        render_gantt(store.tasks, store.date_range(), width)
    except PlannerError as exc:
        _fail(str(exc))


@main.command()
@click.pass_obj
def stats(cfg: Config) -> None:
    """Show task counts by progress."""
    from pmplanner.render import render_stats

    _, store = _open(cfg)
    render_stats(store.stats())


@main.command()
@click.pass_obj
def check(cfg: Config) -> None:
    """Report dependency timing conflicts (exit 1 when there are any)."""
    from pmplanner.render import render_diagnostics

    _, store = _open(cfg)
    issues = store.diagnostics()
    if not issues:
        glog.success("No dependency issues.")
        return
    render_diagnostics(issues)
    sys.exit(1)


@main.command()
@click.option("-o", "--output-dir", default="", help="Directory for the PDF (default: $PM_PLANNER_EXPORT_DIR or .)")
@click.option("--rows-per-page", type=click.IntRange(min=1), default=None, help="Task rows per PDF page")
@click.pass_obj
def export(cfg: Config, output_dir: str, rows_per_page: int | None) -> None:
    """Export the Gantt chart to gantt-chart-<date>.pdf."""
    from pmplanner.export import export_pdf

    _, store = _open(cfg)
    target = Path(output_dir).expanduser() if output_dir else cfg.export_path
    try:
        out = export_pdf(
            store.tasks,
            store.date_range(),
            target,
            chart_width=cfg.chart_width,
            rows_per_page=rows_per_page or cfg.rows_per_page,
        )
    except PlannerError as exc:
        _fail(str(exc))
        return
    glog.success(f"PDF exported: {out}")
