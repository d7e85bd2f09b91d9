"""Configuration defaults, env vars, and runtime options for PM Planner."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


VERSION = "1.0.0"

DEFAULT_STORE_FILE = "pm-planner-tasks.json"
DEFAULT_CHART_WIDTH = 800
DEFAULT_ROWS_PER_PAGE = 12


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass
class Config:
    """Runtime configuration: CLI flags win over env vars, env vars over defaults."""

    # Persistence
    store_path: str = ""

    # Layout
    chart_width: int = 0

    # Export
    export_dir: str = ""
    rows_per_page: int = DEFAULT_ROWS_PER_PAGE

    # Misc
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.store_path:
            self.store_path = os.environ.get("PM_PLANNER_STORE") or DEFAULT_STORE_FILE
        if self.chart_width <= 0:
            self.chart_width = _env_int("PM_PLANNER_CHART_WIDTH", DEFAULT_CHART_WIDTH)
        if not self.export_dir:
            self.export_dir = os.environ.get("PM_PLANNER_EXPORT_DIR") or "."
        if self.rows_per_page <= 0:
            self.rows_per_page = DEFAULT_ROWS_PER_PAGE

    @property
    def store_file(self) -> Path:
        return Path(self.store_path).expanduser()

    @property
    def export_path(self) -> Path:
        return Path(self.export_dir).expanduser()
