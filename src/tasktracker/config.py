"""Settings resolved from environment variables.

Nothing is read at import time, so tests can monkeypatch the environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

ENV_PREFIX = "TASK_TRACKER"
APP_DIR = "task-tracker"
DEFAULT_FILE_NAME = "tasks.json"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


def default_data_file() -> Path:
    """Where the task file lives when no --file option is given.

    TASK_TRACKER_FILE wins, then $XDG_DATA_HOME/task-tracker/tasks.json,
    then ~/.local/share/task-tracker/tasks.json.
    """
    explicit = _env_path(_k("FILE"))
    if explicit is not None:
        return explicit

    data_home = _env_path("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return data_home / APP_DIR / DEFAULT_FILE_NAME


def log_level() -> int:
    raw = (os.getenv(_k("LOG_LEVEL")) or "").strip().upper()
    if not raw:
        return logging.WARNING
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.WARNING
