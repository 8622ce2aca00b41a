from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "FOCUSFLOW_HOME"
APP_ENV_DB = "FOCUSFLOW_DB"


def app_home() -> Path:
    """
    User-writable home for FocusFlow.
    Override with FOCUSFLOW_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".focusflow").resolve()


def data_dir() -> Path:
    d = app_home() / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


def db_path() -> Path:
    """
    Canonical DB path for focusflow.

    Resolution order:
    1. FOCUSFLOW_DB env var (explicit override)
    2. ~/.focusflow/data/focusflow.db (default)
    """
    if os.environ.get(APP_ENV_DB):
        return Path(os.environ[APP_ENV_DB]).expanduser().resolve()
    return data_dir() / "focusflow.db"
