"""
Centralized configuration for FocusFlow.

All values that vary by deployment belong here.
Override via environment variables where marked.
"""

import os
from datetime import timedelta

# ============================================================
# Time
# ============================================================

DEFAULT_TIMEZONE: str = os.environ.get("FOCUSFLOW_TIMEZONE", "UTC")
"""IANA zone used for naive datetimes and for Quick-Add "today"."""

QUICK_ADD_DURATION: timedelta = timedelta(hours=1)
"""Fixed length of a Quick-Add block. Not configurable."""

# ============================================================
# Time block field limits
# ============================================================

TITLE_MAX_LENGTH: int = 200
DESCRIPTION_MAX_LENGTH: int = 1000

# ============================================================
# Store
# ============================================================

POOL_SIZE: int = int(os.environ.get("FOCUSFLOW_POOL_SIZE", "5"))
"""Maximum number of pooled sqlite connections."""

POOL_TIMEOUT: float = float(os.environ.get("FOCUSFLOW_POOL_TIMEOUT", "30"))
"""Seconds to wait for a pooled connection before giving up."""

BUSY_TIMEOUT_MS: int = 5000
"""sqlite busy_timeout applied to every pooled connection."""

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("FOCUSFLOW_LOG_LEVEL", "INFO")

_log_json = os.environ.get("FOCUSFLOW_LOG_JSON")
LOG_JSON: bool | None = None if _log_json is None else _log_json.lower() in ("1", "true", "yes")
"""Force JSON (true) or human (false) log output. Unset = auto-detect."""
