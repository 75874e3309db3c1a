"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
PROJECT_ROOT, MAX_DIR_ENTRIES, LOG_LEVEL, PATH_ENCODING).
"""

from __future__ import annotations

import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


# Project root for the read_dir tool's containment boundary
PROJECT_ROOT = Path(os.environ.get("PROJECT_ROOT", ".")).resolve()

# Byte paths are always decoded with this; not configurable
PATH_ENCODING = "utf-8"

# Limits / output
MAX_DIR_ENTRIES = _env_int("MAX_DIR_ENTRIES", 1000)

# Logging (server entry point only)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
