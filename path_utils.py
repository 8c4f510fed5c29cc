from __future__ import annotations

"""Where the kiosk keeps its config file and logs."""

import os
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]

HOME_ENV = "PRICECHECK_HOME"
LOG_DIR_ENV = "PRICECHECK_LOG_DIR"


def _expand(path_like: PathLike) -> Path:
    return Path(os.path.expandvars(str(path_like))).expanduser()


def get_base_dir() -> Path:
    """Kiosk home: $PRICECHECK_HOME, else the directory holding this module."""
    env_path = os.environ.get(HOME_ENV)
    if env_path:
        return _expand(env_path).resolve()
    return Path(__file__).resolve().parent


def resolve_path(path_like: Optional[PathLike]) -> Path:
    """Absolute paths pass through; relative ones hang off the kiosk home."""
    if path_like is None:
        raise ValueError("path_like must not be None")
    path = _expand(path_like)
    return path if path.is_absolute() else get_base_dir() / path


def get_log_dir() -> Path:
    """Create (if needed) and return the log directory ($PRICECHECK_LOG_DIR or <home>/logs)."""
    override = os.environ.get(LOG_DIR_ENV)
    log_dir = resolve_path(override) if override else get_base_dir() / "logs"
    if log_dir.exists() and not log_dir.is_dir():
        raise NotADirectoryError(f"Log path {log_dir} exists and is not a directory")
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir
