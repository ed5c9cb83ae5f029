"""Typed readers for mapconvert settings in the process environment."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import ConfigurationError


def env_text(name: str, default: str = "") -> str:
    """Stripped value of `name`; unset and blank both give `default`."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_directory(name: str) -> Path | None:
    """Directory named by `name`, or None when unset.

    The directory need not exist yet, but an existing non-directory path is a
    `ConfigurationError`.
    """

    value = env_text(name)
    if not value:
        return None
    path = Path(value).expanduser()
    if path.exists() and not path.is_dir():
        raise ConfigurationError(name, f"points at {path}, which is not a directory")
    return path
