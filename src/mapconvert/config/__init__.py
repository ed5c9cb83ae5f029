"""Application configuration helpers."""

from __future__ import annotations

from .convert import (
    ANNOTATION_NAMESPACE_ENV,
    OUTPUT_DIR_ENV,
    ConvertConfig,
    get_convert_config,
)
from .env import env_directory, env_text
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging, level_for

__all__ = [
    "ANNOTATION_NAMESPACE_ENV",
    "OUTPUT_DIR_ENV",
    "ConfigurationError",
    "ConvertConfig",
    "MissingConfigurationError",
    "configure_logging",
    "env_directory",
    "env_text",
    "get_convert_config",
    "level_for",
]
