"""Errors raised while reading mapconvert settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting holds a value mapconvert cannot use."""

    def __init__(self, setting: str, reason: str) -> None:
        super().__init__(f"{setting} {reason}")
        self.setting = setting
        self.reason = reason


class MissingConfigurationError(ConfigurationError):
    def __init__(self, setting: str) -> None:
        super().__init__(setting, "is not set")
