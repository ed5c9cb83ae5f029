"""Errors raised by the conversion core and its drivers."""

from __future__ import annotations

from typing import Literal

type FormatKind = Literal["mapping", "export"]


class MapConvertError(Exception):
    """Base class for mapconvert errors."""


class UnsupportedFormatError(MapConvertError, ValueError):
    """Raised when a format tag is not present in the relevant registry."""

    def __init__(self, format: str, *, kind: FormatKind) -> None:  # noqa: A002
        self.format = format
        self.kind = kind
        super().__init__(f"Unsupported {kind} format: {format!r}")


class MappingError(MapConvertError):
    """Raised when mapping information is missing or malformed."""


class ExportError(MapConvertError):
    """Raised when exported metadata cannot be written."""
