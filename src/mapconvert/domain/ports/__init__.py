"""Domain port definitions for adapters."""

from __future__ import annotations

from .drivers import (
    ClassMappingDriver,
    EntityNameReader,
    Exporter,
    ExporterFactory,
    MappingDriver,
    PreloadingDriver,
)

__all__ = [
    "ClassMappingDriver",
    "EntityNameReader",
    "Exporter",
    "ExporterFactory",
    "MappingDriver",
    "PreloadingDriver",
]
