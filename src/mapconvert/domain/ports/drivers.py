"""Ports for mapping drivers (readers) and exporters (writers)."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from mapconvert.domain.model import ClassMetadata


@runtime_checkable
class MappingDriver[TClass](Protocol):
    """Populates metadata for one class identifier."""

    def load_metadata_for_class(self, class_name: TClass, metadata: ClassMetadata) -> None: ...

    def is_transient(self, class_name: TClass) -> bool: ...


@runtime_checkable
class PreloadingDriver(MappingDriver[str], Protocol):
    """File-based driver that discovers class names on its own."""

    PRELOAD: ClassVar[bool]

    def preload(self, *, force: bool = False) -> list[str]: ...


class EntityNameReader(Protocol):
    """Resolves the entity name a declared class is published under."""

    default_namespace: str

    def entity_name(self, cls: type) -> str: ...


@runtime_checkable
class ClassMappingDriver(MappingDriver[type], Protocol):
    """Driver that reads mapping information straight off declared classes."""

    reader: EntityNameReader


@runtime_checkable
class Exporter(Protocol):
    """Writes a metadata collection in one target format."""

    extension: str

    def set_output_dir(self, output_dir: Path | str) -> None: ...

    def set_extension(self, extension: str) -> None: ...

    def export_class_metadata(self, metadata: ClassMetadata) -> str: ...

    def export(self) -> list[Path]: ...


class ExporterFactory(Protocol):
    def __call__(
        self, metadata: Sequence[ClassMetadata], output_dir: Path | str | None = None
    ) -> Exporter: ...
