"""Metadata aggregation across mapping sources and exporter dispatch.

`ClassMetadataExporter` collects entity metadata from any number of registered
(directory, format) sources and hands the combined list to an exporter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final, NamedTuple

from mapconvert.adapters.export import (
    AnnotationExporter,
    PythonExporter,
    XmlExporter,
    YamlExporter,
)
from mapconvert.adapters.loading import (
    PYTHON_SOURCE_SUFFIX,
    declared_classes,
    execute_source,
    iter_source_files,
    load_source_tree,
    source_root_on_path,
)
from mapconvert.adapters.mapping import (
    DeclarativeReader,
    FileDriver,
    SqlAlchemyAnnotationDriver,
    XmlDriver,
    YamlDriver,
)
from mapconvert.domain.errors import UnsupportedFormatError
from mapconvert.domain.model import ClassMetadata, ExportFormat, MappingFormat
from mapconvert.domain.ports import ClassMappingDriver, PreloadingDriver

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

    from mapconvert.domain.ports import Exporter, ExporterFactory

    type MappingDriverClass = Callable[..., ClassMappingDriver | PreloadingDriver]
    type SourceDriver = ClassMappingDriver | PreloadingDriver | MappingFormat

log = logging.getLogger(__name__)

MAPPING_DRIVERS: Final[Mapping[str, MappingDriverClass]] = {
    MappingFormat.ANNOTATION: SqlAlchemyAnnotationDriver,
    MappingFormat.YAML: YamlDriver,
    MappingFormat.YML: YamlDriver,
    MappingFormat.XML: XmlDriver,
}
EXPORTERS: Final[Mapping[str, ExporterFactory]] = {
    ExportFormat.XML: XmlExporter,
    ExportFormat.YAML: YamlExporter,
    ExportFormat.YML: YamlExporter,
    ExportFormat.PYTHON: PythonExporter,
    ExportFormat.ANNOTATION: AnnotationExporter,
}


class MappingDirectory(NamedTuple):
    directory: Path | str
    driver: SourceDriver


class ClassMetadataExporter:
    """Aggregates metadata from registered mapping sources.

    Sources are scanned in registration order on every call to
    `get_metadata_instances`; nothing is cached between calls. When two sources
    declare the same entity name, the later source wins. Mapped superclasses
    are dropped from the result.
    """

    def __init__(self, *, annotation_namespace: str = "") -> None:
        self.annotation_namespace = annotation_namespace
        self._mapping_drivers: dict[str, MappingDriverClass] = dict(MAPPING_DRIVERS)
        self._exporters: dict[str, ExporterFactory] = dict(EXPORTERS)
        self._mapping_directories: list[MappingDirectory] = []

    def register_mapping_driver(
        self,
        format: str,  # noqa: A002
        driver_cls: MappingDriverClass,
    ) -> None:
        self._mapping_drivers[format] = driver_cls

    def register_exporter(self, format: str, exporter_cls: ExporterFactory) -> None:  # noqa: A002
        self._exporters[format] = exporter_cls

    @property
    def mapping_directories(self) -> list[MappingDirectory]:
        return list(self._mapping_directories)

    def add_mapping_dir(self, directory: Path | str, format: str) -> None:  # noqa: A002
        """Register a directory of mapping sources written in `format`."""

        if format == MappingFormat.PYTHON:
            self._mapping_directories.append(MappingDirectory(directory, MappingFormat.PYTHON))
            return

        driver = self.get_mapping_driver(format, directory)
        if driver is None:
            raise UnsupportedFormatError(format, kind="mapping")
        self._mapping_directories.append(MappingDirectory(directory, driver))

    def get_mapping_driver(
        self,
        format: str,  # noqa: A002
        directory: Path | str,
    ) -> ClassMappingDriver | PreloadingDriver | None:
        driver_cls = self._mapping_drivers.get(format)
        if driver_cls is None:
            return None
        if isinstance(driver_cls, type) and issubclass(driver_cls, FileDriver):
            return driver_cls(directory, preload=driver_cls.PRELOAD)
        return driver_cls(DeclarativeReader(default_namespace=self.annotation_namespace))

    def get_metadata_instances(self) -> list[ClassMetadata]:
        """Scan every registered source and return the entity metadata found."""

        collected: dict[str, ClassMetadata] = {}
        for source in self._mapping_directories:
            before = len(collected)
            if source.driver == MappingFormat.PYTHON:
                self._collect_native(source.directory, collected)
            elif isinstance(source.driver, ClassMappingDriver):
                self._collect_declared(source.directory, source.driver, collected)
            else:
                self._collect_preloaded(source.driver, collected)
            log.debug(
                "Scanned %s source %s: %d new name(s)",
                _describe(source.driver),
                source.directory,
                len(collected) - before,
            )

        entities = [
            metadata for metadata in collected.values() if not metadata.is_mapped_superclass
        ]
        log.info(
            "Collected %d entit%s from %d source(s), skipped %d mapped superclass(es)",
            len(entities),
            "y" if len(entities) == 1 else "ies",
            len(self._mapping_directories),
            len(collected) - len(entities),
        )
        return entities

    def get_exporter(
        self,
        format: str,  # noqa: A002
        output_dir: Path | str | None = None,
    ) -> Exporter:
        exporter_cls = self._exporters.get(format)
        if exporter_cls is None:
            raise UnsupportedFormatError(format, kind="export")
        return exporter_cls(self.get_metadata_instances(), output_dir)

    def _collect_native(self, directory: Path | str, collected: dict[str, ClassMetadata]) -> None:
        with source_root_on_path(directory):
            for path in iter_source_files(directory, PYTHON_SOURCE_SUFFIX):
                module = execute_source(path)
                for value in vars(module).values():
                    if isinstance(value, ClassMetadata):
                        collected[value.name] = value

    def _collect_declared(
        self,
        directory: Path | str,
        driver: ClassMappingDriver,
        collected: dict[str, ClassMetadata],
    ) -> None:
        # import the whole tree first: inspecting one mapper configures its entire registry
        classes = [
            cls for module in load_source_tree(directory) for cls in declared_classes(module)
        ]
        for cls in classes:
            if driver.is_transient(cls):
                continue
            metadata = ClassMetadata(name=driver.reader.entity_name(cls))
            driver.load_metadata_for_class(cls, metadata)
            collected[metadata.name] = metadata

    def _collect_preloaded(
        self, driver: PreloadingDriver, collected: dict[str, ClassMetadata]
    ) -> None:
        for class_name in driver.preload(force=True):
            metadata = ClassMetadata(name=class_name)
            driver.load_metadata_for_class(class_name, metadata)
            collected[class_name] = metadata


def _describe(driver: SourceDriver) -> str:
    if isinstance(driver, MappingFormat):
        return driver.value
    return type(driver).__name__
