"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from mapconvert.config import get_convert_config
from mapconvert.domain.errors import ExportError
from mapconvert.metadata_exporter import ClassMetadataExporter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mapconvert.domain.model import ClassMetadata

type MappingSource = tuple[Path | str, str]


log = getLogger(__name__)


@dataclass(slots=True)
class ConvertResult:
    exported: int
    output_dir: Path
    paths: list[Path]


def build_exporter(
    sources: Iterable[MappingSource],
    *,
    annotation_namespace: str | None = None,
) -> ClassMetadataExporter:
    """Create an aggregator with every source registered in order."""

    if annotation_namespace is None:
        annotation_namespace = get_convert_config().annotation_namespace
    aggregator = ClassMetadataExporter(annotation_namespace=annotation_namespace)
    for directory, format_ in sources:
        aggregator.add_mapping_dir(directory, format_)
    return aggregator


def collect_metadata(
    sources: Iterable[MappingSource],
    *,
    annotation_namespace: str | None = None,
) -> list[ClassMetadata]:
    """Return the entity metadata declared by `sources`."""

    aggregator = build_exporter(sources, annotation_namespace=annotation_namespace)
    return aggregator.get_metadata_instances()


def convert_mappings(
    sources: Iterable[MappingSource],
    to_format: str,
    output_dir: Path | str | None = None,
    *,
    annotation_namespace: str | None = None,
    extension: str | None = None,
) -> ConvertResult:
    """Convert every entity declared by `sources` into `to_format` files."""

    if output_dir is None:
        output_dir = get_convert_config().resolve_output_dir()
    if output_dir is None:
        raise ExportError("No output directory given for conversion")

    source_list = list(sources)
    aggregator = build_exporter(source_list, annotation_namespace=annotation_namespace)
    log.info(
        "Starting conversion: sources=%s, to=%s, output_dir=%s",
        len(source_list),
        to_format,
        output_dir,
    )

    exporter = aggregator.get_exporter(to_format, output_dir)
    if extension is not None:
        exporter.set_extension(extension)
    paths = exporter.export()

    result = ConvertResult(exported=len(paths), output_dir=Path(output_dir), paths=paths)
    log.info(f"Finished conversion: exported={result.exported}, output_dir={result.output_dir}")
    return result
