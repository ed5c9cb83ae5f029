"""Base class for exporter drivers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from mapconvert.domain.errors import ExportError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mapconvert.domain.model import ClassMetadata

log = logging.getLogger(__name__)


class AbstractExporter(ABC):
    """Writes one file per class into `output_dir`.

    The file for ``app.models.User`` lands at ``<output_dir>/app/models/User<extension>``.
    """

    default_extension: ClassVar[str]

    def __init__(
        self, metadata: Sequence[ClassMetadata], output_dir: Path | str | None = None
    ) -> None:
        self.metadata = list(metadata)
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.extension = self.default_extension

    def set_output_dir(self, output_dir: Path | str) -> None:
        self.output_dir = Path(output_dir)

    def set_extension(self, extension: str) -> None:
        self.extension = extension

    @abstractmethod
    def export_class_metadata(self, metadata: ClassMetadata) -> str:
        """Render one class in the exporter's format."""

    def output_path(self, metadata: ClassMetadata) -> Path:
        if self.output_dir is None:
            raise ExportError("No output directory configured for export")
        return self.output_dir.joinpath(*metadata.name.split(".")).with_name(
            f"{metadata.short_name}{self.extension}"
        )

    def export(self) -> list[Path]:
        """Write every class and return the written paths in metadata order."""

        if self.output_dir is None:
            raise ExportError("No output directory configured for export")

        written: list[Path] = []
        for metadata in self.metadata:
            path = self.output_path(metadata)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.export_class_metadata(metadata), encoding="utf-8")
            log.debug("Exported %s to %s", metadata.name, path)
            written.append(path)
        return written
