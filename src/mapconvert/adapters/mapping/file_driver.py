"""Shared behaviour for drivers that read mapping documents from a directory."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from pydantic import ValidationError

from mapconvert.adapters.loading import iter_source_files
from mapconvert.domain.errors import MappingError

from .schema import EntityMappingDocument
from .translator import populate_metadata

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mapconvert.domain.model import ClassMetadata

log = logging.getLogger(__name__)


class FileDriver(ABC):
    """Base class for file-based drivers.

    Every file below `directory` ending in `extension` may declare any number of
    classes. Documents are parsed lazily on first use, or eagerly when the
    driver is built with ``preload=True``.
    """

    PRELOAD: ClassVar[bool] = False
    extension: ClassVar[str]

    def __init__(self, directory: Path | str, *, preload: bool = False) -> None:
        self.directory = Path(directory)
        self._documents: dict[str, EntityMappingDocument] | None = None
        if preload:
            self.preload()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.directory)!r})"

    @abstractmethod
    def read_definitions(self, path: Path) -> Mapping[str, Mapping[str, object]]:
        """Return the raw class definitions found in one mapping file."""

    def preload(self, *, force: bool = False) -> list[str]:
        """Parse all mapping files and return the declared class names."""

        if self._documents is None or force:
            self._documents = self._load_documents()
        return list(self._documents)

    def get_all_class_names(self) -> list[str]:
        return self.preload()

    def is_transient(self, class_name: str) -> bool:
        return class_name not in self._loaded_documents()

    def load_metadata_for_class(self, class_name: str, metadata: ClassMetadata) -> None:
        document = self._loaded_documents().get(class_name)
        if document is None:
            raise MappingError(
                f"No mapping file declares class {class_name!r} in {self.directory}"
            )
        populate_metadata(document, metadata)

    def _loaded_documents(self) -> dict[str, EntityMappingDocument]:
        if self._documents is None:
            self._documents = self._load_documents()
        return self._documents

    def _load_documents(self) -> dict[str, EntityMappingDocument]:
        documents: dict[str, EntityMappingDocument] = {}
        origins: dict[str, Path] = {}
        # files are visited in path order; a later declaration replaces an earlier one
        for path in iter_source_files(self.directory, self.extension):
            for class_name, payload in self.read_definitions(path).items():
                if class_name in documents:
                    log.debug(
                        "%s redeclares %s from %s", path, class_name, origins[class_name]
                    )
                documents[class_name] = _validate_document(class_name, payload, path)
                origins[class_name] = path
        log.debug("Preloaded %d mapping(s) from %s", len(documents), self.directory)
        return documents


def _validate_document(
    class_name: str, payload: Mapping[str, object], path: Path
) -> EntityMappingDocument:
    try:
        return EntityMappingDocument.model_validate(payload)
    except ValidationError as exc:
        raise MappingError(f"Invalid mapping for {class_name!r} in {path}: {exc}") from exc
