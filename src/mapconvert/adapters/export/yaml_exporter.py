"""YAML exporter (`*.orm.yml`), the inverse of `YamlDriver`."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import yaml

from mapconvert.adapters.mapping import YAML_EXTENSION, build_document

from .base import AbstractExporter

if TYPE_CHECKING:
    from mapconvert.domain.model import ClassMetadata


class YamlExporter(AbstractExporter):
    default_extension: ClassVar[str] = YAML_EXTENSION

    def export_class_metadata(self, metadata: ClassMetadata) -> str:
        document = build_document(metadata)
        return yaml.safe_dump(
            {metadata.name: document.to_mapping()},
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )
