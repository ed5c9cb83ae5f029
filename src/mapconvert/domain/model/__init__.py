"""Public domain model surface."""

from __future__ import annotations

from mapconvert.domain.model.enums import (
    AssociationType,
    ExportFormat,
    IdGeneratorType,
    InheritanceType,
    LifecycleEvent,
    MappingFormat,
)
from mapconvert.domain.model.metadata import (
    AssociationMapping,
    ClassMetadata,
    FieldMapping,
    JoinColumn,
    JoinTable,
)

__all__ = [  # noqa: RUF022
    # metadata
    "ClassMetadata",
    "FieldMapping",
    "AssociationMapping",
    "JoinColumn",
    "JoinTable",
    # enums
    "AssociationType",
    "ExportFormat",
    "IdGeneratorType",
    "InheritanceType",
    "LifecycleEvent",
    "MappingFormat",
]
