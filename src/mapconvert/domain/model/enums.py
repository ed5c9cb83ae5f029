"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class MappingFormat(StrEnum):
    ANNOTATION = "annotation"
    YAML = "yaml"
    YML = "yml"
    XML = "xml"
    # native-code sources: modules that build ClassMetadata values themselves
    PYTHON = "python"


class ExportFormat(StrEnum):
    ANNOTATION = "annotation"
    YAML = "yaml"
    YML = "yml"
    XML = "xml"
    PYTHON = "python"


class AssociationType(StrEnum):
    ONE_TO_ONE = "oneToOne"
    MANY_TO_ONE = "manyToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_MANY = "manyToMany"

    @property
    def is_to_one(self) -> bool:
        return self in (AssociationType.ONE_TO_ONE, AssociationType.MANY_TO_ONE)


class InheritanceType(StrEnum):
    NONE = "NONE"
    JOINED = "JOINED"
    SINGLE_TABLE = "SINGLE_TABLE"


class IdGeneratorType(StrEnum):
    NONE = "NONE"
    AUTO = "AUTO"
    IDENTITY = "IDENTITY"
    SEQUENCE = "SEQUENCE"


class LifecycleEvent(StrEnum):
    PRE_PERSIST = "prePersist"
    POST_PERSIST = "postPersist"
    PRE_UPDATE = "preUpdate"
    POST_UPDATE = "postUpdate"
    PRE_REMOVE = "preRemove"
    POST_REMOVE = "postRemove"
    POST_LOAD = "postLoad"
