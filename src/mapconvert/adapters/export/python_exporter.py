"""Native-code exporter: writes Python modules that rebuild `ClassMetadata` values.

The generated modules are valid `python` mapping sources, so an export can be
scanned again as input.
"""

from __future__ import annotations

from dataclasses import MISSING, fields, is_dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Final

from .base import AbstractExporter

if TYPE_CHECKING:
    from dataclasses import Field

    from mapconvert.domain.model import ClassMetadata

HEADER: Final[str] = '''"""Mapping information for {name}."""

from mapconvert.domain.model import (
    AssociationMapping,
    AssociationType,
    ClassMetadata,
    FieldMapping,
    IdGeneratorType,
    InheritanceType,
    JoinColumn,
    JoinTable,
    LifecycleEvent,
)

'''
# rendered as method calls instead of constructor arguments
COLLECTION_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    {"fields", "associations", "lifecycle_callbacks"}
)


class PythonExporter(AbstractExporter):
    default_extension: ClassVar[str] = ".py"

    def export_class_metadata(self, metadata: ClassMetadata) -> str:
        lines = [HEADER.format(name=metadata.name), "metadata = ClassMetadata("]
        for field in fields(metadata):
            if field.name in COLLECTION_ATTRIBUTES:
                continue
            value = getattr(metadata, field.name)
            if field.name != "name" and _is_default(field, value):
                continue
            lines.append(f"    {field.name}={_render(value)},")
        lines.append(")")

        for mapping in metadata.fields.values():
            lines.append(f"metadata.map_field({_render(mapping)})")
        for association in metadata.associations.values():
            lines.append(f"metadata.map_association({_render(association)})")
        for event, methods in metadata.lifecycle_callbacks.items():
            for method in methods:
                lines.append(f"metadata.add_lifecycle_callback({_render(event)}, {method!r})")
        return "\n".join(lines) + "\n"


def _is_default(field: Field[object], value: object) -> bool:
    if field.default is not MISSING:
        return value == field.default
    if field.default_factory is not MISSING:
        return value == field.default_factory()
    return False


def _render(value: object) -> str:
    if isinstance(value, Enum):
        return f"{type(value).__name__}.{value.name}"
    if is_dataclass(value) and not isinstance(value, type):
        arguments = [
            f"{field.name}={_render(getattr(value, field.name))}"
            for field in fields(value)
            if not _is_default(field, getattr(value, field.name))
        ]
        return f"{type(value).__name__}({', '.join(arguments)})"
    if isinstance(value, tuple):
        items = [_render(item) for item in value]  # pyright: ignore[reportUnknownVariableType]
        return f"({items[0]},)" if len(items) == 1 else f"({', '.join(items)})"
    if isinstance(value, list):
        items = [_render(item) for item in value]  # pyright: ignore[reportUnknownVariableType]
        return f"[{', '.join(items)}]"
    if isinstance(value, dict):
        pairs = [
            f"{_render(key)}: {_render(item)}"
            for key, item in value.items()  # pyright: ignore[reportUnknownVariableType]
        ]
        return f"{{{', '.join(pairs)}}}"
    return repr(value)
