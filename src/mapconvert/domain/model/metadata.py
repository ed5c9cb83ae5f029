"""Normalized entity metadata shared by every mapping driver and exporter.

Drivers never assign free-form attributes: they fill a `ClassMetadata` through
`map_field`, `map_association` and `add_lifecycle_callback`, which enforce the
few structural rules every format agrees on.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mapconvert.domain.errors import MappingError
from mapconvert.domain.model.enums import (
    AssociationType,
    IdGeneratorType,
    InheritanceType,
    LifecycleEvent,
)


@dataclass(kw_only=True, slots=True)
class FieldMapping:
    field_name: str
    type: str = "string"
    column_name: str | None = None
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    nullable: bool = False
    unique: bool = False
    id: bool = False

    def __post_init__(self) -> None:
        if not self.field_name:
            raise MappingError("field mapping requires a field name")
        if self.column_name is None:
            self.column_name = self.field_name


@dataclass(kw_only=True, slots=True)
class JoinColumn:
    name: str
    referenced_column_name: str = "id"
    nullable: bool = True
    on_delete: str | None = None


@dataclass(kw_only=True, slots=True)
class JoinTable:
    name: str
    join_columns: tuple[JoinColumn, ...] = ()
    inverse_join_columns: tuple[JoinColumn, ...] = ()


@dataclass(kw_only=True, slots=True)
class AssociationMapping:
    field_name: str
    target_entity: str
    type: AssociationType
    mapped_by: str | None = None
    inversed_by: str | None = None
    join_columns: tuple[JoinColumn, ...] = ()
    join_table: JoinTable | None = None
    cascade: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.target_entity:
            raise MappingError(f"association {self.field_name!r} requires a target entity")
        if self.mapped_by is not None and self.inversed_by is not None:
            raise MappingError(
                f"association {self.field_name!r} cannot be both owning and inverse side"
            )
        if self.type is AssociationType.MANY_TO_ONE and self.mapped_by is not None:
            raise MappingError(
                f"many-to-one association {self.field_name!r} is always the owning side"
            )
        if self.join_table is not None and self.type is not AssociationType.MANY_TO_MANY:
            raise MappingError(
                f"join table on {self.field_name!r} requires a many-to-many association"
            )

    @property
    def is_owning_side(self) -> bool:
        return self.mapped_by is None


@dataclass(eq=False, kw_only=True)
class ClassMetadata:
    """Mapping information for one persistable class, keyed by `name`."""

    name: str
    table_name: str | None = None
    is_mapped_superclass: bool = False
    custom_repository_class: str | None = None
    id_generator: IdGeneratorType = IdGeneratorType.NONE
    inheritance_type: InheritanceType = InheritanceType.NONE
    discriminator_column: str | None = None
    discriminator_value: str | None = None
    discriminator_map: dict[str, str] = field(default_factory=dict[str, str])
    parent_classes: list[str] = field(default_factory=list[str])
    fields: dict[str, FieldMapping] = field(default_factory=dict[str, FieldMapping])
    associations: dict[str, AssociationMapping] = field(
        default_factory=dict[str, AssociationMapping]
    )
    lifecycle_callbacks: dict[LifecycleEvent, list[str]] = field(
        default_factory=dict[LifecycleEvent, list[str]]
    )

    def __repr__(self) -> str:
        kind = "MappedSuperclass" if self.is_mapped_superclass else "Entity"
        return f"<ClassMetadata {kind} {self.name!r}>"

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def resolved_table_name(self) -> str:
        """Explicit table name, else the short class name."""
        return self.table_name or self.short_name

    @property
    def identifier(self) -> list[str]:
        return [name for name, mapping in self.fields.items() if mapping.id]

    @property
    def is_identifier_composite(self) -> bool:
        return len(self.identifier) > 1

    @property
    def is_inheritance_root(self) -> bool:
        return not self.parent_classes

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def has_association(self, name: str) -> bool:
        return name in self.associations

    def map_field(self, mapping: FieldMapping) -> None:
        self._ensure_unmapped(mapping.field_name)
        self.fields[mapping.field_name] = mapping

    def map_association(self, mapping: AssociationMapping) -> None:
        self._ensure_unmapped(mapping.field_name)
        self.associations[mapping.field_name] = mapping

    def add_lifecycle_callback(self, event: LifecycleEvent | str, method: str) -> None:
        callbacks = self.lifecycle_callbacks.setdefault(LifecycleEvent(event), [])
        if method not in callbacks:
            callbacks.append(method)

    def _ensure_unmapped(self, name: str) -> None:
        if name in self.fields or name in self.associations:
            raise MappingError(f"Property {name!r} in {self.name!r} was already declared")
