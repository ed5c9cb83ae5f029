"""Annotation driver: reads SQLAlchemy declarative classes.

Declarative models play the part of annotated entities. A class mapped through
a declarative base is an entity, a declarative subclass with
``__abstract__ = True`` is a mapped superclass, and everything else (the base
itself, mixins, helpers) is transient.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from sqlalchemy import Column, Identity, Sequence
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import MappedColumn, Mapper, registry
from sqlalchemy.types import NullType

from mapconvert.domain.errors import MappingError
from mapconvert.domain.model import (
    AssociationMapping,
    AssociationType,
    FieldMapping,
    IdGeneratorType,
    InheritanceType,
    JoinColumn,
    JoinTable,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import RelationshipProperty
    from sqlalchemy.sql.schema import ColumnElement

    from mapconvert.domain.model import ClassMetadata

log = logging.getLogger(__name__)

SQL_TYPE_NAMES: Final[dict[str, str]] = {
    "Text": "text",
    "UnicodeText": "text",
    "String": "string",
    "SmallInteger": "smallint",
    "BigInteger": "bigint",
    "Integer": "integer",
    "Boolean": "boolean",
    "Float": "float",
    "Numeric": "decimal",
    "DateTime": "datetime",
    "Date": "date",
    "Time": "time",
    "Uuid": "uuid",
    "JSON": "json",
    "LargeBinary": "binary",
    "Enum": "string",
}
PYTHON_TYPE_NAMES: Final[dict[str, str]] = {
    "str": "string",
    "int": "integer",
    "float": "float",
    "bool": "boolean",
    "Decimal": "decimal",
    "datetime": "datetime",
    "date": "date",
    "time": "time",
    "UUID": "uuid",
    "bytes": "binary",
}
DEFAULT_CASCADE: Final[frozenset[str]] = frozenset({"save-update", "merge"})
CASCADE_NAMES: Final[dict[str, str]] = {
    "save-update": "persist",
    "merge": "merge",
    "delete": "remove",
    "delete-orphan": "orphan-removal",
    "expunge": "detach",
    "refresh-expire": "refresh",
}


@dataclass(slots=True)
class DeclarativeReader:
    """Names declared classes, prefixing `default_namespace` when one is configured."""

    default_namespace: str = ""

    def entity_name(self, cls: type) -> str:
        if self.default_namespace:
            return f"{self.default_namespace}.{cls.__qualname__}"
        return cls.__qualname__


def is_declarative_class(cls: type) -> bool:
    return isinstance(getattr(cls, "registry", None), registry)


def is_abstract_declarative(cls: type) -> bool:
    return is_declarative_class(cls) and bool(vars(cls).get("__abstract__", False))


class SqlAlchemyAnnotationDriver:
    def __init__(self, reader: DeclarativeReader) -> None:
        self.reader = reader

    def __repr__(self) -> str:
        return f"SqlAlchemyAnnotationDriver(namespace={self.reader.default_namespace!r})"

    def is_transient(self, class_name: type) -> bool:
        if _mapper_for(class_name) is not None:
            return False
        return not is_abstract_declarative(class_name)

    def load_metadata_for_class(self, class_name: type, metadata: ClassMetadata) -> None:
        mapper = _mapper_for(class_name)
        if mapper is None:
            if not is_abstract_declarative(class_name):
                raise MappingError(f"{class_name.__qualname__} is not a declarative class")
            self._load_mapped_superclass(class_name, metadata)
            return

        own_attributes = _own_attribute_names(class_name)
        is_root = mapper.inherits is None

        metadata.table_name = None if mapper.single else getattr(mapper.local_table, "name", None)
        metadata.parent_classes = [
            self.reader.entity_name(parent.class_) for parent in list(mapper.iterate_to_root())[1:]
        ]
        self._load_inheritance(mapper, metadata)

        for prop in mapper.column_attrs:
            if not is_root and prop.key not in own_attributes:
                continue
            metadata.map_field(_field_for_column(prop.key, prop.columns[0]))

        metadata.id_generator = _id_generator(mapper)

        for relationship in mapper.relationships:
            if not is_root and relationship.key not in own_attributes:
                continue
            metadata.map_association(self._association_for(relationship))

        log.debug("Loaded declarative mapping for %s", metadata.name)

    def _load_mapped_superclass(self, cls: type, metadata: ClassMetadata) -> None:
        metadata.is_mapped_superclass = True
        metadata.table_name = vars(cls).get("__tablename__")
        annotations = inspect.get_annotations(cls)
        for key, value in vars(cls).items():
            if isinstance(value, MappedColumn):
                column: Column[object] = value.column
            elif isinstance(value, Column):
                column = value
            else:
                continue
            mapping = _field_for_column(key, column)
            if isinstance(column.type, NullType) and key in annotations:
                mapping.type = _type_from_annotation(annotations[key])
            metadata.map_field(mapping)

    def _load_inheritance(self, mapper: Mapper[object], metadata: ClassMetadata) -> None:
        root = mapper.base_mapper
        if root.polymorphic_on is None and mapper.inherits is None:
            return

        joined = any(
            not descendant.single
            for descendant in root.self_and_descendants
            if descendant is not root
        )
        metadata.inheritance_type = (
            InheritanceType.JOINED if joined else InheritanceType.SINGLE_TABLE
        )
        if mapper.polymorphic_identity is not None:
            metadata.discriminator_value = str(mapper.polymorphic_identity)
        if mapper.inherits is None:
            discriminator = mapper.polymorphic_on
            metadata.discriminator_column = getattr(discriminator, "name", None)
            metadata.discriminator_map = {
                str(identity): self.reader.entity_name(sub_mapper.class_)
                for identity, sub_mapper in mapper.polymorphic_map.items()
            }

    def _association_for(self, relationship: RelationshipProperty[object]) -> AssociationMapping:
        target = relationship.mapper
        back_populates = relationship.back_populates
        reverse = target.relationships.get(back_populates) if back_populates else None
        direction = relationship.direction.name
        cascade = _cascade_names(relationship)
        target_entity = self.reader.entity_name(target.class_)

        if direction == "MANYTOONE":
            return AssociationMapping(
                field_name=relationship.key,
                target_entity=target_entity,
                type=(
                    AssociationType.ONE_TO_ONE
                    if reverse is not None and not reverse.uselist
                    else AssociationType.MANY_TO_ONE
                ),
                inversed_by=back_populates,
                join_columns=tuple(
                    _join_column(local, remote) for local, remote in relationship.local_remote_pairs
                ),
                cascade=cascade,
            )

        if direction == "ONETOMANY":
            return AssociationMapping(
                field_name=relationship.key,
                target_entity=target_entity,
                type=AssociationType.ONE_TO_MANY
                if relationship.uselist
                else AssociationType.ONE_TO_ONE,
                mapped_by=back_populates,
                cascade=cascade,
            )

        # many-to-many: the side whose entity sorts first owns the join table
        owner_name = self.reader.entity_name(relationship.parent.class_)
        owning = reverse is None or owner_name <= target_entity
        secondary = relationship.secondary
        join_table = None
        if owning and secondary is not None:
            join_table = JoinTable(
                name=getattr(secondary, "name", str(secondary)),
                join_columns=tuple(
                    _join_column(fk, pk) for pk, fk in relationship.synchronize_pairs
                ),
                inverse_join_columns=tuple(
                    _join_column(fk, pk)
                    for pk, fk in relationship.secondary_synchronize_pairs or ()
                ),
            )
        return AssociationMapping(
            field_name=relationship.key,
            target_entity=target_entity,
            type=AssociationType.MANY_TO_MANY,
            mapped_by=None if owning else back_populates,
            inversed_by=back_populates if owning else None,
            join_table=join_table,
            cascade=cascade,
        )


def _mapper_for(cls: type) -> Mapper[object] | None:
    mapper = sa_inspect(cls, raiseerr=False)
    return mapper if isinstance(mapper, Mapper) else None


def _own_attribute_names(cls: type) -> set[str]:
    return set(vars(cls)) | set(inspect.get_annotations(cls))


def _type_name(column: ColumnElement[object]) -> str:
    for candidate in type(column.type).__mro__:
        name = SQL_TYPE_NAMES.get(candidate.__name__)
        if name is not None:
            return name
    return type(column.type).__name__.lower()


def _type_from_annotation(annotation: object) -> str:
    text = annotation if isinstance(annotation, str) else repr(annotation)
    inner = text.removeprefix("Mapped[").removesuffix("]")
    for part in inner.replace("Optional[", "").replace("]", "").split("|"):
        name = PYTHON_TYPE_NAMES.get(part.strip().rsplit(".", 1)[-1])
        if name is not None:
            return name
    return "string"


def _field_for_column(key: str, column: Column[object]) -> FieldMapping:
    column_type = column.type
    return FieldMapping(
        field_name=key,
        type=_type_name(column),
        column_name=column.name or key,
        length=getattr(column_type, "length", None),
        precision=getattr(column_type, "precision", None),
        scale=getattr(column_type, "scale", None),
        nullable=bool(column.nullable) and not column.primary_key,
        unique=bool(column.unique),
        id=bool(column.primary_key),
    )


def _id_generator(mapper: Mapper[object]) -> IdGeneratorType:
    primary_key = mapper.primary_key
    if len(primary_key) != 1:
        return IdGeneratorType.NONE
    column = primary_key[0]
    if isinstance(getattr(column, "identity", None), Identity):
        return IdGeneratorType.IDENTITY
    if isinstance(getattr(column, "default", None), Sequence):
        return IdGeneratorType.SEQUENCE
    if _type_name(column) in ("integer", "smallint", "bigint") and column.autoincrement in (
        True,
        "auto",
    ):
        return IdGeneratorType.AUTO
    return IdGeneratorType.NONE


def _join_column(local: ColumnElement[object], remote: ColumnElement[object]) -> JoinColumn:
    foreign_keys = getattr(local, "foreign_keys", ())
    on_delete = next((fk.ondelete for fk in foreign_keys if fk.ondelete), None)
    return JoinColumn(
        name=getattr(local, "name", str(local)),
        referenced_column_name=getattr(remote, "name", str(remote)),
        nullable=bool(getattr(local, "nullable", True)),
        on_delete=on_delete,
    )


def _cascade_names(relationship: RelationshipProperty[object]) -> tuple[str, ...]:
    options = set(relationship.cascade)
    if options == DEFAULT_CASCADE:
        return ()
    return tuple(sorted(CASCADE_NAMES.get(option, option) for option in options))
