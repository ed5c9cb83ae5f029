"""Annotation exporter: writes SQLAlchemy declarative classes.

Each class goes to its own module and imports ``Base`` from a shared module.
By default that module is written to the export root as ``orm_base.py``; call
`set_base_module` to import ``Base`` from an existing module instead. Parent
classes are imported from their own exported modules.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, ClassVar, Final, NamedTuple

from mapconvert.domain.model import AssociationType, InheritanceType

from .base import AbstractExporter

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from mapconvert.domain.model import (
        AssociationMapping,
        ClassMetadata,
        FieldMapping,
        JoinColumn,
        JoinTable,
    )

    type MetadataLookup = Callable[[str], ClassMetadata | None]


class ColumnType(NamedTuple):
    python: str
    sqlalchemy: str


COLUMN_TYPES: Final[dict[str, ColumnType]] = {
    "string": ColumnType("str", "String"),
    "text": ColumnType("str", "Text"),
    "integer": ColumnType("int", "Integer"),
    "smallint": ColumnType("int", "SmallInteger"),
    "bigint": ColumnType("int", "BigInteger"),
    "boolean": ColumnType("bool", "Boolean"),
    "float": ColumnType("float", "Float"),
    "decimal": ColumnType("Decimal", "Numeric"),
    "datetime": ColumnType("datetime", "DateTime"),
    "date": ColumnType("date", "Date"),
    "time": ColumnType("time", "Time"),
    "uuid": ColumnType("uuid.UUID", "Uuid"),
    "json": ColumnType("object", "JSON"),
    "binary": ColumnType("bytes", "LargeBinary"),
}
DEFAULT_COLUMN_TYPE: Final[ColumnType] = COLUMN_TYPES["string"]
PYTHON_TYPE_IMPORTS: Final[dict[str, str]] = {
    "Decimal": "from decimal import Decimal",
    "datetime": "from datetime import datetime",
    "date": "from datetime import date",
    "time": "from datetime import time",
    "uuid.UUID": "import uuid",
}
INDENT: Final[str] = "    "
SHARED_BASE_MODULE: Final[str] = "orm_base"
BASE_MODULE_SOURCE: Final[str] = '''"""Declarative base shared by the exported mappings."""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
'''

CASCADE_OPTIONS: Final[dict[str, str]] = {
    "all": "all",
    "persist": "save-update",
    "merge": "merge",
    "remove": "delete",
    "orphan-removal": "delete-orphan",
    "detach": "expunge",
    "refresh": "refresh-expire",
}


class AnnotationExporter(AbstractExporter):
    default_extension: ClassVar[str] = ".py"

    def __init__(
        self, metadata: Sequence[ClassMetadata], output_dir: Path | str | None = None
    ) -> None:
        super().__init__(metadata, output_dir)
        self.base_module = SHARED_BASE_MODULE

    def set_base_module(self, module: str) -> None:
        self.base_module = module

    def export(self) -> list[Path]:
        if self.output_dir is None or self.base_module != SHARED_BASE_MODULE:
            return super().export()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        base_path = self.output_dir / f"{SHARED_BASE_MODULE}.py"
        base_path.write_text(BASE_MODULE_SOURCE, encoding="utf-8")
        return [base_path, *super().export()]

    def export_class_metadata(self, metadata: ClassMetadata) -> str:
        return _ClassRenderer(metadata, self._lookup, self.base_module).render()

    def _lookup(self, name: str) -> ClassMetadata | None:
        return next((candidate for candidate in self.metadata if candidate.name == name), None)


class _ClassRenderer:
    def __init__(
        self,
        metadata: ClassMetadata,
        lookup: MetadataLookup,
        base_module: str,
    ) -> None:
        self.metadata = metadata
        self.lookup = lookup
        self.base_module = base_module
        self.python_imports: set[str] = set()
        self.sqlalchemy_imports: set[str] = set()
        self.orm_imports: set[str] = {"Mapped", "mapped_column"}

    def render(self) -> str:
        body = self._class_body()
        tables = self._association_tables()
        parent = self._parent_class()

        lines = ['"""Declarative mapping for {}."""'.format(self.metadata.name), ""]
        lines.append("from __future__ import annotations")
        lines.append("")
        lines.extend(sorted(self.python_imports))
        if self.python_imports:
            lines.append("")
        if self.sqlalchemy_imports:
            lines.append(f"from sqlalchemy import {', '.join(sorted(self.sqlalchemy_imports))}")
        lines.append(f"from sqlalchemy.orm import {', '.join(sorted(self.orm_imports))}")
        lines.append("")
        if tables or not self._inherits_parent:
            lines.append(f"from {self.base_module} import Base")
        if self._inherits_parent:
            lines.append(f"from {self.metadata.parent_classes[0]} import {parent}")
        for table in tables:
            lines.extend(["", "", table])
        lines.extend(["", "", f"class {self.metadata.short_name}({parent}):"])
        lines.extend(f"{INDENT}{line}" if line else "" for line in body)
        return "\n".join(lines) + "\n"

    @property
    def _inherits_parent(self) -> bool:
        parents = self.metadata.parent_classes
        return bool(parents) and self.lookup(parents[0]) is not None

    def _parent_class(self) -> str:
        if self._inherits_parent:
            return self.metadata.parent_classes[0].rsplit(".", 1)[-1]
        return "Base"

    def _class_body(self) -> list[str]:
        metadata = self.metadata
        body: list[str] = []
        if metadata.is_mapped_superclass:
            body.append("__abstract__ = True")
        elif not (
            self._inherits_parent and metadata.inheritance_type is InheritanceType.SINGLE_TABLE
        ):
            body.append(f"__tablename__ = {metadata.resolved_table_name!r}")
        mapper_args = self._mapper_args()
        if mapper_args:
            body.append(f"__mapper_args__ = {{{', '.join(mapper_args)}}}")
        for event, methods in metadata.lifecycle_callbacks.items():
            body.append(f"# {event.value}: {', '.join(methods)}")
        body.append("")

        for mapping in metadata.fields.values():
            body.append(self._column(mapping))
        for association in metadata.associations.values():
            body.extend(self._association(association))
        if not metadata.fields and not metadata.associations:
            body.append("pass")
        return body

    def _mapper_args(self) -> list[str]:
        args: list[str] = []
        metadata = self.metadata
        if metadata.discriminator_column and not metadata.parent_classes:
            field = next(
                (
                    name
                    for name, mapping in metadata.fields.items()
                    if mapping.column_name == metadata.discriminator_column
                ),
                metadata.discriminator_column,
            )
            args.append(f'"polymorphic_on": {field!r}')
        polymorphic = self._inherits_parent or (
            metadata.discriminator_column is not None and not metadata.parent_classes
        )
        if polymorphic and metadata.discriminator_value is not None:
            args.append(f'"polymorphic_identity": {metadata.discriminator_value!r}')
        return args

    def _column_type(self, mapping: FieldMapping) -> ColumnType:
        column_type = COLUMN_TYPES.get(mapping.type, DEFAULT_COLUMN_TYPE)
        self.sqlalchemy_imports.add(column_type.sqlalchemy)
        python_import = PYTHON_TYPE_IMPORTS.get(column_type.python)
        if python_import is not None:
            self.python_imports.add(python_import)
        return column_type

    def _column(self, mapping: FieldMapping) -> str:
        column_type = self._column_type(mapping)
        if mapping.length is not None:
            type_expr = f"{column_type.sqlalchemy}({mapping.length})"
        elif mapping.precision is not None:
            type_expr = f"{column_type.sqlalchemy}({mapping.precision}, {mapping.scale or 0})"
        else:
            type_expr = column_type.sqlalchemy

        arguments: list[str] = []
        if mapping.column_name != mapping.field_name:
            arguments.append(repr(mapping.column_name))
        arguments.append(type_expr)
        if mapping.id:
            arguments.append("primary_key=True")
        if mapping.unique:
            arguments.append("unique=True")
        annotation = column_type.python
        if mapping.nullable and not mapping.id:
            annotation = f"{annotation} | None"
        return (
            f"{mapping.field_name}: Mapped[{annotation}] = mapped_column({', '.join(arguments)})"
        )

    def _association(self, association: AssociationMapping) -> list[str]:
        self.orm_imports.add("relationship")
        target = association.target_entity.rsplit(".", 1)[-1]
        arguments: list[str] = []
        back_populates = association.mapped_by or association.inversed_by
        join_table = association.join_table or self._owning_join_table(association)
        if join_table is not None:
            arguments.append(f"secondary={join_table.name!r}")
        if back_populates:
            arguments.append(f"back_populates={back_populates!r}")
        if association.cascade:
            cascade = [
                CASCADE_OPTIONS[name] for name in association.cascade if name in CASCADE_OPTIONS
            ]
            if cascade:
                arguments.append(f"cascade={', '.join(cascade)!r}")

        lines: list[str] = []
        if association.type.is_to_one and association.is_owning_side:
            lines.extend(
                self._foreign_key(column, association.target_entity)
                for column in association.join_columns
                if column.name not in self.metadata.fields
            )
        collection = association.type in (
            AssociationType.ONE_TO_MANY,
            AssociationType.MANY_TO_MANY,
        )
        annotation = f"list[{target}]" if collection else target
        lines.append(
            f"{association.field_name}: Mapped[{annotation}] = relationship({', '.join(arguments)})"
        )
        return lines

    def _owning_join_table(self, association: AssociationMapping) -> JoinTable | None:
        if association.type is not AssociationType.MANY_TO_MANY or not association.mapped_by:
            return None
        target = self.lookup(association.target_entity)
        owner = target.associations.get(association.mapped_by) if target else None
        return owner.join_table if owner else None

    def _foreign_key(self, column: JoinColumn, target_entity: str) -> str:
        self.sqlalchemy_imports.add("ForeignKey")
        target = self.lookup(target_entity)
        table = target.resolved_table_name if target else target_entity.rsplit(".", 1)[-1]
        python_type = "int"
        if target is not None:
            referenced = next(
                (
                    mapping
                    for mapping in target.fields.values()
                    if mapping.column_name == column.referenced_column_name
                ),
                None,
            )
            if referenced is not None:
                python_type = self._column_type(referenced).python
        if column.nullable:
            python_type = f"{python_type} | None"
        options = f", ondelete={column.on_delete!r}" if column.on_delete else ""
        return (
            f"{column.name}: Mapped[{python_type}] = "
            f"mapped_column(ForeignKey({f'{table}.{column.referenced_column_name}'!r}{options}))"
        )

    def _association_tables(self) -> list[str]:
        tables: list[str] = []
        for association in self.metadata.associations.values():
            join_table = association.join_table
            if join_table is None or not association.is_owning_side:
                continue
            self.sqlalchemy_imports.update({"Column", "ForeignKey", "Table"})
            target = self.lookup(association.target_entity)
            target_table = (
                target.resolved_table_name
                if target
                else association.target_entity.rsplit(".", 1)[-1]
            )
            columns = [
                _join_table_column(column, self.metadata.resolved_table_name)
                for column in join_table.join_columns
            ]
            columns.extend(
                _join_table_column(column, target_table)
                for column in join_table.inverse_join_columns
            )
            tables.append(
                f"{_table_identifier(join_table.name)} = Table(\n"
                f"{INDENT}{join_table.name!r},\n"
                f"{INDENT}Base.metadata,\n"
                + "".join(f"{INDENT}{column},\n" for column in columns)
                + ")"
            )
        return tables


def _table_identifier(name: str) -> str:
    return "_table_" + re.sub(r"\W", "_", name)


def _join_table_column(column: JoinColumn, table: str) -> str:
    options = f", ondelete={column.on_delete!r}" if column.on_delete else ""
    return (
        f"Column({column.name!r}, "
        f"ForeignKey({f'{table}.{column.referenced_column_name}'!r}{options}), primary_key=True)"
    )
