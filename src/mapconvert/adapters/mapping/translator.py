"""Translate mapping documents into domain metadata and back."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mapconvert.domain.model import (
    AssociationMapping,
    AssociationType,
    ClassMetadata,
    FieldMapping,
    IdGeneratorType,
    JoinColumn,
    JoinTable,
)

from .schema import (
    AssociationSchema,
    ColumnSchema,
    EntityMappingDocument,
    GeneratorSchema,
    IdSchema,
    JoinColumnSchema,
    JoinTableSchema,
)

if TYPE_CHECKING:
    from collections.abc import Iterable


def populate_metadata(document: EntityMappingDocument, metadata: ClassMetadata) -> None:
    """Fill `metadata` from a validated document."""

    metadata.is_mapped_superclass = document.is_mapped_superclass
    metadata.table_name = document.table
    metadata.custom_repository_class = document.repository_class
    metadata.inheritance_type = document.inheritance_type
    metadata.discriminator_column = document.discriminator_column
    metadata.discriminator_value = document.discriminator_value
    metadata.discriminator_map = dict(document.discriminator_map)
    metadata.parent_classes = list(document.parent_classes)

    for name, id_schema in document.identifiers.items():
        metadata.map_field(_build_field(name, id_schema, is_id=True))
        if id_schema.generator is not None:
            metadata.id_generator = id_schema.generator.strategy

    for name, column in document.field_mappings.items():
        metadata.map_field(_build_field(name, column, is_id=False))

    for association_type, associations in _associations_by_type(document):
        for name, association in associations.items():
            metadata.map_association(_build_association(name, association, association_type))

    for event, methods in document.lifecycle_callbacks.items():
        for method in methods:
            metadata.add_lifecycle_callback(event, method)


def build_document(metadata: ClassMetadata) -> EntityMappingDocument:
    """Describe `metadata` as a mapping document."""

    document = EntityMappingDocument(
        type="mappedSuperclass" if metadata.is_mapped_superclass else "entity",
        table=metadata.table_name,
        repository_class=metadata.custom_repository_class,
        inheritance_type=metadata.inheritance_type,
        discriminator_column=metadata.discriminator_column,
        discriminator_value=metadata.discriminator_value,
        discriminator_map=dict(metadata.discriminator_map),
        parent_classes=list(metadata.parent_classes),
        lifecycle_callbacks={
            event: list(methods) for event, methods in metadata.lifecycle_callbacks.items()
        },
    )

    for name, mapping in metadata.fields.items():
        if mapping.id:
            generator = (
                GeneratorSchema(strategy=metadata.id_generator)
                if metadata.id_generator is not IdGeneratorType.NONE
                else None
            )
            document.identifiers[name] = IdSchema(
                **_column_values(mapping), generator=generator
            )
        else:
            document.field_mappings[name] = ColumnSchema(**_column_values(mapping))

    targets = {
        AssociationType.ONE_TO_ONE: document.one_to_one,
        AssociationType.MANY_TO_ONE: document.many_to_one,
        AssociationType.ONE_TO_MANY: document.one_to_many,
        AssociationType.MANY_TO_MANY: document.many_to_many,
    }
    for name, association in metadata.associations.items():
        targets[association.type][name] = _association_schema(association)

    return document


def _associations_by_type(
    document: EntityMappingDocument,
) -> Iterable[tuple[AssociationType, dict[str, AssociationSchema]]]:
    yield AssociationType.ONE_TO_ONE, document.one_to_one
    yield AssociationType.MANY_TO_ONE, document.many_to_one
    yield AssociationType.ONE_TO_MANY, document.one_to_many
    yield AssociationType.MANY_TO_MANY, document.many_to_many


def _build_field(name: str, column: ColumnSchema, *, is_id: bool) -> FieldMapping:
    return FieldMapping(
        field_name=name,
        type=column.type,
        column_name=column.column,
        length=column.length,
        precision=column.precision,
        scale=column.scale,
        nullable=column.nullable,
        unique=column.unique,
        id=is_id,
    )


def _build_join_column(schema: JoinColumnSchema) -> JoinColumn:
    return JoinColumn(
        name=schema.name,
        referenced_column_name=schema.referenced_column_name,
        nullable=schema.nullable,
        on_delete=schema.on_delete,
    )


def _build_join_table(schema: JoinTableSchema) -> JoinTable:
    return JoinTable(
        name=schema.name,
        join_columns=tuple(_build_join_column(column) for column in schema.join_columns),
        inverse_join_columns=tuple(
            _build_join_column(column) for column in schema.inverse_join_columns
        ),
    )


def _build_association(
    name: str, schema: AssociationSchema, association_type: AssociationType
) -> AssociationMapping:
    return AssociationMapping(
        field_name=name,
        target_entity=schema.target_entity,
        type=association_type,
        mapped_by=schema.mapped_by,
        inversed_by=schema.inversed_by,
        join_columns=tuple(_build_join_column(column) for column in schema.join_columns),
        join_table=_build_join_table(schema.join_table) if schema.join_table else None,
        cascade=tuple(schema.cascade),
    )


def _column_values(mapping: FieldMapping) -> dict[str, object]:
    return {
        "type": mapping.type,
        # column defaults to the field name, so only spell it out when it differs
        "column": mapping.column_name if mapping.column_name != mapping.field_name else None,
        "length": mapping.length,
        "precision": mapping.precision,
        "scale": mapping.scale,
        "nullable": mapping.nullable,
        "unique": mapping.unique,
    }


def _join_column_schema(column: JoinColumn) -> JoinColumnSchema:
    return JoinColumnSchema(
        name=column.name,
        referenced_column_name=column.referenced_column_name,
        nullable=column.nullable,
        on_delete=column.on_delete,
    )


def _association_schema(association: AssociationMapping) -> AssociationSchema:
    join_table = association.join_table
    return AssociationSchema(
        target_entity=association.target_entity,
        mapped_by=association.mapped_by,
        inversed_by=association.inversed_by,
        join_columns=[_join_column_schema(column) for column in association.join_columns],
        join_table=JoinTableSchema(
            name=join_table.name,
            join_columns=[_join_column_schema(c) for c in join_table.join_columns],
            inverse_join_columns=[
                _join_column_schema(c) for c in join_table.inverse_join_columns
            ],
        )
        if join_table is not None
        else None,
        cascade=list(association.cascade),
    )
