"""XML exporter (`*.orm.xml`), the inverse of `XmlDriver`."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, ClassVar

from mapconvert.adapters.mapping import XML_EXTENSION, build_document
from mapconvert.adapters.mapping.xml_driver import (
    ASSOCIATION_TAGS,
    CASCADE_PREFIX,
    ENTITY_TAG,
    MAPPED_SUPERCLASS_TAG,
    ROOT_TAG,
)
from mapconvert.domain.model import InheritanceType

from .base import AbstractExporter

if TYPE_CHECKING:
    from mapconvert.adapters.mapping.schema import (
        AssociationSchema,
        ColumnSchema,
        JoinColumnSchema,
    )
    from mapconvert.domain.model import ClassMetadata

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'


class XmlExporter(AbstractExporter):
    default_extension: ClassVar[str] = XML_EXTENSION

    def export_class_metadata(self, metadata: ClassMetadata) -> str:
        document = build_document(metadata)
        root = ET.Element(ROOT_TAG)
        element = ET.SubElement(
            root,
            MAPPED_SUPERCLASS_TAG if document.is_mapped_superclass else ENTITY_TAG,
            name=metadata.name,
        )
        _set(element, "table", document.table)
        _set(element, "repository-class", document.repository_class)
        if document.inheritance_type is not InheritanceType.NONE:
            element.set("inheritance-type", document.inheritance_type.value)
        _set(element, "discriminator-column", document.discriminator_column)
        _set(element, "discriminator-value", document.discriminator_value)

        for parent in document.parent_classes:
            ET.SubElement(element, "parent-class", name=parent)

        if document.discriminator_map:
            mapping = ET.SubElement(element, "discriminator-map")
            for value, class_name in document.discriminator_map.items():
                ET.SubElement(
                    mapping, "discriminator-mapping", {"value": value, "class": class_name}
                )

        for name, id_schema in document.identifiers.items():
            id_element = ET.SubElement(element, "id", name=name)
            _set_column(id_element, id_schema)
            if id_schema.generator is not None:
                ET.SubElement(id_element, "generator", strategy=id_schema.generator.strategy.value)

        for name, column in document.field_mappings.items():
            _set_column(ET.SubElement(element, "field", name=name), column)

        associations = {
            "one-to-one": document.one_to_one,
            "many-to-one": document.many_to_one,
            "one-to-many": document.one_to_many,
            "many-to-many": document.many_to_many,
        }
        for tag in ASSOCIATION_TAGS:
            for name, association in associations[tag].items():
                _add_association(element, tag, name, association)

        if document.lifecycle_callbacks:
            callbacks = ET.SubElement(element, "lifecycle-callbacks")
            for event, methods in document.lifecycle_callbacks.items():
                for method in methods:
                    ET.SubElement(
                        callbacks, "lifecycle-callback", type=event.value, method=method
                    )

        ET.indent(root)
        return XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


def _set(element: ET.Element, attribute: str, value: str | None) -> None:
    if value is not None:
        element.set(attribute, value)


def _bool(value: bool) -> str:  # noqa: FBT001
    return "true" if value else "false"


def _set_column(element: ET.Element, column: ColumnSchema) -> None:
    element.set("type", column.type)
    _set(element, "column", column.column)
    for attribute in ("length", "precision", "scale"):
        value = getattr(column, attribute)
        if value is not None:
            element.set(attribute, str(value))
    if column.nullable:
        element.set("nullable", _bool(column.nullable))
    if column.unique:
        element.set("unique", _bool(column.unique))


def _add_join_column(parent: ET.Element, column: JoinColumnSchema) -> None:
    element = ET.SubElement(
        parent,
        "join-column",
        {"name": column.name, "referenced-column-name": column.referenced_column_name},
    )
    if not column.nullable:
        element.set("nullable", _bool(column.nullable))
    _set(element, "on-delete", column.on_delete)


def _add_association(
    parent: ET.Element, tag: str, name: str, association: AssociationSchema
) -> None:
    element = ET.SubElement(
        parent, tag, {"field": name, "target-entity": association.target_entity}
    )
    _set(element, "mapped-by", association.mapped_by)
    _set(element, "inversed-by", association.inversed_by)

    if association.cascade:
        cascade = ET.SubElement(element, "cascade")
        for option in association.cascade:
            ET.SubElement(cascade, f"{CASCADE_PREFIX}{option}")

    if association.join_columns:
        join_columns = ET.SubElement(element, "join-columns")
        for column in association.join_columns:
            _add_join_column(join_columns, column)

    join_table = association.join_table
    if join_table is not None:
        table = ET.SubElement(element, "join-table", name=join_table.name)
        join_columns = ET.SubElement(table, "join-columns")
        for column in join_table.join_columns:
            _add_join_column(join_columns, column)
        inverse = ET.SubElement(table, "inverse-join-columns")
        for column in join_table.inverse_join_columns:
            _add_join_column(inverse, column)
