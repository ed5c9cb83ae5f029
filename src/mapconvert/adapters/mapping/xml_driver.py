"""XML mapping driver (`*.orm.xml`).

A file holds one ``<mapping>`` root with ``<entity>`` and ``<mapped-superclass>``
children::

    <mapping>
      <entity name="app.User" table="users">
        <id name="id" type="integer"><generator strategy="AUTO"/></id>
        <field name="email" type="string" length="255" unique="true"/>
        <one-to-many field="posts" target-entity="app.Post" mapped-by="author"/>
      </entity>
    </mapping>
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, ClassVar, Final

from mapconvert.domain.errors import MappingError

from .file_driver import FileDriver

if TYPE_CHECKING:
    from pathlib import Path

XML_EXTENSION = ".orm.xml"
ROOT_TAG: Final[str] = "mapping"
ENTITY_TAG: Final[str] = "entity"
MAPPED_SUPERCLASS_TAG: Final[str] = "mapped-superclass"

CLASS_ATTRIBUTES: Final[dict[str, str]] = {
    "table": "table",
    "repository-class": "repositoryClass",
    "inheritance-type": "inheritanceType",
    "discriminator-column": "discriminatorColumn",
    "discriminator-value": "discriminatorValue",
}
COLUMN_ATTRIBUTES: Final[tuple[str, ...]] = (
    "type",
    "column",
    "length",
    "precision",
    "scale",
    "nullable",
    "unique",
)
JOIN_COLUMN_ATTRIBUTES: Final[dict[str, str]] = {
    "name": "name",
    "referenced-column-name": "referencedColumnName",
    "nullable": "nullable",
    "on-delete": "onDelete",
}
ASSOCIATION_TAGS: Final[dict[str, str]] = {
    "one-to-one": "oneToOne",
    "many-to-one": "manyToOne",
    "one-to-many": "oneToMany",
    "many-to-many": "manyToMany",
}
CASCADE_PREFIX: Final[str] = "cascade-"


class XmlDriver(FileDriver):
    extension: ClassVar[str] = XML_EXTENSION

    def read_definitions(self, path: Path) -> dict[str, dict[str, object]]:
        try:
            root = ET.parse(path).getroot()  # noqa: S314
        except ET.ParseError as exc:
            raise MappingError(f"Invalid XML in {path}: {exc}") from exc

        if root.tag != ROOT_TAG:
            raise MappingError(f"{path} must have a <{ROOT_TAG}> root element, got <{root.tag}>")

        definitions: dict[str, dict[str, object]] = {}
        for element in root:
            if element.tag not in (ENTITY_TAG, MAPPED_SUPERCLASS_TAG):
                continue
            definitions[_require(element, "name", path)] = _class_definition(element, path)
        return definitions


def _require(element: ET.Element, attribute: str, path: Path) -> str:
    value = element.get(attribute)
    if value is None or not value.strip():
        raise MappingError(f"<{element.tag}> in {path} is missing the {attribute!r} attribute")
    return value


def _class_definition(element: ET.Element, path: Path) -> dict[str, object]:
    payload: dict[str, object] = {
        "type": "mappedSuperclass" if element.tag == MAPPED_SUPERCLASS_TAG else "entity"
    }
    for attribute, key in CLASS_ATTRIBUTES.items():
        value = element.get(attribute)
        if value is not None:
            payload[key] = value

    parents = [_require(child, "name", path) for child in element.findall("parent-class")]
    if parents:
        payload["parentClasses"] = parents

    discriminator_map = {
        _require(child, "value", path): _require(child, "class", path)
        for child in element.findall("discriminator-map/discriminator-mapping")
    }
    if discriminator_map:
        payload["discriminatorMap"] = discriminator_map

    identifiers: dict[str, object] = {}
    for child in element.findall("id"):
        column = _column_definition(child)
        generator = child.find("generator")
        if generator is not None:
            column["generator"] = {"strategy": generator.get("strategy", "AUTO")}
        identifiers[_require(child, "name", path)] = column
    if identifiers:
        payload["id"] = identifiers

    fields = {
        _require(child, "name", path): _column_definition(child)
        for child in element.findall("field")
    }
    if fields:
        payload["fields"] = fields

    for tag, key in ASSOCIATION_TAGS.items():
        associations = {
            _require(child, "field", path): _association_definition(child, path)
            for child in element.findall(tag)
        }
        if associations:
            payload[key] = associations

    callbacks: dict[str, list[str]] = {}
    for child in element.findall("lifecycle-callbacks/lifecycle-callback"):
        callbacks.setdefault(_require(child, "type", path), []).append(
            _require(child, "method", path)
        )
    if callbacks:
        payload["lifecycleCallbacks"] = callbacks

    return payload


def _column_definition(element: ET.Element) -> dict[str, object]:
    return {
        attribute: element.get(attribute)
        for attribute in COLUMN_ATTRIBUTES
        if element.get(attribute) is not None
    }


def _join_column_definition(element: ET.Element) -> dict[str, object]:
    return {
        key: element.get(attribute)
        for attribute, key in JOIN_COLUMN_ATTRIBUTES.items()
        if element.get(attribute) is not None
    }


def _association_definition(element: ET.Element, path: Path) -> dict[str, object]:
    payload: dict[str, object] = {"targetEntity": _require(element, "target-entity", path)}
    for attribute, key in (("mapped-by", "mappedBy"), ("inversed-by", "inversedBy")):
        value = element.get(attribute)
        if value is not None:
            payload[key] = value

    join_columns = [
        _join_column_definition(child)
        for child in [*element.findall("join-column"), *element.findall("join-columns/join-column")]
    ]
    if join_columns:
        payload["joinColumns"] = join_columns

    join_table = element.find("join-table")
    if join_table is not None:
        payload["joinTable"] = {
            "name": _require(join_table, "name", path),
            "joinColumns": [
                _join_column_definition(child)
                for child in join_table.findall("join-columns/join-column")
            ],
            "inverseJoinColumns": [
                _join_column_definition(child)
                for child in join_table.findall("inverse-join-columns/join-column")
            ],
        }

    cascade = [
        child.tag.removeprefix(CASCADE_PREFIX)
        for child in element.findall("cascade/*")
        if child.tag.startswith(CASCADE_PREFIX)
    ]
    if cascade:
        payload["cascade"] = cascade

    return payload
