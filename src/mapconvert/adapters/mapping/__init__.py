"""Mapping drivers: read entity metadata from source formats."""

from __future__ import annotations

from .file_driver import FileDriver
from .schema import EntityMappingDocument
from .sqlalchemy_driver import DeclarativeReader, SqlAlchemyAnnotationDriver
from .translator import build_document, populate_metadata
from .xml_driver import XML_EXTENSION, XmlDriver
from .yaml_driver import YAML_EXTENSION, YamlDriver

__all__ = [
    "XML_EXTENSION",
    "YAML_EXTENSION",
    "DeclarativeReader",
    "EntityMappingDocument",
    "FileDriver",
    "SqlAlchemyAnnotationDriver",
    "XmlDriver",
    "YamlDriver",
    "build_document",
    "populate_metadata",
]
