"""Exporter drivers: write entity metadata in target formats."""

from __future__ import annotations

from .annotation_exporter import AnnotationExporter
from .base import AbstractExporter
from .python_exporter import PythonExporter
from .xml_exporter import XmlExporter
from .yaml_exporter import YamlExporter

__all__ = [
    "AbstractExporter",
    "AnnotationExporter",
    "PythonExporter",
    "XmlExporter",
    "YamlExporter",
]
