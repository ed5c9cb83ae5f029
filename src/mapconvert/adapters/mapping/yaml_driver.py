"""YAML mapping driver (`*.orm.yml`)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, cast

import yaml

from mapconvert.domain.errors import MappingError

from .file_driver import FileDriver

if TYPE_CHECKING:
    from pathlib import Path

YAML_EXTENSION = ".orm.yml"


class YamlDriver(FileDriver):
    """Reads a top-level mapping of class name to class definition per file."""

    extension: ClassVar[str] = YAML_EXTENSION

    def read_definitions(self, path: Path) -> dict[str, dict[str, object]]:
        with path.open(encoding="utf-8") as handle:
            try:
                loaded = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise MappingError(f"Invalid YAML in {path}: {exc}") from exc

        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise MappingError(f"{path} must contain a mapping of class names")

        definitions: dict[str, dict[str, object]] = {}
        for class_name, definition in cast(dict[Any, Any], loaded).items():
            if not isinstance(definition, dict):
                raise MappingError(f"Definition of {class_name!r} in {path} is not a mapping")
            definitions[str(class_name)] = cast(dict[str, object], definition)
        return definitions
