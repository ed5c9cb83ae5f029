from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from mapconvert.app import collect_metadata, convert_mappings
from mapconvert.config import ANNOTATION_NAMESPACE_ENV, OUTPUT_DIR_ENV
from mapconvert.domain.errors import ExportError, UnsupportedFormatError

if TYPE_CHECKING:
    from pathlib import Path


def test_convert_mappings_exports_every_entity(
    tmp_path: Path, xml_dir: Path, annotation_dir: Path
) -> None:
    out = tmp_path / "out"

    result = convert_mappings([(xml_dir, "xml"), (annotation_dir, "annotation")], "yaml", out)

    assert result.exported == 2
    assert result.output_dir == out
    assert result.paths == [out / "Foo.orm.yml", out / "Bar.orm.yml"]
    assert result.paths[1].read_text(encoding="utf-8").startswith("Bar:\n  type: entity\n")


def test_convert_mappings_uses_configured_output_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, xml_dir: Path
) -> None:
    monkeypatch.setenv(OUTPUT_DIR_ENV, str(tmp_path / "configured"))

    result = convert_mappings([(xml_dir, "xml")], "xml", extension=".xml")

    assert result.paths == [(tmp_path / "configured").resolve() / "Foo.xml"]


def test_convert_mappings_requires_output_dir(
    monkeypatch: pytest.MonkeyPatch, xml_dir: Path
) -> None:
    monkeypatch.delenv(OUTPUT_DIR_ENV, raising=False)

    with pytest.raises(ExportError):
        convert_mappings([(xml_dir, "xml")], "yaml")


def test_convert_mappings_rejects_unknown_target(tmp_path: Path, xml_dir: Path) -> None:
    with pytest.raises(UnsupportedFormatError):
        convert_mappings([(xml_dir, "xml")], "csv", tmp_path)

    assert not (tmp_path / "Foo.csv").exists()


def test_collect_metadata_applies_namespace(
    monkeypatch: pytest.MonkeyPatch, annotation_dir: Path
) -> None:
    monkeypatch.setenv(ANNOTATION_NAMESPACE_ENV, "shop")

    assert [m.name for m in collect_metadata([(annotation_dir, "annotation")])] == ["shop.Bar"]
    assert [
        m.name
        for m in collect_metadata([(annotation_dir, "annotation")], annotation_namespace="")
    ] == ["Bar"]
