from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from mapconvert.config import (
    ANNOTATION_NAMESPACE_ENV,
    OUTPUT_DIR_ENV,
    ConfigurationError,
    ConvertConfig,
    MissingConfigurationError,
    configure_logging,
    env_directory,
    env_text,
    get_convert_config,
    level_for,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture
def _restore_sqlalchemy_logger() -> Iterator[None]:
    logger = logging.getLogger("sqlalchemy")
    level = logger.level
    yield
    logger.setLevel(level)


def test_env_text_strips_and_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAPCONVERT_EXAMPLE", "  value ")
    monkeypatch.setenv("MAPCONVERT_BLANK", "   ")
    monkeypatch.delenv("MAPCONVERT_UNSET", raising=False)

    assert env_text("MAPCONVERT_EXAMPLE") == "value"
    assert env_text("MAPCONVERT_BLANK", "fallback") == "fallback"
    assert env_text("MAPCONVERT_UNSET") == ""


def test_env_directory_accepts_missing_directory(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv(OUTPUT_DIR_ENV, str(tmp_path / "not-yet"))

    assert env_directory(OUTPUT_DIR_ENV) == tmp_path / "not-yet"


def test_env_directory_rejects_existing_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    target = tmp_path / "file.txt"
    target.write_text("", encoding="utf-8")
    monkeypatch.setenv(OUTPUT_DIR_ENV, str(target))

    with pytest.raises(ConfigurationError) as exc:
        get_convert_config()

    assert exc.value.setting == OUTPUT_DIR_ENV
    assert "not a directory" in str(exc.value)


def test_convert_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(OUTPUT_DIR_ENV, raising=False)
    monkeypatch.delenv(ANNOTATION_NAMESPACE_ENV, raising=False)

    config = get_convert_config()

    assert config.output_dir is None
    assert config.resolve_output_dir() is None
    assert config.annotation_namespace == ""


def test_convert_config_reads_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(OUTPUT_DIR_ENV, str(tmp_path / "out"))
    monkeypatch.setenv(ANNOTATION_NAMESPACE_ENV, "  app.models ")

    config = get_convert_config()

    assert config.output_dir == tmp_path / "out"
    assert config.require_output_dir() == (tmp_path / "out").resolve()
    assert config.annotation_namespace == "app.models"


def test_blank_output_dir_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(OUTPUT_DIR_ENV, "  ")

    assert get_convert_config().output_dir is None


def test_require_output_dir_names_the_setting() -> None:
    with pytest.raises(MissingConfigurationError) as exc:
        ConvertConfig().require_output_dir()

    assert exc.value.setting == OUTPUT_DIR_ENV
    assert str(exc.value) == f"{OUTPUT_DIR_ENV} is not set"


@pytest.mark.parametrize(
    ("verbosity", "expected"),
    [(0, logging.INFO), (1, logging.DEBUG), (3, logging.DEBUG)],
)
def test_level_for_verbosity(verbosity: int, expected: int) -> None:
    assert level_for(verbosity) == expected


@pytest.mark.usefixtures("_restore_sqlalchemy_logger")
@pytest.mark.parametrize(
    ("verbosity", "expected"),
    [(1, logging.WARNING), (2, logging.DEBUG)],
)
def test_configure_logging_quiets_sqlalchemy_below_double_verbose(
    verbosity: int, expected: int
) -> None:
    configure_logging(verbosity)

    assert logging.getLogger("sqlalchemy").level == expected
