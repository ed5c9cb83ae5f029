"""Conversion defaults read from the environment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .env import env_directory, env_text
from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

OUTPUT_DIR_ENV: Final[str] = "MAPCONVERT_OUTPUT_DIR"
ANNOTATION_NAMESPACE_ENV: Final[str] = "MAPCONVERT_ANNOTATION_NAMESPACE"


@dataclass(frozen=True, slots=True)
class ConvertConfig:
    output_dir: Path | None = None
    annotation_namespace: str = ""

    def resolve_output_dir(self) -> Path | None:
        if self.output_dir is None:
            return None
        return self.output_dir.expanduser().resolve()

    def require_output_dir(self) -> Path:
        resolved = self.resolve_output_dir()
        if resolved is None:
            raise MissingConfigurationError(OUTPUT_DIR_ENV)
        return resolved


def get_convert_config() -> ConvertConfig:
    return ConvertConfig(
        output_dir=env_directory(OUTPUT_DIR_ENV),
        annotation_namespace=env_text(ANNOTATION_NAMESPACE_ENV),
    )
