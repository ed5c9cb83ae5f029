"""Logging setup for the mapconvert command line."""

from __future__ import annotations

import logging
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LIBRARY_LOGGERS: Final[tuple[str, ...]] = ("sqlalchemy",)


def level_for(verbosity: int) -> int:
    """INFO by default, DEBUG from one ``-v`` on."""

    return logging.DEBUG if verbosity > 0 else logging.INFO


def configure_logging(verbosity: int = 0, *, force: bool = False) -> None:
    """Configure the root logger for a CLI run.

    Library loggers stay at WARNING unless ``-vv`` or more is given.
    """

    logging.basicConfig(
        level=level_for(verbosity),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
    library_level = logging.DEBUG if verbosity > 1 else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
