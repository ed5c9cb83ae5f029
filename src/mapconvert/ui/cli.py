from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from mapconvert.app import collect_metadata, convert_mappings
from mapconvert.config import OUTPUT_DIR_ENV, configure_logging, get_convert_config
from mapconvert.domain.errors import UnsupportedFormatError
from mapconvert.domain.model import ExportFormat, MappingFormat

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from mapconvert.app import MappingSource

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Convert entity mapping metadata")
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Log every scanned source and written file (-vv adds SQLAlchemy output)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Convert mappings to another format")
    _add_source_argument(convert)
    convert.add_argument(
        "--to",
        type=str,
        required=True,
        help=f"Target format ({', '.join(ExportFormat)})",
    )
    convert.add_argument(
        "--dest",
        type=str,
        help=f"Output directory (defaults to ${OUTPUT_DIR_ENV})",
    )
    convert.add_argument(
        "--namespace",
        type=str,
        help="Namespace prefixed to entity names read from annotation sources",
    )
    convert.add_argument(
        "--extension",
        type=str,
        help="Override the exporter's file extension",
    )

    listing = subparsers.add_parser("list", help="List the entities declared by mappings")
    _add_source_argument(listing)
    listing.add_argument(
        "--namespace",
        type=str,
        help="Namespace prefixed to entity names read from annotation sources",
    )

    return parser.parse_args(list(argv))


def _add_source_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source",
        type=str,
        action="append",
        required=True,
        metavar="FORMAT:DIR",
        help=f"Mapping source, repeatable ({', '.join(MappingFormat)})",
    )


def _parse_source(value: str) -> MappingSource:
    format_, sep, directory = value.partition(":")
    if not sep or not format_.strip() or not directory.strip():
        raise ValueError(f"Invalid source (expected FORMAT:DIR): {value}")
    return Path(directory.strip()), format_.strip()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(parsed_args.verbose)
        sources = [_parse_source(value) for value in parsed_args.source]
        output_dir: Path | str | None = None
        if parsed_args.command == "convert":
            output_dir = parsed_args.dest or get_convert_config().require_output_dir()
    except (ValueError, RuntimeError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "convert":
            result = convert_mappings(
                sources,
                parsed_args.to,
                output_dir,
                annotation_namespace=parsed_args.namespace,
                extension=parsed_args.extension,
            )
            log.info("Wrote %s file(s) to %s", result.exported, result.output_dir)
        elif parsed_args.command == "list":
            for metadata in collect_metadata(sources, annotation_namespace=parsed_args.namespace):
                sys.stdout.write(f"{metadata.name}\n")
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except UnsupportedFormatError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during conversion")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
