"""CLI argument parsing, validation, and main entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from photo_archiver import __version__
from photo_archiver.config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_EXTENSIONS,
    ArchiverConfig,
    LogMode,
    normalize_extensions,
)
from photo_archiver.errors import ArchiverError, ConfigError
from photo_archiver.logging_setup import setup_logging
from photo_archiver.metadata import exiftool_available

logger = logging.getLogger("photo_archiver")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photo-archiver",
        description=(
            "Move photos and videos into YYYY/MM or YYYY/MM <tag> folders, "
            "named after their capture date, removing exact duplicates."
        ),
    )
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Input directory. Files in a subfolder are tagged with its name.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Archive root where YYYY/MM folders are created.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and report every action without changing any file.",
    )
    parser.add_argument(
        "--ext",
        dest="exts",
        action="append",
        default=None,
        metavar="EXT",
        help=(
            "Extension to treat as media (repeatable, e.g. --ext jpg --ext mp4). "
            f"Default: {' '.join(sorted(e.lstrip('.') for e in DEFAULT_EXTENSIONS))}."
        ),
    )
    parser.add_argument(
        "--log",
        dest="log_mode",
        choices=[m.value for m in LogMode],
        default=LogMode.CONFLICTS.value,
        help="Per-file decisions shown on the console (default: conflicts).",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG-level) console output.",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log and manifest files (default: current directory).",
    )
    parser.add_argument(
        "--exiftool-batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Number of files per exiftool batch call (default: {DEFAULT_BATCH_SIZE}).",
    )
    parser.add_argument(
        "--timezone",
        default=None,
        help="IANA zone that timezone-aware dates are converted to (e.g. Europe/Paris).",
    )
    parser.add_argument(
        "--mtime-fallback",
        action="store_true",
        help="Date files without metadata from their modification time.",
    )
    parser.add_argument(
        "--no-manifest",
        action="store_true",
        help="Do not write the JSON decision manifest.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def build_config(args: argparse.Namespace) -> ArchiverConfig:
    """Validate CLI arguments and assemble the run configuration."""
    if not args.input.is_dir():
        raise ConfigError(f"--input must be a directory: {args.input}")

    source = args.input.resolve()
    destination = args.output.resolve()
    if destination == source or source in destination.parents:
        raise ConfigError("--output cannot be inside --input")

    if args.exts:
        extensions = normalize_extensions(args.exts)
        if not extensions:
            raise ConfigError("--ext given but no usable extension")
    else:
        logger.info(f"No extensions provided, using defaults: {sorted(DEFAULT_EXTENSIONS)}")
        extensions = DEFAULT_EXTENSIONS

    if args.timezone:
        try:
            ZoneInfo(args.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"unknown --timezone {args.timezone!r}") from e

    if args.exiftool_batch_size < 1:
        raise ConfigError("--exiftool-batch-size must be at least 1")

    if not exiftool_available():
        raise ConfigError(
            "exiftool is not installed or not in PATH "
            "(install it with: sudo apt install libimage-exiftool-perl)"
        )

    return ArchiverConfig(
        input=source,
        output=destination,
        dry_run=args.dry_run,
        extensions=extensions,
        log_mode=LogMode(args.log_mode),
        verbose=args.verbose,
        log_dir=(args.log_dir or Path(".")).resolve(),
        exiftool_batch_size=args.exiftool_batch_size,
        timezone=args.timezone,
        mtime_fallback=args.mtime_fallback,
        write_manifest=not args.no_manifest,
    )


def _cmd_run(args: argparse.Namespace) -> int:
    """Execute a run and return the process exit status."""
    log_dir = (args.log_dir or Path(".")).resolve()
    run_id = setup_logging(
        log_mode=LogMode(args.log_mode), verbose=args.verbose, log_dir=log_dir,
    )

    try:
        config = build_config(args)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        return 1

    logger.info("=" * 60)
    logger.info(f"photo-archiver v{__version__}")
    logger.info(f"  Input:       {config.input}")
    logger.info(f"  Output:      {config.output}")
    logger.info(f"  Dry-run:     {config.dry_run}")
    logger.info(f"  Extensions:  {' '.join(sorted(config.extensions or []))}")
    logger.info(f"  Timezone:    {config.timezone or 'as recorded'}")
    logger.info(f"  Log dir:     {config.log_dir}")
    logger.info("=" * 60)

    from photo_archiver.pipeline import Pipeline

    try:
        result = Pipeline(config, run_id).run()
    except ArchiverError as e:
        logger.error(f"Fatal: {e}")
        return 1

    logger.info("=" * 60)
    logger.info("Summary:")
    logger.info(f"  Scanned:     {result.files_scanned}")
    logger.info(f"  Moved:       {result.files_moved}")
    logger.info(f"  Renamed:     {result.files_renamed} (name taken by other content)")
    logger.info(f"  Duplicates:  {result.duplicates_removed} (source deleted)")
    logger.info(f"  Unresolved:  {result.files_unresolved} ({result.errors} errors)")
    logger.info(f"  Dirs pruned: {result.dirs_removed}")
    if result.dry_run:
        logger.info("  (DRY-RUN -- no files were changed)")
    if result.manifest_path:
        logger.info(f"  Manifest:    {result.manifest_path}")
    logger.info("=" * 60)

    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    raise SystemExit(_cmd_run(args))


if __name__ == "__main__":
    main(sys.argv[1:])
