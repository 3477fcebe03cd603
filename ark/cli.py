"""
Command-line entry point for Ark.

Usage:
    ark /path/to/xy.db /opt/backup
    ark /path/to/xy.db,/path/to/xy.sql /opt/backup
    DEBUG=1 ark /path/to/xy.db /opt/backup

Schedule with cron:
    55 23 * * * ark /path/to/xy.db,/path/to/xy.sql /opt/backup
"""

from __future__ import annotations

import argparse
import sys

from loguru import logger

from ark.rotation import RotationJob
from ark.utils.config import get_config


def parse_sources(value: str) -> list[str]:
    """Split a comma-delimited source list, trimming blanks."""
    return [part.strip() for part in value.split(",") if part.strip()]


def configure_logging(verbose: bool = False) -> None:
    """Route loguru to stderr at the configured level."""
    config = get_config()
    level = "DEBUG" if verbose else config.log_level
    logger.remove()
    logger.add(sys.stderr, level=level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ark",
        description="Archive files into a dated zip and rotate old snapshots.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ark /path/to/xy.db /opt/backup
  ark /path/to/xy.db,/path/to/xy.sql /opt/backup

Retention: last 7 days, Sundays of the current month, last day of each
previous month this year, and Dec 31 of each previous year.
""",
    )
    parser.add_argument(
        "sources",
        metavar="FILES",
        help="Comma-separated list of files to archive",
    )
    parser.add_argument(
        "backup_dir",
        metavar="BACKUP_DIR",
        help="Directory holding export<YYYYMMDD>.zip snapshots",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be created and deleted without touching files",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug output (same as DEBUG=1)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose)

    sources = parse_sources(args.sources)
    if not sources:
        print("Error: no source files given", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    job = RotationJob(sources, args.backup_dir, dry_run=args.dry_run)

    try:
        result = job.run()
    except (OSError, ValueError) as e:
        logger.opt(exception=True).debug("Backup run failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for error in result.errors:
        print(f"Failed to delete {error['name']}: {error['error']}", file=sys.stderr)

    print(
        f"Summary: created={int(result.created)}, kept={len(result.kept)}, "
        f"deleted={len(result.deleted)}, failed={len(result.errors)}"
    )
    if args.dry_run:
        print("Dry run complete. No files were changed.")
    else:
        print("Backup and rotation completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
