# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from propsync.adapters.report_schema import ImportReportModel
from propsync.adapters.sqlalchemy.unit_of_work import shutdown, startup
from propsync.app import ImportTarget, import_file
from propsync.config import ConfigurationError, configure_logging
from propsync.domain.importing import ImportMode

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from propsync.domain.importing import BatchOutcome

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Not an integer: {value}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("Must be at least 1")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bulk import property management data")
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser("import", help="Import rows from a CSV file")
    importer.add_argument(
        "target",
        choices=[target.value for target in ImportTarget],
        help="Kind of entity the file contains",
    )
    importer.add_argument("file", type=Path, help="CSV file with a header row")
    importer.add_argument(
        "--mode",
        choices=[mode.value for mode in ImportMode],
        default=ImportMode.CREATE.value,
        help="create, update or both (default: %(default)s)",
    )
    importer.add_argument(
        "--actor",
        type=str,
        help="User id recorded on audit entries (defaults to config)",
    )
    importer.add_argument(
        "--chunk-size",
        type=_positive_int,
        help="Rows processed concurrently per chunk (defaults to config)",
    )
    importer.add_argument(
        "--skip-duplicates",
        action="store_true",
        help="Skip contacts whose email already exists instead of failing them",
    )
    importer.add_argument(
        "--skip-conflicts",
        action="store_true",
        help="Skip price ranges that overlap a stored period instead of failing them",
    )
    importer.add_argument(
        "--update-existing",
        action="store_true",
        help="Overwrite the overlapping stored price range instead of failing the row",
    )
    importer.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and report every row, then roll back",
    )
    importer.add_argument(
        "--log-level",
        type=str,
        help="Logging level on stderr (defaults to PROPSYNC_LOG_LEVEL or INFO)",
    )
    importer.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy async database URI (defaults to DATABASE_URI / data dir)",
    )
    return parser.parse_args(list(argv))


async def _run_import(args: argparse.Namespace) -> BatchOutcome:
    await startup(database_uri=args.database_uri)
    try:
        return await import_file(
            args.target,
            args.file,
            mode=args.mode,
            actor_id=args.actor,
            chunk_size=args.chunk_size,
            skip_duplicates=args.skip_duplicates,
            skip_conflicts=args.skip_conflicts,
            update_existing=args.update_existing,
            dry_run=args.dry_run,
        )
    finally:
        await shutdown()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    try:
        configure_logging(level=parsed_args.log_level)
    except ConfigurationError as exc:
        print(f"propsync: {exc}", file=sys.stderr)
        sys.exit(2)

    if not parsed_args.file.is_file():
        log.error("File not found: %s", parsed_args.file)
        sys.exit(2)

    try:
        outcome = asyncio.run(_run_import(parsed_args))
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)

    print(ImportReportModel.from_outcome(outcome).model_dump_json(indent=2))
    if not outcome.report.success:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
