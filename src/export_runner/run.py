"""Export runner — pulls every workout from Garmin Connect into one GPX archive.

Usage:
    python -m export_runner.run                       # archive into $EXPORT_OUTPUT_DIR
    python -m export_runner.run --output-dir exports  # explicit directory
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from activity_export.models.enums import ExportStatus
from activity_export.session import ExportSession
from health_source import GarminHealthSource
from health_source.auth import clear_tokens

from export_runner.config import (
    GARMIN_EMAIL,
    GARMIN_PASSWORD,
    MAX_WORKOUTS,
    OUTPUT_DIR,
    TOKEN_DIR,
)

logger = logging.getLogger(__name__)


def _prompt_mfa() -> str:
    return input("Garmin MFA code: ").strip()


def _log_progress(session: ExportSession) -> None:
    if session.is_exporting and session.status_message:
        logger.info("[%3.0f%%] %s", session.progress * 100, session.status_message)


def export_job(output_dir: Path, max_workouts: int) -> int:
    """Run one export; return a process exit code."""
    source = GarminHealthSource(
        email=GARMIN_EMAIL,
        password=GARMIN_PASSWORD,
        token_dir=TOKEN_DIR,
        prompt_mfa=_prompt_mfa if sys.stdin.isatty() else None,
        max_workouts=max_workouts,
    )
    session = ExportSession(source, output_dir)
    session.subscribe(_log_progress)

    result = asyncio.run(session.run())

    if session.error_message:
        logger.error(session.error_message)
        return 1
    if result is not None and result.status == ExportStatus.NO_WORKOUTS:
        logger.info(session.status_message)
        return 0

    logger.info(
        "Exported %d of %d workouts to %s",
        len(result.files),
        result.workout_count,
        session.exported_path,
    )
    print(session.exported_path)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Export workouts as a GPX tar.gz archive")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=OUTPUT_DIR,
        help="Directory for the archive (default: $EXPORT_OUTPUT_DIR or .)",
    )
    parser.add_argument(
        "--max-workouts",
        type=int,
        default=MAX_WORKOUTS,
        help="Maximum number of workouts to fetch",
    )
    parser.add_argument(
        "--logout",
        action="store_true",
        help="Delete saved Garmin tokens before exporting",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if args.logout:
        clear_tokens(TOKEN_DIR)
    return export_job(args.output_dir, args.max_workouts)


if __name__ == "__main__":
    sys.exit(main())
