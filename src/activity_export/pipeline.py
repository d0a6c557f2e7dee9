"""Export pipeline: the main orchestrator from health source to archive.

One run: check availability → authorize → list workouts → process each
workout in turn (fan-out stream fetch, segment, enrich, write GPX) →
package the archive → clean up. Progress is reported through a callback
from the coordinating task only.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from activity_export.archive import archive_file_name, date_range, package_archive
from activity_export.document_builder import build_document
from activity_export.models.enums import ExportStatus
from activity_export.models.progress import ExportProgress, ExportResult
from activity_export.models.workout import Workout
from activity_export.sample_index import build_sample_index
from activity_export.serialization.gpx import to_gpx_bytes
from health_source.exceptions import HealthSourceUnavailableError

if TYPE_CHECKING:
    from health_source.base import HealthDataSource

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ExportProgress], None]

STATUS_AUTHORIZING = "Requesting health data permissions..."
STATUS_FETCHING = "Fetching workouts..."
STATUS_NO_WORKOUTS = "No workouts found"
STATUS_ARCHIVING = "Creating archive..."
STATUS_CLEANING_UP = "Cleaning up..."
STATUS_COMPLETE = "Export complete!"

_ARCHIVE_FRACTION = 0.9
_CLEANUP_FRACTION = 0.95


def processing_status(position: int, total: int) -> str:
    return f"Processing workout {position} of {total}..."


async def export_activities(
    source: HealthDataSource,
    output_dir: Path | str,
    on_progress: ProgressCallback | None = None,
    workdir: Path | str | None = None,
) -> ExportResult:
    """Run one full export and return its result.

    Args:
        source: Health-data source to read from.
        output_dir: Directory receiving ``activities-<range>.tar.gz``.
        on_progress: Called with each :class:`ExportProgress` update.
        workdir: Parent for the per-run temporary directory (system default if None).

    Returns:
        An :class:`ExportResult`; ``status`` is NO_WORKOUTS when the source
        has no workouts, in which case no archive is written.

    Raises:
        HealthSourceUnavailableError: the source cannot be used.
        HealthSourcePermissionError: authorization was denied.
        HealthSourceAPIError: the workout list could not be fetched.
        ArchiveError: the archive could not be written.
    """

    def report(fraction: float, status: str) -> None:
        logger.debug("Progress %.2f: %s", fraction, status)
        if on_progress is not None:
            on_progress(ExportProgress(fraction=fraction, status=status))

    if not source.is_available():
        raise HealthSourceUnavailableError("Health data is not available on this device")

    report(0.0, STATUS_AUTHORIZING)
    await source.request_authorization()

    report(0.0, STATUS_FETCHING)
    workouts = await source.fetch_workouts()
    if not workouts:
        logger.info("No workouts found")
        report(0.0, STATUS_NO_WORKOUTS)
        return ExportResult(status=ExportStatus.NO_WORKOUTS)

    total = len(workouts)
    logger.info("Exporting %d workout(s)", total)

    with tempfile.TemporaryDirectory(prefix="activity-export-", dir=workdir) as tmp:
        tmp_dir = Path(tmp)
        written: list[Path] = []
        used_names: set[str] = set()

        for position, workout in enumerate(workouts, start=1):
            report((position - 1) / total, processing_status(position, total))
            path = await process_workout(source, workout, tmp_dir, used_names)
            if path is not None:
                written.append(path)
                used_names.add(path.name)

        report(_ARCHIVE_FRACTION, STATUS_ARCHIVING)
        # The range spans every fetched workout, including skipped ones.
        archive_path = await asyncio.to_thread(
            package_archive, written, output_dir, date_range(workouts)
        )
        report(_CLEANUP_FRACTION, STATUS_CLEANING_UP)

    report(1.0, STATUS_COMPLETE)
    return ExportResult(
        status=ExportStatus.COMPLETED,
        archive_path=archive_path,
        files=tuple(p.name for p in written),
        workout_count=total,
        skipped_count=total - len(written),
    )


async def process_workout(
    source: HealthDataSource,
    workout: Workout,
    directory: Path,
    used_names: set[str] | frozenset[str] = frozenset(),
) -> Path | None:
    """Write one workout's GPX file into *directory*.

    Returns the file path, or None when the workout has no route or any
    step fails. Failures are logged and never propagate.
    """
    try:
        route = await source.fetch_route(workout)
        if route is None:
            logger.info("Workout %s has no route, skipping", workout.workout_id)
            return None

        locations = await source.fetch_locations(route)
        if not locations:
            logger.info("Workout %s has an empty route, skipping", workout.workout_id)
            return None

        file_name = archive_file_name(workout)
        if file_name in used_names:
            logger.warning(
                "File name %s already used in this export, skipping workout %s",
                file_name,
                workout.workout_id,
            )
            return None

        index = await build_sample_index(source, workout)
        events = await _fetch_events(source, workout)
        path = directory / file_name
        document = await asyncio.to_thread(
            _write_document, path, workout, locations, events, index
        )
        logger.info(
            "Wrote %s (%d points, %d segments, %d waypoints)",
            file_name,
            document.point_count,
            len(document.segments),
            len(document.waypoints),
        )
        return path
    except Exception as exc:
        logger.warning("Failed to process workout %s: %s", workout.workout_id, exc)
        return None


def _write_document(path: Path, workout: Workout, locations, events, index):
    """Build, serialize and write one document; runs in a worker thread."""
    document = build_document(workout, locations, events, index)
    path.write_bytes(to_gpx_bytes(document))
    return document


async def _fetch_events(source: HealthDataSource, workout: Workout) -> list:
    """Workout events, or an empty list if they cannot be fetched."""
    try:
        return list(await source.fetch_events(workout))
    except Exception as exc:
        logger.warning("Failed to fetch events for workout %s: %s", workout.workout_id, exc)
        return []
