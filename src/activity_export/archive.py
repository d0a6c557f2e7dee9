"""Archive Packager — name per-workout files and bundle them into one tar.gz."""

from __future__ import annotations

import logging
import os
import tarfile
from collections.abc import Sequence
from pathlib import Path

from activity_export.exceptions import ArchiveError
from activity_export.models.enums import (
    ARCHIVE_FILE_EXTENSION,
    GPX_FILE_EXTENSION,
    WORKOUT_ID_PREFIX_LENGTH,
)
from activity_export.models.workout import Workout

logger = logging.getLogger(__name__)


def archive_file_name(workout: Workout, extension: str = GPX_FILE_EXTENSION) -> str:
    """Per-workout file name: ``<Display>-<yyyy-MM-dd-HHmm>-<id prefix>.<ext>``.

    The id prefix keeps names distinct when type and start minute collide;
    it lowers the collision risk but does not remove it.
    """
    prefix = workout.workout_id[:WORKOUT_ID_PREFIX_LENGTH]
    return f"{workout.display_name}-{workout.start:%Y-%m-%d-%H%M}-{prefix}.{extension}"


def date_range(workouts: Sequence[Workout]) -> str:
    """Start-date span of *workouts*: one date, or ``<first>-to-<last>``."""
    if not workouts:
        return "no-workouts"
    starts = sorted(w.start for w in workouts)
    first = f"{starts[0]:%Y-%m-%d}"
    last = f"{starts[-1]:%Y-%m-%d}"
    return first if first == last else f"{first}-to-{last}"


def archive_name(range_label: str) -> str:
    return f"activities-{range_label}.{ARCHIVE_FILE_EXTENSION}"


def package_archive(
    files: Sequence[Path],
    output_dir: Path | str,
    range_label: str,
) -> Path:
    """Bundle *files* into ``<output_dir>/activities-<range>.tar.gz``.

    Entries are added in the given order under their base names. Any
    existing archive at the target path is removed first; the new one is
    written next to it and moved into place once complete.

    Raises:
        ArchiveError: on duplicate entry names or any tar/OS failure.
    """
    output_dir = Path(output_dir)
    target = output_dir / archive_name(range_label)
    partial = target.with_name(target.name + ".partial")

    names = [Path(f).name for f in files]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ArchiveError(f"Duplicate archive entries: {', '.join(duplicates)}")

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        target.unlink(missing_ok=True)
        with tarfile.open(partial, "w:gz") as tar:
            for path, name in zip(files, names):
                tar.add(str(path), arcname=name, recursive=False)
        os.replace(partial, target)
    except (OSError, tarfile.TarError) as exc:
        partial.unlink(missing_ok=True)
        raise ArchiveError(f"Failed to create archive {target}: {exc}") from exc

    logger.info("Wrote %d file(s) to %s", len(files), target)
    return target
