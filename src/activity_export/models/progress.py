"""Progress events and run results exchanged with the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from activity_export.models.enums import ExportStatus


@dataclass(frozen=True)
class ExportProgress:
    """A progress update: ``fraction`` in [0.0, 1.0] plus a status line."""

    fraction: float
    status: str


@dataclass(frozen=True)
class ExportResult:
    """Outcome of a run that did not fail."""

    status: ExportStatus
    archive_path: Path | None = None
    files: tuple[str, ...] = field(default_factory=tuple)  # archive entry names, in order
    workout_count: int = 0
    skipped_count: int = 0
