"""Source-side records — what a health-data source hands to the pipeline.

All records are immutable snapshots for a single export run.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from activity_export.models.enums import (
    ELEVATION_FLOOR_M,
    ELEVATION_MISSING_M,
    ActivityType,
    EventKind,
    StreamKind,
)


@dataclass(frozen=True)
class TimedSample:
    """One reading of a stream, in the stream's canonical unit."""

    timestamp: datetime
    value: float
    kind: StreamKind


@dataclass(frozen=True)
class LocationPoint:
    """A single route fix.

    ``elevation`` keeps whatever the source reported; use
    :attr:`elevation_m` to read it with the sentinel filtered out.
    """

    timestamp: datetime
    latitude: float
    longitude: float
    elevation: float | None = None

    @property
    def elevation_m(self) -> float | None:
        """Elevation in metres, or None when absent or a sentinel value."""
        if self.elevation is None:
            return None
        if self.elevation < ELEVATION_FLOOR_M or self.elevation == ELEVATION_MISSING_M:
            return None
        return self.elevation


@dataclass(frozen=True)
class WorkoutEvent:
    """A lap/pause/resume marker; ``end`` is set for interval events."""

    start: datetime
    kind: EventKind
    end: datetime | None = None


@dataclass(frozen=True)
class WorkoutRoute:
    """Opaque handle to the GPS route recorded with a workout."""

    route_id: str
    workout_id: str


@dataclass(frozen=True)
class Workout:
    """One recorded exercise session."""

    workout_id: str
    activity_type: ActivityType
    start: datetime
    end: datetime
    duration_s: float
    total_distance_m: float | None = None
    total_energy_kcal: float | None = None

    @property
    def display_name(self) -> str:
        return self.activity_type.display_name
