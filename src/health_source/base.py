"""The contract every health-data source implements.

All fetches are coroutines and may raise :class:`HealthSourceError`
subclasses; an empty result is always a valid answer.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from activity_export.models.enums import StreamKind
from activity_export.models.workout import (
    LocationPoint,
    TimedSample,
    Workout,
    WorkoutEvent,
    WorkoutRoute,
)


@runtime_checkable
class HealthDataSource(Protocol):
    def is_available(self) -> bool:
        """Return True if the source can be used on this machine."""
        ...

    async def request_authorization(self) -> None:
        """Ensure read access; raise HealthSourcePermissionError if denied."""
        ...

    async def fetch_workouts(self) -> list[Workout]:
        """All workouts, most recent first."""
        ...

    async def fetch_route(self, workout: Workout) -> WorkoutRoute | None:
        ...

    async def fetch_locations(self, route: WorkoutRoute) -> list[LocationPoint]:
        ...

    async def fetch_samples(
        self,
        workout: Workout,
        kind: StreamKind,
        start: datetime,
        end: datetime,
    ) -> list[TimedSample]:
        """Samples of one stream kind recorded within [start, end]."""
        ...

    async def fetch_events(self, workout: Workout) -> list[WorkoutEvent]:
        ...
