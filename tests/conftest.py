"""Shared test fixtures: workouts, routes and a fake health source."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

import pytest

from activity_export.models.enums import ActivityType
from activity_export.models.workout import LocationPoint, Workout
from factories import BASE_TIME, FakeHealthSource, point


@pytest.fixture
def workout_factory() -> Callable[..., Workout]:
    """Factory fixture for Workout instances.

    Usage:
        w = workout_factory(activity_type=ActivityType.CYCLING, minutes=45)
    """

    def factory(
        workout_id: str = "3f2a9c1e-0b7d-4c55-9e61-2d8f0a4b7c10",
        activity_type: ActivityType = ActivityType.RUNNING,
        start: datetime = BASE_TIME,
        minutes: float = 30.0,
        distance_m: float | None = 5200.0,
        energy_kcal: float | None = 310.0,
    ) -> Workout:
        return Workout(
            workout_id=workout_id,
            activity_type=activity_type,
            start=start,
            end=start + timedelta(minutes=minutes),
            duration_s=minutes * 60.0,
            total_distance_m=distance_m,
            total_energy_kcal=energy_kcal,
        )

    return factory


@pytest.fixture
def running_workout(workout_factory) -> Workout:
    """30-minute run starting 2024-06-01T08:00:00Z."""
    return workout_factory()


@pytest.fixture
def two_point_route() -> list[LocationPoint]:
    """Two fixes 40 s apart; the gap splits them into separate segments."""
    return [point(0, lat=10.0, lon=20.0), point(40, lat=10.001, lon=20.0)]


@pytest.fixture
def steady_route() -> list[LocationPoint]:
    """Ten minutes of fixes every 5 s heading north, with elevation."""
    return [
        point(s, lat=10.0 + s * 1e-5, lon=20.0, ele=100.0 + s * 0.01)
        for s in range(0, 600, 5)
    ]


@pytest.fixture
def fake_source_factory() -> Callable[..., FakeHealthSource]:
    return FakeHealthSource
