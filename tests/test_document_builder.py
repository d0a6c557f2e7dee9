"""Tests for track document assembly: metadata, waypoints and formatting."""

from __future__ import annotations

import pytest

from activity_export.document_builder import (
    build_document,
    build_metadata,
    build_waypoints,
    format_duration,
    format_pace,
    speed_to_pace,
)
from activity_export.models.enums import GPX_CREATOR, ActivityType, EventKind, StreamKind
from activity_export.sample_index import SampleIndex
from factories import at, event, point, sample

K = StreamKind


def _names(waypoints) -> list[str]:
    return [w.name for w in waypoints]


def _by_name(waypoints, name):
    return next(w for w in waypoints if w.name == name)


class TestFormatting:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "0s"), (45, "45s"), (1800, "30m 0s"), (1805, "30m 5s"), (3725, "1h 2m 5s")],
    )
    def test_format_duration(self, seconds, expected) -> None:
        assert format_duration(seconds) == expected

    def test_speed_to_pace(self) -> None:
        assert speed_to_pace(1000.0 / 300.0) == pytest.approx(5.0)

    @pytest.mark.parametrize("speed", [0.0, -1.0])
    def test_non_positive_speed_has_no_pace(self, speed) -> None:
        assert speed_to_pace(speed) is None

    def test_format_pace(self) -> None:
        assert format_pace(5.5) == "5:30 min/km"
        assert format_pace(4.0) == "4:00 min/km"
        assert format_pace(None) == "--"


class TestMetadata:
    def test_fields(self, running_workout) -> None:
        meta = build_metadata(running_workout)
        assert meta.name == "Running - 2024-06-01 08:00"
        assert running_workout.workout_id in meta.description
        assert meta.time == running_workout.start
        assert meta.activity_type == "running"
        assert meta.creator == GPX_CREATOR

    def test_keywords_full(self, running_workout) -> None:
        meta = build_metadata(running_workout)
        assert meta.keywords == "Duration: 30m 0s, Distance: 5.20 km, Calories: 310 kcal"

    def test_keywords_without_distance_or_energy(self, workout_factory) -> None:
        meta = build_metadata(workout_factory(distance_m=None, energy_kcal=None))
        assert meta.keywords == "Duration: 30m 0s"

    def test_unmapped_activity_is_workout(self, workout_factory) -> None:
        meta = build_metadata(workout_factory(activity_type=ActivityType.OTHER))
        assert meta.name.startswith("Workout - ")
        assert meta.activity_type == "workout"


class TestWaypoints:
    def test_start_only_without_samples(self, running_workout, steady_route) -> None:
        waypoints = build_waypoints(running_workout, steady_route, [], SampleIndex())
        assert _names(waypoints) == ["Workout Start"]
        start = waypoints[0]
        assert start.timestamp == running_workout.start
        assert (start.latitude, start.longitude) == (
            steady_route[0].latitude, steady_route[0].longitude,
        )
        assert "Running" in start.description
        assert "5.20 km" in start.description

    def test_order_with_all_sources(self, running_workout, steady_route) -> None:
        index = SampleIndex.from_samples([
            sample(K.RUNNING_POWER, 60, 300.0),
            sample(K.HEART_RATE, 120, 171.0),
            sample(K.RUNNING_SPEED, 30, 3.5),
            sample(K.VO2_MAX, 0, 52.3),
            sample(K.RESPIRATORY_RATE, 200, 38.0),
            sample(K.FLIGHTS_CLIMBED, 300, 2.0),
        ])
        events = [event(EventKind.LAP, 300, 600)]
        waypoints = build_waypoints(running_workout, steady_route, events, index)
        assert _names(waypoints) == [
            "Workout Start",
            "Lap 1",
            "Peak Power",
            "Max Heart Rate",
            "Max Speed",
            "VO2 Max",
            "Peak Respiratory Rate",
            "Elevation Summary",
            "Average Pace",
        ]

    def test_summary_waypoints_have_no_position(self, running_workout, steady_route) -> None:
        index = SampleIndex.from_samples([sample(K.HEART_RATE, 120, 171.0)])
        hr = _by_name(build_waypoints(running_workout, steady_route, [], index), "Max Heart Rate")
        assert not hr.has_position
        assert hr.timestamp == at(120)
        assert hr.description == "Max heart rate: 171 bpm"

    def test_laps_numbered_in_time_order(self, running_workout, steady_route) -> None:
        events = [
            event(EventKind.LAP, 400),
            event(EventKind.PAUSE, 100),
            event(EventKind.LAP, 200, 400),
        ]
        waypoints = build_waypoints(running_workout, steady_route, events, SampleIndex())
        assert _names(waypoints) == ["Workout Start", "Lap 1", "Lap 2"]
        lap1, lap2 = waypoints[1], waypoints[2]
        assert lap1.timestamp == at(200)
        assert "duration 3m 20s" in lap1.description
        assert lap2.timestamp == at(400)
        assert "duration" not in lap2.description

    def test_lap_anchored_on_last_point_at_or_before(self, running_workout) -> None:
        route = [point(0, lat=1.0), point(10, lat=2.0), point(20, lat=3.0)]
        waypoints = build_waypoints(
            running_workout, route, [event(EventKind.LAP, 15)], SampleIndex()
        )
        assert waypoints[1].latitude == 2.0

    def test_lap_before_route_uses_first_point(self, running_workout) -> None:
        route = [point(10, lat=2.0), point(20, lat=3.0)]
        waypoints = build_waypoints(
            running_workout, route, [event(EventKind.LAP, 0)], SampleIndex()
        )
        assert waypoints[1].latitude == 2.0

    def test_peak_power_from_cycling_stream(self, running_workout, steady_route) -> None:
        index = SampleIndex.from_samples([
            sample(K.CYCLING_POWER, 10, 410.0),
            sample(K.CYCLING_POWER, 20, 390.0),
        ])
        peak = _by_name(build_waypoints(running_workout, steady_route, [], index), "Peak Power")
        assert peak.timestamp == at(10)
        assert peak.description == "Peak power: 410 W"

    def test_max_speed_includes_pace(self, running_workout, steady_route) -> None:
        index = SampleIndex.from_samples([sample(K.CYCLING_SPEED, 10, 1000.0 / 240.0)])
        max_speed = _by_name(
            build_waypoints(running_workout, steady_route, [], index), "Max Speed"
        )
        assert "4:00 min/km" in max_speed.description

    def test_zero_speed_pace_placeholder(self, workout_factory, steady_route) -> None:
        workout = workout_factory(activity_type=ActivityType.CYCLING)
        index = SampleIndex.from_samples([sample(K.CYCLING_SPEED, 10, 0.0)])
        max_speed = _by_name(build_waypoints(workout, steady_route, [], index), "Max Speed")
        assert "(pace --)" in max_speed.description

    def test_vo2_max_uses_first_sample(self, running_workout, steady_route) -> None:
        index = SampleIndex.from_samples([
            sample(K.VO2_MAX, 500, 55.0),
            sample(K.VO2_MAX, 100, 48.7),
        ])
        vo2 = _by_name(build_waypoints(running_workout, steady_route, [], index), "VO2 Max")
        assert vo2.timestamp == at(100)
        assert "48.7" in vo2.description

    def test_elevation_summary_needs_positive_total(self, running_workout, steady_route) -> None:
        zero = SampleIndex.from_samples([sample(K.FLIGHTS_CLIMBED, 10, 0.0)])
        assert "Elevation Summary" not in _names(
            build_waypoints(running_workout, steady_route, [], zero)
        )

        index = SampleIndex.from_samples([
            sample(K.FLIGHTS_CLIMBED, 10, 1.0),
            sample(K.FLIGHTS_CLIMBED, 400, 2.0),
        ])
        summary = _by_name(
            build_waypoints(running_workout, steady_route, [], index), "Elevation Summary"
        )
        assert summary.description == "Flights climbed: 3"
        assert summary.timestamp == running_workout.end

    def test_average_pace_only_for_running_and_walking(
        self, workout_factory, steady_route
    ) -> None:
        index = SampleIndex.from_samples([
            sample(K.RUNNING_SPEED, 0, 3.0),
            sample(K.RUNNING_SPEED, 10, 3.666666),
        ])
        for activity, expected in [
            (ActivityType.RUNNING, True),
            (ActivityType.WALKING, True),
            (ActivityType.CYCLING, False),
            (ActivityType.HIKING, False),
        ]:
            workout = workout_factory(activity_type=activity)
            names = _names(build_waypoints(workout, steady_route, [], index))
            assert ("Average Pace" in names) is expected

    def test_average_pace_value(self, running_workout, steady_route) -> None:
        index = SampleIndex.from_samples([
            sample(K.RUNNING_SPEED, 0, 3.0),
            sample(K.RUNNING_SPEED, 10, 1000.0 / 180.0 * 2 - 3.0),
        ])
        avg = _by_name(build_waypoints(running_workout, steady_route, [], index), "Average Pace")
        assert avg.description.startswith("Average pace: 3:00 min/km")

    def test_no_average_pace_from_walking_speed_stream(
        self, workout_factory, steady_route
    ) -> None:
        workout = workout_factory(activity_type=ActivityType.WALKING)
        index = SampleIndex.from_samples([sample(K.WALKING_SPEED, 0, 1.4)])
        assert "Average Pace" not in _names(build_waypoints(workout, steady_route, [], index))


class TestBuildDocument:
    def test_empty_route_rejected(self, running_workout) -> None:
        with pytest.raises(ValueError):
            build_document(running_workout, [], [], SampleIndex())

    def test_two_segment_document(self, running_workout, two_point_route) -> None:
        index = SampleIndex.from_samples([sample(K.HEART_RATE, 5, 150.0)])
        document = build_document(running_workout, two_point_route, [], index)
        assert len(document.segments) == 2
        assert document.point_count == 2
        first = document.segments[0].points[0]
        second = document.segments[1].points[0]
        assert first.extensions.heart_rate == 150
        assert second.extensions is None
        assert document.waypoints[0].name == "Workout Start"
        assert document.metadata.name == "Running - 2024-06-01 08:00"

    def test_segments_follow_events(self, running_workout, steady_route) -> None:
        events = [event(EventKind.LAP, 300)]
        document = build_document(running_workout, steady_route, events, SampleIndex())
        assert len(document.segments) == 2
        assert document.point_count == len(steady_route)

    def test_custom_gap_threshold(self, running_workout, steady_route) -> None:
        document = build_document(
            running_workout, steady_route, [], SampleIndex(), gap_threshold_s=4.0
        )
        assert len(document.segments) == len(steady_route)
