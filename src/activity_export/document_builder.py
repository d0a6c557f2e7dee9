"""Document Builder — assemble one workout's track document.

Combines metadata, the segmented and enriched route, and summary waypoints
(peaks, averages, totals) into a :class:`TrackDocument`.
"""

from __future__ import annotations

from collections.abc import Sequence

from activity_export.enricher import enrich_segments
from activity_export.models.enums import (
    GPX_CREATOR,
    PACE_ACTIVITY_TYPES,
    POWER_STREAMS,
    SAMPLE_TOLERANCE_S,
    SEGMENT_GAP_S,
    SPEED_STREAMS,
    EventKind,
    StreamKind,
)
from activity_export.models.track import TrackDocument, TrackMetadata, Waypoint
from activity_export.models.workout import LocationPoint, Workout, WorkoutEvent
from activity_export.sample_index import SampleIndex
from activity_export.segmenter import segment_route


def build_document(
    workout: Workout,
    route: Sequence[LocationPoint],
    events: Sequence[WorkoutEvent],
    index: SampleIndex,
    gap_threshold_s: float = SEGMENT_GAP_S,
    tolerance_s: float = SAMPLE_TOLERANCE_S,
) -> TrackDocument:
    """Build the track document for *workout*.

    *route* must be non-empty; workouts without a route produce no document.
    """
    if not route:
        raise ValueError(f"Workout {workout.workout_id} has an empty route")

    segments = segment_route(route, events, gap_threshold_s=gap_threshold_s)
    return TrackDocument(
        metadata=build_metadata(workout),
        segments=tuple(enrich_segments(segments, index, tolerance_s=tolerance_s)),
        waypoints=tuple(build_waypoints(workout, route, events, index)),
    )


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def build_metadata(workout: Workout) -> TrackMetadata:
    display = workout.display_name
    return TrackMetadata(
        name=f"{display} - {workout.start:%Y-%m-%d %H:%M}",
        description=f"Exported from health workout data (workout {workout.workout_id})",
        time=workout.start,
        keywords=", ".join(_summary_parts(workout)),
        activity_type=display.lower(),
        creator=GPX_CREATOR,
    )


def _summary_parts(workout: Workout) -> list[str]:
    """Duration always; distance and calories only when recorded."""
    parts = [f"Duration: {format_duration(workout.duration_s)}"]
    if workout.total_distance_m is not None:
        parts.append(f"Distance: {workout.total_distance_m / 1000.0:.2f} km")
    if workout.total_energy_kcal is not None:
        parts.append(f"Calories: {workout.total_energy_kcal:.0f} kcal")
    return parts


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format seconds as 'Hh Mm Ss', dropping leading zero units. e.g. 1805 -> '30m 5s'."""
    total = int(round(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def speed_to_pace(speed_m_per_s: float) -> float | None:
    """Convert m/s to minutes per km; None for non-positive speeds.

    Example: 3.333 m/s → 1000/60/3.333 ≈ 5.0 min/km
    """
    if speed_m_per_s <= 0:
        return None
    return 1000.0 / 60.0 / speed_m_per_s


def format_pace(pace_min_per_km: float | None) -> str:
    """Convert minutes-per-km to 'M:SS min/km'. e.g. 5.5 -> '5:30 min/km'."""
    if pace_min_per_km is None:
        return "--"
    total_s = int(round(pace_min_per_km * 60))
    return f"{total_s // 60}:{total_s % 60:02d} min/km"


# ---------------------------------------------------------------------------
# Waypoints
# ---------------------------------------------------------------------------


def build_waypoints(
    workout: Workout,
    route: Sequence[LocationPoint],
    events: Sequence[WorkoutEvent],
    index: SampleIndex,
) -> list[Waypoint]:
    """Start marker, lap markers, then summary markers for available data."""
    waypoints = [_start_waypoint(workout, route)]
    waypoints.extend(_lap_waypoints(events, route))

    power = index.merged(StreamKind.RUNNING_POWER, *POWER_STREAMS)
    peak = power.peak()
    if peak is not None:
        waypoints.append(Waypoint(
            timestamp=peak.timestamp,
            name="Peak Power",
            description=f"Peak power: {peak.value:.0f} W",
        ))

    peak = index.stream(StreamKind.HEART_RATE).peak()
    if peak is not None:
        waypoints.append(Waypoint(
            timestamp=peak.timestamp,
            name="Max Heart Rate",
            description=f"Max heart rate: {peak.value:.0f} bpm",
        ))

    speed = index.merged(StreamKind.RUNNING_SPEED, *SPEED_STREAMS)
    peak = speed.peak()
    if peak is not None:
        waypoints.append(Waypoint(
            timestamp=peak.timestamp,
            name="Max Speed",
            description=(
                f"Max speed: {peak.value:.2f} m/s "
                f"(pace {format_pace(speed_to_pace(peak.value))})"
            ),
        ))

    # VO2 max is reported once per workout; the first reading is the value.
    first = index.stream(StreamKind.VO2_MAX).first()
    if first is not None:
        waypoints.append(Waypoint(
            timestamp=first.timestamp,
            name="VO2 Max",
            description=f"VO2 max: {first.value:.1f} mL/kg/min",
        ))

    peak = index.stream(StreamKind.RESPIRATORY_RATE).peak()
    if peak is not None:
        waypoints.append(Waypoint(
            timestamp=peak.timestamp,
            name="Peak Respiratory Rate",
            description=f"Peak respiratory rate: {peak.value:.1f} breaths/min",
        ))

    flights = index.stream(StreamKind.FLIGHTS_CLIMBED).total()
    if flights > 0:
        waypoints.append(Waypoint(
            timestamp=workout.end,
            name="Elevation Summary",
            description=f"Flights climbed: {flights:.0f}",
        ))

    running_speed = index.stream(StreamKind.RUNNING_SPEED)
    if workout.activity_type in PACE_ACTIVITY_TYPES and running_speed:
        avg_speed = running_speed.mean()
        waypoints.append(Waypoint(
            timestamp=workout.end,
            name="Average Pace",
            description=(
                f"Average pace: {format_pace(speed_to_pace(avg_speed))} "
                f"({avg_speed:.2f} m/s)"
            ),
        ))

    return waypoints


def _start_waypoint(workout: Workout, route: Sequence[LocationPoint]) -> Waypoint:
    first = route[0] if route else None
    return Waypoint(
        timestamp=workout.start,
        name="Workout Start",
        description=f"{workout.display_name}: " + ", ".join(_summary_parts(workout)),
        latitude=first.latitude if first else None,
        longitude=first.longitude if first else None,
    )


def _lap_waypoints(
    events: Sequence[WorkoutEvent], route: Sequence[LocationPoint]
) -> list[Waypoint]:
    laps = sorted((e for e in events if e.kind == EventKind.LAP), key=lambda e: e.start)
    waypoints = []
    for number, lap in enumerate(laps, start=1):
        anchor = _point_at_or_before(route, lap)
        description = f"Lap {number} started at {lap.start:%H:%M:%S}"
        if lap.end is not None:
            description += f", duration {format_duration((lap.end - lap.start).total_seconds())}"
        waypoints.append(Waypoint(
            timestamp=lap.start,
            name=f"Lap {number}",
            description=description,
            latitude=anchor.latitude if anchor else None,
            longitude=anchor.longitude if anchor else None,
        ))
    return waypoints


def _point_at_or_before(
    route: Sequence[LocationPoint], event: WorkoutEvent
) -> LocationPoint | None:
    """Last route point at or before the event, else the first point."""
    anchor = route[0] if route else None
    for point in route:
        if point.timestamp > event.start:
            break
        anchor = point
    return anchor
