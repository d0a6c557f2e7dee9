"""Pure functions mapping Garmin API response dicts to export models.

No I/O — takes raw dicts from the Garmin client and returns Workouts,
LocationPoints, TimedSamples and WorkoutEvents in canonical units.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from activity_export.models.enums import ActivityType, EventKind, StreamKind
from activity_export.models.workout import (
    LocationPoint,
    TimedSample,
    Workout,
    WorkoutEvent,
)

# Garmin activityType.typeKey → ActivityType
_ACTIVITY_TYPES: dict[str, ActivityType] = {
    "running": ActivityType.RUNNING,
    "street_running": ActivityType.RUNNING,
    "track_running": ActivityType.RUNNING,
    "trail_running": ActivityType.RUNNING,
    "treadmill_running": ActivityType.RUNNING,
    "walking": ActivityType.WALKING,
    "casual_walking": ActivityType.WALKING,
    "speed_walking": ActivityType.WALKING,
    "cycling": ActivityType.CYCLING,
    "road_biking": ActivityType.CYCLING,
    "mountain_biking": ActivityType.CYCLING,
    "gravel_cycling": ActivityType.CYCLING,
    "indoor_cycling": ActivityType.CYCLING,
    "lap_swimming": ActivityType.SWIMMING,
    "open_water_swimming": ActivityType.SWIMMING,
    "hiking": ActivityType.HIKING,
    "yoga": ActivityType.YOGA,
    "strength_training": ActivityType.TRADITIONAL_STRENGTH_TRAINING,
    "hiit": ActivityType.FUNCTIONAL_STRENGTH_TRAINING,
    "elliptical": ActivityType.ELLIPTICAL,
    "rowing": ActivityType.ROWING,
    "indoor_rowing": ActivityType.ROWING,
    "stair_climbing": ActivityType.STAIRS,
    "floor_climbing": ActivityType.STAIRS,
    "tennis": ActivityType.TENNIS,
    "basketball": ActivityType.BASKETBALL,
    "soccer": ActivityType.SOCCER,
    "golf": ActivityType.GOLF,
}

# Garmin detail metric key → (stream kind, multiplier into canonical units).
# Speed, power and distance depend on the activity type; see _typed_key().
_DIRECT_METRICS: dict[str, tuple[StreamKind, float]] = {
    "directHeartRate": (StreamKind.HEART_RATE, 1.0),
    "directBikeCadence": (StreamKind.CYCLING_CADENCE, 1.0),
    "directAirTemperature": (StreamKind.TEMPERATURE, 1.0),
    "directStrideLength": (StreamKind.RUNNING_STRIDE_LENGTH, 0.01),         # cm → m
    "directVerticalOscillation": (StreamKind.RUNNING_VERTICAL_OSCILLATION, 0.01),  # cm → m
    "directGroundContactTime": (StreamKind.RUNNING_GROUND_CONTACT_TIME, 0.001),    # ms → s
    "directRespirationRate": (StreamKind.RESPIRATORY_RATE, 1.0),
    "directSwimStroke": (StreamKind.SWIMMING_STROKE_COUNT, 1.0),
}

_TIMESTAMP_KEY = "directTimestamp"


def parse_garmin_time(value: Any) -> Optional[datetime]:
    """Parse Garmin GMT timestamps: epoch millis or 'YYYY-MM-DD HH:MM:SS[.f]'."""
    if value is None:
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        text = str(value).replace("T", " ")
        fmt = "%Y-%m-%d %H:%M:%S.%f" if "." in text else "%Y-%m-%d %H:%M:%S"
        return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
    except (ValueError, TypeError, OSError):
        return None


def map_activity_type(type_key: Any) -> ActivityType:
    return _ACTIVITY_TYPES.get(str(type_key or "").lower(), ActivityType.OTHER)


def map_activity(raw: dict[str, Any]) -> Optional[Workout]:
    """Map one entry of ``get_activities()`` to a Workout.

    Returns None when the id or start time is missing.
    """
    activity_id = raw.get("activityId")
    start = parse_garmin_time(raw.get("startTimeGMT"))
    if activity_id is None or start is None:
        return None

    duration = _to_float(raw.get("elapsedDuration")) or _to_float(raw.get("duration")) or 0.0

    activity_type = raw.get("activityType") or {}
    return Workout(
        workout_id=str(activity_id),
        activity_type=map_activity_type(activity_type.get("typeKey")),
        start=start,
        end=start + timedelta(seconds=duration),
        duration_s=duration,
        total_distance_m=_to_float(raw.get("distance")),
        total_energy_kcal=_to_float(raw.get("calories")),
    )


def map_polyline(details: Any) -> list[LocationPoint]:
    """Extract route points from ``geoPolylineDTO.polyline``, ordered by time."""
    if not isinstance(details, dict):
        return []
    polyline_dto = details.get("geoPolylineDTO") or {}
    points: list[LocationPoint] = []
    for entry in polyline_dto.get("polyline") or []:
        if not isinstance(entry, dict):
            continue
        ts = parse_garmin_time(entry.get("time"))
        lat = _to_float(entry.get("lat"))
        lon = _to_float(entry.get("lon"))
        if ts is None or lat is None or lon is None:
            continue
        points.append(LocationPoint(
            timestamp=ts,
            latitude=lat,
            longitude=lon,
            elevation=_to_float(entry.get("altitude")),
        ))
    points.sort(key=lambda p: p.timestamp)
    return points


def map_detail_samples(
    details: Any, kind: StreamKind, activity_type: ActivityType
) -> list[TimedSample]:
    """Extract one stream kind from the metric rows of ``get_activity_details()``."""
    if not isinstance(details, dict):
        return []

    columns = _metric_columns(details)
    ts_col = columns.get(_TIMESTAMP_KEY)
    if ts_col is None:
        return []
    rows = [
        row.get("metrics")
        for row in details.get("activityDetailMetrics") or []
        if isinstance(row, dict) and isinstance(row.get("metrics"), list)
    ]

    if kind == StreamKind.STEP_COUNT:
        return _step_counts(rows, columns, ts_col)
    if kind == StreamKind.WALKING_ASYMMETRY:
        return _asymmetry(rows, columns, ts_col)

    for key, (mapped, factor) in _DIRECT_METRICS.items():
        if mapped == kind and key in columns:
            return _column_samples(rows, ts_col, columns[key], kind, factor)

    typed_key = _typed_key(kind, activity_type)
    if typed_key is not None and typed_key in columns:
        return _column_samples(rows, ts_col, columns[typed_key], kind, 1.0)
    return []


def map_summary_samples(
    raw: dict[str, Any], workout: Workout, kind: StreamKind
) -> list[TimedSample]:
    """Single-value streams that Garmin only reports per activity."""
    if kind == StreamKind.VO2_MAX:
        value = _to_float(raw.get("vO2MaxValue"))
        if value is not None:
            return [TimedSample(timestamp=workout.start, value=value, kind=kind)]
    elif kind == StreamKind.FLIGHTS_CLIMBED:
        value = _to_float(raw.get("floorsClimbed"))
        if value:
            return [TimedSample(timestamp=workout.end, value=value, kind=kind)]
    elif kind == StreamKind.BASAL_ENERGY:
        value = _to_float(raw.get("bmrCalories"))
        if value is not None:
            return [TimedSample(timestamp=workout.end, value=value, kind=kind)]
    return []


def map_lap_events(splits: Any) -> list[WorkoutEvent]:
    """Map ``get_activity_splits()`` lapDTOs to LAP interval events."""
    if not isinstance(splits, dict):
        return []
    events: list[WorkoutEvent] = []
    for lap in splits.get("lapDTOs") or []:
        if not isinstance(lap, dict):
            continue
        start = parse_garmin_time(lap.get("startTimeGMT"))
        if start is None:
            continue
        duration = _to_float(lap.get("elapsedDuration")) or _to_float(lap.get("duration"))
        end = None
        if duration is not None:
            end = start + timedelta(seconds=duration)
        events.append(WorkoutEvent(start=start, kind=EventKind.LAP, end=end))
    events.sort(key=lambda e: e.start)
    return events


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _metric_columns(details: dict[str, Any]) -> dict[str, int]:
    columns: dict[str, int] = {}
    for descriptor in details.get("metricDescriptors") or []:
        if isinstance(descriptor, dict) and "key" in descriptor:
            try:
                columns[descriptor["key"]] = int(descriptor["metricsIndex"])
            except (KeyError, ValueError, TypeError):
                continue
    return columns


def _typed_key(kind: StreamKind, activity_type: ActivityType) -> Optional[str]:
    """Garmin reports one speed/power/distance column; route it by sport."""
    cycling = activity_type == ActivityType.CYCLING
    walking = activity_type in (ActivityType.WALKING, ActivityType.HIKING)
    swimming = activity_type == ActivityType.SWIMMING

    if kind == StreamKind.CYCLING_SPEED and cycling:
        return "directSpeed"
    if kind == StreamKind.WALKING_SPEED and walking:
        return "directSpeed"
    if kind == StreamKind.RUNNING_SPEED and not (cycling or walking or swimming):
        return "directSpeed"
    if kind == StreamKind.CYCLING_POWER and cycling:
        return "directPower"
    if kind == StreamKind.RUNNING_POWER and not cycling:
        return "directPower"
    if kind == StreamKind.DISTANCE_CYCLING and cycling:
        return "sumDistance"
    if kind == StreamKind.DISTANCE_SWIMMING and swimming:
        return "sumDistance"
    if kind == StreamKind.DISTANCE_WALKING_RUNNING and not (cycling or swimming):
        return "sumDistance"
    return None


def _cell(row: list, col: int) -> Optional[float]:
    if col >= len(row):
        return None
    return _to_float(row[col])


def _column_samples(
    rows: list[list], ts_col: int, col: int, kind: StreamKind, factor: float
) -> list[TimedSample]:
    samples: list[TimedSample] = []
    for row in rows:
        ts = parse_garmin_time(_cell(row, ts_col))
        value = _cell(row, col)
        if ts is None or value is None:
            continue
        samples.append(TimedSample(timestamp=ts, value=value * factor, kind=kind))
    return samples


def _step_counts(rows: list[list], columns: dict[str, int], ts_col: int) -> list[TimedSample]:
    """Steps taken between consecutive rows, from the cadence column.

    Prefers ``directDoubleCadence`` (steps/min); ``directRunCadence`` is
    per-leg so it is doubled.
    """
    if "directDoubleCadence" in columns:
        col, factor = columns["directDoubleCadence"], 1.0
    elif "directRunCadence" in columns:
        col, factor = columns["directRunCadence"], 2.0
    else:
        return []

    samples: list[TimedSample] = []
    previous: Optional[datetime] = None
    for row in rows:
        ts = parse_garmin_time(_cell(row, ts_col))
        spm = _cell(row, col)
        if ts is None:
            continue
        if previous is not None and spm is not None:
            interval_s = (ts - previous).total_seconds()
            if interval_s > 0:
                steps = spm * factor * interval_s / 60.0
                samples.append(TimedSample(timestamp=ts, value=steps, kind=StreamKind.STEP_COUNT))
        previous = ts
    return samples


def _asymmetry(rows: list[list], columns: dict[str, int], ts_col: int) -> list[TimedSample]:
    """Gait asymmetry % from left ground-contact balance (50% = symmetric)."""
    col = columns.get("directGroundContactBalanceLeft")
    if col is None:
        return []
    samples: list[TimedSample] = []
    for row in rows:
        ts = parse_garmin_time(_cell(row, ts_col))
        left = _cell(row, col)
        if ts is None or left is None:
            continue
        samples.append(TimedSample(
            timestamp=ts,
            value=abs(left - 50.0) * 2.0,
            kind=StreamKind.WALKING_ASYMMETRY,
        ))
    return samples
