"""Derived track models — built per workout, serialized once, then dropped."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime

from activity_export.models.workout import LocationPoint


class _OptionalGroup:
    """Mixin for dataclasses whose fields are all optional."""

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass(frozen=True)
class RunningDynamics(_OptionalGroup):
    stride_length_m: float | None = None
    vertical_oscillation_cm: float | None = None
    ground_contact_time_ms: float | None = None


@dataclass(frozen=True)
class EnergyMetrics(_OptionalGroup):
    active_kcal: float | None = None
    basal_kcal: float | None = None


@dataclass(frozen=True)
class PhysiologyMetrics(_OptionalGroup):
    respiratory_rate: float | None = None
    oxygen_saturation_pct: float | None = None


@dataclass(frozen=True)
class WalkingDynamics(_OptionalGroup):
    asymmetry_pct: float | None = None
    double_support_pct: float | None = None
    step_length_m: float | None = None


@dataclass(frozen=True)
class EnvironmentMetrics(_OptionalGroup):
    flights_climbed: float | None = None


@dataclass(frozen=True)
class MovementMetrics(_OptionalGroup):
    stair_ascent_speed: float | None = None
    stair_descent_speed: float | None = None
    step_cadence: float | None = None
    stroke_count: float | None = None
    distance_m: float | None = None


@dataclass(frozen=True)
class CustomExtensions(_OptionalGroup):
    """Non-standard per-point metrics, grouped into optional sub-blocks."""

    energy: EnergyMetrics | None = None
    physiology: PhysiologyMetrics | None = None
    walking_dynamics: WalkingDynamics | None = None
    environment: EnvironmentMetrics | None = None
    movement: MovementMetrics | None = None


@dataclass(frozen=True)
class TrackPointExtensions(_OptionalGroup):
    """Sensor values attached to one route point.

    Every field is independently optional; groups are None rather than empty.
    """

    heart_rate: int | None = None
    cadence: int | None = None
    speed: float | None = None
    power: float | None = None
    temperature: float | None = None
    running_dynamics: RunningDynamics | None = None
    custom: CustomExtensions | None = None


@dataclass(frozen=True)
class TrackPoint:
    location: LocationPoint
    extensions: TrackPointExtensions | None = None


@dataclass(frozen=True)
class TrackSegment:
    """A contiguous recording interval of enriched points."""

    points: tuple[TrackPoint, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Waypoint:
    """A standalone annotated marker.

    ``latitude``/``longitude`` are None for summary markers that are
    anchored in time only.
    """

    timestamp: datetime
    name: str
    description: str
    latitude: float | None = None
    longitude: float | None = None

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class TrackMetadata:
    name: str
    description: str
    time: datetime
    keywords: str
    activity_type: str          # lower-cased display name, used as <trk><type>
    creator: str


@dataclass(frozen=True)
class TrackDocument:
    """Everything needed to write one workout's GPX file."""

    metadata: TrackMetadata
    segments: tuple[TrackSegment, ...]
    waypoints: tuple[Waypoint, ...]

    @property
    def point_count(self) -> int:
        return sum(len(s.points) for s in self.segments)
