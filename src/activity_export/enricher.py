"""Enricher — attach co-occurring sensor values to each route point.

For every (point, stream) pair the nearest sample within the tolerance
window is looked up; groups of related values are only built when at least
one member matched, so absent data never produces empty groups.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import timedelta

from activity_export.models.enums import (
    DISTANCE_STREAMS,
    POWER_STREAMS,
    SAMPLE_TOLERANCE_S,
    SPEED_STREAMS,
    STEP_CADENCE_WINDOW_S,
    StreamKind,
)
from activity_export.models.track import (
    CustomExtensions,
    EnergyMetrics,
    EnvironmentMetrics,
    MovementMetrics,
    PhysiologyMetrics,
    RunningDynamics,
    TrackPoint,
    TrackPointExtensions,
    TrackSegment,
    WalkingDynamics,
)
from activity_export.models.workout import LocationPoint
from activity_export.sample_index import SampleIndex, SampleStream

# Source units → GPX extension units
_M_TO_CM = 100.0
_S_TO_MS = 1000.0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _or_none(group):
    """Return *group* unless every field in it is None."""
    return None if group.is_empty() else group


class PointEnricher:
    """Looks up per-point extension values from a :class:`SampleIndex`.

    Merged speed, power and distance streams are built once up front.
    """

    def __init__(
        self,
        index: SampleIndex,
        tolerance_s: float = SAMPLE_TOLERANCE_S,
        cadence_window_s: float = STEP_CADENCE_WINDOW_S,
    ) -> None:
        self.index = index
        self.tolerance_s = tolerance_s
        self.cadence_window_s = cadence_window_s
        self.speed = index.merged(StreamKind.RUNNING_SPEED, *SPEED_STREAMS)
        self.power = index.merged(StreamKind.RUNNING_POWER, *POWER_STREAMS)
        self.distance = index.merged(StreamKind.DISTANCE_WALKING_RUNNING, *DISTANCE_STREAMS)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _lookup(self, stream: SampleStream, point: LocationPoint) -> float | None:
        sample = stream.nearest(point.timestamp, self.tolerance_s)
        return sample.value if sample is not None else None

    def _value(self, kind: StreamKind, point: LocationPoint) -> float | None:
        return self._lookup(self.index.stream(kind), point)

    def step_cadence(self, point: LocationPoint) -> float | None:
        """Steps per minute from step-count samples around *point*.

        Sums STEP_COUNT samples within a window centred on the point and
        scales the sum to one minute. None when the window holds no samples.
        """
        half = timedelta(seconds=self.cadence_window_s / 2.0)
        in_window = self.index.window(
            StreamKind.STEP_COUNT, point.timestamp - half, point.timestamp + half
        )
        if not in_window:
            return None
        steps = sum(s.value for s in in_window)
        return steps * 60.0 / self.cadence_window_s

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def running_dynamics(self, point: LocationPoint) -> RunningDynamics | None:
        """Stride length gates the whole group."""
        stride = self._value(StreamKind.RUNNING_STRIDE_LENGTH, point)
        if stride is None:
            return None
        oscillation = self._value(StreamKind.RUNNING_VERTICAL_OSCILLATION, point)
        contact = self._value(StreamKind.RUNNING_GROUND_CONTACT_TIME, point)
        return RunningDynamics(
            stride_length_m=stride,
            vertical_oscillation_cm=oscillation * _M_TO_CM if oscillation is not None else None,
            ground_contact_time_ms=contact * _S_TO_MS if contact is not None else None,
        )

    def custom_extensions(self, point: LocationPoint) -> CustomExtensions | None:
        energy = _or_none(EnergyMetrics(
            active_kcal=self._value(StreamKind.ACTIVE_ENERGY, point),
            basal_kcal=self._value(StreamKind.BASAL_ENERGY, point),
        ))
        physiology = _or_none(PhysiologyMetrics(
            respiratory_rate=self._value(StreamKind.RESPIRATORY_RATE, point),
            oxygen_saturation_pct=self._value(StreamKind.OXYGEN_SATURATION, point),
        ))
        walking = _or_none(WalkingDynamics(
            asymmetry_pct=self._value(StreamKind.WALKING_ASYMMETRY, point),
            double_support_pct=self._value(StreamKind.WALKING_DOUBLE_SUPPORT, point),
            step_length_m=self._value(StreamKind.WALKING_STEP_LENGTH, point),
        ))
        environment = _or_none(EnvironmentMetrics(
            flights_climbed=self._value(StreamKind.FLIGHTS_CLIMBED, point),
        ))
        movement = _or_none(MovementMetrics(
            stair_ascent_speed=self._value(StreamKind.STAIR_ASCENT_SPEED, point),
            stair_descent_speed=self._value(StreamKind.STAIR_DESCENT_SPEED, point),
            step_cadence=self.step_cadence(point),
            stroke_count=self._value(StreamKind.SWIMMING_STROKE_COUNT, point),
            distance_m=self._lookup(self.distance, point),
        ))
        return _or_none(CustomExtensions(
            energy=energy,
            physiology=physiology,
            walking_dynamics=walking,
            environment=environment,
            movement=movement,
        ))

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------

    def extensions(self, point: LocationPoint) -> TrackPointExtensions | None:
        """All extension values for *point*, or None if nothing matched."""
        heart_rate = self._value(StreamKind.HEART_RATE, point)
        cadence = self._value(StreamKind.CYCLING_CADENCE, point)
        return _or_none(TrackPointExtensions(
            heart_rate=_round_half_up(heart_rate) if heart_rate is not None else None,
            cadence=_round_half_up(cadence) if cadence is not None else None,
            speed=self._lookup(self.speed, point),
            power=self._lookup(self.power, point),
            temperature=self._value(StreamKind.TEMPERATURE, point),
            running_dynamics=self.running_dynamics(point),
            custom=self.custom_extensions(point),
        ))

    def enrich(self, point: LocationPoint) -> TrackPoint:
        return TrackPoint(location=point, extensions=self.extensions(point))


def enrich_segments(
    segments: Sequence[Sequence[LocationPoint]],
    index: SampleIndex,
    tolerance_s: float = SAMPLE_TOLERANCE_S,
) -> list[TrackSegment]:
    """Turn raw point segments into enriched :class:`TrackSegment` objects."""
    enricher = PointEnricher(index, tolerance_s=tolerance_s)
    return [
        TrackSegment(points=tuple(enricher.enrich(p) for p in segment))
        for segment in segments
    ]
