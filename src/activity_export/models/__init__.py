"""Data models for the activity export pipeline."""

from activity_export.models.enums import (
    ActivityType,
    EventKind,
    ExportStatus,
    StreamKind,
)
from activity_export.models.progress import ExportProgress, ExportResult
from activity_export.models.track import (
    CustomExtensions,
    EnergyMetrics,
    EnvironmentMetrics,
    MovementMetrics,
    PhysiologyMetrics,
    RunningDynamics,
    TrackDocument,
    TrackMetadata,
    TrackPoint,
    TrackPointExtensions,
    TrackSegment,
    WalkingDynamics,
    Waypoint,
)
from activity_export.models.workout import (
    LocationPoint,
    TimedSample,
    Workout,
    WorkoutEvent,
    WorkoutRoute,
)

__all__ = [
    "ActivityType",
    "CustomExtensions",
    "EnergyMetrics",
    "EnvironmentMetrics",
    "EventKind",
    "ExportProgress",
    "ExportResult",
    "ExportStatus",
    "LocationPoint",
    "MovementMetrics",
    "PhysiologyMetrics",
    "RunningDynamics",
    "StreamKind",
    "TimedSample",
    "TrackDocument",
    "TrackMetadata",
    "TrackPoint",
    "TrackPointExtensions",
    "TrackSegment",
    "WalkingDynamics",
    "Waypoint",
    "Workout",
    "WorkoutEvent",
    "WorkoutRoute",
]
