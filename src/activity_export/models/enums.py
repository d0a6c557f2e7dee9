"""Enumerations and constants for the activity export pipeline."""

from enum import IntEnum, auto


class StreamKind(IntEnum):
    """Time-series sample streams recognised by the exporter.

    Canonical units are noted per member; sources convert into them.
    """

    HEART_RATE = auto()                    # count/min
    ACTIVE_ENERGY = auto()                 # kcal
    BASAL_ENERGY = auto()                  # kcal
    DISTANCE_WALKING_RUNNING = auto()      # m
    DISTANCE_CYCLING = auto()              # m
    DISTANCE_SWIMMING = auto()             # m
    STEP_COUNT = auto()                    # steps
    RUNNING_SPEED = auto()                 # m/s
    WALKING_SPEED = auto()                 # m/s
    CYCLING_SPEED = auto()                 # m/s
    RUNNING_POWER = auto()                 # W
    CYCLING_POWER = auto()                 # W
    CYCLING_CADENCE = auto()               # rev/min
    RUNNING_STRIDE_LENGTH = auto()         # m
    RUNNING_VERTICAL_OSCILLATION = auto()  # m
    RUNNING_GROUND_CONTACT_TIME = auto()   # s
    RESPIRATORY_RATE = auto()              # breaths/min
    OXYGEN_SATURATION = auto()             # %
    VO2_MAX = auto()                       # mL/kg/min
    WALKING_ASYMMETRY = auto()             # %
    WALKING_DOUBLE_SUPPORT = auto()        # %
    WALKING_STEP_LENGTH = auto()           # m
    FLIGHTS_CLIMBED = auto()               # count
    STAIR_ASCENT_SPEED = auto()            # m/s
    STAIR_DESCENT_SPEED = auto()           # m/s
    TEMPERATURE = auto()                   # °C
    SWIMMING_STROKE_COUNT = auto()         # count


ALL_STREAM_KINDS: tuple[StreamKind, ...] = tuple(StreamKind)

# Streams merged into a single per-point value.
SPEED_STREAMS = (
    StreamKind.RUNNING_SPEED,
    StreamKind.WALKING_SPEED,
    StreamKind.CYCLING_SPEED,
)
POWER_STREAMS = (StreamKind.RUNNING_POWER, StreamKind.CYCLING_POWER)
DISTANCE_STREAMS = (
    StreamKind.DISTANCE_WALKING_RUNNING,
    StreamKind.DISTANCE_CYCLING,
    StreamKind.DISTANCE_SWIMMING,
)


class EventKind(IntEnum):
    """Workout event types that matter to segmentation."""

    LAP = auto()
    PAUSE = auto()
    RESUME = auto()
    OTHER = auto()


class ActivityType(IntEnum):
    """Workout activity types with a dedicated display name."""

    RUNNING = auto()
    WALKING = auto()
    CYCLING = auto()
    SWIMMING = auto()
    HIKING = auto()
    YOGA = auto()
    FUNCTIONAL_STRENGTH_TRAINING = auto()
    TRADITIONAL_STRENGTH_TRAINING = auto()
    CROSS_TRAINING = auto()
    ELLIPTICAL = auto()
    ROWING = auto()
    STAIRS = auto()
    STEP_TRAINING = auto()
    TENNIS = auto()
    BASKETBALL = auto()
    SOCCER = auto()
    GOLF = auto()
    OTHER = auto()

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, "Workout")


_DISPLAY_NAMES = {
    ActivityType.RUNNING: "Running",
    ActivityType.WALKING: "Walking",
    ActivityType.CYCLING: "Cycling",
    ActivityType.SWIMMING: "Swimming",
    ActivityType.HIKING: "Hiking",
    ActivityType.YOGA: "Yoga",
    ActivityType.FUNCTIONAL_STRENGTH_TRAINING: "Strength",
    ActivityType.TRADITIONAL_STRENGTH_TRAINING: "Weight-Training",
    ActivityType.CROSS_TRAINING: "Cross-Training",
    ActivityType.ELLIPTICAL: "Elliptical",
    ActivityType.ROWING: "Rowing",
    ActivityType.STAIRS: "Stairs",
    ActivityType.STEP_TRAINING: "Step-Training",
    ActivityType.TENNIS: "Tennis",
    ActivityType.BASKETBALL: "Basketball",
    ActivityType.SOCCER: "Soccer",
    ActivityType.GOLF: "Golf",
}

# Activity types that get an average-pace waypoint.
PACE_ACTIVITY_TYPES = frozenset({ActivityType.RUNNING, ActivityType.WALKING})


class ExportStatus(IntEnum):
    """Terminal state of a successful export run."""

    COMPLETED = auto()
    NO_WORKOUTS = auto()


# ---------------------------------------------------------------------------
# Pipeline constants
# ---------------------------------------------------------------------------

# Max |Δt| between a route point and a sample for them to co-occur (inclusive).
SAMPLE_TOLERANCE_S = 5.0

# A gap longer than this between consecutive route points starts a new segment.
SEGMENT_GAP_S = 30.0

# Window centred on a route point used to turn step counts into a cadence.
STEP_CADENCE_WINDOW_S = 60.0

# Elevations below this, or exactly -1, mean "no elevation recorded".
ELEVATION_FLOOR_M = -1000.0
ELEVATION_MISSING_M = -1.0

# ---------------------------------------------------------------------------
# GPX output
# ---------------------------------------------------------------------------

GPX_CREATOR = "activity-export"
GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"
GPX_SCHEMA_LOCATION = (
    "http://www.topografix.com/GPX/1/1 http://www.topografix.com/GPX/1/1/gpx.xsd"
)
TRACKPOINT_EXTENSION_NAMESPACE = "http://www.garmin.com/xmlschemas/TrackPointExtension/v1"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

GPX_FILE_EXTENSION = "gpx"
ARCHIVE_FILE_EXTENSION = "tar.gz"
WORKOUT_ID_PREFIX_LENGTH = 8
