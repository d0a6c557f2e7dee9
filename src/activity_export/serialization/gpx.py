"""GPX 1.1 serialization for TrackDocument objects.

Converts an internal TrackDocument → GPX XML with Garmin TrackPointExtension
blocks for per-point sensor data.

All functions are pure (no I/O).
"""

from __future__ import annotations

from datetime import datetime, timezone

from lxml import etree

from activity_export.models.enums import (
    GPX_NAMESPACE,
    GPX_SCHEMA_LOCATION,
    TRACKPOINT_EXTENSION_NAMESPACE,
    XSI_NAMESPACE,
)
from activity_export.models.track import (
    CustomExtensions,
    RunningDynamics,
    TrackDocument,
    TrackMetadata,
    TrackPoint,
    TrackPointExtensions,
    Waypoint,
)

_NSMAP = {
    None: GPX_NAMESPACE,
    "gpxtpx": TRACKPOINT_EXTENSION_NAMESPACE,
    "xsi": XSI_NAMESPACE,
}

# Waypoints without a position are written at this placeholder coordinate.
_PLACEHOLDER_LAT_LON = (0.0, 0.0)


def _gpx(tag: str) -> str:
    return f"{{{GPX_NAMESPACE}}}{tag}"


def _tpx(tag: str) -> str:
    return f"{{{TRACKPOINT_EXTENSION_NAMESPACE}}}{tag}"


def to_gpx_element(document: TrackDocument) -> etree._Element:
    """Convert a TrackDocument to an lxml ``<gpx>`` element tree."""
    root = etree.Element(_gpx("gpx"), nsmap=_NSMAP)
    root.set("version", "1.1")
    root.set("creator", document.metadata.creator)
    root.set(f"{{{XSI_NAMESPACE}}}schemaLocation", GPX_SCHEMA_LOCATION)

    _append_metadata(root, document.metadata)

    trk = etree.SubElement(root, _gpx("trk"))
    etree.SubElement(trk, _gpx("name")).text = document.metadata.name
    etree.SubElement(trk, _gpx("type")).text = document.metadata.activity_type
    for segment in document.segments:
        trkseg = etree.SubElement(trk, _gpx("trkseg"))
        for point in segment.points:
            _append_trackpoint(trkseg, point)

    for waypoint in document.waypoints:
        _append_waypoint(root, waypoint)

    return root


def to_gpx_bytes(document: TrackDocument) -> bytes:
    """Serialize a TrackDocument to UTF-8 GPX bytes with an XML declaration."""
    return etree.tostring(
        to_gpx_element(document),
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=True,
    )


def to_gpx_string(document: TrackDocument) -> str:
    return to_gpx_bytes(document).decode("utf-8")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def format_time(value: datetime) -> str:
    """ISO-8601 UTC with a 'Z' suffix; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _fmt(value: float, digits: int) -> str:
    return f"{value:.{digits}f}"


def _append_metadata(root: etree._Element, metadata: TrackMetadata) -> None:
    meta = etree.SubElement(root, _gpx("metadata"))
    etree.SubElement(meta, _gpx("name")).text = metadata.name
    etree.SubElement(meta, _gpx("desc")).text = metadata.description
    etree.SubElement(meta, _gpx("time")).text = format_time(metadata.time)
    if metadata.keywords:
        etree.SubElement(meta, _gpx("keywords")).text = metadata.keywords


def _append_trackpoint(trkseg: etree._Element, point: TrackPoint) -> None:
    location = point.location
    trkpt = etree.SubElement(
        trkseg,
        _gpx("trkpt"),
        lat=_fmt(location.latitude, 6),
        lon=_fmt(location.longitude, 6),
    )
    elevation = location.elevation_m
    if elevation is not None:
        etree.SubElement(trkpt, _gpx("ele")).text = _fmt(elevation, 1)
    etree.SubElement(trkpt, _gpx("time")).text = format_time(location.timestamp)

    if point.extensions is not None and not point.extensions.is_empty():
        extensions = etree.SubElement(trkpt, _gpx("extensions"))
        _append_trackpoint_extension(extensions, point.extensions)


def _append_trackpoint_extension(
    parent: etree._Element, ext: TrackPointExtensions
) -> None:
    """Build ``<gpxtpx:TrackPointExtension>``; absent values produce no tags."""
    tpx = etree.SubElement(parent, _tpx("TrackPointExtension"))
    if ext.heart_rate is not None:
        etree.SubElement(tpx, _tpx("hr")).text = str(ext.heart_rate)
    if ext.cadence is not None:
        etree.SubElement(tpx, _tpx("cad")).text = str(ext.cadence)
    if ext.speed is not None:
        etree.SubElement(tpx, _tpx("speed")).text = _fmt(ext.speed, 2)
    if ext.power is not None:
        etree.SubElement(tpx, _tpx("power")).text = _fmt(ext.power, 0)
    if ext.temperature is not None:
        etree.SubElement(tpx, _tpx("atemp")).text = _fmt(ext.temperature, 1)
    if ext.running_dynamics is not None:
        _append_running_dynamics(tpx, ext.running_dynamics)
    if ext.custom is not None:
        _append_custom_extensions(tpx, ext.custom)


def _append_running_dynamics(parent: etree._Element, rd: RunningDynamics) -> None:
    group = etree.SubElement(parent, _tpx("RunningDynamics"))
    _optional(group, "StrideLength", rd.stride_length_m, 2)
    _optional(group, "VerticalOscillation", rd.vertical_oscillation_cm, 1)
    _optional(group, "GroundContactTime", rd.ground_contact_time_ms, 0)


def _append_custom_extensions(parent: etree._Element, custom: CustomExtensions) -> None:
    group = etree.SubElement(parent, _tpx("CustomExtensions"))

    if custom.energy is not None:
        block = etree.SubElement(group, _tpx("Energy"))
        _optional(block, "ActiveEnergy", custom.energy.active_kcal, 2)
        _optional(block, "BasalEnergy", custom.energy.basal_kcal, 2)

    if custom.physiology is not None:
        block = etree.SubElement(group, _tpx("Physiology"))
        _optional(block, "RespiratoryRate", custom.physiology.respiratory_rate, 1)
        _optional(block, "OxygenSaturation", custom.physiology.oxygen_saturation_pct, 1)

    if custom.walking_dynamics is not None:
        block = etree.SubElement(group, _tpx("WalkingDynamics"))
        _optional(block, "Asymmetry", custom.walking_dynamics.asymmetry_pct, 1)
        _optional(block, "DoubleSupport", custom.walking_dynamics.double_support_pct, 1)
        _optional(block, "StepLength", custom.walking_dynamics.step_length_m, 2)

    if custom.environment is not None:
        block = etree.SubElement(group, _tpx("Environment"))
        _optional(block, "FlightsClimbed", custom.environment.flights_climbed, 0)

    if custom.movement is not None:
        block = etree.SubElement(group, _tpx("Movement"))
        _optional(block, "StairAscentSpeed", custom.movement.stair_ascent_speed, 2)
        _optional(block, "StairDescentSpeed", custom.movement.stair_descent_speed, 2)
        _optional(block, "StepCadence", custom.movement.step_cadence, 0)
        _optional(block, "StrokeCount", custom.movement.stroke_count, 0)
        _optional(block, "Distance", custom.movement.distance_m, 1)


def _optional(parent: etree._Element, tag: str, value: float | None, digits: int) -> None:
    if value is not None:
        etree.SubElement(parent, _tpx(tag)).text = _fmt(value, digits)


def _append_waypoint(root: etree._Element, waypoint: Waypoint) -> None:
    if waypoint.has_position:
        lat, lon = waypoint.latitude, waypoint.longitude
    else:
        lat, lon = _PLACEHOLDER_LAT_LON
    wpt = etree.SubElement(root, _gpx("wpt"), lat=_fmt(lat, 6), lon=_fmt(lon, 6))
    etree.SubElement(wpt, _gpx("time")).text = format_time(waypoint.timestamp)
    etree.SubElement(wpt, _gpx("name")).text = waypoint.name
    etree.SubElement(wpt, _gpx("desc")).text = waypoint.description
