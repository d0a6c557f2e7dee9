"""Serialization module — export track documents to file formats."""

from activity_export.serialization.gpx import to_gpx_bytes, to_gpx_element, to_gpx_string

__all__ = ["to_gpx_bytes", "to_gpx_element", "to_gpx_string"]
