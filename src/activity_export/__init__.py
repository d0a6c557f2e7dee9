"""Workout-to-GPX export pipeline."""

from activity_export.archive import archive_file_name, date_range, package_archive
from activity_export.document_builder import build_document
from activity_export.enricher import PointEnricher, enrich_segments
from activity_export.exceptions import ArchiveError, ExportError
from activity_export.pipeline import export_activities
from activity_export.sample_index import SampleIndex, SampleStream, build_sample_index
from activity_export.segmenter import segment_route
from activity_export.session import ExportSession

__all__ = [
    "ArchiveError",
    "ExportError",
    "ExportSession",
    "PointEnricher",
    "SampleIndex",
    "SampleStream",
    "archive_file_name",
    "build_document",
    "build_sample_index",
    "date_range",
    "enrich_segments",
    "export_activities",
    "package_archive",
    "segment_route",
]
