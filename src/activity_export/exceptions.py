"""Exception hierarchy for run-level export failures."""

from __future__ import annotations


class ExportError(Exception):
    """Base exception for all activity_export errors."""


class ArchiveError(ExportError):
    """Building or writing the output archive failed."""
