"""Observable export state for a presentation layer.

The pipeline only emits :class:`ExportProgress` events; this class folds
them into the fields a UI binds to and turns run-level failures into a
user-visible message.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from activity_export.exceptions import ExportError
from activity_export.models.enums import ExportStatus
from activity_export.models.progress import ExportProgress, ExportResult
from activity_export.pipeline import export_activities
from health_source.exceptions import HealthSourceError, HealthSourceUnavailableError

if TYPE_CHECKING:
    from health_source.base import HealthDataSource

logger = logging.getLogger(__name__)

Listener = Callable[["ExportSession"], None]


class ExportSession:
    """Drives one export at a time and exposes its state.

    Usage:
        session = ExportSession(source, output_dir)
        session.subscribe(lambda s: print(s.progress, s.status_message))
        await session.run()
        if session.exported_path: ...
    """

    def __init__(self, source: HealthDataSource, output_dir: Path | str) -> None:
        self.source = source
        self.output_dir = Path(output_dir)
        self.is_exporting = False
        self.progress = 0.0
        self.status_message = ""
        self.error_message: str | None = None
        self.exported_path: Path | None = None
        self.result: ExportResult | None = None
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        """Register *listener*; it is called after every state change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    def _on_progress(self, event: ExportProgress) -> None:
        self.progress = event.fraction
        self.status_message = event.status
        self._notify()

    async def run(self) -> ExportResult | None:
        """Run an export; return its result, or None if the run failed.

        Failures are reported through ``error_message``, not raised.
        """
        if self.is_exporting:
            raise RuntimeError("An export is already running")

        self.is_exporting = True
        self.error_message = None
        self.exported_path = None
        self.result = None
        self.progress = 0.0
        self._notify()

        try:
            result = await export_activities(
                self.source, self.output_dir, on_progress=self._on_progress
            )
        except HealthSourceUnavailableError as exc:
            logger.error("Export unavailable: %s", exc)
            self.error_message = str(exc)
            return None
        except (HealthSourceError, ExportError, OSError) as exc:
            logger.error("Export failed: %s", exc)
            self.error_message = f"Export failed: {exc}"
            return None
        except Exception as exc:
            logger.exception("Unexpected export failure")
            self.error_message = f"Export failed: {exc}"
            return None
        finally:
            self.is_exporting = False
            self._notify()

        self.result = result
        if result.status == ExportStatus.COMPLETED:
            self.exported_path = result.archive_path
        self._notify()
        return result
