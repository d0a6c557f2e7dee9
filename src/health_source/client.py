"""Garmin Connect implementation of the health-data source.

All methods wrap raw garminconnect calls with error translation. Blocking
calls run in worker threads so the export pipeline stays awaitable.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from garminconnect import Garmin

from activity_export.models.enums import StreamKind
from activity_export.models.workout import (
    LocationPoint,
    TimedSample,
    Workout,
    WorkoutEvent,
    WorkoutRoute,
)
from health_source.auth import DEFAULT_TOKEN_DIR, create_session, has_saved_tokens
from health_source.exceptions import (
    HealthSourceAPIError,
    HealthSourceRateLimitError,
)
from health_source.metrics_mapper import (
    map_activity,
    map_detail_samples,
    map_lap_events,
    map_polyline,
    map_summary_samples,
)

logger = logging.getLogger(__name__)

_DEFAULT_MAX_WORKOUTS = 1000
_PAGE_SIZE = 100
_MAX_CHART_SIZE = 4000
_MAX_POLYLINE_SIZE = 8000


class GarminHealthSource:
    """Reads workouts, routes, sample streams and laps from Garmin Connect.

    Activity details are fetched once per workout and shared by the
    concurrent per-stream fetches; only the most recent workout's details
    are kept.
    """

    def __init__(
        self,
        email: str | None = None,
        password: str | None = None,
        token_dir: Path | str = DEFAULT_TOKEN_DIR,
        prompt_mfa: Optional[Callable[[], str]] = None,
        max_workouts: int = _DEFAULT_MAX_WORKOUTS,
        garmin: Garmin | None = None,
    ) -> None:
        self._email = email or ""
        self._password = password or ""
        self._token_dir = Path(token_dir)
        self._prompt_mfa = prompt_mfa
        self._max_workouts = max_workouts
        self._garmin = garmin
        self._summaries: dict[str, dict[str, Any]] = {}
        self._details: dict[str, asyncio.Future] = {}

    @classmethod
    def from_garmin(cls, garmin: Garmin, **kwargs: Any) -> "GarminHealthSource":
        """Construct from an already-authenticated Garmin object."""
        return cls(garmin=garmin, **kwargs)

    # ------------------------------------------------------------------
    # Availability / authorization
    # ------------------------------------------------------------------

    def is_available(self) -> bool:
        if self._garmin is not None:
            return True
        return bool(self._email and self._password) or has_saved_tokens(self._token_dir)

    async def request_authorization(self) -> None:
        if self._garmin is not None:
            return
        self._garmin = await asyncio.to_thread(
            create_session,
            email=self._email,
            password=self._password,
            token_dir=self._token_dir,
            prompt_mfa=self._prompt_mfa,
        )

    # ------------------------------------------------------------------
    # Workouts
    # ------------------------------------------------------------------

    async def fetch_workouts(self) -> list[Workout]:
        """List activities, most recent first (Garmin's own ordering)."""
        raw_activities: list[dict[str, Any]] = []
        start = 0
        while start < self._max_workouts:
            limit = min(_PAGE_SIZE, self._max_workouts - start)
            page = await self._call(self._session().get_activities, start, limit) or []
            raw_activities.extend(a for a in page if isinstance(a, dict))
            if len(page) < limit:
                break
            start += limit

        workouts: list[Workout] = []
        self._summaries.clear()
        for raw in raw_activities:
            try:
                workout = map_activity(raw)
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed activity %s: %s", raw.get("activityId"), exc)
                continue
            if workout is None:
                logger.debug("Skipping activity without id/start: %s", raw.get("activityId"))
                continue
            self._summaries[workout.workout_id] = raw
            workouts.append(workout)

        workouts.sort(key=lambda w: w.start, reverse=True)
        logger.info("Fetched %d workouts", len(workouts))
        return workouts

    async def fetch_route(self, workout: Workout) -> WorkoutRoute | None:
        details = await self._activity_details(workout.workout_id)
        polyline = (details or {}).get("geoPolylineDTO") or {}
        if not polyline.get("polyline"):
            return None
        return WorkoutRoute(route_id=f"{workout.workout_id}-route", workout_id=workout.workout_id)

    async def fetch_locations(self, route: WorkoutRoute) -> list[LocationPoint]:
        details = await self._activity_details(route.workout_id)
        return map_polyline(details)

    async def fetch_samples(
        self,
        workout: Workout,
        kind: StreamKind,
        start: datetime,
        end: datetime,
    ) -> list[TimedSample]:
        summary = self._summaries.get(workout.workout_id, {})
        samples = map_summary_samples(summary, workout, kind)
        if not samples:
            details = await self._activity_details(workout.workout_id)
            samples = map_detail_samples(details, kind, workout.activity_type)
        return [s for s in samples if start <= s.timestamp <= end]

    async def fetch_events(self, workout: Workout) -> list[WorkoutEvent]:
        splits = await self._call(self._session().get_activity_splits, workout.workout_id)
        return map_lap_events(splits)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _session(self) -> Garmin:
        if self._garmin is None:
            raise HealthSourceAPIError("Not authorized; call request_authorization() first")
        return self._garmin

    async def _activity_details(self, activity_id: str) -> dict[str, Any]:
        """Activity details for *activity_id*, fetched at most once."""
        future = self._details.get(activity_id)
        if future is None:
            self._details.clear()
            future = asyncio.ensure_future(
                self._call(
                    self._session().get_activity_details,
                    activity_id,
                    _MAX_CHART_SIZE,
                    _MAX_POLYLINE_SIZE,
                )
            )
            self._details[activity_id] = future
        return await asyncio.shield(future) or {}

    async def _call(self, fn: Callable, *args: Any, **kwargs: Any) -> Any:
        """Run *fn* in a worker thread, translating failures (no retries)."""
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except Exception as exc:
            status = getattr(exc, "status", None) or getattr(exc, "status_code", None)
            if status == 429:
                raise HealthSourceRateLimitError(f"Rate limited: {exc}") from exc
            raise HealthSourceAPIError(str(exc), status_code=status) from exc
