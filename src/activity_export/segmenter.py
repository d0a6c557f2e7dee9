"""Segmenter — split a route into lap/pause-aware track segments.

Single pass over the route with two pieces of state: the open segment and
a cursor into the time-ordered events. Each event is consumed exactly once,
just before the first point at or after its start time.
"""

from __future__ import annotations

from collections.abc import Sequence

from activity_export.models.enums import SEGMENT_GAP_S, EventKind
from activity_export.models.workout import LocationPoint, WorkoutEvent

_SEGMENTING_EVENTS = frozenset({EventKind.LAP, EventKind.PAUSE, EventKind.RESUME})


def segment_route(
    route: Sequence[LocationPoint],
    events: Sequence[WorkoutEvent] = (),
    gap_threshold_s: float = SEGMENT_GAP_S,
) -> list[list[LocationPoint]]:
    """Partition *route* into ordered, non-empty segments.

    Rules, applied per point in timestamp order:

    * ``LAP`` — close the open segment and start a new one at this point.
    * ``PAUSE`` — close the open segment; the next segment starts empty.
    * ``RESUME`` — start the segment at this point if it is empty.
    * Otherwise the point opens the segment if it is empty, starts a new
      segment when more than *gap_threshold_s* passed since the previous
      point, or is appended.

    LAP and PAUSE are no-ops while the open segment is empty. Every point
    lands in exactly one segment, so concatenating the result gives back
    *route*.

    Args:
        route: Location points ordered by timestamp.
        events: Workout events in any order; OTHER events are ignored.
        gap_threshold_s: Largest gap, in seconds, that keeps one segment.

    Returns:
        List of segments, each a list of points. Empty for an empty route.
    """
    pending = sorted(events, key=lambda e: e.start)
    cursor = 0

    segments: list[list[LocationPoint]] = []
    current: list[LocationPoint] = []
    previous: LocationPoint | None = None

    for point in route:
        placed = False

        while cursor < len(pending) and pending[cursor].start <= point.timestamp:
            event = pending[cursor]
            cursor += 1
            if event.kind not in _SEGMENTING_EVENTS:
                continue

            if event.kind == EventKind.LAP:
                if current and not placed:
                    segments.append(current)
                    current = [point]
                    placed = True
            elif event.kind == EventKind.PAUSE:
                if current:
                    if placed:
                        # The point opened this segment via an earlier event.
                        current.pop()
                        placed = False
                    if current:
                        segments.append(current)
                    current = []
            elif event.kind == EventKind.RESUME:
                if not current:
                    current = [point]
                    placed = True

        if not placed:
            if not current:
                current = [point]
            elif (
                previous is not None
                and (point.timestamp - previous.timestamp).total_seconds() > gap_threshold_s
            ):
                segments.append(current)
                current = [point]
            else:
                current.append(point)

        previous = point

    if current:
        segments.append(current)

    if not segments and route:
        segments = [list(route)]
    return segments
