"""Sample Index — uniform, time-queryable access to a workout's sample streams.

Each stream is kept sorted with a parallel numpy array of epoch seconds so
window and nearest-neighbour queries are binary searches.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np

from activity_export.models.enums import ALL_STREAM_KINDS, SAMPLE_TOLERANCE_S, StreamKind
from activity_export.models.workout import TimedSample, Workout

if TYPE_CHECKING:
    from health_source.base import HealthDataSource

logger = logging.getLogger(__name__)


class SampleStream:
    """One stream's samples, ordered by timestamp ascending."""

    def __init__(self, kind: StreamKind, samples: Iterable[TimedSample] = ()) -> None:
        self.kind = kind
        self._samples: tuple[TimedSample, ...] = tuple(
            sorted(samples, key=lambda s: s.timestamp)
        )
        self._times = np.array(
            [s.timestamp.timestamp() for s in self._samples], dtype=np.float64
        )

    @classmethod
    def merge(cls, kind: StreamKind, *streams: SampleStream) -> SampleStream:
        """Combine several streams into one ordered stream tagged *kind*."""
        merged: list[TimedSample] = []
        for stream in streams:
            merged.extend(stream.samples)
        return cls(kind, merged)

    @property
    def samples(self) -> tuple[TimedSample, ...]:
        return self._samples

    def __len__(self) -> int:
        return len(self._samples)

    def __bool__(self) -> bool:
        return bool(self._samples)

    def __iter__(self):
        return iter(self._samples)

    def values(self) -> list[float]:
        return [s.value for s in self._samples]

    def window(self, start: datetime, end: datetime) -> list[TimedSample]:
        """Samples with start <= timestamp <= end, in order."""
        lo = int(np.searchsorted(self._times, start.timestamp(), side="left"))
        hi = int(np.searchsorted(self._times, end.timestamp(), side="right"))
        return list(self._samples[lo:hi])

    def nearest(
        self, at: datetime, tolerance_s: float = SAMPLE_TOLERANCE_S
    ) -> TimedSample | None:
        """Return the sample closest in time to *at*, if within tolerance.

        The tolerance is inclusive. When two samples are exactly equally far
        from *at*, the earlier one is returned.
        """
        if not self._samples:
            return None

        t = at.timestamp()
        j = int(np.searchsorted(self._times, t, side="left"))

        best: int | None = None
        best_diff = float("inf")
        # j-1 is checked first so it wins an exact tie.
        for idx in (j - 1, j):
            if 0 <= idx < len(self._samples):
                diff = abs(self._times[idx] - t)
                if diff < best_diff:
                    best, best_diff = idx, diff

        if best is None or best_diff > tolerance_s:
            return None
        return self._samples[best]

    def first(self) -> TimedSample | None:
        return self._samples[0] if self._samples else None

    def peak(self) -> TimedSample | None:
        """Sample with the highest value; the earliest wins on equal values."""
        if not self._samples:
            return None
        return max(self._samples, key=lambda s: s.value)

    def total(self) -> float:
        return float(sum(s.value for s in self._samples))

    def mean(self) -> float | None:
        if not self._samples:
            return None
        return self.total() / len(self._samples)


class SampleIndex:
    """All sample streams of one workout, keyed by :class:`StreamKind`.

    Kinds that were never loaded read as empty streams.
    """

    def __init__(self, streams: dict[StreamKind, SampleStream] | None = None) -> None:
        self._streams: dict[StreamKind, SampleStream] = dict(streams or {})

    @classmethod
    def from_samples(cls, samples: Iterable[TimedSample]) -> SampleIndex:
        """Build an index from a flat iterable, grouping by each sample's kind."""
        grouped: dict[StreamKind, list[TimedSample]] = {}
        for sample in samples:
            grouped.setdefault(sample.kind, []).append(sample)
        return cls({kind: SampleStream(kind, items) for kind, items in grouped.items()})

    def stream(self, kind: StreamKind) -> SampleStream:
        found = self._streams.get(kind)
        if found is None:
            found = SampleStream(kind)
            self._streams[kind] = found
        return found

    def window(self, kind: StreamKind, start: datetime, end: datetime) -> list[TimedSample]:
        return self.stream(kind).window(start, end)

    def merged(self, kind: StreamKind, *kinds: StreamKind) -> SampleStream:
        """One ordered stream combining *kinds*, tagged as *kind*."""
        return SampleStream.merge(kind, *(self.stream(k) for k in kinds))

    def non_empty_kinds(self) -> list[StreamKind]:
        return [k for k, s in self._streams.items() if s]

    def is_empty(self) -> bool:
        return not self.non_empty_kinds()


async def build_sample_index(
    source: HealthDataSource,
    workout: Workout,
    kinds: Iterable[StreamKind] = ALL_STREAM_KINDS,
) -> SampleIndex:
    """Fetch every stream kind for *workout* concurrently and index the results.

    Each kind resolves independently: a failed fetch is logged and treated
    as an empty stream, it never cancels the other fetches. Samples outside
    the workout's [start, end] are dropped.
    """
    kinds = tuple(kinds)

    async def _fetch(kind: StreamKind) -> SampleStream:
        try:
            samples = await source.fetch_samples(workout, kind, workout.start, workout.end)
        except Exception as exc:
            logger.warning(
                "Failed to fetch %s samples for workout %s: %s",
                kind.name,
                workout.workout_id,
                exc,
            )
            samples = []
        in_range = [s for s in samples or [] if workout.start <= s.timestamp <= workout.end]
        return SampleStream(kind, in_range)

    streams = await asyncio.gather(*(_fetch(kind) for kind in kinds))
    index = SampleIndex(dict(zip(kinds, streams)))
    logger.debug(
        "Indexed %d/%d non-empty streams for workout %s",
        len(index.non_empty_kinds()),
        len(kinds),
        workout.workout_id,
    )
    return index
