"""Put the child and caregiver histories on one fixed-step time grid.

The two histories are sampled independently and at different rates.  Both
continuous series (child score, caregiver arousal) are linearly interpolated
onto a common grid spanning only the range where both exist; the child's
band and the caregiver's emotion label are categorical, so each grid point
takes the most recent sample at or before it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence

import numpy as np

from coregulation.errors import AlignmentError
from coregulation.models import CaregiverEmotion, EmotionReading, FusedReading


@dataclass(frozen=True)
class AlignedSeries:
    """Both histories resampled onto ``origin + offsets`` seconds."""

    origin: datetime
    step_seconds: float
    offsets: np.ndarray
    child_score: np.ndarray
    child_severity: np.ndarray
    caregiver_arousal: np.ndarray
    caregiver_emotion: list[CaregiverEmotion]

    def __len__(self) -> int:
        return len(self.offsets)

    def time_at(self, index: int) -> datetime:
        return self.origin + timedelta(seconds=float(self.offsets[index]))


def _dedupe_sorted(stamps: list[datetime], items: list) -> tuple[list[datetime], list]:
    """Sort by timestamp; on equal timestamps keep the last item given."""
    latest: dict[datetime, object] = {}
    for ts, item in zip(stamps, items):
        latest[ts] = item
    ordered = sorted(latest)
    return ordered, [latest[ts] for ts in ordered]


def _seconds_since(origin: datetime, stamps: list[datetime]) -> np.ndarray:
    return np.array([(ts - origin).total_seconds() for ts in stamps], dtype=float)


def _previous_index(sample_times: np.ndarray, grid: np.ndarray) -> np.ndarray:
    idx = np.searchsorted(sample_times, grid, side="right") - 1
    return np.clip(idx, 0, len(sample_times) - 1)


def align(
    child_history: Sequence[FusedReading],
    caregiver_history: Sequence[EmotionReading],
    step_seconds: float = 1.0,
) -> AlignedSeries:
    """Resample both histories onto a common grid.

    Child readings flagged ``insufficient_signal`` are ignored.

    Raises
    ------
    AlignmentError
        If either series has fewer than two usable samples or the two time
        ranges do not overlap by at least one grid step.
    """
    if step_seconds <= 0:
        raise ValueError("step_seconds must be > 0")

    child = [r for r in child_history if not r.insufficient_signal]
    if len(child) < 2:
        raise AlignmentError(f"child history has {len(child)} usable samples, need 2")
    if len(caregiver_history) < 2:
        raise AlignmentError(
            f"caregiver history has {len(caregiver_history)} samples, need 2"
        )

    child_ts, child = _dedupe_sorted([r.timestamp for r in child], child)
    care_ts, caregiver = _dedupe_sorted(
        [r.timestamp for r in caregiver_history], list(caregiver_history)
    )
    if len(child) < 2 or len(caregiver) < 2:
        raise AlignmentError("fewer than two distinct timestamps in a series")

    start = max(child_ts[0], care_ts[0])
    end = min(child_ts[-1], care_ts[-1])
    span = (end - start).total_seconds()
    if span < step_seconds:
        raise AlignmentError(
            f"histories overlap for {max(span, 0.0):.1f}s, need at least {step_seconds}s"
        )

    n_points = int(np.floor(span / step_seconds + 1e-9)) + 1
    grid = np.arange(n_points, dtype=float) * step_seconds

    child_t = _seconds_since(start, child_ts)
    care_t = _seconds_since(start, care_ts)

    child_score = np.interp(grid, child_t, [r.score for r in child])
    caregiver_arousal = np.interp(grid, care_t, [r.arousal for r in caregiver])

    child_idx = _previous_index(child_t, grid)
    severities = np.array([r.band.severity for r in child], dtype=int)
    care_idx = _previous_index(care_t, grid)

    return AlignedSeries(
        origin=start,
        step_seconds=step_seconds,
        offsets=grid,
        child_score=child_score,
        child_severity=severities[child_idx],
        caregiver_arousal=caregiver_arousal,
        caregiver_emotion=[caregiver[i].emotion for i in care_idx],
    )
