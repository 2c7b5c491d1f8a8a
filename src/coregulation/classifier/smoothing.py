"""Tier A — majority-vote jitter suppression over recent readings."""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime, timedelta

from coregulation.models import ArousalBand


@dataclass(frozen=True)
class _Vote:
    band: ArousalBand
    confidence: float
    timestamp: datetime


class MajorityVoteBuffer:
    """Fixed-capacity ring buffer of instant bands.

    The smoothed band is the most frequent band in the buffer; a tie goes to
    whichever tied band was seen most recently.  With ``horizon_seconds``
    set, entries older than the newest reading minus the horizon are also
    dropped so that smoothing does not depend on the frame rate.
    """

    def __init__(self, capacity: int = 5, horizon_seconds: float | None = 10.0) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._votes: deque[_Vote] = deque(maxlen=capacity)
        self._horizon = timedelta(seconds=horizon_seconds) if horizon_seconds else None

    def __len__(self) -> int:
        return len(self._votes)

    @property
    def capacity(self) -> int:
        return self._votes.maxlen or 0

    def push(
        self, band: ArousalBand, confidence: float, timestamp: datetime,
    ) -> tuple[ArousalBand, float]:
        """Add one instant band; return ``(smoothed_band, smoothed_confidence)``."""
        self._votes.append(_Vote(band, confidence, timestamp))
        if self._horizon is not None:
            cutoff = timestamp - self._horizon
            while self._votes and self._votes[0].timestamp < cutoff:
                self._votes.popleft()
        return self.smoothed_band(), self.smoothed_confidence()

    def smoothed_band(self) -> ArousalBand | None:
        if not self._votes:
            return None
        counts = Counter(v.band for v in self._votes)
        top = max(counts.values())
        tied = {band for band, n in counts.items() if n == top}
        for vote in reversed(self._votes):
            if vote.band in tied:
                return vote.band
        return None

    def smoothed_confidence(self) -> float:
        if not self._votes:
            return 0.0
        return sum(v.confidence for v in self._votes) / len(self._votes)

    def clear(self) -> None:
        self._votes.clear()
