"""Tier B — sustain filter for the stabilised (displayed) band.

A new band only becomes stable after it has been observed continuously for
``sustain_seconds``, measured from reading timestamps.  Any different band
restarts the count; returning to the current stable band drops the
candidate.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from coregulation.models import ArousalBand

logger = structlog.get_logger(__name__)


class SustainFilter:
    """Stabilised band tracker."""

    def __init__(self, sustain_seconds: float = 20.0) -> None:
        if sustain_seconds < 0:
            raise ValueError("sustain_seconds must be >= 0")
        self.sustain_seconds = sustain_seconds
        self._stable: ArousalBand | None = None
        self._candidate: ArousalBand | None = None
        self._candidate_since: datetime | None = None
        self._last_seen: datetime | None = None

    @property
    def stable(self) -> ArousalBand | None:
        """Current stable band (``None`` until the first band has
        sustained)."""
        return self._stable

    @property
    def candidate(self) -> ArousalBand | None:
        return self._candidate

    @property
    def candidate_progress(self) -> float:
        """Fraction (0-1) of the sustain duration the candidate has served."""
        if self._candidate_since is None or self._last_seen is None:
            return 0.0
        if self.sustain_seconds == 0:
            return 1.0
        elapsed = (self._last_seen - self._candidate_since).total_seconds()
        return max(0.0, min(1.0, elapsed / self.sustain_seconds))

    def update(self, band: ArousalBand, timestamp: datetime) -> ArousalBand | None:
        """Feed one instant band.

        Returns the new stable band when it changed on this update,
        otherwise ``None``.
        """
        self._last_seen = timestamp

        if band == self._candidate and self._candidate_since is not None:
            elapsed = (timestamp - self._candidate_since).total_seconds()
            if elapsed < self.sustain_seconds:
                return None
            previous = self._stable
            self._stable = band
            self._candidate = None
            self._candidate_since = None
            if previous != band:
                logger.info(
                    "classifier.stable_band_changed",
                    previous=previous.value if previous else None,
                    stable=band.value,
                    sustained_seconds=round(elapsed, 1),
                )
                return band
            return None

        if band == self._stable:
            self._candidate = None
            self._candidate_since = None
            return None

        self._candidate = band
        self._candidate_since = timestamp
        if self.sustain_seconds == 0:
            return self.update(band, timestamp)
        logger.debug("classifier.new_candidate", candidate=band.value, needs_seconds=self.sustain_seconds)
        return None

    def reset(self) -> None:
        self._stable = None
        self._candidate = None
        self._candidate_since = None
        self._last_seen = None
