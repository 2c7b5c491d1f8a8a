"""Band classifier — fusion, instant lookup and two-tier smoothing.

One :class:`BandClassifier` serves one child.  It holds no identity or
personalisation of its own: the :class:`ThresholdProfile` arrives with every
call, so recalibrating mid-session is just passing a new profile.

Two smoothing tiers run side by side on the instant band:

- **Tier A** (:class:`MajorityVoteBuffer`) drives ``FusedReading.band`` and
  suppresses frame-to-frame jitter.
- **Tier B** (:class:`SustainFilter`) drives :meth:`get_stabilized`, the
  slow, display-level band that only moves after 20 s of persistence.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Iterable

import structlog

from coregulation.classifier.bands import instant_band
from coregulation.classifier.smoothing import MajorityVoteBuffer
from coregulation.classifier.sustain import SustainFilter
from coregulation.config import get_settings
from coregulation.fusion.engine import fuse
from coregulation.models import ArousalBand, FusedReading, ModalitySignal
from coregulation.profile.models import ThresholdProfile

logger = structlog.get_logger(__name__)

_DEFAULT_HISTORY = 3600


class BandClassifier:
    """Stateful per-child classifier.

    Arguments left as ``None`` fall back to :class:`Settings`; a smoothing
    horizon of ``0`` disables the wall-clock eviction.
    """

    def __init__(
        self,
        smoothing_capacity: int | None = None,
        smoothing_horizon_seconds: float | None = None,
        sustain_seconds: float | None = None,
        history_size: int = _DEFAULT_HISTORY,
    ) -> None:
        settings = get_settings()
        if smoothing_horizon_seconds is None:
            smoothing_horizon_seconds = settings.smoothing_horizon_seconds
        self._smoother = MajorityVoteBuffer(
            capacity=smoothing_capacity or settings.smoothing_capacity,
            horizon_seconds=smoothing_horizon_seconds,
        )
        self._sustain = SustainFilter(
            sustain_seconds if sustain_seconds is not None else settings.sustain_seconds
        )
        self._history: deque[FusedReading] = deque(maxlen=history_size)

    # ── Classification ────────────────────────────────────────

    def classify(
        self,
        signals: Iterable[ModalitySignal],
        profile: ThresholdProfile | None = None,
        timestamp: datetime | None = None,
    ) -> FusedReading:
        """Fuse one frame's signals and classify the result.

        Never raises.  A frame with no signals is reported with
        ``insufficient_signal=True``; it keeps the previous smoothed band and
        does not vote in either smoothing tier.  With no earlier vote (first
        frame, or right after :meth:`clear`) there is no previous band, so
        ``band`` falls back to the lookup of the neutral score.
        """
        signals = list(signals)
        result = fuse(signals, profile)
        if timestamp is None:
            timestamp = max((s.timestamp for s in signals), default=None) or datetime.utcnow()

        raw_band = instant_band(result.score, profile)

        if result.insufficient_signal:
            previous = self._smoother.smoothed_band()
            reading = FusedReading(
                score=result.score,
                band=previous or raw_band,
                instant_band=raw_band,
                confidence=0.0,
                smoothed_confidence=self._smoother.smoothed_confidence(),
                contributions={},
                timestamp=timestamp,
                insufficient_signal=True,
            )
            self._history.append(reading)
            return reading

        smoothed_band, smoothed_confidence = self._smoother.push(
            raw_band, result.confidence, timestamp,
        )
        self._sustain.update(raw_band, timestamp)

        reading = FusedReading(
            score=result.score,
            band=smoothed_band or raw_band,
            instant_band=raw_band,
            confidence=result.confidence,
            smoothed_confidence=smoothed_confidence,
            contributions=result.contributions,
            timestamp=timestamp,
        )
        self._history.append(reading)

        logger.debug(
            "classifier.reading",
            score=round(reading.score, 3),
            band=reading.band.value,
            instant_band=raw_band.value,
            confidence=round(reading.confidence, 3),
        )
        return reading

    # ── Stabilised band ───────────────────────────────────────

    def get_stabilized(self) -> ArousalBand | None:
        """Band that has persisted for the sustain duration, or ``None``
        before the first one has."""
        return self._sustain.stable

    @property
    def candidate(self) -> ArousalBand | None:
        return self._sustain.candidate

    @property
    def candidate_progress(self) -> float:
        return self._sustain.candidate_progress

    # ── History ───────────────────────────────────────────────

    def recent(self, n: int | None = None) -> list[FusedReading]:
        """Return the last ``n`` readings (all retained readings if ``None``)."""
        readings = list(self._history)
        if n is None:
            return readings
        return readings[-n:] if n > 0 else []

    def clear(self) -> None:
        """Forget all state, e.g. at the end of a session."""
        self._smoother.clear()
        self._sustain.reset()
        self._history.clear()
