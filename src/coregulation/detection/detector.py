"""Co-regulation detector — sliding-window lagged cross-correlation.

Pipeline
--------
1. Align both histories on a fixed grid (:func:`align`).
2. Slide a window (default 30 s, stride 5 s) across the grid.
3. In each window find the lag (±10 s) with the strongest Pearson ``|r|``
   between caregiver arousal and child score.
4. Windows with ``|r|`` above the threshold become candidate events,
   classified by lead direction and by what happened to the child's band.
5. Overlapping candidates that agree on classification and direction are
   merged into one event.

The scan is CPU bound and may run in a worker thread; it checks an optional
:class:`threading.Event` between windows and aborts with
:class:`ScanCancelledError` once it is set.
"""

from __future__ import annotations

import statistics
import threading
from collections import Counter
from dataclasses import dataclass
from datetime import timedelta
from typing import Sequence

import structlog

from coregulation.config import get_settings
from coregulation.detection.alignment import AlignedSeries, align
from coregulation.detection.correlation import best_lagged_correlation
from coregulation.detection.models import (
    CoRegulationEvent,
    CoRegulationPattern,
    EventClassification,
    EventDirection,
)
from coregulation.errors import AlignmentError, ScanCancelledError
from coregulation.models import CaregiverEmotion, EmotionReading, FusedReading

logger = structlog.get_logger(__name__)


@dataclass
class _Candidate:
    start: int  # grid index, inclusive
    end: int  # grid index, exclusive
    lag: int  # grid steps
    correlation: float
    classification: EventClassification
    direction: EventDirection
    windows: int = 1


def _most_common_latest(items: Sequence[CaregiverEmotion]) -> CaregiverEmotion | None:
    """Most frequent item; ties go to the one seen last."""
    if not items:
        return None
    counts = Counter(items)
    top = max(counts.values())
    for item in reversed(items):
        if counts[item] == top:
            return item
    return None


class CoRegulationDetector:
    """Stateless scanner; one instance can serve any number of sessions.

    Parameters left as ``None`` come from :class:`Settings`.
    """

    def __init__(
        self,
        grid_step_seconds: float | None = None,
        window_seconds: float | None = None,
        stride_seconds: float | None = None,
        max_lag_seconds: float | None = None,
        correlation_threshold: float | None = None,
        lag_epsilon_seconds: float | None = None,
        caregiver_high_arousal: float | None = None,
    ) -> None:
        s = get_settings()
        self.grid_step_seconds = grid_step_seconds or s.grid_step_seconds
        self.window_seconds = window_seconds or s.window_seconds
        self.stride_seconds = stride_seconds or s.stride_seconds
        self.max_lag_seconds = max_lag_seconds if max_lag_seconds is not None else s.max_lag_seconds
        self.correlation_threshold = (
            correlation_threshold if correlation_threshold is not None else s.correlation_threshold
        )
        self.lag_epsilon_seconds = (
            lag_epsilon_seconds if lag_epsilon_seconds is not None else s.lag_epsilon_seconds
        )
        self.caregiver_high_arousal = (
            caregiver_high_arousal if caregiver_high_arousal is not None
            else s.caregiver_high_arousal
        )

        if self.grid_step_seconds <= 0:
            raise ValueError("grid_step_seconds must be > 0")
        if not 0 < self.stride_seconds < self.window_seconds:
            raise ValueError("stride_seconds must be > 0 and smaller than window_seconds")
        if not 0 <= self.correlation_threshold < 1:
            raise ValueError("correlation_threshold must lie in [0, 1)")

    # ── Public API ────────────────────────────────────────────

    def detect(
        self,
        child_history: Sequence[FusedReading],
        caregiver_history: Sequence[EmotionReading],
        *,
        cancel_event: threading.Event | None = None,
    ) -> list[CoRegulationEvent]:
        """Scan both histories and return merged co-regulation events,
        ordered by start time.

        Histories that cannot be aligned yield an empty list (logged).
        """
        try:
            aligned = align(child_history, caregiver_history, self.grid_step_seconds)
        except AlignmentError as exc:
            logger.warning(
                "detection.alignment_failed",
                reason=str(exc),
                child_samples=len(child_history),
                caregiver_samples=len(caregiver_history),
            )
            return []

        step = self.grid_step_seconds
        n = len(aligned)
        window = min(n, int(round(self.window_seconds / step)) + 1)
        stride = max(1, int(round(self.stride_seconds / step)))
        max_lag = int(round(self.max_lag_seconds / step))
        starts = list(range(0, n - window + 1, stride))
        if starts[-1] != n - window:
            # the last window always ends on the final grid point
            starts.append(n - window)

        candidates: list[_Candidate] = []
        for scanned, start in enumerate(starts):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("detection.scan_cancelled", scanned=scanned, total=len(starts))
                raise ScanCancelledError(scanned, len(starts))

            end = start + window
            best = best_lagged_correlation(
                aligned.caregiver_arousal, aligned.child_score, start, end, max_lag,
            )
            if best is None:
                continue
            lag, r = best
            if abs(r) <= self.correlation_threshold:
                continue
            candidates.append(self._candidate(aligned, start, end, lag, r))

        events = [self._to_event(aligned, c) for c in self._merge(candidates)]
        logger.info(
            "detection.scan_complete",
            grid_points=n,
            windows=len(starts),
            candidates=len(candidates),
            events=len(events),
        )
        return events

    # ── Classification ────────────────────────────────────────

    def direction_for(self, lag_seconds: float) -> EventDirection:
        if lag_seconds > self.lag_epsilon_seconds:
            return EventDirection.CAREGIVER_LEADS
        if lag_seconds < -self.lag_epsilon_seconds:
            return EventDirection.CHILD_LEADS
        return EventDirection.SIMULTANEOUS

    def classify(
        self,
        direction: EventDirection,
        band_delta: int,
        caregiver_mean_arousal: float,
        correlation: float,
    ) -> EventClassification:
        """Label an event from its lead direction and outcome.

        With no lead it is mirroring.  Otherwise the child's band change
        decides; an unchanged band falls back to the caregiver's mean arousal
        and the sign of ``r``.
        """
        if direction is EventDirection.SIMULTANEOUS:
            return EventClassification.MIRRORING
        if band_delta < 0:
            return EventClassification.SUPPORTIVE
        if band_delta > 0:
            return EventClassification.ADVERSE

        caregiver_calm = caregiver_mean_arousal < self.caregiver_high_arousal
        if correlation > 0:
            return EventClassification.SUPPORTIVE if caregiver_calm else EventClassification.ADVERSE
        return EventClassification.ADVERSE if caregiver_calm else EventClassification.SUPPORTIVE

    # ── Internals ─────────────────────────────────────────────

    @staticmethod
    def _band_delta(aligned: AlignedSeries, start: int, end: int) -> int:
        return int(aligned.child_severity[end - 1]) - int(aligned.child_severity[start])

    @staticmethod
    def _caregiver_mean(aligned: AlignedSeries, start: int, end: int) -> float:
        return float(aligned.caregiver_arousal[start:end].mean())

    def _candidate(
        self, aligned: AlignedSeries, start: int, end: int, lag: int, r: float,
    ) -> _Candidate:
        direction = self.direction_for(lag * self.grid_step_seconds)
        classification = self.classify(
            direction,
            self._band_delta(aligned, start, end),
            self._caregiver_mean(aligned, start, end),
            r,
        )
        return _Candidate(start, end, lag, r, classification, direction)

    @staticmethod
    def _merge(candidates: list[_Candidate]) -> list[_Candidate]:
        """Merge overlapping or touching candidates with the same
        classification and direction; the merged one keeps the strongest
        correlation and its lag."""
        merged: list[_Candidate] = []
        for cand in sorted(candidates, key=lambda c: c.start):
            prev = merged[-1] if merged else None
            if (
                prev is not None
                and cand.start <= prev.end
                and cand.classification is prev.classification
                and cand.direction is prev.direction
            ):
                prev.end = max(prev.end, cand.end)
                prev.windows += cand.windows
                if abs(cand.correlation) > abs(prev.correlation):
                    prev.correlation = cand.correlation
                    prev.lag = cand.lag
                continue
            merged.append(_Candidate(**vars(cand)))
        return merged

    def _to_event(self, aligned: AlignedSeries, c: _Candidate) -> CoRegulationEvent:
        return CoRegulationEvent(
            window_start=aligned.time_at(c.start),
            window_end=aligned.time_at(c.end - 1),
            lag=timedelta(seconds=c.lag * self.grid_step_seconds),
            correlation=c.correlation,
            classification=c.classification,
            direction=c.direction,
            child_band_delta=self._band_delta(aligned, c.start, c.end),
            caregiver_dominant_emotion=_most_common_latest(
                aligned.caregiver_emotion[c.start:c.end]
            ),
            caregiver_mean_arousal=min(1.0, max(0.0, self._caregiver_mean(aligned, c.start, c.end))),
            windows_merged=c.windows,
        )


def summarize_events(events: Sequence[CoRegulationEvent]) -> CoRegulationPattern:
    """Roll a session's events up into a :class:`CoRegulationPattern`."""
    if not events:
        return CoRegulationPattern()

    counts = Counter(e.classification for e in events)
    supportive_emotions = [
        e.caregiver_dominant_emotion
        for e in events
        if e.classification is EventClassification.SUPPORTIVE
        and e.caregiver_dominant_emotion is not None
    ]
    return CoRegulationPattern(
        total_events=len(events),
        counts=dict(counts),
        mean_abs_correlation=statistics.fmean(abs(e.correlation) for e in events),
        mean_lag_seconds=statistics.fmean(e.lag_seconds for e in events),
        most_effective_emotion=_most_common_latest(supportive_emotions),
    )


def run_coregulation_scan(
    child_history: Sequence[FusedReading],
    caregiver_history: Sequence[EmotionReading],
    *,
    cancel_event: threading.Event | None = None,
) -> list[CoRegulationEvent]:
    """One-shot scan with the configured detector parameters."""
    return CoRegulationDetector().detect(
        child_history, caregiver_history, cancel_event=cancel_event,
    )
