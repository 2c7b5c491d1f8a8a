"""Async session pipeline — wires adapters, classifier, detector and
aggregator together for one child / caregiver pair.

Frames and caregiver readings usually arrive from different tasks (camera
loop, audio loop, reporting).  Each history is guarded by its own
:class:`asyncio.Lock`; the co-regulation scan copies both histories under
their locks and then runs in a worker thread so the event loop keeps
serving frames while it works.
"""

from __future__ import annotations

import asyncio
import threading
from datetime import datetime
from typing import Iterable

import structlog

from coregulation.adapters.caregiver import caregiver_reading
from coregulation.adapters.child import FacialFeatures, PoseFeatures, VocalFeatures
from coregulation.adapters.registry import adapt_frame
from coregulation.classifier.classifier import BandClassifier
from coregulation.detection.detector import CoRegulationDetector
from coregulation.detection.models import CoRegulationEvent
from coregulation.errors import ScanCancelledError
from coregulation.logger import session_context
from coregulation.models import (
    ArousalBand,
    CaregiverEmotion,
    EmotionReading,
    FusedReading,
    ModalitySignal,
)
from coregulation.profile.models import ThresholdProfile
from coregulation.session.aggregator import aggregate
from coregulation.session.models import SessionSummary

logger = structlog.get_logger(__name__)


class SessionPipeline:
    """Per-session orchestration of the core components.

    The profile is swapped wholesale with :meth:`set_profile`; each frame is
    classified with whichever profile is current when it arrives.
    """

    def __init__(
        self,
        session_id: str,
        profile: ThresholdProfile | None = None,
        classifier: BandClassifier | None = None,
        detector: CoRegulationDetector | None = None,
    ) -> None:
        self.session_id = session_id
        self._profile = profile
        self._classifier = classifier or BandClassifier()
        self._detector = detector or CoRegulationDetector()

        self._child_lock = asyncio.Lock()
        self._caregiver_lock = asyncio.Lock()
        self._readings: list[FusedReading] = []
        self._caregiver: list[EmotionReading] = []
        self._events: list[CoRegulationEvent] = []

    # ── Profile ───────────────────────────────────────────────

    @property
    def profile(self) -> ThresholdProfile | None:
        return self._profile

    def set_profile(self, profile: ThresholdProfile | None) -> None:
        self._profile = profile
        logger.info(
            "pipeline.profile_replaced",
            session_id=self.session_id,
            source=profile.source.value if profile else None,
        )

    # ── Child ─────────────────────────────────────────────────

    async def record_frame(
        self,
        pose: PoseFeatures | None = None,
        face: FacialFeatures | None = None,
        voice: VocalFeatures | None = None,
        timestamp: datetime | None = None,
    ) -> FusedReading:
        """Adapt one frame's extractor records, classify and store it."""
        timestamp = timestamp or datetime.utcnow()
        return await self.record_signals(adapt_frame(pose, face, voice, timestamp), timestamp)

    async def record_signals(
        self,
        signals: Iterable[ModalitySignal],
        timestamp: datetime | None = None,
    ) -> FusedReading:
        """Classify already-normalised signals and store the reading."""
        async with self._child_lock:
            reading = self._classifier.classify(signals, self._profile, timestamp)
            self._readings.append(reading)
        return reading

    def get_stabilized(self) -> ArousalBand | None:
        return self._classifier.get_stabilized()

    # ── Caregiver ─────────────────────────────────────────────

    async def record_caregiver(self, reading: EmotionReading) -> EmotionReading:
        async with self._caregiver_lock:
            self._caregiver.append(reading)
        return reading

    async def record_caregiver_emotion(
        self,
        emotion: CaregiverEmotion | str,
        intensity: float = 1.0,
        confidence: float = 1.0,
        timestamp: datetime | None = None,
    ) -> EmotionReading:
        """Convert a caregiver emotion label into a reading and store it."""
        return await self.record_caregiver(
            caregiver_reading(emotion, intensity, confidence, timestamp)
        )

    # ── Co-regulation ─────────────────────────────────────────

    async def _snapshot(self) -> tuple[list[FusedReading], list[EmotionReading]]:
        async with self._child_lock:
            child = list(self._readings)
        async with self._caregiver_lock:
            caregiver = list(self._caregiver)
        return child, caregiver

    async def run_coregulation_scan(self) -> list[CoRegulationEvent]:
        """Scan the full histories recorded so far.

        Cancelling the awaiting task signals the worker thread, which stops
        at the next window boundary.
        """
        child, caregiver = await self._snapshot()
        cancel = threading.Event()
        with session_context(self.session_id):
            try:
                events = await asyncio.to_thread(
                    self._detector.detect, child, caregiver, cancel_event=cancel,
                )
            except asyncio.CancelledError:
                cancel.set()
                logger.info("pipeline.scan_cancel_requested", session_id=self.session_id)
                raise
            except ScanCancelledError:
                logger.warning("pipeline.scan_aborted", session_id=self.session_id)
                raise
        self._events = events
        return list(events)

    @property
    def events(self) -> list[CoRegulationEvent]:
        return list(self._events)

    # ── Reporting ─────────────────────────────────────────────

    async def summarize(self) -> SessionSummary:
        """Aggregate everything recorded so far, including the events from
        the last completed scan."""
        child, caregiver = await self._snapshot()
        with session_context(self.session_id):
            return aggregate(child, caregiver, self._events, session_id=self.session_id)

    async def close(self) -> SessionSummary:
        """Final summary; resets the classifier for reuse."""
        summary = await self.summarize()
        async with self._child_lock:
            self._classifier.clear()
        logger.info(
            "pipeline.session_closed",
            session_id=self.session_id,
            samples=summary.sample_count,
            events=len(summary.events),
        )
        return summary
