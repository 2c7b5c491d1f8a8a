"""Shared Pydantic models used across the core."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ─────────────────────────────────────────────────────


class Modality(str, Enum):
    """Independent sensing channels observed on the child."""

    POSE = "pose"
    FACE = "face"
    VOICE = "voice"


class ArousalBand(str, Enum):
    """Five ordered arousal severity categories.

    Ordering is by :attr:`severity`, not by declaration or value; any
    transition between bands is legal.
    """

    SHUTDOWN = "shutdown"
    CALM = "calm"
    ELEVATED = "elevated"
    ESCALATING = "escalating"
    CRISIS = "crisis"

    @property
    def severity(self) -> int:
        return _BAND_SEVERITY[self]

    @property
    def display_name(self) -> str:
        return _BAND_TEXT[self][0]

    @property
    def description(self) -> str:
        return _BAND_TEXT[self][1]

    @property
    def coaching_focus(self) -> str:
        return _BAND_TEXT[self][2]

    @classmethod
    def by_severity(cls) -> list[ArousalBand]:
        return sorted(cls, key=lambda b: b.severity)


_BAND_SEVERITY = {
    ArousalBand.SHUTDOWN: 0,
    ArousalBand.CALM: 1,
    ArousalBand.ELEVATED: 2,
    ArousalBand.ESCALATING: 3,
    ArousalBand.CRISIS: 4,
}

_BAND_TEXT = {
    ArousalBand.SHUTDOWN: (
        "Shutdown", "Under-aroused, withdrawn, low energy", "Alerting and engagement",
    ),
    ArousalBand.CALM: (
        "Calm", "Regulated, calm, ready to learn", "Maintenance and prevention",
    ),
    ArousalBand.ELEVATED: (
        "Elevated", "Elevated arousal, early warning signs",
        "Early intervention and de-escalation",
    ),
    ArousalBand.ESCALATING: (
        "Escalating", "High arousal, needs immediate support",
        "Immediate calming and regulation",
    ),
    ArousalBand.CRISIS: (
        "Crisis", "Crisis state, safety is priority", "Safety and crisis management",
    ),
}


class CaregiverEmotion(str, Enum):
    """Caregiver emotional state categories reported by the caregiver
    extractor."""

    CALM = "calm"
    REGULATED = "regulated"
    STRESSED = "stressed"
    FRUSTRATED = "frustrated"
    ANXIOUS = "anxious"
    OVERWHELMED = "overwhelmed"


# ── Data transfer objects ─────────────────────────────────────


class ModalitySignal(BaseModel):
    """One normalised reading from a single modality for one frame.

    A modality that produced nothing for a frame is *absent* from the input
    collection; a present signal with ``value=0`` means "observed, no
    arousal".
    """

    model_config = ConfigDict(frozen=True)

    modality: Modality
    value: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class EmotionReading(BaseModel):
    """A caregiver emotional-state sample."""

    model_config = ConfigDict(frozen=True)

    emotion: CaregiverEmotion
    valence: float = Field(ge=-1.0, le=1.0)
    arousal: float = Field(ge=0.0, le=1.0)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    confidence: float = Field(1.0, ge=0.0, le=1.0)


class FusedReading(BaseModel):
    """Result of one classification cycle for the child.

    ``band`` is the jitter-suppressed (Tier A) band; ``instant_band`` is the
    plain range lookup of ``score``.

    When ``insufficient_signal`` is set the score is the neutral 0.5 and
    ``band`` repeats the last smoothed band.  A gap before any band has been
    smoothed has nothing to repeat and carries the neutral lookup
    (Elevated under the default boundaries); consumers should check
    ``insufficient_signal`` before acting on ``band``.
    """

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=1.0)
    band: ArousalBand
    instant_band: ArousalBand
    confidence: float = Field(ge=0.0, le=1.0)
    smoothed_confidence: float = Field(0.0, ge=0.0, le=1.0)
    contributions: dict[Modality, float] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    insufficient_signal: bool = False

    @property
    def dominant_modality(self) -> Modality | None:
        if not self.contributions:
            return None
        return max(self.contributions, key=self.contributions.__getitem__)
