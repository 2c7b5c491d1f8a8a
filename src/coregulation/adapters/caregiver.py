"""Caregiver adapter — maps a detected caregiver emotion onto an
:class:`EmotionReading` with dimensional valence / arousal."""

from __future__ import annotations

from datetime import datetime

from coregulation.adapters.base import clamp01
from coregulation.models import CaregiverEmotion, EmotionReading

# Circumplex anchors per emotion at full intensity: (valence, arousal).
_EMOTION_ANCHORS: dict[CaregiverEmotion, tuple[float, float]] = {
    CaregiverEmotion.CALM: (0.5, 0.15),
    CaregiverEmotion.REGULATED: (0.6, 0.3),
    CaregiverEmotion.STRESSED: (-0.4, 0.7),
    CaregiverEmotion.FRUSTRATED: (-0.7, 0.8),
    CaregiverEmotion.ANXIOUS: (-0.5, 0.75),
    CaregiverEmotion.OVERWHELMED: (-0.8, 0.9),
}

# Neutral point that zero intensity collapses to.
_NEUTRAL_AROUSAL = 0.3


def caregiver_reading(
    emotion: CaregiverEmotion | str,
    intensity: float,
    confidence: float = 1.0,
    timestamp: datetime | None = None,
) -> EmotionReading:
    """Build an :class:`EmotionReading` from an emotion label and intensity.

    ``intensity`` (0-1) scales the distance from a neutral point towards the
    emotion's circumplex anchor, so a faint "stressed" sits closer to neutral
    arousal than an intense one.
    """
    emotion = CaregiverEmotion(emotion)
    intensity = clamp01(intensity)
    valence_anchor, arousal_anchor = _EMOTION_ANCHORS[emotion]

    valence = valence_anchor * intensity
    arousal = _NEUTRAL_AROUSAL + (arousal_anchor - _NEUTRAL_AROUSAL) * intensity

    return EmotionReading(
        emotion=emotion,
        valence=max(-1.0, min(1.0, valence)),
        arousal=clamp01(arousal),
        timestamp=timestamp or datetime.utcnow(),
        confidence=clamp01(confidence),
    )

