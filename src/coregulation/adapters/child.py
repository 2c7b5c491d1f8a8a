"""Adapters for the three child-facing extractors (pose, face, voice).

Each extractor is consumed through a small Pydantic record describing what it
reports per processed frame.  The arousal mappings are fixed weighted sums of
those features; confidence always comes from the extractor itself and
reflects detection reliability, not semantic certainty.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from coregulation.adapters.base import FeatureAdapter
from coregulation.models import Modality

# ── Extractor contracts ──────────────────────────────────────


class PoseFeatures(BaseModel):
    """Body-movement features from the pose extractor."""

    movement_intensity: float = Field(ge=0.0, le=1.0)
    body_tension: float = Field(ge=0.0, le=1.0)
    posture_openness: float = Field(0.5, ge=0.0, le=1.0)
    keypoint_confidence: float = Field(ge=0.0, le=1.0)


class FacialFeatures(BaseModel):
    """Facial-expression features from the landmark extractor."""

    expression_intensity: float = Field(ge=0.0, le=1.0)
    eye_wideness: float = Field(0.0, ge=0.0, le=1.0)
    mouth_openness: float = Field(0.0, ge=0.0, le=1.0)
    brow_raised: bool = False
    confidence: float = Field(ge=0.0, le=1.0)


class VocalFeatures(BaseModel):
    """Voice-prosody features, already normalised to 0-1 by the extractor."""

    volume: float = Field(ge=0.0, le=1.0)
    energy: float = Field(ge=0.0, le=1.0)
    speech_rate: float = Field(0.0, ge=0.0, le=1.0)
    voice_quality: float = Field(1.0, ge=0.0, le=1.0)  # 1 = clear, 0 = harsh
    confidence: float = Field(ge=0.0, le=1.0)


# ── Adapters ─────────────────────────────────────────────────

_POSE_WEIGHTS = {"movement": 0.4, "tension": 0.4, "openness": 0.2}
_VOICE_WEIGHTS = {"volume": 0.3, "energy": 0.3, "rate": 0.2, "quality": 0.2}

_EYE_WIDE_THRESHOLD = 0.6
_MOUTH_OPEN_THRESHOLD = 0.5


class PoseAdapter(FeatureAdapter[PoseFeatures]):
    modality = Modality.POSE

    def arousal_value(self, features: PoseFeatures) -> float:
        # closed posture reads as higher arousal
        return (
            features.movement_intensity * _POSE_WEIGHTS["movement"]
            + features.body_tension * _POSE_WEIGHTS["tension"]
            + (1.0 - features.posture_openness) * _POSE_WEIGHTS["openness"]
        )

    def confidence(self, features: PoseFeatures) -> float:
        return features.keypoint_confidence


class FaceAdapter(FeatureAdapter[FacialFeatures]):
    modality = Modality.FACE

    def arousal_value(self, features: FacialFeatures) -> float:
        arousal = features.expression_intensity * 0.5
        if features.eye_wideness > _EYE_WIDE_THRESHOLD:
            arousal += 0.2
        if features.brow_raised:
            arousal += 0.2
        if features.mouth_openness > _MOUTH_OPEN_THRESHOLD:
            arousal += 0.1
        return min(arousal, 1.0)

    def confidence(self, features: FacialFeatures) -> float:
        return features.confidence


class VoiceAdapter(FeatureAdapter[VocalFeatures]):
    modality = Modality.VOICE

    def arousal_value(self, features: VocalFeatures) -> float:
        return (
            features.volume * _VOICE_WEIGHTS["volume"]
            + features.energy * _VOICE_WEIGHTS["energy"]
            + features.speech_rate * _VOICE_WEIGHTS["rate"]
            + (1.0 - features.voice_quality) * _VOICE_WEIGHTS["quality"]
        )

    def confidence(self, features: VocalFeatures) -> float:
        return features.confidence

