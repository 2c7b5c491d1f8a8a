"""Tests for the extractor adapters and the adapter registry."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from conftest import at
from coregulation.adapters import (
    FaceAdapter,
    FacialFeatures,
    PoseAdapter,
    PoseFeatures,
    VocalFeatures,
    VoiceAdapter,
    adapt_frame,
    available_modalities,
    caregiver_reading,
    get_adapter,
    register_adapter,
    unregister_adapter,
)
from coregulation.models import CaregiverEmotion, Modality


# ── Child adapters ───────────────────────────────────────────


class TestPoseAdapter:
    def test_weighted_sum(self):
        features = PoseFeatures(
            movement_intensity=0.5, body_tension=0.5, posture_openness=0.0, keypoint_confidence=0.8,
        )
        signal = PoseAdapter().adapt(features, at(0))
        assert signal.modality == Modality.POSE
        assert signal.value == pytest.approx(0.2 + 0.2 + 0.2)
        assert signal.confidence == pytest.approx(0.8)
        assert signal.timestamp == at(0)

    def test_open_still_posture_is_zero(self):
        features = PoseFeatures(
            movement_intensity=0.0, body_tension=0.0, posture_openness=1.0, keypoint_confidence=1.0,
        )
        assert PoseAdapter().adapt(features).value == 0.0

    def test_absent_stays_absent(self):
        assert PoseAdapter().adapt(None) is None


class TestFaceAdapter:
    def test_intensity_only(self):
        features = FacialFeatures(expression_intensity=0.6, confidence=0.7)
        assert FaceAdapter().adapt(features).value == pytest.approx(0.3)

    def test_cues_add_up_and_cap(self):
        features = FacialFeatures(
            expression_intensity=1.0,
            eye_wideness=0.9,
            mouth_openness=0.9,
            brow_raised=True,
            confidence=0.9,
        )
        assert FaceAdapter().adapt(features).value == 1.0

    def test_wide_eyes_threshold_is_exclusive(self):
        features = FacialFeatures(expression_intensity=0.0, eye_wideness=0.6, confidence=1.0)
        assert FaceAdapter().adapt(features).value == 0.0


class TestVoiceAdapter:
    def test_harsh_loud_voice(self):
        features = VocalFeatures(
            volume=1.0, energy=1.0, speech_rate=1.0, voice_quality=0.0, confidence=0.6,
        )
        signal = VoiceAdapter().adapt(features)
        assert signal.value == pytest.approx(1.0)
        assert signal.confidence == pytest.approx(0.6)

    def test_quiet_clear_voice(self):
        features = VocalFeatures(volume=0.1, energy=0.1, confidence=0.9)
        assert VoiceAdapter().adapt(features).value == pytest.approx(0.06)


class TestAdaptFrame:
    def test_only_present_modalities(self):
        signals = adapt_frame(
            pose=PoseFeatures(movement_intensity=0.2, body_tension=0.2, keypoint_confidence=0.9),
            voice=VocalFeatures(volume=0.2, energy=0.2, confidence=0.5),
            timestamp=at(4),
        )
        assert [s.modality for s in signals] == [Modality.POSE, Modality.VOICE]
        assert all(s.timestamp == at(4) for s in signals)

    def test_empty_frame(self):
        assert adapt_frame() == []


# ── Caregiver ────────────────────────────────────────────────


class TestCaregiverReading:
    def test_full_intensity_hits_anchor(self):
        reading = caregiver_reading(CaregiverEmotion.OVERWHELMED, 1.0, timestamp=at(0))
        assert reading.valence == pytest.approx(-0.8)
        assert reading.arousal == pytest.approx(0.9)

    def test_zero_intensity_is_neutral(self):
        reading = caregiver_reading("frustrated", 0.0)
        assert reading.emotion == CaregiverEmotion.FRUSTRATED
        assert reading.valence == 0.0
        assert reading.arousal == pytest.approx(0.3)

    def test_calm_lowers_arousal(self):
        assert caregiver_reading(CaregiverEmotion.CALM, 1.0).arousal < 0.3

    def test_intensity_is_clamped(self):
        reading = caregiver_reading(CaregiverEmotion.STRESSED, 3.0, confidence=2.0)
        assert reading.arousal == pytest.approx(0.7)
        assert reading.confidence == 1.0

    def test_unknown_emotion(self):
        with pytest.raises(ValueError):
            caregiver_reading("elated", 0.5)


# ── Registry ─────────────────────────────────────────────────


class LoudPose(PoseAdapter):
    def arousal_value(self, features):
        return 1.0


@pytest.fixture
def restore_adapters():
    saved = {m: get_adapter(m) for m in available_modalities()}
    yield
    for modality in list(available_modalities()):
        unregister_adapter(modality)
    for adapter in saved.values():
        register_adapter(adapter)


class TestAdapterRegistry:
    def test_builtin_modalities(self):
        assert available_modalities() == [Modality.POSE, Modality.FACE, Modality.VOICE]

    def test_get_adapter(self):
        assert isinstance(get_adapter(Modality.FACE), FaceAdapter)

    def test_register_returns_previous(self, restore_adapters):
        previous = register_adapter(LoudPose())
        assert isinstance(previous, PoseAdapter)
        assert isinstance(get_adapter(Modality.POSE), LoudPose)

    def test_registered_adapter_drives_adapt_frame(self, restore_adapters):
        still = PoseFeatures(movement_intensity=0, body_tension=0, posture_openness=1, keypoint_confidence=1)
        assert adapt_frame(pose=still, timestamp=at(0))[0].value == 0.0

        register_adapter(LoudPose())
        [signal] = adapt_frame(pose=still, timestamp=at(0))
        assert signal.modality == Modality.POSE
        assert signal.value == 1.0

    def test_missing_adapter(self, restore_adapters):
        unregister_adapter(Modality.VOICE)
        assert Modality.VOICE not in available_modalities()
        with pytest.raises(ValueError, match="No adapter registered"):
            get_adapter(Modality.VOICE)

    def test_unregistered_modality_is_dropped_from_frame(self, restore_adapters):
        unregister_adapter(Modality.VOICE)
        with capture_logs() as logs:
            signals = adapt_frame(
                pose=PoseFeatures(movement_intensity=0.2, body_tension=0.2, keypoint_confidence=0.9),
                voice=VocalFeatures(volume=0.5, energy=0.5, confidence=0.9),
                timestamp=at(1),
            )
        assert [s.modality for s in signals] == [Modality.POSE]
        assert any(e["event"] == "adapters.unregistered_modality" for e in logs)
