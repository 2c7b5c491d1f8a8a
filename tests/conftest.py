"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

import pytest

from coregulation.classifier.bands import instant_band
from coregulation.models import (
    CaregiverEmotion,
    EmotionReading,
    FusedReading,
    Modality,
    ModalitySignal,
)
from coregulation.profile.builder import build_threshold_profile
from coregulation.profile.models import ThresholdProfile, TraitCategory

T0 = datetime(2025, 3, 1, 9, 30, 0)


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def square_wave(t: int, period: int = 20, high_for: int = 14, high: float = 0.8, low: float = 0.2) -> float:
    """Asymmetric square wave; the uneven duty cycle keeps anti-phase lags
    from correlating as strongly as the true lag."""
    return high if (t % period) < high_for else low


def child_reading(score: float, t: float, confidence: float = 0.9) -> FusedReading:
    band = instant_band(score)
    return FusedReading(
        score=score,
        band=band,
        instant_band=band,
        confidence=confidence,
        contributions={Modality.POSE: score},
        timestamp=at(t),
    )


def caregiver_sample(arousal: float, t: float) -> EmotionReading:
    emotion = CaregiverEmotion.STRESSED if arousal >= 0.5 else CaregiverEmotion.CALM
    valence = -0.4 if emotion is CaregiverEmotion.STRESSED else 0.5
    return EmotionReading(emotion=emotion, valence=valence, arousal=arousal, timestamp=at(t))


@pytest.fixture
def make_signal() -> Callable[..., ModalitySignal]:
    def _make(modality: Modality, value: float, confidence: float = 1.0, t: float = 0.0) -> ModalitySignal:
        return ModalitySignal(modality=modality, value=value, confidence=confidence, timestamp=at(t))

    return _make


@pytest.fixture
def autism_profile() -> ThresholdProfile:
    return build_threshold_profile(trait=TraitCategory.AUTISM)


@pytest.fixture
def lagged_histories() -> Callable[..., tuple[list[FusedReading], list[EmotionReading]]]:
    """Build 1 Hz child / caregiver histories where the child's score
    follows the caregiver's arousal by ``child_delay`` seconds."""

    def _build(child_delay: int = 3, seconds: int = 120) -> tuple[list[FusedReading], list[EmotionReading]]:
        caregiver = [caregiver_sample(square_wave(t), t) for t in range(seconds)]
        child = []
        for t in range(seconds):
            level = square_wave(t - child_delay)
            score = 0.7 if level > 0.5 else 0.3
            child.append(child_reading(score, t))
        return child, caregiver

    return _build
