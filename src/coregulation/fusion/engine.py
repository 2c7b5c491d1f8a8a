"""Fusion engine — confidence-weighted combination of modality signals.

Each present modality contributes ``confidence × profile multiplier`` of
weight; weights are renormalised over the modalities actually present, so a
missing modality never drags the score towards zero.  Overall confidence
combines the weakest contributing weight with inter-modality agreement.
"""

from __future__ import annotations

import statistics
from typing import Iterable

import structlog
from pydantic import BaseModel, ConfigDict, Field

from coregulation.adapters.base import clamp01
from coregulation.models import Modality, ModalitySignal
from coregulation.profile.models import ThresholdProfile

logger = structlog.get_logger(__name__)

# Score reported when nothing was observed.
NEUTRAL_SCORE = 0.5


class FusionResult(BaseModel):
    """Output of one fusion step."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    contributions: dict[Modality, float] = Field(default_factory=dict)
    insufficient_signal: bool = False


def latest_per_modality(signals: Iterable[ModalitySignal]) -> dict[Modality, ModalitySignal]:
    """Collapse duplicate modalities, keeping the most recent signal."""
    latest: dict[Modality, ModalitySignal] = {}
    for signal in signals:
        current = latest.get(signal.modality)
        if current is None or signal.timestamp >= current.timestamp:
            latest[signal.modality] = signal
    return latest


def agreement(values: list[float]) -> float:
    """1 when all modalities report the same value, falling to 0 as their
    population spread reaches 0.5."""
    if len(values) < 2:
        return 1.0
    return max(0.0, 1.0 - 2.0 * statistics.pstdev(values))


def fuse(
    signals: Iterable[ModalitySignal],
    profile: ThresholdProfile | None = None,
) -> FusionResult:
    """Fuse zero to three modality signals into one arousal score.

    Never raises: an empty input yields the neutral score with
    ``insufficient_signal=True`` and zero confidence.
    """
    present = latest_per_modality(signals)
    if not present:
        logger.debug("fusion.insufficient_signal")
        return FusionResult(
            score=NEUTRAL_SCORE, confidence=0.0, insufficient_signal=True,
        )

    raw_weights: dict[Modality, float] = {}
    for modality, signal in present.items():
        multiplier = profile.weight_multiplier(modality) if profile is not None else 1.0
        raw_weights[modality] = max(0.0, signal.confidence * multiplier)

    values = [s.value for s in present.values()]
    total = sum(raw_weights.values())

    if total <= 0:
        # All confidences zero: fall back to the plain mean, no confidence.
        n = len(present)
        contributions = {m: s.value / n for m, s in present.items()}
        score = statistics.fmean(values)
        logger.debug("fusion.zero_weight", modalities=[m.value for m in present])
        return FusionResult(
            score=clamp01(score), confidence=0.0, contributions=contributions,
        )

    contributions = {
        m: (raw_weights[m] / total) * s.value for m, s in present.items()
    }
    score = sum(contributions.values())
    weakest = min(clamp01(w) for w in raw_weights.values())
    confidence = agreement(values) * weakest

    return FusionResult(
        score=clamp01(score),
        confidence=clamp01(confidence),
        contributions=contributions,
    )
