"""Abstract base class for all extractor adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel

from coregulation.models import Modality, ModalitySignal

FeaturesT = TypeVar("FeaturesT", bound=BaseModel)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class FeatureAdapter(ABC, Generic[FeaturesT]):
    """Contract that every modality adapter must implement.

    An adapter turns the feature record returned by one black-box extractor
    (pose estimator, facial landmarks, voice prosody) into a normalised
    :class:`ModalitySignal`.  Extractors either return a complete record or
    nothing; ``None`` is passed straight through so that absence stays
    distinguishable from a low value.
    """

    modality: Modality

    @abstractmethod
    def arousal_value(self, features: FeaturesT) -> float:
        """Map an extractor record onto the 0-1 arousal scale."""

    @abstractmethod
    def confidence(self, features: FeaturesT) -> float:
        """Return the extractor's detection reliability (0-1)."""

    def adapt(
        self,
        features: FeaturesT | None,
        timestamp: datetime | None = None,
    ) -> ModalitySignal | None:
        """Return the normalised signal, or ``None`` when the extractor
        produced nothing for this frame."""
        if features is None:
            return None
        return ModalitySignal(
            modality=self.modality,
            value=clamp01(self.arousal_value(features)),
            confidence=clamp01(self.confidence(features)),
            timestamp=timestamp or datetime.utcnow(),
        )
