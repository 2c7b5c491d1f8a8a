"""Pydantic models for per-individual threshold personalisation.

These models represent:
- The immutable :class:`ThresholdProfile` consumed by fusion and
  classification
- Declared trait categories and the adjustments they imply
- A resting baseline sample recorded during calibration
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from coregulation.config import DEFAULT_BAND_BOUNDARIES
from coregulation.models import Modality, ModalitySignal

# ── Enums ─────────────────────────────────────────────────────


class ProfileSource(str, Enum):
    """How a profile's boundaries were derived."""

    DEFAULT = "default"
    BASELINE_CALIBRATED = "baseline_calibrated"
    DIAGNOSIS_ADJUSTED = "diagnosis_adjusted"


class TraitCategory(str, Enum):
    """Declared neurodevelopmental trait category for an individual.

    Closed set: the adjustment table in :mod:`coregulation.profile.traits`
    must carry an entry for every member.
    """

    NONE = "none"
    AUTISM = "autism"
    ADHD = "adhd"
    SENSORY_PROCESSING = "sensory_processing"
    MULTIPLE = "multiple"
    OTHER = "other"
    PREFER_NOT_TO_SPECIFY = "prefer_not_to_specify"


# ── Trait adjustment ─────────────────────────────────────────


class TraitAdjustment(BaseModel):
    """Weight and threshold adjustments implied by a trait category.

    Threshold multipliers ``> 1`` mean more movement / vocal activity is
    needed before leaving the Calm band.  They never narrow it.
    """

    model_config = ConfigDict(frozen=True)

    modality_weight_multipliers: dict[Modality, float] = Field(default_factory=dict)
    movement_threshold_multiplier: float = Field(1.0, ge=1.0)
    vocal_threshold_multiplier: float = Field(1.0, ge=1.0)

    @property
    def calm_widening(self) -> float:
        return (self.movement_threshold_multiplier + self.vocal_threshold_multiplier) / 2.0

    @property
    def is_neutral(self) -> bool:
        return (
            self.calm_widening == 1.0
            and all(m == 1.0 for m in self.modality_weight_multipliers.values())
        )


# ── Baseline sample ──────────────────────────────────────────


STALE_AFTER = timedelta(days=30)


class BaselineSample(BaseModel):
    """Modality signals recorded while the individual is known to be at rest
    (nominally ~45 s)."""

    signals: list[ModalitySignal] = Field(default_factory=list)
    recorded_at: datetime = Field(default_factory=datetime.utcnow)
    notes: str = ""

    @property
    def duration_seconds(self) -> float:
        if len(self.signals) < 2:
            return 0.0
        stamps = [s.timestamp for s in self.signals]
        return (max(stamps) - min(stamps)).total_seconds()

    def is_stale(self, now: datetime | None = None) -> bool:
        """True when the calibration is older than 30 days."""
        now = now or datetime.utcnow()
        return now - self.recorded_at > STALE_AFTER


# ── Threshold profile ────────────────────────────────────────


class ThresholdProfile(BaseModel):
    """Calibrated band boundaries and modality-weight multipliers for one
    individual.

    Immutable once built; recalibration replaces the whole profile.  The four
    cut points split ``[0, 1]`` into Shutdown / Calm / Elevated / Escalating /
    Crisis.
    """

    model_config = ConfigDict(frozen=True)

    band_boundaries: tuple[float, float, float, float] = DEFAULT_BAND_BOUNDARIES
    modality_weight_multipliers: dict[Modality, float] = Field(default_factory=dict)
    source: ProfileSource = ProfileSource.DEFAULT

    trait: TraitCategory | None = None
    baseline_offset: float = 0.0
    calm_widening: float = 1.0
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def _boundaries_strictly_increasing(self) -> ThresholdProfile:
        b = self.band_boundaries
        if any(not 0.0 <= x <= 1.0 for x in b):
            raise ValueError(f"band boundaries must lie in [0, 1]: {b}")
        if any(lo >= hi for lo, hi in zip(b, b[1:])):
            raise ValueError(f"band boundaries must be strictly increasing: {b}")
        return self

    @property
    def crisis_entry(self) -> float:
        return self.band_boundaries[-1]

    def weight_multiplier(self, modality: Modality) -> float:
        return self.modality_weight_multipliers.get(modality, 1.0)

    def describe(self) -> str:
        """Human-readable summary of the cut points."""
        s, c, e, x = self.band_boundaries
        return (
            f"Shutdown < {s:.2f} <= Calm < {c:.2f} <= Elevated < {e:.2f} "
            f"<= Escalating < {x:.2f} <= Crisis ({self.source.value})"
        )


DEFAULT_PROFILE = ThresholdProfile()
