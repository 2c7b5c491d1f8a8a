"""Per-individual personalisation of band boundaries and modality weights."""

from coregulation.profile.builder import build_threshold_profile, validate_boundaries
from coregulation.profile.models import (
    DEFAULT_PROFILE,
    BaselineSample,
    ProfileSource,
    ThresholdProfile,
    TraitAdjustment,
    TraitCategory,
)
from coregulation.profile.traits import TRAIT_ADJUSTMENTS, adjustment_for

__all__ = [
    "DEFAULT_PROFILE",
    "TRAIT_ADJUSTMENTS",
    "BaselineSample",
    "ProfileSource",
    "ThresholdProfile",
    "TraitAdjustment",
    "TraitCategory",
    "adjustment_for",
    "build_threshold_profile",
    "validate_boundaries",
]
