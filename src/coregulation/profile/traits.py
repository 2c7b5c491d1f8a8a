"""Trait-category lookup table.

Keyed by the closed :class:`TraitCategory` enum.  Movement / vocal threshold
multipliers widen the Calm band so that habitual self-soothing movement or
vocalisation does not, on its own, escalate the classification; weight
multipliers down-weight modalities that are less informative for the trait
(e.g. flat or masked affect lowers the face weight).
"""

from __future__ import annotations

from coregulation.models import Modality
from coregulation.profile.models import TraitAdjustment, TraitCategory

_NEUTRAL = TraitAdjustment()

TRAIT_ADJUSTMENTS: dict[TraitCategory, TraitAdjustment] = {
    TraitCategory.NONE: _NEUTRAL,
    TraitCategory.AUTISM: TraitAdjustment(
        modality_weight_multipliers={
            Modality.POSE: 0.8,
            Modality.FACE: 0.6,  # masked / flat affect common
            Modality.VOICE: 1.0,
        },
        movement_threshold_multiplier=1.5,
        vocal_threshold_multiplier=1.3,
    ),
    TraitCategory.ADHD: TraitAdjustment(
        modality_weight_multipliers={
            Modality.POSE: 0.7,  # fidgeting is baseline behaviour
            Modality.FACE: 1.0,
            Modality.VOICE: 0.9,
        },
        movement_threshold_multiplier=2.0,
        vocal_threshold_multiplier=1.5,
    ),
    TraitCategory.SENSORY_PROCESSING: TraitAdjustment(
        modality_weight_multipliers={
            Modality.POSE: 0.85,
            Modality.FACE: 0.9,
            Modality.VOICE: 1.0,
        },
        movement_threshold_multiplier=1.3,
        vocal_threshold_multiplier=1.2,
    ),
    TraitCategory.MULTIPLE: _NEUTRAL,
    TraitCategory.OTHER: _NEUTRAL,
    TraitCategory.PREFER_NOT_TO_SPECIFY: _NEUTRAL,
}


def adjustment_for(trait: TraitCategory | None) -> TraitAdjustment:
    """Return the adjustment for ``trait`` (neutral when ``None``)."""
    if trait is None:
        return _NEUTRAL
    return TRAIT_ADJUSTMENTS[trait]
