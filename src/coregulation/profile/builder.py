"""Threshold-profile construction — trait adjustment + baseline calibration.

Two independent, composable adjustments are applied to the default band
boundaries, in this order:

1. **Trait adjustment** — computed from the defaults.  Widens the Calm band by
   scaling the Calm-exit and Elevated-exit boundaries with the mean of the
   trait's movement / vocal threshold multipliers, and records the trait's
   modality-weight multipliers.
2. **Baseline calibration** — a resting sample shifts the three boundaries
   below Crisis entry by the (clamped) distance between the individual's
   resting arousal and the default Calm centre.

The Crisis-entry boundary is never moved by either step.  All validation
happens here; the per-frame path trusts the profile it is given.
"""

from __future__ import annotations

from typing import Sequence

import structlog
from pydantic import ValidationError

from coregulation.config import get_settings
from coregulation.errors import InvalidProfileError
from coregulation.models import Modality
from coregulation.profile.models import (
    BaselineSample,
    ProfileSource,
    ThresholdProfile,
    TraitCategory,
)
from coregulation.profile.traits import adjustment_for

logger = structlog.get_logger(__name__)

# ── Constants ─────────────────────────────────────────────────

MAX_BASELINE_OFFSET = 0.15
MIN_BOUNDARY_GAP = 0.05

# Lower limits for the shifted Shutdown / Calm / Elevated exits.
_BOUNDARY_FLOORS = (0.10, 0.30, 0.50)

# Relative trust in each modality when estimating resting arousal;
# movement is the most stable indicator at rest.
CALIBRATION_WEIGHTS: dict[Modality, float] = {
    Modality.POSE: 0.6,
    Modality.VOICE: 0.25,
    Modality.FACE: 0.15,
}

_MIN_BASELINE_SECONDS = 30.0


# ── Validation ────────────────────────────────────────────────


def validate_boundaries(boundaries: Sequence[float]) -> tuple[float, float, float, float]:
    """Return ``boundaries`` as a 4-tuple or raise :class:`InvalidProfileError`."""
    values = tuple(float(b) for b in boundaries)
    if len(values) != 4:
        raise InvalidProfileError(f"Expected 4 band boundaries, got {len(values)}.")
    if any(not 0.0 <= b <= 1.0 for b in values):
        raise InvalidProfileError(f"Band boundaries must lie in [0, 1]: {values}.")
    if any(lo >= hi for lo, hi in zip(values, values[1:])):
        raise InvalidProfileError(f"Band boundaries must be strictly increasing: {values}.")
    return values  # type: ignore[return-value]


# ── Baseline ─────────────────────────────────────────────────


def weighted_baseline_average(sample: BaselineSample) -> float | None:
    """Confidence- and modality-weighted mean of a resting sample.

    Returns ``None`` when no signal carries any weight.
    """
    numerator = 0.0
    denominator = 0.0
    for signal in sample.signals:
        w = signal.confidence * CALIBRATION_WEIGHTS.get(signal.modality, 0.0)
        numerator += signal.value * w
        denominator += w
    if denominator <= 0:
        return None
    return numerator / denominator


def _baseline_offset(sample: BaselineSample, defaults: Sequence[float]) -> float | None:
    if sample.is_stale():
        logger.warning("profile.baseline_stale", recorded_at=sample.recorded_at.isoformat())
    if sample.duration_seconds < _MIN_BASELINE_SECONDS:
        logger.warning(
            "profile.baseline_short",
            duration_seconds=round(sample.duration_seconds, 1),
            n_signals=len(sample.signals),
        )

    average = weighted_baseline_average(sample)
    if average is None:
        logger.warning("profile.baseline_unusable", n_signals=len(sample.signals))
        return None

    calm_center = (defaults[0] + defaults[1]) / 2.0
    return max(-MAX_BASELINE_OFFSET, min(MAX_BASELINE_OFFSET, average - calm_center))


# ── Builder ──────────────────────────────────────────────────


def build_threshold_profile(
    default_boundaries: Sequence[float] | None = None,
    baseline_sample: BaselineSample | None = None,
    trait: TraitCategory | str | None = None,
) -> ThresholdProfile:
    """Build an immutable :class:`ThresholdProfile` for one individual.

    Parameters
    ----------
    default_boundaries
        Four strictly increasing cut points; ``None`` uses
        ``Settings.default_band_boundaries`` (0.20, 0.45, 0.65, 0.85).
    baseline_sample
        Optional resting sample for calibration.
    trait
        Optional declared trait category.

    Raises
    ------
    InvalidProfileError
        If the defaults are malformed or the adjusted boundaries cannot be
        kept strictly increasing.
    """
    defaults = validate_boundaries(
        default_boundaries if default_boundaries is not None
        else get_settings().default_band_boundaries
    )
    try:
        trait_category = TraitCategory(trait) if trait is not None else None
    except ValueError as exc:
        raise InvalidProfileError(f"Unknown trait category: {trait!r}.") from exc
    adjustment = adjustment_for(trait_category)
    crisis = defaults[3]

    shutdown_exit, calm_exit, elevated_exit = defaults[0], defaults[1], defaults[2]

    # 1. Trait widening (never narrows)
    widening = max(1.0, adjustment.calm_widening)
    if widening > 1.0:
        elevated_exit = max(defaults[2], min(defaults[2] * widening, crisis - MIN_BOUNDARY_GAP))
        calm_exit = max(defaults[1], min(defaults[1] * widening, elevated_exit - MIN_BOUNDARY_GAP))

    # 2. Baseline offset on top
    offset = 0.0
    calibrated = False
    if baseline_sample is not None and baseline_sample.signals:
        computed = _baseline_offset(baseline_sample, defaults)
        if computed is not None:
            offset = computed
            calibrated = True
            floors = [min(f, d) for f, d in zip(_BOUNDARY_FLOORS, defaults)]
            elevated_exit = max(elevated_exit + offset, floors[2])
            calm_exit = max(calm_exit + offset, floors[1])
            shutdown_exit = max(shutdown_exit + offset, floors[0])

            # keep strict ordering below the untouched Crisis entry
            elevated_exit = min(elevated_exit, crisis - MIN_BOUNDARY_GAP)
            calm_exit = min(calm_exit, elevated_exit - MIN_BOUNDARY_GAP)
            shutdown_exit = min(shutdown_exit, calm_exit - MIN_BOUNDARY_GAP)

    if calibrated:
        source = ProfileSource.BASELINE_CALIBRATED
    elif not adjustment.is_neutral:
        source = ProfileSource.DIAGNOSIS_ADJUSTED
    else:
        source = ProfileSource.DEFAULT

    try:
        profile = ThresholdProfile(
            band_boundaries=(shutdown_exit, calm_exit, elevated_exit, crisis),
            modality_weight_multipliers=dict(adjustment.modality_weight_multipliers),
            source=source,
            trait=trait_category,
            baseline_offset=offset,
            calm_widening=widening,
        )
    except ValidationError as exc:
        raise InvalidProfileError(str(exc)) from exc

    logger.info(
        "profile.built",
        source=source.value,
        trait=trait_category.value if trait_category else None,
        boundaries=[round(b, 3) for b in profile.band_boundaries],
        baseline_offset=round(offset, 3),
        calm_widening=round(widening, 3),
        summary=profile.describe(),
    )
    return profile
