"""Instant band lookup against a profile's cut points."""

from __future__ import annotations

from coregulation.config import DEFAULT_BAND_BOUNDARIES
from coregulation.models import ArousalBand
from coregulation.profile.models import ThresholdProfile

_ORDERED_BANDS = ArousalBand.by_severity()


def instant_band(score: float, profile: ThresholdProfile | None = None) -> ArousalBand:
    """Map a fused score onto its band.

    ``score < b0`` is Shutdown, ``< b1`` Calm, ``< b2`` Elevated, ``< b3``
    Escalating, anything else Crisis.  Without a profile the default cut
    points apply.
    """
    boundaries = profile.band_boundaries if profile is not None else DEFAULT_BAND_BOUNDARIES
    for band, upper in zip(_ORDERED_BANDS, boundaries):
        if score < upper:
            return band
    return ArousalBand.CRISIS


def band_range(band: ArousalBand, profile: ThresholdProfile | None = None) -> tuple[float, float]:
    """Return the half-open ``[lo, hi)`` score range covered by ``band``."""
    boundaries = profile.band_boundaries if profile is not None else DEFAULT_BAND_BOUNDARIES
    edges = (0.0, *boundaries, 1.0)
    idx = band.severity
    return edges[idx], edges[idx + 1]
