"""Pydantic models for session-level reporting."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from coregulation.detection.models import CoRegulationEvent, CoRegulationPattern
from coregulation.models import ArousalBand, CaregiverEmotion

BASIS_POINTS = 10_000


def _zero_bands() -> dict[ArousalBand, int]:
    return {band: 0 for band in ArousalBand.by_severity()}


class SessionSummary(BaseModel):
    """Time-in-band distribution and co-regulation roll-up for one session.

    ``band_basis_points`` is the exact distribution (hundredths of a
    percent) and always sums to 10 000 when any reading was counted.
    """

    session_id: str | None = None
    sample_count: int = 0
    insufficient_count: int = 0
    started_at: datetime | None = None
    ended_at: datetime | None = None

    band_counts: dict[ArousalBand, int] = Field(default_factory=_zero_bands)
    band_basis_points: dict[ArousalBand, int] = Field(default_factory=_zero_bands)
    dominant_band: ArousalBand | None = None
    transitions: int = 0
    mean_score: float | None = None
    mean_confidence: float | None = None

    caregiver_sample_count: int = 0
    caregiver_dominant_emotion: CaregiverEmotion | None = None
    caregiver_dominant_share: float = 0.0

    events: list[CoRegulationEvent] = Field(default_factory=list)
    pattern: CoRegulationPattern | None = None

    @property
    def duration(self) -> timedelta:
        if self.started_at is None or self.ended_at is None:
            return timedelta(0)
        return self.ended_at - self.started_at

    @property
    def band_percentages(self) -> dict[ArousalBand, float]:
        return {band: bp / 100 for band, bp in self.band_basis_points.items()}

    def time_in_band(self, band: ArousalBand) -> float:
        """Percentage (0-100) of counted readings spent in ``band``."""
        return self.band_basis_points.get(band, 0) / 100
