"""Pydantic models for parent–child co-regulation detection."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from coregulation.models import CaregiverEmotion

# ── Enums ─────────────────────────────────────────────────────


class EventClassification(str, Enum):
    SUPPORTIVE = "supportive"  # caregiver state precedes child settling
    ADVERSE = "adverse"  # caregiver state precedes child escalating
    MIRRORING = "mirroring"  # both move together with no clear lead


class EventDirection(str, Enum):
    CAREGIVER_LEADS = "caregiver_leads"
    CHILD_LEADS = "child_leads"
    SIMULTANEOUS = "simultaneous"


# ── Events ───────────────────────────────────────────────────


class CoRegulationEvent(BaseModel):
    """A time window in which caregiver arousal and child arousal are
    strongly correlated at some lag.

    ``lag`` is positive when the child's series follows the caregiver's.
    ``child_band_delta`` is the child's band severity at the window end minus
    that at the window start.
    """

    model_config = ConfigDict(frozen=True)

    window_start: datetime
    window_end: datetime
    lag: timedelta
    correlation: float = Field(ge=-1.0, le=1.0)
    classification: EventClassification
    direction: EventDirection
    child_band_delta: int
    caregiver_dominant_emotion: CaregiverEmotion | None = None
    caregiver_mean_arousal: float = Field(0.0, ge=0.0, le=1.0)
    windows_merged: int = Field(1, ge=1)

    @property
    def duration(self) -> timedelta:
        return self.window_end - self.window_start

    @property
    def lag_seconds(self) -> float:
        return self.lag.total_seconds()


class CoRegulationPattern(BaseModel):
    """Summary of the co-regulation events found in one session."""

    total_events: int = 0
    counts: dict[EventClassification, int] = Field(default_factory=dict)
    mean_abs_correlation: float = 0.0
    mean_lag_seconds: float = 0.0
    most_effective_emotion: CaregiverEmotion | None = None

    @property
    def supportive_rate(self) -> float:
        if self.total_events == 0:
            return 0.0
        return self.counts.get(EventClassification.SUPPORTIVE, 0) / self.total_events

    def describe(self) -> str:
        pct = int(self.supportive_rate * 100)
        if self.most_effective_emotion is not None:
            return f"{pct}% supportive when caregiver is {self.most_effective_emotion.value}"
        return f"{pct}% supportive"
