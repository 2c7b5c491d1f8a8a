"""Session aggregator — reduce classified histories to a report summary.

Readings are assumed to be sampled at a roughly steady rate, so
time-in-band is the share of readings in each band.  Readings flagged
``insufficient_signal`` are counted separately and excluded from the
distribution.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import structlog

from coregulation.detection.detector import summarize_events
from coregulation.detection.models import CoRegulationEvent
from coregulation.models import ArousalBand, CaregiverEmotion, EmotionReading, FusedReading
from coregulation.session.models import BASIS_POINTS, SessionSummary

logger = structlog.get_logger(__name__)


def largest_remainder(counts: dict[ArousalBand, int], total: int = BASIS_POINTS) -> dict[ArousalBand, int]:
    """Apportion ``total`` units across bands in proportion to ``counts``.

    Integer floors first, then the leftover units go to the largest
    fractional remainders (ties by larger count, then by severity), so the
    result sums to exactly ``total``.  All zeros when nothing was counted.
    """
    n = sum(counts.values())
    if n == 0:
        return {band: 0 for band in counts}

    shares = {band: c * total // n for band, c in counts.items()}
    leftover = total - sum(shares.values())
    by_remainder = sorted(
        counts,
        key=lambda b: (-(counts[b] * total % n), -counts[b], b.severity),
    )
    for band in by_remainder[:leftover]:
        shares[band] += 1
    return shares


def _dominant(series: pd.Series):
    """Most frequent value; ties resolve to the value observed most recently."""
    counts = series.value_counts()
    tied = set(counts[counts == counts.max()].index)
    for value in reversed(series.tolist()):
        if value in tied:
            return value
    return None


def readings_to_dataframe(readings: Sequence[FusedReading]) -> pd.DataFrame:
    """Tabulate a child history, one row per reading, ordered by time."""
    df = pd.DataFrame(
        [
            {
                "timestamp": r.timestamp,
                "score": r.score,
                "confidence": r.confidence,
                "band": r.band,
                "insufficient": r.insufficient_signal,
            }
            for r in readings
        ],
        columns=["timestamp", "score", "confidence", "band", "insufficient"],
    )
    if not df.empty:
        df["timestamp"] = pd.to_datetime(df["timestamp"])
        df = df.sort_values("timestamp", kind="stable").reset_index(drop=True)
    return df


def aggregate(
    readings: Sequence[FusedReading],
    caregiver: Sequence[EmotionReading] | None = None,
    events: Sequence[CoRegulationEvent] | None = None,
    session_id: str | None = None,
) -> SessionSummary:
    """Build a :class:`SessionSummary` from a session's histories."""
    df = readings_to_dataframe(readings)
    usable = df[~df["insufficient"]] if not df.empty else df

    counts = {band: 0 for band in ArousalBand.by_severity()}
    if not usable.empty:
        for band, n in usable["band"].value_counts().items():
            counts[ArousalBand(band)] = int(n)

    summary = SessionSummary(
        session_id=session_id,
        sample_count=int(len(usable)),
        insufficient_count=int(len(df) - len(usable)),
        band_counts=counts,
        band_basis_points=largest_remainder(counts),
    )

    if not df.empty:
        summary.started_at = df["timestamp"].iloc[0].to_pydatetime()
        summary.ended_at = df["timestamp"].iloc[-1].to_pydatetime()

    if not usable.empty:
        bands = usable["band"]
        summary.dominant_band = ArousalBand(_dominant(bands))
        summary.transitions = int((bands != bands.shift()).sum()) - 1
        summary.mean_score = round(float(usable["score"].mean()), 4)
        summary.mean_confidence = round(float(usable["confidence"].mean()), 4)

    if caregiver:
        care = pd.DataFrame(
            [{"timestamp": r.timestamp, "emotion": r.emotion} for r in caregiver]
        ).sort_values("timestamp", kind="stable")
        dominant = _dominant(care["emotion"])
        summary.caregiver_sample_count = int(len(care))
        summary.caregiver_dominant_emotion = CaregiverEmotion(dominant)
        summary.caregiver_dominant_share = round(
            float((care["emotion"] == dominant).mean()), 4
        )

    if events is not None:
        summary.events = list(events)
        summary.pattern = summarize_events(events)

    logger.info(
        "session.aggregated",
        session_id=session_id,
        samples=summary.sample_count,
        dominant_band=summary.dominant_band.value if summary.dominant_band else None,
        events=len(summary.events),
    )
    return summary
