"""Parent–child co-regulation detection."""

from coregulation.detection.alignment import AlignedSeries, align
from coregulation.detection.correlation import best_lagged_correlation, pearson
from coregulation.detection.detector import (
    CoRegulationDetector,
    run_coregulation_scan,
    summarize_events,
)
from coregulation.detection.models import (
    CoRegulationEvent,
    CoRegulationPattern,
    EventClassification,
    EventDirection,
)

__all__ = [
    "AlignedSeries",
    "CoRegulationDetector",
    "CoRegulationEvent",
    "CoRegulationPattern",
    "EventClassification",
    "EventDirection",
    "align",
    "best_lagged_correlation",
    "pearson",
    "run_coregulation_scan",
    "summarize_events",
]
