"""Session-level aggregation and reporting."""

from coregulation.session.aggregator import aggregate, largest_remainder, readings_to_dataframe
from coregulation.session.models import SessionSummary

__all__ = ["SessionSummary", "aggregate", "largest_remainder", "readings_to_dataframe"]
