"""Exceptions raised by the core.

Only profile construction and an aborted co-regulation scan raise.  The
per-frame path (fusion, classification) degrades gracefully instead.
"""

from __future__ import annotations


class CoregulationError(Exception):
    """Base class for all errors raised by this package."""


class InvalidProfileError(CoregulationError, ValueError):
    """Band boundaries are malformed (wrong count, out of range or not
    strictly increasing)."""


class ScanCancelledError(CoregulationError, RuntimeError):
    """A co-regulation scan was aborted between windows."""

    def __init__(self, windows_scanned: int, windows_total: int) -> None:
        super().__init__(
            f"Co-regulation scan cancelled after {windows_scanned}/{windows_total} windows."
        )
        self.windows_scanned = windows_scanned
        self.windows_total = windows_total


class AlignmentError(CoregulationError):
    """Child and caregiver histories cannot be put on a common time grid
    (too few samples or no overlapping time range)."""
