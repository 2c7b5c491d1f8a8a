"""Lagged Pearson correlation over a window of the aligned grid."""

from __future__ import annotations

import numpy as np

# Fewer paired points than this give no correlation.
MIN_OVERLAP = 3

# Peak-to-peak spread below which a segment counts as flat.
FLAT_TOLERANCE = 1e-9


def pearson(x: np.ndarray, y: np.ndarray) -> float | None:
    """Pearson's r, or ``None`` when either segment is flat or too short."""
    if len(x) < MIN_OVERLAP or len(x) != len(y):
        return None
    if np.ptp(x) < FLAT_TOLERANCE or np.ptp(y) < FLAT_TOLERANCE:
        return None
    r = float(np.corrcoef(x, y)[0, 1])
    if np.isnan(r):
        return None
    return max(-1.0, min(1.0, r))


def lag_order(max_lag: int) -> list[int]:
    """Lags in search order: 0, +1, -1, +2, -2, ..."""
    order = [0]
    for k in range(1, max_lag + 1):
        order.extend((k, -k))
    return order


def best_lagged_correlation(
    caregiver: np.ndarray,
    child: np.ndarray,
    start: int,
    end: int,
    max_lag: int,
) -> tuple[int, float] | None:
    """Search lags in ``[-max_lag, max_lag]`` grid steps within ``[start, end)``.

    At lag ``k`` the pairs are ``caregiver[i]`` and ``child[i + k]`` for every
    ``i`` where both indices fall inside the window.  Returns ``(lag, r)``
    maximising ``|r|``; among equal magnitudes the smaller ``|lag|`` wins.
    ``None`` when no lag yields a correlation.
    """
    best: tuple[int, float] | None = None
    for lag in lag_order(max_lag):
        lo = max(start, start - lag)
        hi = min(end, end - lag)
        if hi - lo < MIN_OVERLAP:
            continue
        r = pearson(caregiver[lo:hi], child[lo + lag:hi + lag])
        if r is None:
            continue
        if best is None or abs(r) > abs(best[1]):
            best = (lag, r)
    return best
