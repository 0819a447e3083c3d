"""
Summary statistics over error-budget point sequences.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np


def min_and_average(points: Sequence[float]) -> tuple[float, float]:
    """Return the minimum and the arithmetic mean of ``points``.

    An empty sequence yields ``(0.0, 0.0)`` instead of raising. The sum is
    exactly rounded so sequences mixing large positive and negative budgets
    do not drift.

    Args:
        points: Error-budget samples.

    Returns:
        Tuple of (minimum, average).
    """
    values = np.asarray(points, dtype=float)
    if values.size == 0:
        return 0.0, 0.0
    return float(values.min()), math.fsum(values) / values.size


def negative_fraction(points: Sequence[float], threshold: float) -> bool:
    """Check whether the share of strictly negative points reaches ``threshold``.

    A threshold outside [0, 1] or an empty sequence always gives False.

    Args:
        points: Error-budget samples.
        threshold: Minimum fraction of negative samples, in [0, 1].

    Returns:
        True if the negative fraction is at least ``threshold``.
    """
    if threshold < 0 or threshold > 1:
        return False

    values = np.asarray(points, dtype=float)
    if values.size == 0:
        return False

    negative_count = int(np.count_nonzero(values < 0))
    return negative_count / values.size >= threshold
