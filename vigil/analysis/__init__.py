"""
Analysis module - error-budget statistics and SLO evaluation.

This module contains:
    - statistics: minimum/average and negative-fraction helpers
    - evaluator: detection rules producing per-SLO evaluation records
"""

from vigil.analysis.evaluator import SLOEvaluator, below_threshold_rule, evaluate_slo
from vigil.analysis.statistics import min_and_average, negative_fraction

__all__ = [
    # Statistics
    "min_and_average",
    "negative_fraction",
    # Evaluator
    "SLOEvaluator",
    "evaluate_slo",
    "below_threshold_rule",
]
