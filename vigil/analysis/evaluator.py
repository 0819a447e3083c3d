"""
Error-budget evaluation of a single SLO.

Two independent rules decide whether an SLO is a candidate for revisiting
its goal:

Below-threshold rule:
    NEVER_BELOW (default) - the remaining budget stayed at or above the
    threshold for every sample, so the objective is easily met and could
    be tightened.
    DIPPED_BELOW - at least one sample fell under the threshold.

Sustained-negative rule:
    At least half of the samples are negative, i.e. the objective was in
    breach for most of the window.

The flag is the OR of both rules. Minimum and average budget are reported
for every evaluated SLO whatever the flag says.
"""

from __future__ import annotations

from collections.abc import Sequence

from vigil.analysis.statistics import min_and_average, negative_fraction
from vigil.core.config import EvaluationConfig
from vigil.core.constants import (
    DEFAULT_ERROR_BUDGET_THRESHOLD,
    DEFAULT_NEGATIVE_THRESHOLD,
    BelowThresholdMode,
)
from vigil.core.types import SLO, EvaluationRecord, PointSequence


def below_threshold_rule(
    points: Sequence[float],
    threshold: float,
    mode: BelowThresholdMode = BelowThresholdMode.NEVER_BELOW,
) -> bool:
    """Apply the below-threshold rule under the given reading."""
    if mode is BelowThresholdMode.DIPPED_BELOW:
        return any(point < threshold for point in points)
    return all(point >= threshold for point in points)


def evaluate_slo(
    slo: SLO,
    sequence: PointSequence,
    error_budget_threshold: float,
    *,
    below_threshold_mode: BelowThresholdMode = BelowThresholdMode.NEVER_BELOW,
    negative_threshold: float = DEFAULT_NEGATIVE_THRESHOLD,
) -> EvaluationRecord:
    """Evaluate one SLO's error-budget samples.

    This is a pure function: the same inputs always give an equal record.

    Args:
        slo: The SLO being evaluated.
        sequence: Samples and query descriptors fetched for ``slo``.
        error_budget_threshold: Budget fraction used by the below-threshold rule.
        below_threshold_mode: Reading of the below-threshold rule.
        negative_threshold: Share of negative samples that flags the SLO.

    Returns:
        The evaluation record for ``slo``.
    """
    points = sequence.points

    flag_below_threshold = below_threshold_rule(points, error_budget_threshold, below_threshold_mode)
    flag_negative = negative_fraction(points, negative_threshold)

    min_budget, avg_budget = min_and_average(points)

    return EvaluationRecord(
        flag=flag_below_threshold or flag_negative,
        goal=slo.goal,
        good_query=sequence.good_query,
        total_query=sequence.total_query,
        min_budget=min_budget,
        avg_budget=avg_budget,
    )


class SLOEvaluator:
    """Evaluates SLOs against a fixed rule configuration.

    Example:
        >>> evaluator = SLOEvaluator(error_budget_threshold=0.9)
        >>> record = evaluator.evaluate(slo, sequence)
    """

    def __init__(
        self,
        error_budget_threshold: float = DEFAULT_ERROR_BUDGET_THRESHOLD,
        *,
        below_threshold_mode: BelowThresholdMode = BelowThresholdMode.NEVER_BELOW,
        negative_threshold: float = DEFAULT_NEGATIVE_THRESHOLD,
    ) -> None:
        self.error_budget_threshold = error_budget_threshold
        self.below_threshold_mode = below_threshold_mode
        self.negative_threshold = negative_threshold

    @classmethod
    def from_config(cls, config: EvaluationConfig) -> SLOEvaluator:
        """Build an evaluator from an ``EvaluationConfig``."""
        return cls(
            config.error_budget_threshold,
            below_threshold_mode=config.below_threshold_mode,
            negative_threshold=config.negative_threshold,
        )

    def evaluate(self, slo: SLO, sequence: PointSequence) -> EvaluationRecord:
        return evaluate_slo(
            slo,
            sequence,
            self.error_budget_threshold,
            below_threshold_mode=self.below_threshold_mode,
            negative_threshold=self.negative_threshold,
        )
