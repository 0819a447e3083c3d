"""
Orchestration module - bounded concurrent evaluation of SLO batches.
"""

from vigil.orchestration.runner import (
    RunOutcome,
    RunState,
    SLOEvaluationRunner,
    evaluate_provider,
    evaluate_slos,
)

__all__ = [
    "SLOEvaluationRunner",
    "RunOutcome",
    "RunState",
    "evaluate_slos",
    "evaluate_provider",
]
