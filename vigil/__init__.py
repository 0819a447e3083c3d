"""
Vigil - SLO error-budget evaluation.

Finds service level objectives whose goal may be miscalibrated by looking at
how their error budget behaved over a trailing window.

Package Structure:
    - core: Configuration, constants, exceptions, logging, protocols, types
    - analysis: Error-budget statistics and the SLO evaluator
    - orchestration: Bounded concurrent evaluation of SLO batches
    - providers: Datadog and Google Cloud Monitoring SLO providers
    - report: Report models and CSV/JSON rendering

Example usage:
    from vigil import VigilConfig, evaluate_provider
    from vigil.providers import create_provider

    config = VigilConfig.from_env()
    with create_provider(config) as provider:
        outcome = evaluate_provider(provider, config.evaluation)
"""

__version__ = "1.0.0"

from vigil.analysis import SLOEvaluator, evaluate_slo
from vigil.core.config import EvaluationConfig, VigilConfig, get_config
from vigil.core.constants import BelowThresholdMode, FailurePolicy
from vigil.core.exceptions import ConfigurationError, NoDataError, ProviderError, VigilError
from vigil.core.logging import configure_logging, get_logger
from vigil.orchestration import RunOutcome, SLOEvaluationRunner, evaluate_provider, evaluate_slos

__all__ = [
    # Version
    "__version__",
    # Config
    "get_config",
    "VigilConfig",
    "EvaluationConfig",
    # Constants
    "BelowThresholdMode",
    "FailurePolicy",
    # Evaluation
    "SLOEvaluator",
    "evaluate_slo",
    "SLOEvaluationRunner",
    "RunOutcome",
    "evaluate_slos",
    "evaluate_provider",
    # Exceptions
    "VigilError",
    "ProviderError",
    "NoDataError",
    "ConfigurationError",
    # Logging
    "get_logger",
    "configure_logging",
]
