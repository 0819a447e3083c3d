"""
Core module - configuration, constants, exceptions, logging, protocols, types.
"""

from vigil.core.config import (
    DatadogConfig,
    EvaluationConfig,
    GCPConfig,
    HTTPConfig,
    ReportConfig,
    VigilConfig,
    get_config,
    reset_config,
    set_config,
)
from vigil.core.constants import (
    DEFAULT_ERROR_BUDGET_THRESHOLD,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_NEGATIVE_THRESHOLD,
    DEFAULT_WINDOW_HOURS,
    BelowThresholdMode,
    FailurePolicy,
    ReportFormat,
    ReportLanguage,
)
from vigil.core.exceptions import (
    ConfigurationError,
    NoDataError,
    ProviderError,
    ReportError,
    SLOProcessingError,
    VigilError,
)
from vigil.core.logging import EventType, configure_logging, get_logger, log_event
from vigil.core.protocols import SLOProvider
from vigil.core.types import (
    SLO,
    DatadogIndicator,
    DatadogSLOType,
    EvaluationRecord,
    GCPIndicator,
    PointSequence,
    ProviderKind,
)

__all__ = [
    # Config
    "VigilConfig",
    "EvaluationConfig",
    "HTTPConfig",
    "DatadogConfig",
    "GCPConfig",
    "ReportConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Constants
    "DEFAULT_ERROR_BUDGET_THRESHOLD",
    "DEFAULT_MAX_CONCURRENCY",
    "DEFAULT_NEGATIVE_THRESHOLD",
    "DEFAULT_WINDOW_HOURS",
    "BelowThresholdMode",
    "FailurePolicy",
    "ReportFormat",
    "ReportLanguage",
    # Exceptions
    "VigilError",
    "ProviderError",
    "NoDataError",
    "SLOProcessingError",
    "ConfigurationError",
    "ReportError",
    # Logging
    "configure_logging",
    "get_logger",
    "log_event",
    "EventType",
    # Protocols
    "SLOProvider",
    # Types
    "SLO",
    "PointSequence",
    "EvaluationRecord",
    "ProviderKind",
    "DatadogIndicator",
    "DatadogSLOType",
    "GCPIndicator",
]
