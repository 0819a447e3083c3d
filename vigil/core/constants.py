"""
Constants and enumerations shared across Vigil.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

# Worker budget for concurrent SLO evaluation
DEFAULT_MAX_CONCURRENCY: Final[int] = 16

# Flag SLOs whose budget never dropped below 90% over the window
DEFAULT_ERROR_BUDGET_THRESHOLD: Final[float] = 0.9

# 30 days
DEFAULT_WINDOW_HOURS: Final[float] = 720.0

# Share of negative samples that marks a budget as persistently breached
DEFAULT_NEGATIVE_THRESHOLD: Final[float] = 0.5

DEFAULT_REPORT_PATH: Final[str] = "slo_report.xlsx"


class FailurePolicy(str, Enum):
    """How the evaluation runner reacts to a hard per-SLO failure.

    FAIL_BATCH lets every dispatched SLO finish, then raises the first error.
    FAIL_FAST stops admitting new SLOs after the first error, waits for the
    in-flight ones, then raises it. BEST_EFFORT never raises and returns the
    partial result with the errors attached.
    """

    FAIL_BATCH = "fail_batch"
    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


class BelowThresholdMode(str, Enum):
    """Reading of the below-threshold detection rule.

    NEVER_BELOW holds when every sample is at or above the threshold, i.e.
    the SLO kept most of its budget for the whole window. DIPPED_BELOW holds
    when at least one sample fell under the threshold.
    """

    NEVER_BELOW = "never_below"
    DIPPED_BELOW = "dipped_below"


class ReportFormat(str, Enum):
    """Output formats supported by the report writer."""

    CSV = "csv"
    JSON = "json"
    XLSX = "xlsx"


class ReportLanguage(str, Enum):
    """Languages available for report headers."""

    EN = "en"
    JA = "ja"
