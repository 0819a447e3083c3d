"""
Domain types shared by providers, the evaluator and the runner.

Provider-specific SLI details live in typed indicator variants so that the
evaluation core never has to inspect them: every indicator can describe its
good/total queries and that is all the core ever asks of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class ProviderKind(str, Enum):
    """Supported monitoring providers."""

    GCP = "gcp"
    DATADOG = "datadog"


class DatadogSLOType(str, Enum):
    """Datadog SLO flavours, as reported by the SLO API."""

    METRIC = "metric"
    MONITOR = "monitor"
    TIME_SLICE = "time_slice"


@dataclass(frozen=True)
class DatadogIndicator:
    """SLI payload for a Datadog SLO."""

    slo_type: str
    numerator: str = ""
    denominator: str = ""
    monitor_ids: tuple[int, ...] = ()

    def describe_queries(self) -> tuple[str, str]:
        if self.slo_type == DatadogSLOType.METRIC.value:
            return self.numerator, self.denominator
        ids = ", ".join(str(i) for i in self.monitor_ids)
        return f"monitor_ids: [{ids}]", f"type: {self.slo_type}"


@dataclass(frozen=True)
class GCPIndicator:
    """Request-based SLI payload for a Cloud Monitoring SLO.

    Either the good/total ratio filters are set, or the SLI is a
    distribution cut and only ``distribution_filter`` plus the range are.
    """

    good_service_filter: str = ""
    total_service_filter: str = ""
    distribution_filter: str = ""
    range_min: float | None = None
    range_max: float | None = None

    def describe_range(self) -> str:
        parts = []
        if self.range_min is not None:
            parts.append(f"min:{self.range_min:g}")
        if self.range_max is not None:
            parts.append(f"max:{self.range_max:g}")
        return " ".join(parts)

    def describe_queries(self) -> tuple[str, str]:
        if self.good_service_filter and self.total_service_filter:
            return self.good_service_filter, self.total_service_filter
        return self.describe_range(), self.distribution_filter


Indicator = Union[DatadogIndicator, GCPIndicator]


@dataclass(frozen=True)
class SLO:
    """A service level objective as listed by a provider."""

    name: str
    display_name: str
    goal: float
    provider: ProviderKind
    indicator: Indicator | None = None


@dataclass(frozen=True)
class PointSequence:
    """Error-budget samples fetched for one SLO.

    Each point is the fraction of error budget remaining at a sampled
    instant; negative values mean the objective was already breached.
    """

    good_query: str
    total_query: str
    points: tuple[float, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points


@dataclass(frozen=True)
class EvaluationRecord:
    """Per-SLO evaluation output consumed by the report generator."""

    flag: bool
    goal: float
    good_query: str
    total_query: str
    min_budget: float
    avg_budget: float

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "flag": self.flag,
            "goal": self.goal,
            "good_query": self.good_query,
            "total_query": self.total_query,
            "min_budget": self.min_budget,
            "avg_budget": self.avg_budget,
        }
