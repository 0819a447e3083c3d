"""
Pytest configuration and shared fixtures.

This module provides reusable fixtures for testing the vigil package.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Generator
from datetime import timedelta
from typing import Any
from unittest.mock import MagicMock

import pytest

from vigil.core import (
    SLO,
    EvaluationConfig,
    GCPIndicator,
    NoDataError,
    PointSequence,
    ProviderKind,
    SLOProvider,
    VigilConfig,
    reset_config,
    set_config,
)

# =============================================================================
# Provider Stubs
# =============================================================================


def make_slo(name: str, goal: float = 0.99, display_name: str | None = None) -> SLO:
    """Build a GCP-flavoured SLO for tests."""
    return SLO(
        name=f"projects/p/services/s/serviceLevelObjectives/{name}",
        display_name=display_name or name,
        goal=goal,
        provider=ProviderKind.GCP,
        indicator=GCPIndicator(good_service_filter=f"good:{name}", total_service_filter=f"total:{name}"),
    )


class StubProvider(SLOProvider):
    """Instrumented in-memory provider.

    ``series`` maps SLO display name to its points, or to an exception the
    fetch should raise. An empty list raises NoDataError like real providers.
    Tracks how many fetches are in flight at once.
    """

    def __init__(self, series: dict[str, Any], delay: float = 0.0) -> None:
        self.series = series
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.GCP

    def list_slos(self) -> list[SLO]:
        return [make_slo(name) for name in self.series]

    def fetch_point_sequence(self, slo: SLO, window: timedelta) -> PointSequence:
        with self._lock:
            self.calls.append(slo.display_name)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            value = self.series[slo.display_name]
            if isinstance(value, Exception):
                raise value
            if not value:
                raise NoDataError(slo.display_name, provider=self.kind.value)
            good, total = slo.indicator.describe_queries()
            return PointSequence(good_query=good, total_query=total, points=tuple(value))
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def slo_factory() -> Callable[..., SLO]:
    """Provide the SLO builder."""
    return make_slo


@pytest.fixture
def provider_factory() -> Callable[..., StubProvider]:
    """Provide the instrumented stub provider class."""
    return StubProvider


@pytest.fixture
def healthy_series() -> dict[str, list[float]]:
    """Provide 50 SLOs whose budget stayed high."""
    return {f"slo-{i:02d}": [0.95, 0.96, 0.97] for i in range(50)}


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def eval_config() -> EvaluationConfig:
    """Provide an evaluation configuration with reference defaults."""
    return EvaluationConfig(error_budget_threshold=0.9, window_hours=720, max_concurrency=16)


@pytest.fixture
def test_config() -> Generator[VigilConfig, None, None]:
    """Provide a test configuration installed as the global config."""
    config = VigilConfig.default()
    set_config(config)
    yield config
    reset_config()


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
def mock_session() -> MagicMock:
    """Provide a mocked requests.Session."""
    session = MagicMock()
    session.headers = {}
    return session
