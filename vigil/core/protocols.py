"""
Protocol definitions and abstract base classes for Vigil.

This module defines the narrow provider contract the evaluation runner
consumes, enabling:
- Loose coupling between the runner and monitoring backends
- Easy stubbing for testing
- Type-safe dependency injection
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from types import TracebackType

from vigil.core.types import SLO, PointSequence, ProviderKind


class SLOProvider(ABC):
    """Abstract base class for monitoring providers.

    Implementations should handle:
    - Connection management
    - Pagination of the provider's listing endpoints
    - Mapping an empty series to NoDataError
    """

    @property
    @abstractmethod
    def kind(self) -> ProviderKind:
        """Identifier of the backing monitoring provider."""
        ...

    @abstractmethod
    def list_slos(self) -> list[SLO]:
        """Enumerate every SLO visible in the configured scope.

        Raises:
            ProviderError: If listing fails.
        """
        ...

    @abstractmethod
    def fetch_point_sequence(self, slo: SLO, window: timedelta) -> PointSequence:
        """Fetch the error-budget samples of ``slo`` over the trailing ``window``.

        Raises:
            NoDataError: If the provider returned zero samples.
            ProviderError: If the fetch fails for any other reason.
        """
        ...

    def close(self) -> None:
        """Release any held resources."""

    def __enter__(self) -> SLOProvider:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
