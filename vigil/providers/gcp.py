"""
Google Cloud Monitoring SLO provider.

Walks every service of a project and its service level objectives, then
reads the ``select_slo_budget_fraction`` time series of each SLO over the
evaluation window. Authentication uses a pre-issued OAuth access token.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import timedelta
from typing import Any

import requests

from vigil.core.config import GCPConfig, HTTPConfig
from vigil.core.exceptions import NoDataError, ProviderError
from vigil.core.logging import get_logger
from vigil.core.types import SLO, GCPIndicator, PointSequence, ProviderKind
from vigil.core.utils import to_rfc3339, window_bounds
from vigil.providers.base import HTTPProvider

logger = get_logger(__name__)


def parse_indicator(sli: dict[str, Any]) -> GCPIndicator:
    """Build a GCPIndicator from a ``serviceLevelIndicator`` resource."""
    request_based = sli.get("requestBased") or {}
    ratio = request_based.get("goodTotalRatio") or {}
    cut = request_based.get("distributionCut") or {}
    value_range = cut.get("range") or {}

    range_min = value_range.get("min")
    range_max = value_range.get("max")
    return GCPIndicator(
        good_service_filter=ratio.get("goodServiceFilter", ""),
        total_service_filter=ratio.get("totalServiceFilter", ""),
        distribution_filter=cut.get("distributionFilter", ""),
        range_min=float(range_min) if range_min is not None else None,
        range_max=float(range_max) if range_max is not None else None,
    )


def parse_slo(item: dict[str, Any]) -> SLO:
    """Build an SLO from a ``ServiceLevelObjective`` resource."""
    return SLO(
        name=item["name"],
        display_name=item.get("displayName") or item["name"],
        goal=float(item.get("goal", 0.0)),
        provider=ProviderKind.GCP,
        indicator=parse_indicator(item.get("serviceLevelIndicator") or {}),
    )


def point_value(point: dict[str, Any]) -> float | None:
    """Extract the numeric value of a time series point."""
    value = point.get("value") or {}
    if "doubleValue" in value:
        return float(value["doubleValue"])
    # int64 values are JSON strings in the REST API
    if "int64Value" in value:
        return float(value["int64Value"])
    return None


class GCPProvider(HTTPProvider):
    """SLO provider for the Cloud Monitoring v3 REST API."""

    def __init__(
        self,
        config: GCPConfig,
        *,
        http_config: HTTPConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        super().__init__(
            config.endpoint,
            timeout_seconds=config.timeout_seconds,
            http_config=http_config,
            session=session,
        )

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.GCP

    @property
    def project_id(self) -> str:
        return self._config.project_id

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.access_token}"}

    def _paginate(self, path: str, items_key: str, params: dict[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        """Yield every item of a paginated list endpoint."""
        params = dict(params or {})
        while True:
            payload = self._get_json(path, params=params)
            yield from payload.get(items_key) or []
            next_token = payload.get("nextPageToken")
            if not next_token:
                return
            params["pageToken"] = next_token

    def list_slos(self) -> list[SLO]:
        slos: list[SLO] = []
        for service in self._paginate(f"/projects/{self.project_id}/services", "services"):
            service_name = service.get("name")
            if not service_name:
                raise ProviderError("Service without a name in listing", provider=self.kind.value)
            for item in self._paginate(f"/{service_name}/serviceLevelObjectives", "serviceLevelObjectives"):
                try:
                    slos.append(parse_slo(item))
                except (KeyError, TypeError, ValueError) as e:
                    raise ProviderError(
                        "Malformed service level objective", provider=self.kind.value,
                        context={"service": service_name}, cause=e,
                    ) from e

        logger.info(f"Found {len(slos)} SLOs in project {self.project_id}")
        return slos

    def fetch_point_sequence(self, slo: SLO, window: timedelta) -> PointSequence:
        indicator = slo.indicator
        if not isinstance(indicator, GCPIndicator):
            raise ProviderError(
                f"SLI is not of expected type: {type(indicator).__name__}", provider=self.kind.value
            )

        start, end = window_bounds(window)
        params = {
            "filter": f'select_slo_budget_fraction("{slo.name}")',
            "interval.startTime": to_rfc3339(start),
            "interval.endTime": to_rfc3339(end),
        }

        points: list[float] = []
        for series in self._paginate(f"/projects/{self.project_id}/timeSeries", "timeSeries", params):
            for point in series.get("points") or []:
                value = point_value(point)
                if value is not None:
                    points.append(value)

        if not points:
            raise NoDataError(slo.display_name, provider=self.kind.value)

        good_query, total_query = indicator.describe_queries()
        return PointSequence(good_query=good_query, total_query=total_query, points=tuple(points))
