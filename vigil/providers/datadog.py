"""
Datadog SLO provider.

Lists SLOs through ``/api/v1/slo`` and derives error-budget samples from
``/api/v1/slo/{id}/history``:

- metric SLOs: one point per history sample, numerator / denominator
  (samples with a zero denominator are skipped);
- monitor and time-slice SLOs: the running uptime ratio over the overall
  history, ignoring no-data states.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import requests

from vigil.core.config import DatadogConfig, HTTPConfig
from vigil.core.exceptions import NoDataError, ProviderError
from vigil.core.logging import get_logger
from vigil.core.types import SLO, DatadogIndicator, DatadogSLOType, PointSequence, ProviderKind
from vigil.core.utils import safe_get_nested, window_bounds
from vigil.providers.base import HTTPProvider

logger = get_logger(__name__)

# Monitor history states
_STATE_UPTIME = 0
_STATE_NO_DATA = 2


def metric_points(history: dict[str, Any]) -> list[float]:
    """Good/total ratio per sample of a metric SLO history."""
    numerator = safe_get_nested(history, "series", "numerator", "values", default=[])
    denominator = safe_get_nested(history, "series", "denominator", "values", default=[])

    points = []
    for num, den in zip(numerator, denominator):
        if num is None or not den:
            continue
        points.append(num / den)
    return points


def monitor_points(history: dict[str, Any]) -> list[float]:
    """Running uptime ratio of a monitor or time-slice SLO history."""
    entries = safe_get_nested(history, "overall", "history", default=[])

    points = []
    uptime_count = 0
    total_count = 0
    for entry in entries:
        if len(entry) < 2:
            continue
        state = entry[1]
        if state == _STATE_NO_DATA:
            continue
        total_count += 1
        if state == _STATE_UPTIME:
            uptime_count += 1
        points.append(uptime_count / total_count)
    return points


def parse_slo(item: dict[str, Any]) -> SLO:
    """Build an SLO from one entry of the Datadog SLO listing."""
    thresholds = item.get("thresholds") or []
    goal = thresholds[0].get("target", 0.0) / 100.0 if thresholds else 0.0

    query = item.get("query") or {}
    indicator = DatadogIndicator(
        slo_type=item.get("type", ""),
        numerator=query.get("numerator", ""),
        denominator=query.get("denominator", ""),
        monitor_ids=tuple(item.get("monitor_ids") or ()),
    )
    return SLO(
        name=item["id"],
        display_name=item.get("name", item["id"]),
        goal=goal,
        provider=ProviderKind.DATADOG,
        indicator=indicator,
    )


class DatadogProvider(HTTPProvider):
    """SLO provider for the Datadog SLO API.

    Example:
        >>> with DatadogProvider(DatadogConfig.from_config({})) as provider:
        ...     slos = provider.list_slos()
    """

    def __init__(
        self,
        config: DatadogConfig,
        *,
        http_config: HTTPConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        super().__init__(
            config.base_url,
            timeout_seconds=config.timeout_seconds,
            http_config=http_config,
            session=session,
        )

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.DATADOG

    def _auth_headers(self) -> dict[str, str]:
        return {
            "DD-API-KEY": self._config.api_key,
            "DD-APPLICATION-KEY": self._config.app_key,
        }

    def list_slos(self) -> list[SLO]:
        slos: list[SLO] = []
        offset = 0
        page_size = self._config.page_size

        while True:
            payload = self._get_json("/api/v1/slo", params={"limit": page_size, "offset": offset})
            items = payload.get("data") or []
            try:
                slos.extend(parse_slo(item) for item in items)
            except (KeyError, TypeError, AttributeError) as e:
                raise ProviderError(
                    "Malformed SLO listing", provider=self.kind.value, context={"offset": offset}, cause=e
                ) from e

            if len(items) < page_size:
                break
            offset += page_size

        logger.info(f"Found {len(slos)} Datadog SLOs")
        return slos

    def fetch_point_sequence(self, slo: SLO, window: timedelta) -> PointSequence:
        indicator = slo.indicator
        if not isinstance(indicator, DatadogIndicator):
            raise ProviderError(
                f"SLI is not of expected type: {type(indicator).__name__}", provider=self.kind.value
            )

        start, end = window_bounds(window)
        payload = self._get_json(
            f"/api/v1/slo/{slo.name}/history",
            params={
                "from_ts": int(start.timestamp()),
                "to_ts": int(end.timestamp()),
                "apply_correction": "true",
            },
        )
        history = payload.get("data") or {}

        if indicator.slo_type == DatadogSLOType.METRIC.value:
            points = metric_points(history)
        elif indicator.slo_type in (DatadogSLOType.MONITOR.value, DatadogSLOType.TIME_SLICE.value):
            points = monitor_points(history)
        else:
            raise ProviderError(f"unsupported SLO type: {indicator.slo_type}", provider=self.kind.value)

        if not points:
            raise NoDataError(slo.display_name, provider=self.kind.value)

        good_query, total_query = indicator.describe_queries()
        return PointSequence(good_query=good_query, total_query=total_query, points=tuple(points))
