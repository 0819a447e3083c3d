"""
Shared HTTP plumbing for the monitoring providers.

Providers talk to their backend over a pooled ``requests`` session. Transport
failures, non-2xx responses and undecodable bodies all surface as
ProviderError so the evaluation runner can treat them uniformly.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
import urllib3

from vigil.core.config import HTTPConfig
from vigil.core.exceptions import ProviderError
from vigil.core.logging import EventType, get_logger, log_event
from vigil.core.protocols import SLOProvider
from vigil.core.utils import truncate_string

logger = get_logger(__name__)


class HTTPProvider(SLOProvider):
    """Base class for providers backed by a JSON HTTP API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float,
        http_config: HTTPConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._http_config = http_config or HTTPConfig()
        self._session = session or self._create_session()
        self._session.headers.update(self._auth_headers())

    @property
    def base_url(self) -> str:
        return self._base_url

    def _auth_headers(self) -> dict[str, str]:
        """Headers added to every request. Subclasses supply credentials here."""
        return {}

    def _create_session(self) -> requests.Session:
        """Create a configured requests session with connection pooling."""
        session = requests.Session()

        adapter = requests.adapters.HTTPAdapter(
            pool_connections=self._http_config.pool_maxsize,
            pool_maxsize=self._http_config.pool_maxsize,
            max_retries=urllib3.util.retry.Retry(
                total=self._http_config.max_retries,
                backoff_factor=self._http_config.retry_backoff_factor,
                status_forcelist=list(self._http_config.retry_status_forcelist),
                allowed_methods=["GET"],
                raise_on_status=False,
            ),
            pool_block=False,
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"Accept": "application/json"})

        return session

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET ``path`` relative to the base URL and decode the JSON body.

        Raises:
            ProviderError: On transport failure, HTTP error status or a
                body that is not a JSON object.
        """
        url = path if path.startswith("http") else f"{self._base_url}/{path.lstrip('/')}"
        log_event(logger, logging.DEBUG, EventType.PROVIDER_REQUEST, self.kind.value, url)

        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.exceptions.Timeout as e:
            raise ProviderError(
                f"Request timed out after {self._timeout}s", provider=self.kind.value,
                context={"url": url}, cause=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(
                "Request failed", provider=self.kind.value, context={"url": url}, cause=e
            ) from e

        if response.status_code >= 400:
            raise ProviderError(
                f"HTTP {response.status_code}: {truncate_string(response.text or '', 200)}",
                provider=self.kind.value,
                context={"url": url},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(
                "Response is not valid JSON", provider=self.kind.value, context={"url": url}, cause=e
            ) from e

        if not isinstance(payload, dict):
            raise ProviderError(
                f"Unexpected response type: {type(payload).__name__}",
                provider=self.kind.value,
                context={"url": url},
            )
        return payload

    def close(self) -> None:
        """Close the session and clean up resources."""
        self._session.close()
