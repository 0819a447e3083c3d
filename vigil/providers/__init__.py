"""
Providers module - monitoring backends implementing the SLO provider contract.

This module contains:
    - base: pooled HTTP session and JSON error mapping
    - datadog: Datadog SLO API provider
    - gcp: Google Cloud Monitoring SLO API provider
"""

from vigil.core.config import VigilConfig
from vigil.core.exceptions import ConfigurationError
from vigil.core.protocols import SLOProvider
from vigil.core.types import ProviderKind
from vigil.providers.base import HTTPProvider
from vigil.providers.datadog import DatadogProvider
from vigil.providers.gcp import GCPProvider


def create_provider(config: VigilConfig) -> SLOProvider:
    """Instantiate the provider selected by ``config.provider``."""
    if config.provider is ProviderKind.GCP:
        return GCPProvider(config.gcp, http_config=config.http)
    if config.provider is ProviderKind.DATADOG:
        return DatadogProvider(config.datadog, http_config=config.http)
    raise ConfigurationError("provider", reason="not supported, use 'gcp' or 'datadog'", value=config.provider)


__all__ = [
    "HTTPProvider",
    "DatadogProvider",
    "GCPProvider",
    "create_provider",
]
