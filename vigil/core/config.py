"""
Centralized configuration management for Vigil.

This module provides a single source of truth for all configuration values,
supporting:
- JSON configuration file (config.json)
- Environment variable overrides
- Programmatic defaults

Configuration is loaded in priority order:
1. Environment variables (highest priority)
2. JSON config file
3. Dataclass defaults (lowest priority)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

from vigil.core.constants import (
    DEFAULT_ERROR_BUDGET_THRESHOLD,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_NEGATIVE_THRESHOLD,
    DEFAULT_REPORT_PATH,
    DEFAULT_WINDOW_HOURS,
    BelowThresholdMode,
    FailurePolicy,
    ReportFormat,
    ReportLanguage,
)
from vigil.core.exceptions import ConfigurationError
from vigil.core.types import ProviderKind

logger = logging.getLogger(__name__)

# Default config file locations (searched in order)
CONFIG_FILE_PATHS = [
    Path("config.json"),  # Current directory
    Path("./config/config.json"),  # Config subdirectory
    Path.home() / ".vigil" / "config.json",  # User home
    Path("/etc/vigil/config.json"),  # System-wide
]


def _load_config_file() -> dict[str, Any]:
    """Load configuration from JSON file.

    Searches for config file in standard locations, or uses
    CONFIG_FILE environment variable if set.

    Returns:
        Dictionary of configuration values, or empty dict if no file found.
    """
    env_config_path = os.getenv("CONFIG_FILE")
    if env_config_path:
        config_path = Path(env_config_path)
        if config_path.exists():
            with config_path.open() as f:
                return json.load(f)
        else:
            # Fall back to defaults rather than failing
            logger.warning(f"CONFIG_FILE specified but not found: {env_config_path}")

    for path in CONFIG_FILE_PATHS:
        if path.exists():
            with path.open() as f:
                return json.load(f)

    return {}


def _cast(parameter: str, value: Any, type_cast: type | None) -> Any:
    """Cast a raw config value, reporting failures as ConfigurationError."""
    if type_cast is None or value is None:
        return value
    if type_cast is bool:
        if isinstance(value, bool):
            return value
        return str(value).lower() in ("true", "1", "yes")
    try:
        return type_cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(parameter, reason=f"expected {type_cast.__name__}: {e}", value=value) from e


def _get_config(config_dict: dict[str, Any], config_key: str, default: Any, type_cast: type | None = None) -> Any:
    """Get a file-only value from the config dictionary, cast to ``type_cast``."""
    if config_key in config_dict:
        return _cast(config_key, config_dict[config_key], type_cast)
    return default


def _get_env_or_config(
    env_key: str,
    config_dict: dict[str, Any],
    config_key: str,
    default: Any,
    type_cast: type | None = None
) -> Any:
    """Get value from environment, config file, or default (in priority order).

    Values from the environment and the config file are both cast with
    ``type_cast``.

    Args:
        env_key: Environment variable name
        config_dict: Config dictionary section
        config_key: Key within config dictionary
        default: Default value if not found
        type_cast: Optional type to cast the value to

    Returns:
        Configuration value from highest priority source

    Raises:
        ConfigurationError: If the value cannot be cast.
    """
    env_value = os.getenv(env_key)
    if env_value is not None:
        return _cast(env_key, env_value, type_cast)

    return _get_config(config_dict, config_key, default, type_cast)


def _coerce_enum(enum_cls: type, parameter: str, value: Any) -> Any:
    """Convert a raw config value into an enum member."""
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(parameter, reason=f"must be one of: {allowed}", value=value) from e


@dataclass(frozen=True)
class EvaluationConfig:
    """Configuration consumed by the evaluator and the evaluation runner."""

    error_budget_threshold: float = DEFAULT_ERROR_BUDGET_THRESHOLD
    window_hours: float = DEFAULT_WINDOW_HOURS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    negative_threshold: float = DEFAULT_NEGATIVE_THRESHOLD
    failure_policy: FailurePolicy = FailurePolicy.FAIL_BATCH
    below_threshold_mode: BelowThresholdMode = BelowThresholdMode.NEVER_BELOW

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.window_hours)

    def validate(self) -> None:
        """Validate values before any evaluation starts.

        Raises:
            ConfigurationError: If a value is out of range.
        """
        if not 0 < self.error_budget_threshold < 1:
            raise ConfigurationError(
                "error_budget_threshold",
                reason="must be between 0 and 1 (exclusive)",
                value=self.error_budget_threshold,
            )
        if self.window_hours <= 0:
            raise ConfigurationError("window", reason="must be a positive duration", value=self.window_hours)
        if self.max_concurrency < 1:
            raise ConfigurationError("max_concurrency", reason="must be a positive integer", value=self.max_concurrency)
        if not 0 <= self.negative_threshold <= 1:
            raise ConfigurationError(
                "negative_threshold", reason="must be between 0 and 1", value=self.negative_threshold
            )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> EvaluationConfig:
        """Create configuration from config dict with environment overrides."""
        eval_config = config.get("evaluation", {})
        return cls(
            error_budget_threshold=_get_env_or_config(
                "VIGIL_ERROR_BUDGET_THRESHOLD", eval_config, "error_budget_threshold",
                cls.error_budget_threshold, float,
            ),
            window_hours=_get_env_or_config(
                "VIGIL_WINDOW_HOURS", eval_config, "window_hours", cls.window_hours, float
            ),
            max_concurrency=_get_env_or_config(
                "VIGIL_MAX_CONCURRENCY", eval_config, "max_concurrency", cls.max_concurrency, int
            ),
            negative_threshold=_get_config(eval_config, "negative_threshold", cls.negative_threshold, float),
            failure_policy=_coerce_enum(
                FailurePolicy, "failure_policy",
                _get_env_or_config("VIGIL_FAILURE_POLICY", eval_config, "failure_policy", cls.failure_policy.value),
            ),
            below_threshold_mode=_coerce_enum(
                BelowThresholdMode, "below_threshold_mode",
                eval_config.get("below_threshold_mode", cls.below_threshold_mode.value),
            ),
        )


@dataclass(frozen=True)
class HTTPConfig:
    """Connection settings shared by the HTTP-based providers.

    ``max_retries`` only configures transport-level retries in the HTTP
    adapter; the evaluation runner itself never retries an SLO.
    """

    pool_maxsize: int = DEFAULT_MAX_CONCURRENCY
    max_retries: int = 0
    retry_backoff_factor: float = 0.3
    retry_status_forcelist: tuple[int, ...] = (500, 502, 503, 504)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> HTTPConfig:
        """Create configuration from config dict."""
        http_config = config.get("http", {})
        return cls(
            pool_maxsize=_get_config(http_config, "pool_maxsize", cls.pool_maxsize, int),
            max_retries=_get_env_or_config("VIGIL_HTTP_MAX_RETRIES", http_config, "max_retries", cls.max_retries, int),
            retry_backoff_factor=_get_config(http_config, "retry_backoff_factor", cls.retry_backoff_factor, float),
            retry_status_forcelist=tuple(http_config.get("retry_status_forcelist", cls.retry_status_forcelist)),
        )


@dataclass(frozen=True)
class DatadogConfig:
    """Configuration for the Datadog SLO API provider."""

    site: str = "datadoghq.com"
    api_key: str = field(default="", repr=False)
    app_key: str = field(default="", repr=False)
    timeout_seconds: int = 30
    page_size: int = 100

    @property
    def base_url(self) -> str:
        return f"https://api.{self.site}"

    def validate(self) -> None:
        if not self.api_key:
            raise ConfigurationError("DD_API_KEY", reason="environment variable is required for Datadog")
        if not self.app_key:
            raise ConfigurationError("DD_APP_KEY", reason="environment variable is required for Datadog")
        if self.page_size < 1:
            raise ConfigurationError("page_size", reason="must be a positive integer", value=self.page_size)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> DatadogConfig:
        """Create configuration from config dict with environment overrides."""
        dd_config = config.get("datadog", {})
        return cls(
            site=_get_env_or_config("DD_SITE", dd_config, "site", cls.site) or cls.site,
            api_key=_get_env_or_config("DD_API_KEY", dd_config, "api_key", ""),
            app_key=_get_env_or_config("DD_APP_KEY", dd_config, "app_key", ""),
            timeout_seconds=_get_config(dd_config, "timeout_seconds", cls.timeout_seconds, int),
            page_size=_get_config(dd_config, "page_size", cls.page_size, int),
        )


@dataclass(frozen=True)
class GCPConfig:
    """Configuration for the Google Cloud Monitoring SLO API provider."""

    project_id: str = ""
    access_token: str = field(default="", repr=False)
    endpoint: str = "https://monitoring.googleapis.com/v3"
    timeout_seconds: int = 30

    def validate(self) -> None:
        if not self.project_id:
            raise ConfigurationError("gcp_project", reason="is required for GCP")
        if not self.access_token:
            raise ConfigurationError("GCP_ACCESS_TOKEN", reason="environment variable is required for GCP")

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> GCPConfig:
        """Create configuration from config dict with environment overrides."""
        gcp_config = config.get("gcp", {})
        return cls(
            project_id=_get_env_or_config("GCP_PROJECT", gcp_config, "project_id", cls.project_id),
            access_token=_get_env_or_config("GCP_ACCESS_TOKEN", gcp_config, "access_token", ""),
            endpoint=gcp_config.get("endpoint", cls.endpoint),
            timeout_seconds=_get_config(gcp_config, "timeout_seconds", cls.timeout_seconds, int),
        )


@dataclass(frozen=True)
class ReportConfig:
    """Configuration for report output."""

    output_path: str = DEFAULT_REPORT_PATH
    format: ReportFormat | None = None
    language: ReportLanguage = ReportLanguage.EN

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ReportConfig:
        """Create configuration from config dict."""
        report_config = config.get("report", {})
        fmt = report_config.get("format")
        return cls(
            output_path=report_config.get("output_path", cls.output_path),
            format=_coerce_enum(ReportFormat, "report.format", fmt) if fmt else None,
            language=_coerce_enum(
                ReportLanguage, "report.language", report_config.get("language", cls.language.value)
            ),
        )


@dataclass
class VigilConfig:
    """Root configuration aggregating all sub-configurations."""

    provider: ProviderKind = ProviderKind.GCP
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    http: HTTPConfig = field(default_factory=HTTPConfig)
    datadog: DatadogConfig = field(default_factory=DatadogConfig)
    gcp: GCPConfig = field(default_factory=GCPConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    # Track which config file was loaded (if any)
    config_file_path: str | None = None

    def validate(self) -> None:
        """Validate the evaluation settings and the selected provider's settings."""
        self.evaluation.validate()
        if self.provider is ProviderKind.GCP:
            self.gcp.validate()
        elif self.provider is ProviderKind.DATADOG:
            self.datadog.validate()

    @classmethod
    def from_file(cls, file_path: str | Path) -> VigilConfig:
        """Load configuration from a specific JSON file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            json.JSONDecodeError: If the file contains invalid JSON.
        """
        path = Path(file_path)
        with path.open() as f:
            config_dict = json.load(f)
        return cls.from_config(config_dict, config_file_path=str(path))

    @classmethod
    def from_config(cls, config: dict[str, Any], config_file_path: str | None = None) -> VigilConfig:
        """Create full configuration from config dictionary."""
        return cls(
            provider=_coerce_enum(
                ProviderKind, "provider",
                _get_env_or_config("VIGIL_PROVIDER", config, "provider", cls.provider.value),
            ),
            evaluation=EvaluationConfig.from_config(config),
            http=HTTPConfig.from_config(config),
            datadog=DatadogConfig.from_config(config),
            gcp=GCPConfig.from_config(config),
            report=ReportConfig.from_config(config),
            config_file_path=config_file_path,
        )

    @classmethod
    def from_env(cls) -> VigilConfig:
        """Create full configuration from config file and environment variables.

        Searches for config file in standard locations, then applies
        environment variable overrides.
        """
        config_dict = _load_config_file()

        config_path = None
        env_config = os.getenv("CONFIG_FILE")
        if env_config and Path(env_config).exists():
            config_path = env_config
        else:
            for path in CONFIG_FILE_PATHS:
                if path.exists():
                    config_path = str(path)
                    break

        return cls.from_config(config_dict, config_file_path=config_path)

    @classmethod
    def default(cls) -> VigilConfig:
        """Create configuration with all defaults (no file loading)."""
        return cls()


# Global configuration instance - can be overridden for testing
_config: VigilConfig | None = None


def get_config() -> VigilConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = VigilConfig.from_env()
    return _config


def set_config(config: VigilConfig) -> None:
    """Set the global configuration instance (useful for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset configuration to be reloaded on next access."""
    global _config
    _config = None
