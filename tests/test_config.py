"""
Tests for configuration module.
"""

from __future__ import annotations

import json
import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from vigil.core import (
    BelowThresholdMode,
    ConfigurationError,
    DatadogConfig,
    EvaluationConfig,
    FailurePolicy,
    GCPConfig,
    HTTPConfig,
    ProviderKind,
    ReportFormat,
    ReportLanguage,
    VigilConfig,
    get_config,
    reset_config,
    set_config,
)


class TestEvaluationConfig:
    """Tests for evaluation configuration."""

    def test_default_values(self):
        """Test default configuration values."""
        config = EvaluationConfig()
        assert config.error_budget_threshold == 0.9
        assert config.window_hours == 720
        assert config.window == timedelta(days=30)
        assert config.max_concurrency == 16
        assert config.negative_threshold == 0.5
        assert config.failure_policy is FailurePolicy.FAIL_BATCH
        assert config.below_threshold_mode is BelowThresholdMode.NEVER_BELOW

    def test_defaults_are_valid(self):
        """Test the defaults pass validation."""
        EvaluationConfig().validate()

    @pytest.mark.parametrize("threshold", [0.0, 1.0, -0.5, 1.5])
    def test_threshold_out_of_range(self, threshold):
        """Test the threshold must lie strictly between 0 and 1."""
        with pytest.raises(ConfigurationError) as exc_info:
            EvaluationConfig(error_budget_threshold=threshold).validate()
        assert exc_info.value.parameter == "error_budget_threshold"

    def test_window_must_be_positive(self):
        """Test a zero window is rejected."""
        with pytest.raises(ConfigurationError, match="window"):
            EvaluationConfig(window_hours=0).validate()

    def test_concurrency_must_be_positive(self):
        """Test a zero worker budget is rejected."""
        with pytest.raises(ConfigurationError, match="max_concurrency"):
            EvaluationConfig(max_concurrency=0).validate()

    def test_negative_threshold_range(self):
        """Test the sustained-negative fraction must lie in [0, 1]."""
        with pytest.raises(ConfigurationError):
            EvaluationConfig(negative_threshold=1.2).validate()

    def test_immutability(self):
        """Test that config is immutable (frozen)."""
        config = EvaluationConfig()
        with pytest.raises(Exception):  # FrozenInstanceError
            config.max_concurrency = 999

    def test_from_config_dict(self):
        """Test loading from the evaluation section of a config dict."""
        with patch.dict(os.environ, {}, clear=True):
            config = EvaluationConfig.from_config({
                "evaluation": {
                    "error_budget_threshold": 0.8,
                    "failure_policy": "best_effort",
                    "below_threshold_mode": "dipped_below",
                }
            })
        assert config.error_budget_threshold == 0.8
        assert config.failure_policy is FailurePolicy.BEST_EFFORT
        assert config.below_threshold_mode is BelowThresholdMode.DIPPED_BELOW

    def test_env_overrides_file(self):
        """Test environment variables win over the config dict."""
        with patch.dict(os.environ, {
            "VIGIL_ERROR_BUDGET_THRESHOLD": "0.75",
            "VIGIL_MAX_CONCURRENCY": "4",
            "VIGIL_FAILURE_POLICY": "fail_fast",
        }):
            config = EvaluationConfig.from_config({"evaluation": {"error_budget_threshold": 0.8}})
        assert config.error_budget_threshold == 0.75
        assert config.max_concurrency == 4
        assert config.failure_policy is FailurePolicy.FAIL_FAST

    def test_bad_env_value(self):
        """Test an unparseable environment value is a configuration error."""
        with patch.dict(os.environ, {"VIGIL_MAX_CONCURRENCY": "many"}):
            with pytest.raises(ConfigurationError) as exc_info:
                EvaluationConfig.from_config({})
        assert exc_info.value.parameter == "VIGIL_MAX_CONCURRENCY"

    def test_unknown_policy(self):
        """Test an unknown failure policy lists the allowed values."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError, match="fail_batch"):
                EvaluationConfig.from_config({"evaluation": {"failure_policy": "retry"}})

    def test_file_values_are_cast(self):
        """Test string values in the config file are cast like env values."""
        with patch.dict(os.environ, {}, clear=True):
            config = EvaluationConfig.from_config({
                "evaluation": {"error_budget_threshold": "0.5", "max_concurrency": "4", "negative_threshold": "0.25"}
            })
        assert config.error_budget_threshold == 0.5
        assert config.max_concurrency == 4
        assert config.negative_threshold == 0.25

    @pytest.mark.parametrize("key, value", [
        ("error_budget_threshold", "abc"),
        ("window_hours", [720]),
        ("max_concurrency", "many"),
        ("negative_threshold", {"share": 0.5}),
    ])
    def test_bad_file_value(self, key, value):
        """Test an uncastable config file value is a configuration error."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                EvaluationConfig.from_config({"evaluation": {key: value}})
        assert exc_info.value.parameter == key


class TestHTTPConfig:
    """Tests for HTTP transport configuration."""

    def test_no_retries_by_default(self):
        """Test transport retries are off unless configured."""
        assert HTTPConfig().max_retries == 0
        assert HTTPConfig().pool_maxsize == 16

    def test_from_env(self):
        """Test retries can be enabled from the environment."""
        with patch.dict(os.environ, {"VIGIL_HTTP_MAX_RETRIES": "3"}):
            assert HTTPConfig.from_config({}).max_retries == 3


class TestProviderConfigs:
    """Tests for per-provider configuration."""

    def test_datadog_base_url(self):
        """Test the API host is derived from the site."""
        assert DatadogConfig(site="datadoghq.eu").base_url == "https://api.datadoghq.eu"

    def test_datadog_keys_required(self):
        """Test both Datadog keys are required."""
        with pytest.raises(ConfigurationError, match="DD_API_KEY"):
            DatadogConfig().validate()
        with pytest.raises(ConfigurationError, match="DD_APP_KEY"):
            DatadogConfig(api_key="a").validate()
        DatadogConfig(api_key="a", app_key="b").validate()

    def test_datadog_keys_hidden_from_repr(self):
        """Test secrets never show up in repr."""
        assert "secret" not in repr(DatadogConfig(api_key="secret", app_key="secret"))

    def test_datadog_from_env(self):
        """Test Datadog settings come from the DD_* variables."""
        with patch.dict(os.environ, {"DD_SITE": "us5.datadoghq.com", "DD_API_KEY": "k", "DD_APP_KEY": "a"}):
            config = DatadogConfig.from_config({})
        assert config.site == "us5.datadoghq.com"
        assert config.api_key == "k"
        assert config.app_key == "a"

    def test_gcp_requires_project_and_token(self):
        """Test GCP needs both a project and a token."""
        with pytest.raises(ConfigurationError, match="gcp_project"):
            GCPConfig(access_token="t").validate()
        with pytest.raises(ConfigurationError, match="GCP_ACCESS_TOKEN"):
            GCPConfig(project_id="p").validate()
        GCPConfig(project_id="p", access_token="t").validate()

    def test_bad_file_values(self):
        """Test file-only numeric settings are cast and checked."""
        with patch.dict(os.environ, {}, clear=True):
            assert DatadogConfig.from_config({"datadog": {"page_size": "50"}}).page_size == 50
            with pytest.raises(ConfigurationError, match="page_size"):
                DatadogConfig.from_config({"datadog": {"page_size": "ten"}})
            with pytest.raises(ConfigurationError, match="timeout_seconds"):
                GCPConfig.from_config({"gcp": {"timeout_seconds": "slow"}})
            with pytest.raises(ConfigurationError, match="pool_maxsize"):
                HTTPConfig.from_config({"http": {"pool_maxsize": "lots"}})


class TestVigilConfig:
    """Tests for the root configuration."""

    def test_default(self):
        """Test default config targets GCP with reference defaults."""
        config = VigilConfig.default()
        assert config.provider is ProviderKind.GCP
        assert config.report.output_path == "slo_report.xlsx"
        assert config.report.format is None
        assert config.report.language is ReportLanguage.EN

    def test_validate_checks_selected_provider_only(self):
        """Test only the selected provider's credentials are required."""
        config = VigilConfig(provider=ProviderKind.DATADOG, datadog=DatadogConfig(api_key="a", app_key="b"))
        config.validate()

    def test_validate_checks_evaluation(self):
        """Test evaluation settings are validated too."""
        config = VigilConfig(
            gcp=GCPConfig(project_id="p", access_token="t"),
            evaluation=EvaluationConfig(error_budget_threshold=2.0),
        )
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_from_file(self, tmp_path):
        """Test loading every section from a JSON file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "provider": "datadog",
            "evaluation": {"window_hours": 168, "max_concurrency": 8},
            "datadog": {"site": "datadoghq.eu", "page_size": 50},
            "report": {"output_path": "out.json", "format": "json", "language": "ja"},
        }))

        with patch.dict(os.environ, {}, clear=True):
            config = VigilConfig.from_file(path)

        assert config.provider is ProviderKind.DATADOG
        assert config.evaluation.window == timedelta(days=7)
        assert config.evaluation.max_concurrency == 8
        assert config.datadog.site == "datadoghq.eu"
        assert config.datadog.page_size == 50
        assert config.report.format is ReportFormat.JSON
        assert config.report.language is ReportLanguage.JA
        assert config.config_file_path == str(path)

    def test_from_file_missing(self, tmp_path):
        """Test a missing file is not silently ignored."""
        with pytest.raises(FileNotFoundError):
            VigilConfig.from_file(tmp_path / "nope.json")

    def test_from_env_uses_config_file_variable(self, tmp_path):
        """Test CONFIG_FILE points at the file to load."""
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"gcp": {"project_id": "from-file"}}))

        with patch.dict(os.environ, {"CONFIG_FILE": str(path)}, clear=True):
            config = VigilConfig.from_env()

        assert config.gcp.project_id == "from-file"
        assert config.config_file_path == str(path)

    def test_unknown_provider(self):
        """Test an unknown provider name is a configuration error."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError, match="provider"):
                VigilConfig.from_config({"provider": "prometheus"})


class TestGlobalConfig:
    """Tests for the global configuration instance."""

    def test_set_and_get(self):
        """Test an installed config is returned as-is."""
        config = VigilConfig.default()
        set_config(config)
        try:
            assert get_config() is config
        finally:
            reset_config()

    def test_fixture_installs_config(self, test_config):
        """Test the shared fixture installs the global config."""
        assert get_config() is test_config

    def test_reset_reloads(self, tmp_path):
        """Test reset forces a reload on next access."""
        set_config(VigilConfig.default())
        reset_config()
        with patch.dict(os.environ, {"CONFIG_FILE": str(tmp_path / "missing.json")}, clear=True):
            with patch("vigil.core.config.CONFIG_FILE_PATHS", []):
                reloaded = get_config()
        try:
            assert reloaded.config_file_path is None
        finally:
            reset_config()
