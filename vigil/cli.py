"""
Command-line entry point.

Lists SLOs from the selected provider, evaluates them under a bounded worker
budget and writes the flagged ones to a report.

Exit codes:
    0 - report written
    1 - the run failed (provider error); no report is written
    2 - invalid configuration
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from collections.abc import Sequence

from tqdm import tqdm

from vigil.core.config import VigilConfig
from vigil.core.constants import BelowThresholdMode, FailurePolicy, ReportFormat, ReportLanguage
from vigil.core.exceptions import ConfigurationError, ReportError, VigilError
from vigil.core.logging import configure_logging, get_logger, set_log_level
from vigil.core.types import ProviderKind
from vigil.core.utils import parse_duration
from vigil.orchestration import evaluate_slos
from vigil.providers import create_provider
from vigil.report import build_report, infer_format, write_report

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vigil",
        description="Find SLOs whose goal may be too loose, based on their error-budget history",
    )
    parser.add_argument(
        "--cloud",
        choices=[kind.value for kind in ProviderKind],
        help="Cloud provider (default: gcp)",
    )
    parser.add_argument("--gcp-project", help="GCP project id")
    parser.add_argument("--dd-site", help="Datadog site, e.g. datadoghq.com, ap1.datadoghq.com, datadoghq.eu")
    parser.add_argument(
        "--error-budget-threshold",
        type=float,
        help="Error budget threshold, between 0 and 1 (default: 0.9)",
    )
    parser.add_argument("--window", help='Target window, e.g. "720h" or "30d" (default: 720h)')
    parser.add_argument("--max-concurrency", type=int, help="Maximum SLOs evaluated in parallel (default: 16)")
    parser.add_argument(
        "--failure-policy",
        choices=[policy.value for policy in FailurePolicy],
        help="Behaviour when an SLO fails with a provider error (default: fail_batch)",
    )
    parser.add_argument(
        "--below-threshold-mode",
        choices=[mode.value for mode in BelowThresholdMode],
        help="Reading of the below-threshold rule (default: never_below)",
    )
    parser.add_argument("-o", "--output", help="Report path, .xlsx, .csv or .json (default: slo_report.xlsx)")
    parser.add_argument("--format", choices=[fmt.value for fmt in ReportFormat], help="Report format")
    parser.add_argument("--lang", choices=[lang.value for lang in ReportLanguage], help="Report language")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _window_hours(value: str) -> float:
    try:
        return parse_duration(value).total_seconds() / 3600
    except ValueError as e:
        raise ConfigurationError("window", reason=str(e), value=value) from e


def apply_args(config: VigilConfig, args: argparse.Namespace) -> VigilConfig:
    """Overlay command-line flags on a loaded configuration."""
    evaluation_changes = {}
    if args.error_budget_threshold is not None:
        evaluation_changes["error_budget_threshold"] = args.error_budget_threshold
    if args.window is not None:
        evaluation_changes["window_hours"] = _window_hours(args.window)
    if args.max_concurrency is not None:
        evaluation_changes["max_concurrency"] = args.max_concurrency
    if args.failure_policy is not None:
        evaluation_changes["failure_policy"] = FailurePolicy(args.failure_policy)
    if args.below_threshold_mode is not None:
        evaluation_changes["below_threshold_mode"] = BelowThresholdMode(args.below_threshold_mode)

    report_changes = {}
    if args.output is not None:
        report_changes["output_path"] = args.output
    if args.format is not None:
        report_changes["format"] = ReportFormat(args.format)
    if args.lang is not None:
        report_changes["language"] = ReportLanguage(args.lang)

    return dataclasses.replace(
        config,
        provider=ProviderKind(args.cloud) if args.cloud else config.provider,
        evaluation=dataclasses.replace(config.evaluation, **evaluation_changes),
        gcp=dataclasses.replace(config.gcp, project_id=args.gcp_project) if args.gcp_project else config.gcp,
        datadog=dataclasses.replace(config.datadog, site=args.dd_site) if args.dd_site else config.datadog,
        report=dataclasses.replace(config.report, **report_changes),
    )


def load_config(args: argparse.Namespace) -> VigilConfig:
    """Load, overlay and validate the configuration before any provider call."""
    base = VigilConfig.from_file(args.config) if args.config else VigilConfig.from_env()
    config = apply_args(base, args)
    config.validate()
    if config.report.format is None:
        try:
            infer_format(config.report.output_path)
        except ReportError as e:
            raise ConfigurationError("output", reason=e.message, value=config.report.output_path) from e
    return config


def run(config: VigilConfig, show_progress: bool = True) -> int:
    """Evaluate the configured provider's SLOs and write the report."""
    scope = config.gcp.project_id if config.provider is ProviderKind.GCP else config.provider.value

    with create_provider(config) as provider:
        logger.info("Getting SLOs...")
        slos = provider.list_slos()

        with tqdm(total=len(slos), desc="Evaluating SLOs", unit="slo", disable=not show_progress) as bar:
            outcome = evaluate_slos(provider, slos, config.evaluation, progress=bar.update)

    report = build_report(
        outcome,
        provider=config.provider,
        scope=scope,
        error_budget_threshold=config.evaluation.error_budget_threshold,
        window_days=config.evaluation.window_hours / 24,
        language=config.report.language,
    )
    path = write_report(report, config.report.output_path, config.report.format)

    for message in outcome.warnings:
        logger.info(message)
    for error in outcome.errors:
        logger.warning(f"Skipped after error: {error}")

    logger.info(f"Report has been written to {path}")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level=logging.INFO, verbose=args.verbose)
    if args.verbose:
        set_log_level(logging.DEBUG)

    try:
        config = load_config(args)
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load config file {args.config}: {e}")
        return EXIT_CONFIG_ERROR

    try:
        return run(config, show_progress=not args.no_progress)
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR
    except ReportError as e:
        logger.error(f"Failed to write report: {e}")
        return EXIT_RUN_FAILED
    except VigilError as e:
        logger.error(f"Error in processing SLOs: {e}")
        return EXIT_RUN_FAILED


if __name__ == "__main__":
    sys.exit(main())
