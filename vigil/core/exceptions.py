"""
Custom exception hierarchy for the SLO evaluation pipeline.

This module provides a structured exception hierarchy that enables:
- Telling non-fatal "no data" conditions apart from hard provider failures
- Rich error context for debugging
- Consistent error messages across providers
"""

from __future__ import annotations

from typing import Any


class VigilError(Exception):
    """Base exception for all Vigil errors.

    All custom exceptions inherit from this class, enabling catching
    every evaluation-related error with a single except clause.
    """

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        self.cause = cause
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message including context."""
        parts = [self.message]
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"[{context_str}]")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " ".join(parts)


# =============================================================================
# Provider-Related Exceptions
# =============================================================================


class ProviderError(VigilError):
    """Raised when a monitoring provider call fails.

    Examples:
        - Connection failure or timeout
        - Authentication rejected by the provider
        - Malformed or unexpected response payload
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        context = dict(context or {})
        if provider:
            context.setdefault("provider", provider)
        super().__init__(message, context=context, cause=cause)
        self.provider = provider


class NoDataError(ProviderError):
    """Raised when an SLO has zero error-budget samples in the window.

    This is the only provider failure the evaluation runner treats as
    non-fatal: it is recorded as a warning and the batch carries on.
    """

    def __init__(self, display_name: str, *, provider: str | None = None) -> None:
        # Message is surfaced verbatim as the run warning, so no context suffix.
        super().__init__(f"no data points found for SLO: {display_name}")
        self.display_name = display_name
        self.provider = provider


class SLOProcessingError(ProviderError):
    """Raised when fetching or evaluating a single SLO fails."""

    def __init__(
        self,
        display_name: str,
        *,
        reason: str | None = None,
        provider: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        message = f"failed to process SLO {display_name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, provider=provider, cause=cause)
        self.display_name = display_name


# =============================================================================
# Configuration-Related Exceptions
# =============================================================================


class ConfigurationError(VigilError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        parameter: str,
        *,
        reason: str,
        value: Any = None,
    ) -> None:
        context = {"parameter": parameter}
        if value is not None:
            context["value"] = value
        super().__init__(f"Configuration error for {parameter}: {reason}", context=context)
        self.parameter = parameter


# =============================================================================
# Report-Related Exceptions
# =============================================================================


class ReportError(VigilError):
    """Raised when the SLO report cannot be rendered or written."""

    def __init__(
        self,
        path: str,
        *,
        reason: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(f"Failed to write report: {reason}", context={"path": path}, cause=cause)
        self.path = path
