"""
Bounded concurrent evaluation of SLOs.

The runner fans SLOs out to a fixed-size worker pool, fetches each one's
error-budget samples from the provider, evaluates them and merges the
records into state owned by a single run:

- At most ``max_concurrency`` SLOs are in flight; the dispatcher blocks on an
  admission gate until a worker frees a slot.
- "No data" is recorded as a warning and never fails the batch.
- Any other failure is a hard error. What happens next depends on the
  failure policy; under the default FAIL_BATCH every dispatched SLO still
  runs to completion and the first hard error is raised in place of the
  results.

Run lifecycle: IDLE -> DISPATCHING -> DRAINING -> COMPLETED | ABORTED
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from vigil.analysis.evaluator import SLOEvaluator
from vigil.core.config import EvaluationConfig
from vigil.core.constants import DEFAULT_MAX_CONCURRENCY, FailurePolicy
from vigil.core.exceptions import NoDataError, ProviderError, SLOProcessingError
from vigil.core.logging import EventType, get_logger, log_event
from vigil.core.protocols import SLOProvider
from vigil.core.types import SLO, EvaluationRecord

logger = get_logger(__name__)

ProgressCallback = Callable[[int], object]


class RunState(str, Enum):
    """Lifecycle of a single evaluation run."""

    IDLE = "idle"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    COMPLETED = "completed"
    ABORTED = "aborted"


_TRANSITIONS: dict[RunState, tuple[RunState, ...]] = {
    RunState.IDLE: (RunState.DISPATCHING,),
    RunState.DISPATCHING: (RunState.DRAINING,),
    RunState.DRAINING: (RunState.COMPLETED, RunState.ABORTED),
    RunState.COMPLETED: (),
    RunState.ABORTED: (),
}


@dataclass
class RunOutcome:
    """Result aggregate of a completed run.

    ``results`` maps SLO display name to its evaluation record. ``errors``
    is only ever non-empty under the BEST_EFFORT policy.
    """

    results: dict[str, EvaluationRecord]
    warnings: list[str] = field(default_factory=list)
    errors: list[ProviderError] = field(default_factory=list)
    state: RunState = RunState.COMPLETED

    @property
    def flagged(self) -> dict[str, EvaluationRecord]:
        """Records whose flag is set."""
        return {name: record for name, record in self.results.items() if record.flag}

    def summary(self) -> dict[str, int]:
        return {
            "evaluated": len(self.results),
            "flagged": len(self.flagged),
            "warnings": len(self.warnings),
            "errors": len(self.errors),
        }


class _RunState:
    """Mutable state owned by one ``SLOEvaluationRunner.run`` call.

    The result map, the warning list and the error list each have their own
    lock; every write holds it only for the merge of a single item.
    """

    def __init__(self) -> None:
        self.results: dict[str, EvaluationRecord] = {}
        self.warnings: list[str] = []
        self.errors: list[ProviderError] = []
        self.state = RunState.IDLE
        self._results_lock = threading.Lock()
        self._warnings_lock = threading.Lock()
        self._errors_lock = threading.Lock()

    def transition(self, new_state: RunState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid run state transition: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def merge_record(
        self,
        display_name: str,
        record: EvaluationRecord,
        on_merged: ProgressCallback | None = None,
    ) -> None:
        with self._results_lock:
            if display_name in self.results:
                logger.debug(f"Duplicate SLO display name, overwriting earlier record: {display_name}")
            self.results[display_name] = record
            if on_merged is not None:
                on_merged(1)

    def add_warning(self, message: str) -> None:
        with self._warnings_lock:
            self.warnings.append(message)

    def record_error(self, error: ProviderError) -> bool:
        """Store a hard error. Returns True if it is the first one of the run."""
        with self._errors_lock:
            self.errors.append(error)
            return len(self.errors) == 1

    @property
    def has_error(self) -> bool:
        with self._errors_lock:
            return bool(self.errors)

    @property
    def first_error(self) -> ProviderError | None:
        with self._errors_lock:
            return self.errors[0] if self.errors else None


class SLOEvaluationRunner:
    """Evaluates a batch of SLOs under a bounded worker budget.

    A runner instance holds configuration only; all per-run state is created
    inside ``run`` so one runner can be reused or driven from several
    threads at once.

    Example:
        >>> runner = SLOEvaluationRunner(provider, SLOEvaluator(0.9), window=timedelta(days=30))
        >>> outcome = runner.run(provider.list_slos())
        >>> outcome.flagged
    """

    def __init__(
        self,
        provider: SLOProvider,
        evaluator: SLOEvaluator,
        *,
        window: timedelta,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        failure_policy: FailurePolicy = FailurePolicy.FAIL_BATCH,
        progress: ProgressCallback | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")
        self.provider = provider
        self.evaluator = evaluator
        self.window = window
        self.max_concurrency = max_concurrency
        self.failure_policy = failure_policy
        self.progress = progress

    def run(self, slos: Iterable[SLO]) -> RunOutcome:
        """Evaluate every SLO and return the merged outcome.

        Args:
            slos: SLOs to evaluate, typically from ``provider.list_slos()``.

        Returns:
            RunOutcome with one record per SLO that produced data.

        Raises:
            ProviderError: The first hard error of the run, unless the policy
                is BEST_EFFORT. No partial results are returned in that case.
        """
        slo_list = list(slos)
        state = _RunState()
        gate = threading.BoundedSemaphore(self.max_concurrency)
        start_time = time.time()

        state.transition(RunState.DISPATCHING)
        log_event(
            logger, logging.INFO, EventType.RUN_START, self.provider.kind.value,
            "Evaluating SLOs",
            slos=len(slo_list), max_concurrency=self.max_concurrency, policy=self.failure_policy.value,
        )

        with ThreadPoolExecutor(max_workers=self.max_concurrency, thread_name_prefix="vigil-eval") as executor:
            futures = []
            for slo in slo_list:
                gate.acquire()
                if self.failure_policy is FailurePolicy.FAIL_FAST and state.has_error:
                    gate.release()
                    logger.info(
                        "Stopping dispatch after hard error, %d of %d SLOs not started",
                        len(slo_list) - len(futures), len(slo_list),
                    )
                    break
                futures.append(executor.submit(self._process_slo, slo, state, gate))

            state.transition(RunState.DRAINING)
            wait(futures)

        # Workers capture provider failures themselves; anything left here is a bug
        for future in futures:
            future.result()

        duration = time.time() - start_time
        first_error = state.first_error

        if first_error is not None and self.failure_policy is not FailurePolicy.BEST_EFFORT:
            state.transition(RunState.ABORTED)
            log_event(
                logger, logging.ERROR, EventType.RUN_ABORTED, self.provider.kind.value,
                "Discarding results after hard error",
                errors=len(state.errors), duration_s=f"{duration:.1f}",
            )
            raise first_error

        state.transition(RunState.COMPLETED)
        outcome = RunOutcome(
            results=dict(state.results),
            warnings=list(state.warnings),
            errors=list(state.errors),
            state=state.state,
        )
        log_event(
            logger, logging.INFO, EventType.RUN_COMPLETE, self.provider.kind.value,
            "Evaluation finished", duration_s=f"{duration:.1f}", **outcome.summary(),
        )
        return outcome

    def _process_slo(self, slo: SLO, state: _RunState, gate: threading.BoundedSemaphore) -> None:
        """Fetch, evaluate and merge one SLO (runs on a worker thread)."""
        provider_name = self.provider.kind.value
        try:
            try:
                sequence = self.provider.fetch_point_sequence(slo, self.window)
                if sequence.is_empty:
                    raise NoDataError(slo.display_name, provider=provider_name)
                record = self.evaluator.evaluate(slo, sequence)
            except NoDataError as e:
                state.add_warning(str(e))
                log_event(logger, logging.DEBUG, EventType.SLO_NO_DATA, slo.display_name, "No data points")
                return
            except Exception as e:
                error = SLOProcessingError(slo.display_name, provider=provider_name, cause=e)
                is_first = state.record_error(error)
                log_event(
                    logger, logging.ERROR if is_first else logging.WARNING,
                    EventType.SLO_FAILED, slo.display_name, str(e),
                )
                return

            state.merge_record(slo.display_name, record, self.progress)
            log_event(
                logger, logging.DEBUG, EventType.SLO_EVALUATED, slo.display_name, "Evaluated",
                flag=record.flag, points=len(sequence),
            )
        finally:
            gate.release()


def evaluate_slos(
    provider: SLOProvider,
    slos: Iterable[SLO],
    config: EvaluationConfig | None = None,
    progress: ProgressCallback | None = None,
) -> RunOutcome:
    """Evaluate ``slos`` with an evaluator and runner built from ``config``.

    Raises:
        ConfigurationError: If ``config`` is invalid.
        ProviderError: The first hard error of the run (see ``FailurePolicy``).
    """
    config = config or EvaluationConfig()
    config.validate()
    runner = SLOEvaluationRunner(
        provider,
        SLOEvaluator.from_config(config),
        window=config.window,
        max_concurrency=config.max_concurrency,
        failure_policy=config.failure_policy,
        progress=progress,
    )
    return runner.run(slos)


def evaluate_provider(
    provider: SLOProvider,
    config: EvaluationConfig | None = None,
    progress: ProgressCallback | None = None,
) -> RunOutcome:
    """List every SLO from ``provider`` and evaluate them.

    Raises:
        ConfigurationError: If ``config`` is invalid.
        ProviderError: If listing fails or the run aborts.
    """
    config = config or EvaluationConfig()
    config.validate()
    logger.info("Getting SLOs...")
    slos = provider.list_slos()
    return evaluate_slos(provider, slos, config, progress)
