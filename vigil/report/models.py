"""
Pydantic data models for the SLO report.

These models are the contract between an evaluation run and the report
writer: ratios from the run are converted to percentages here and only
flagged SLOs become rows.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from vigil.core.constants import ReportLanguage
from vigil.core.types import EvaluationRecord, ProviderKind
from vigil.orchestration.runner import RunOutcome

REPORT_SCHEMA_VERSION = "1.0.0"


class ReportRow(BaseModel):
    """One flagged SLO in the report."""

    slo: str = Field(..., min_length=1, description="SLO display name")
    current_goal: float = Field(..., description="Current goal, percent")
    new_goal: float | None = Field(None, description="Proposed goal, filled in by the operator")
    min_budget: float = Field(..., description="Minimum remaining error budget, percent")
    avg_budget: float = Field(..., description="Average remaining error budget, percent")
    good_query: str = ""
    total_query: str = ""

    @classmethod
    def from_record(cls, name: str, record: EvaluationRecord) -> ReportRow:
        return cls(
            slo=name,
            current_goal=record.goal * 100,
            min_budget=record.min_budget * 100,
            avg_budget=record.avg_budget * 100,
            good_query=record.good_query,
            total_query=record.total_query,
        )


class SLOReport(BaseModel):
    """Report of SLOs whose goal may be worth revisiting."""

    schema_version: str = REPORT_SCHEMA_VERSION
    provider: ProviderKind
    scope: str = Field(..., description="GCP project id, or the provider name")
    error_budget_threshold: float = Field(..., gt=0, lt=1)
    window_days: float = Field(..., gt=0)
    language: ReportLanguage = ReportLanguage.EN
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    rows: list[ReportRow] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def flagged_count(self) -> int:
        return len(self.rows)


def build_report(
    outcome: RunOutcome,
    *,
    provider: ProviderKind,
    scope: str,
    error_budget_threshold: float,
    window_days: float,
    language: ReportLanguage = ReportLanguage.EN,
) -> SLOReport:
    """Build a report from the flagged subset of a run outcome.

    Rows are sorted by SLO name so repeated runs produce stable files.
    """
    rows = [ReportRow.from_record(name, record) for name, record in sorted(outcome.flagged.items())]
    return SLOReport(
        provider=provider,
        scope=scope,
        error_budget_threshold=error_budget_threshold,
        window_days=window_days,
        language=language,
        rows=rows,
        warnings=list(outcome.warnings),
    )
