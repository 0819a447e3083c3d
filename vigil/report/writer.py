"""
Report rendering to XLSX, CSV or JSON.
"""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill

from vigil.core.constants import ReportFormat, ReportLanguage
from vigil.core.exceptions import ReportError
from vigil.core.logging import get_logger
from vigil.report.models import SLOReport

logger = get_logger(__name__)

COLUMNS = ["slo", "current_goal", "new_goal", "min_budget", "avg_budget", "good_query", "total_query"]

HEADERS: dict[ReportLanguage, dict[str, str]] = {
    ReportLanguage.EN: {
        "slo": "SLO",
        "current_goal": "Current SLO (%)",
        "new_goal": "New SLO (%)",
        "min_budget": "Min Error Budget (%)",
        "avg_budget": "Avg Error Budget (%)",
        "good_query": "Good Query",
        "total_query": "Total Query",
    },
    ReportLanguage.JA: {
        "slo": "SLO",
        "current_goal": "現在のSLO (%)",
        "new_goal": "新しいSLO (%)",
        "min_budget": "最小エラーバジェット (%)",
        "avg_budget": "平均エラーバジェット (%)",
        "good_query": "Good クエリ",
        "total_query": "Total クエリ",
    },
}

DESCRIPTIONS: dict[ReportLanguage, str] = {
    ReportLanguage.EN: (
        "SLOs in {scope} whose error budget stayed above {threshold:g}% or was mostly "
        "negative over the last {days:g} days. Fill in the new SLO column."
    ),
    ReportLanguage.JA: (
        "{scope} の SLO のうち、過去 {days:g} 日間でエラーバジェットが {threshold:g}% を"
        "下回らなかった、または大半が負だったもの。新しいSLO列を記入してください。"
    ),
}

GENERATED_BY: dict[ReportLanguage, str] = {
    ReportLanguage.EN: "Generated by Vigil",
    ReportLanguage.JA: "Vigil によって生成されました",
}

# Sheet layout: description and note in row 1, headers in row 2, data from row 3
SHEET_NAME = "Sheet1"
_HEADER_ROW = 2
_NEW_GOAL_COLUMN = "C"
_COLUMN_WIDTHS = {"A": 50, "B": 10, "C": 10, "D": 10, "E": 10, "F": 50, "G": 50}

_BOLD = Font(bold=True)
_HIGHLIGHT_FILL = PatternFill(fill_type="solid", start_color="21CE9C", end_color="21CE9C")
_DESCRIPTION_FONT = Font(bold=True, color="DE3163")


def describe(report: SLOReport) -> str:
    """One-line description of the report scope, in the report language."""
    return DESCRIPTIONS[report.language].format(
        scope=report.scope,
        threshold=report.error_budget_threshold * 100,
        days=report.window_days,
    )


def to_dataframe(report: SLOReport) -> pd.DataFrame:
    """Tabulate report rows with localized column headers."""
    frame = pd.DataFrame([row.model_dump() for row in report.rows], columns=COLUMNS)
    return frame.rename(columns=HEADERS[report.language])


def infer_format(path: str | Path) -> ReportFormat:
    suffix = Path(path).suffix.lower().lstrip(".")
    try:
        return ReportFormat(suffix)
    except ValueError as e:
        raise ReportError(str(path), reason=f"cannot infer format from suffix '{suffix}'") from e


def _write_xlsx(report: SLOReport, path: Path) -> None:
    """Write the operator workbook.

    Row 1 holds the description and a generated-by note, row 2 the bold
    headers, and the blank new-goal column is highlighted for the operator
    to fill in.
    """
    frame = to_dataframe(report)
    last_row = _HEADER_ROW + len(frame)

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, startrow=_HEADER_ROW - 1, index=False)
        sheet = writer.sheets[SHEET_NAME]

        for cell, text in (("A1", describe(report)), ("F1", GENERATED_BY[report.language])):
            sheet[cell] = text
            sheet[cell].font = _DESCRIPTION_FONT
            sheet[cell].alignment = Alignment(wrap_text=True)

        for cell in sheet[_HEADER_ROW]:
            cell.font = _BOLD
        for row in range(_HEADER_ROW, last_row + 1):
            cell = sheet[f"{_NEW_GOAL_COLUMN}{row}"]
            cell.font = _BOLD
            cell.fill = _HIGHLIGHT_FILL

        for column, width in _COLUMN_WIDTHS.items():
            sheet.column_dimensions[column].width = width


def write_report(report: SLOReport, path: str | Path, fmt: ReportFormat | None = None) -> Path:
    """Write the report to ``path``.

    XLSX output is the operator workbook. CSV output holds the table only.
    JSON output holds the full report including metadata and warnings.

    Args:
        report: Report to write.
        path: Destination file.
        fmt: Output format; inferred from the file suffix when omitted.

    Returns:
        The path written.

    Raises:
        ReportError: If the format is unknown or writing fails.
    """
    path = Path(path)
    fmt = fmt or infer_format(path)

    try:
        if fmt is ReportFormat.XLSX:
            _write_xlsx(report, path)
        elif fmt is ReportFormat.CSV:
            to_dataframe(report).to_csv(path, index=False, float_format="%.2f")
        else:
            payload = report.model_dump(mode="json")
            payload["description"] = describe(report)
            path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        raise ReportError(str(path), reason=str(e), cause=e) from e

    logger.info(f"Report with {report.flagged_count} SLOs written to {path}")
    return path
