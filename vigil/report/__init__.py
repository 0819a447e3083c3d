"""
Report module - flagged SLO report models and rendering.
"""

from vigil.report.models import ReportRow, SLOReport, build_report
from vigil.report.writer import describe, infer_format, to_dataframe, write_report

__all__ = [
    "ReportRow",
    "SLOReport",
    "build_report",
    "describe",
    "infer_format",
    "to_dataframe",
    "write_report",
]
