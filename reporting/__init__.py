from .correlator import (
    ArtifactFile,
    ReportCorrelator,
    correlate,
    load_structured_report,
    scan_artifacts,
    select_screenshot,
    write_allure_results,
)
from .summary import build_summary, cleanup_old_reports, write_summary

__all__ = [
    "ArtifactFile",
    "ReportCorrelator",
    "build_summary",
    "cleanup_old_reports",
    "correlate",
    "load_structured_report",
    "scan_artifacts",
    "select_screenshot",
    "write_allure_results",
    "write_summary",
]
