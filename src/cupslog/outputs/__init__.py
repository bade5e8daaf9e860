"""Report registry."""

# Ensure built-in reports register themselves
from . import csv_writer  # noqa: F401
from .base import (
    BOM,
    ReportContext,
    ReportModule,
    export_filename,
    get_report_module,
    list_reports,
    render_report,
)

__all__ = [
    "BOM",
    "ReportContext",
    "ReportModule",
    "export_filename",
    "get_report_module",
    "list_reports",
    "render_report",
]
