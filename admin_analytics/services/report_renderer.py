"""Render generated reports as HTML, CSV or JSON."""
import csv
import io
import json
from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates

from admin_analytics.core.constants import DateRange, ExportFormat, ReportType
from admin_analytics.utils.errors import EmptyResultError, InvalidReportType, ValidationError

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

# Reports exported as one metric,value row per key
SCALAR_REPORTS = {ReportType.OVERVIEW, ReportType.SYSTEM_HEALTH}

# Table exported for the tabular report types
TABULAR_SECTIONS = {
    ReportType.ADMIN_ACTIVITY: "admin_summary",
    ReportType.SECURITY: "security_events",
    ReportType.PERFORMANCE: "admin_performance",
    ReportType.FEATURE_USAGE: "feature_usage",
}

MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.JSON: "application/json",
}


def _cell(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if value is None:
        return ""
    return value


def rows_to_csv(rows: list[dict]) -> str:
    """Header from the first row's keys, then one line per row."""
    if not rows:
        raise EmptyResultError("No rows to export")
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    header = list(rows[0].keys())
    writer.writerow(header)
    for row in rows:
        writer.writerow([_cell(row.get(key)) for key in header])
    return buffer.getvalue()


def metrics_to_csv(data: dict) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["metric", "value"])
    for key, value in data.items():
        writer.writerow([key, _cell(value)])
    return buffer.getvalue()


def render_csv(report_type: str, data: dict) -> str:
    try:
        report_type = ReportType(report_type)
    except ValueError:
        raise InvalidReportType(f"Invalid report type: {report_type}")
    if report_type in SCALAR_REPORTS:
        return metrics_to_csv(data)
    return rows_to_csv(data.get(TABULAR_SECTIONS[report_type]) or [])


def render_json(data: Any) -> str:
    return json.dumps(data, indent=4, default=str)


def export_filename(report_type: str, range_code: DateRange, export_format: ExportFormat) -> str:
    return f"admin_analytics_{report_type}_{range_code.value}.{export_format.value}"


def parse_format(value: str | None) -> ExportFormat:
    try:
        return ExportFormat((value or ExportFormat.HTML.value).lower())
    except ValueError:
        raise ValidationError(f"Invalid export format: {value}")


def render_html(request: Request, report_type: str, data: dict, **context):
    return templates.TemplateResponse(
        request,
        "reports/report.html",
        {
            "report_type": report_type,
            "report_types": [t.value for t in ReportType],
            "date_ranges": [r.value for r in DateRange],
            "data": data,
            **context,
        },
    )


def render_dashboard(request: Request, **context):
    return templates.TemplateResponse(request, "dashboard.html", context)
