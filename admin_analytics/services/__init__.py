"""Service layer package."""

__all__ = [
    "tracking_service",
    "analytics_service",
    "report_service",
    "report_renderer",
    "filters",
]
