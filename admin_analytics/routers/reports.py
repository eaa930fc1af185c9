"""HTML report pages, CSV/JSON exports and the live dashboard."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.orm import Session

from admin_analytics.core.config import settings
from admin_analytics.core.constants import ExportFormat, ReportType
from admin_analytics.core.database import get_db
from admin_analytics.dependencies.auth import get_report_viewer
from admin_analytics.models.admin import Admin
from admin_analytics.models.base import utcnow
from admin_analytics.services import report_renderer
from admin_analytics.services.analytics_service import AnalyticsService
from admin_analytics.services.report_service import ReportService, normalize_range, parse_range

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])


def _login_redirect() -> RedirectResponse:
    return RedirectResponse(settings.LOGIN_URL, status_code=302)


@router.get("/reports")
async def view_report(
    request: Request,
    type: str = Query(ReportType.OVERVIEW.value),
    range: Optional[str] = Query(None),
    format: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    viewer = get_report_viewer(request, db)
    if viewer is None:
        return _login_redirect()

    export_format = report_renderer.parse_format(format)
    range_code = normalize_range(range)
    start, end = parse_range(range_code.value)
    data = ReportService.generate(db, type, start, end)

    if export_format is ExportFormat.HTML:
        return report_renderer.render_html(
            request,
            type,
            data,
            start_date=start.isoformat(),
            end_date=end.isoformat(),
            range_code=range_code.value,
        )

    if export_format is ExportFormat.CSV:
        body = report_renderer.render_csv(type, data)
    else:
        body = report_renderer.render_json(data)

    filename = report_renderer.export_filename(type, range_code, export_format)
    logger.info(f"Admin {viewer.admin_id} exported {filename}")
    return Response(
        content=body,
        media_type=report_renderer.MEDIA_TYPES[export_format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/dashboard")
async def view_dashboard(request: Request, db: Session = Depends(get_db)):
    viewer = get_report_viewer(request, db)
    if viewer is None:
        return _login_redirect()

    today = utcnow().date()
    admin = db.query(Admin).filter(Admin.id == viewer.admin_id).first()
    return report_renderer.render_dashboard(
        request,
        admin=admin,
        today=today.isoformat(),
        summary=AnalyticsService.summary(db, today),
        recent_activities=AnalyticsService.list_activities(db, limit=20),
        security_events=AnalyticsService.list_security_events(db, limit=10),
        performance=AnalyticsService.performance(db, today),
    )
