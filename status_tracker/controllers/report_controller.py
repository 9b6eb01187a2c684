# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: report export, preview and filter options.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette.responses import Response

from status_tracker.core.config import settings
from status_tracker.core.dates import split_ids
from status_tracker.core.dependencies import get_current_actor, get_report_service
from status_tracker.models.domain import Actor
from status_tracker.schemas import ReportPreview, TeamOption
from status_tracker.services.report_renderer import XLSX_MEDIA_TYPE, render_workbook
from status_tracker.services.report_service import ReportService

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


class ReportParams:
    """Shared team/user/date-range vocabulary of every report endpoint."""

    def __init__(
        self,
        team: Optional[str] = None,
        teams: Optional[str] = Query(default=None, description="Comma-joined team ids"),
        user: Optional[str] = None,
        users: Optional[str] = Query(default=None, description="Comma-joined user ids"),
        start_date: Optional[str] = Query(default=None, alias="startDate"),
        end_date: Optional[str] = Query(default=None, alias="endDate"),
        start_date_snake: Optional[str] = Query(default=None, alias="start_date"),
        end_date_snake: Optional[str] = Query(default=None, alias="end_date"),
        month: Optional[str] = Query(default=None, description="YYYY-MM"),
    ):
        self.team_ids = split_ids(teams) or split_ids(team)
        self.user_ids = split_ids(users) or split_ids(user)
        self.start_date = start_date or start_date_snake
        self.end_date = end_date or end_date_snake
        self.month = month

    def as_kwargs(self) -> dict:
        return {
            "team_ids": self.team_ids,
            "user_ids": self.user_ids,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "month": self.month,
        }


@router.get("/excel")
def export_excel(
    params: ReportParams = Depends(),
    actor: Actor = Depends(get_current_actor),
    service: ReportService = Depends(get_report_service),
):
    """Download the status report as an xlsx workbook."""
    report = service.build_report(actor, output_format="xlsx", **params.as_kwargs())
    content = render_workbook(report)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={settings.REPORT_FILENAME}"},
    )


@router.get("/preview", response_model=ReportPreview)
def preview_report(
    params: ReportParams = Depends(),
    actor: Actor = Depends(get_current_actor),
    service: ReportService = Depends(get_report_service),
):
    return service.build_report(actor, output_format="json", **params.as_kwargs())


@router.get("/options", response_model=List[TeamOption])
def report_options(
    actor: Actor = Depends(get_current_actor),
    service: ReportService = Depends(get_report_service),
):
    """Accessible teams and their members, for report filter dropdowns."""
    return service.report_options(actor)
