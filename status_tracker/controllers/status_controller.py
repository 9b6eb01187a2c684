# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: status submission, record queries and slot lookup.
Request parsing only; StatusService owns the rules.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from status_tracker.core.dates import split_ids
from status_tracker.core.dependencies import get_current_actor, get_status_service
from status_tracker.models.domain import Actor
from status_tracker.schemas import RecordLookup, RecordOut, SubmissionRequest, SubmissionResult
from status_tracker.services.status_service import StatusService

router = APIRouter(prefix="/api/v1", tags=["Status"])


@router.post("/status", status_code=201, response_model=SubmissionResult)
def submit_status(
    body: SubmissionRequest,
    response: Response,
    actor: Actor = Depends(get_current_actor),
    service: StatusService = Depends(get_status_service),
):
    """Create the day's record, or overwrite it when one already exists."""
    result = service.submit(actor, body)
    if not result["created"]:
        response.status_code = 200
    return SubmissionResult(created=result["created"], record=RecordOut(**result["record"]))


@router.get("/status", response_model=List[RecordOut])
def list_status(
    user: Optional[str] = None,
    team: Optional[str] = None,
    teams: Optional[str] = Query(default=None, description="Comma-joined team ids"),
    users: Optional[str] = Query(default=None, description="Comma-joined user ids"),
    date: Optional[str] = None,
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    start_date_snake: Optional[str] = Query(default=None, alias="start_date"),
    end_date_snake: Optional[str] = Query(default=None, alias="end_date"),
    month: Optional[str] = Query(default=None, description="YYYY-MM"),
    actor: Actor = Depends(get_current_actor),
    service: StatusService = Depends(get_status_service),
):
    records = service.find_records(
        actor,
        user_id=user,
        team_id=team,
        team_ids=split_ids(teams),
        user_ids=split_ids(users),
        on_date=date,
        start_date=start_date or start_date_snake,
        end_date=end_date or end_date_snake,
        month=month,
    )
    return [RecordOut(**r) for r in records]


@router.get("/status/lookup", response_model=RecordLookup)
def lookup_status(
    team: str,
    user: str,
    date: str,
    actor: Actor = Depends(get_current_actor),
    service: StatusService = Depends(get_status_service),
):
    """The record for one (user, team, date) slot and whether the caller may edit it."""
    result = service.lookup(actor, team, user, date)
    record = RecordOut(**result["record"]) if result["record"] else None
    return RecordLookup(record=record, can_edit=result["can_edit"])
