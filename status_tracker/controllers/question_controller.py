# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: question registry endpoints.
Request parsing only; QuestionService owns the rules.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from status_tracker.core.dependencies import get_current_actor, get_question_service
from status_tracker.models.domain import Actor
from status_tracker.schemas import QuestionCreate, QuestionOut, QuestionUpdate
from status_tracker.services.question_service import QuestionService

router = APIRouter(prefix="/api/v1", tags=["Questions"])


@router.post("/questions", status_code=201, response_model=QuestionOut)
def create_question(
    payload: QuestionCreate,
    actor: Actor = Depends(get_current_actor),
    service: QuestionService = Depends(get_question_service),
):
    return service.create_question(
        actor, text=payload.text, is_common=payload.is_common,
        teams=payload.teams, order=payload.order,
    )


@router.get("/questions", response_model=List[QuestionOut])
def list_questions(
    team: Optional[str] = None,
    is_common: Optional[bool] = Query(default=None, alias="isCommon"),
    include_inactive: bool = False,
    actor: Actor = Depends(get_current_actor),
    service: QuestionService = Depends(get_question_service),
):
    return service.list_questions(
        actor, team_id=team, is_common=is_common, include_inactive=include_inactive,
    )


@router.get("/questions/form", response_model=List[QuestionOut])
def form_questions(
    team: str,
    actor: Actor = Depends(get_current_actor),
    service: QuestionService = Depends(get_question_service),
):
    """Active questions shown on a team's submission form."""
    return service.form_questions(actor, team)


@router.get("/questions/{question_id}", response_model=QuestionOut)
def get_question(
    question_id: str,
    actor: Actor = Depends(get_current_actor),
    service: QuestionService = Depends(get_question_service),
):
    return service.get_question(actor, question_id)


@router.patch("/questions/{question_id}", response_model=QuestionOut)
def update_question(
    question_id: str,
    payload: QuestionUpdate,
    actor: Actor = Depends(get_current_actor),
    service: QuestionService = Depends(get_question_service),
):
    return service.update_question(actor, question_id, payload.model_dump(exclude_unset=True))


@router.delete("/questions/{question_id}", response_model=QuestionOut)
def deactivate_question(
    question_id: str,
    actor: Actor = Depends(get_current_actor),
    service: QuestionService = Depends(get_question_service),
):
    """Soft delete: the question is deactivated, never removed."""
    return service.deactivate_question(actor, question_id)
