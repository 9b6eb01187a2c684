# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: who am I."""
from fastapi import APIRouter, Depends

from status_tracker.core.dependencies import get_current_actor
from status_tracker.models.domain import Actor
from status_tracker.schemas import ActorOut

router = APIRouter(prefix="/api/v1", tags=["Auth"])


@router.get("/auth/me", response_model=ActorOut)
def me(actor: Actor = Depends(get_current_actor)):
    return ActorOut(id=actor.id, name=actor.name, role=actor.role)
