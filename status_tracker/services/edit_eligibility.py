# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: edit eligibility predicate.
"""

from typing import Any, Optional

from status_tracker.models.domain import Actor, PRIVILEGED_ROLES


def can_edit(actor: Actor, existing_record: Optional[dict[str, Any]]) -> bool:
    """
    Whether ``actor`` may write the (user, team, date) slot holding
    ``existing_record``. A free slot is always writable; an occupied one
    belongs to its submitter, managers and admins.
    """
    if existing_record is None:
        return True
    if actor.role in PRIVILEGED_ROLES:
        return True
    return actor.id == existing_record.get("submitted_by")
