# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: question registry. Creation, edits and scoped listing.
Questions are never removed; deleting one deactivates it.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from status_tracker.core.exceptions import Forbidden, NotFound, ValidationError
from status_tracker.core.logging import get_logger
from status_tracker.models.domain import Actor
from status_tracker.repositories.directory_repository import DirectoryRepository
from status_tracker.repositories.question_repository import QuestionRepository
from status_tracker.services.access_scope import AccessScope

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def applies_to_team(question: dict[str, Any], team_id: str) -> bool:
    return question["is_common"] or team_id in question.get("teams", ())


class QuestionService:
    """Business logic for the question registry."""

    def __init__(
        self,
        question_repo: QuestionRepository,
        directory: DirectoryRepository,
        access: AccessScope,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._questions = question_repo
        self._directory = directory
        self._access = access
        self._clock = clock

    # ── Commands ──

    def create_question(self, actor: Actor, text: str, is_common: bool = False,
                        teams: Optional[list[str]] = None, order: int = 0) -> dict[str, Any]:
        self._require_privileged(actor)
        text = self._clean_text(text)
        team_ids = self._validate_teams(teams or [])
        question = self._questions.create(
            str(uuid.uuid4()), text, is_common, team_ids, order, actor.id, self._clock()
        )
        logger.info("Question created id=%s common=%s teams=%d by=%s",
                    question["id"], is_common, len(team_ids), actor.id)
        return question

    def update_question(self, actor: Actor, question_id: str,
                        changes: dict[str, Any]) -> dict[str, Any]:
        """Partially update a question. ``changes`` uses API field names."""
        question = self._get_editable(actor, question_id)

        fields: dict[str, Any] = {}
        if changes.get("text") is not None:
            fields["text"] = self._clean_text(changes["text"])
        if changes.get("is_common") is not None:
            fields["is_common"] = bool(changes["is_common"])
        if changes.get("order") is not None:
            fields["display_order"] = int(changes["order"])
        if changes.get("active") is not None:
            fields["active"] = bool(changes["active"])
        team_ids = None
        if changes.get("teams") is not None:
            team_ids = self._validate_teams(changes["teams"])

        updated = self._questions.update(question["id"], fields, team_ids, self._clock())
        logger.info("Question updated id=%s fields=%s", question_id,
                    sorted(fields) + (["teams"] if team_ids is not None else []))
        return updated

    def deactivate_question(self, actor: Actor, question_id: str) -> dict[str, Any]:
        question = self._get_editable(actor, question_id)
        updated = self._questions.update(question["id"], {"active": False}, None, self._clock())
        logger.info("Question deactivated id=%s by=%s", question_id, actor.id)
        return updated

    # ── Queries ──

    def list_questions(self, actor: Actor, team_id: Optional[str] = None,
                       is_common: Optional[bool] = None,
                       include_inactive: bool = False) -> list[dict[str, Any]]:
        include_inactive = include_inactive and actor.is_privileged
        scope = self._access.visible_team_ids(actor)
        if team_id and scope is not None and team_id not in scope:
            raise Forbidden("Team outside the actor's teams")
        return self._questions.list(
            is_common=is_common, team_id=team_id, scope_team_ids=scope,
            include_inactive=include_inactive,
        )

    def form_questions(self, actor: Actor, team_id: str) -> list[dict[str, Any]]:
        """Active questions a submission form for ``team_id`` shows."""
        if self._directory.get_team(team_id) is None:
            raise NotFound(f"Team {team_id} not found")
        if not actor.is_privileged and not self._directory.is_member(team_id, actor.id):
            raise Forbidden("Employees only see forms of their own teams")
        return self._questions.list(scope_team_ids=[team_id])

    def get_question(self, actor: Actor, question_id: str) -> dict[str, Any]:
        question = self._questions.get(question_id)
        if question is None:
            raise NotFound(f"Question {question_id} not found")
        if actor.is_admin or question["is_common"]:
            return question
        visible = self._access.visible_team_ids(actor) or set()
        if not visible.intersection(question["teams"]):
            raise Forbidden("Question outside the actor's teams")
        return question

    # ── Private ──

    def _get_editable(self, actor: Actor, question_id: str) -> dict[str, Any]:
        self._require_privileged(actor)
        question = self._questions.get(question_id)
        if question is None:
            raise NotFound(f"Question {question_id} not found")
        if not actor.is_admin and question["created_by"] != actor.id:
            raise Forbidden("Only the creator or an admin may change a question")
        return question

    def _validate_teams(self, team_ids: list[str]) -> list[str]:
        team_ids = list(dict.fromkeys(t for t in team_ids if t))
        known = {t["id"] for t in self._directory.list_teams(team_ids)}
        missing = [t for t in team_ids if t not in known]
        if missing:
            raise NotFound(f"Unknown teams: {', '.join(missing)}")
        return team_ids

    @staticmethod
    def _clean_text(text: str) -> str:
        if not text or not text.strip():
            raise ValidationError("Question text is required", field="text")
        return text.strip()

    @staticmethod
    def _require_privileged(actor: Actor) -> None:
        if not actor.is_privileged:
            raise Forbidden("Only managers and admins manage questions")
