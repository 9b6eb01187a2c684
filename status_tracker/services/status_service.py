# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: status submissions and record queries.
Coordinates the date window, edit eligibility and the record store.
"""

from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from status_tracker.core.dates import month_bounds, parse_iso_date, parse_optional_date
from status_tracker.core.exceptions import Forbidden, NotFound, ValidationError
from status_tracker.core.logging import get_logger
from status_tracker.metrics import STATUS_SUBMISSIONS
from status_tracker.models.domain import Actor
from status_tracker.repositories.directory_repository import DirectoryRepository
from status_tracker.repositories.question_repository import QuestionRepository
from status_tracker.repositories.status_repository import StatusRepository
from status_tracker.schemas import LeaveSubmission, SubmissionRequest
from status_tracker.services.access_scope import AccessScope
from status_tracker.services.date_window import ensure_allowed
from status_tracker.services.edit_eligibility import can_edit

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalise_payload(submission: SubmissionRequest) -> tuple[bool, Optional[str], list[tuple[str, str]]]:
    """
    Validate the leave/responses variant.
    Returns ``(is_leave, leave_reason, [(question_id, answer), ...])``.
    """
    if isinstance(submission, LeaveSubmission):
        reason = (submission.leave_reason or "").strip()
        if not reason:
            raise ValidationError("Please provide a reason for leave", field="leave_reason")
        return True, reason, []

    responses: list[tuple[str, str]] = []
    seen: set[str] = set()
    for item in submission.responses:
        answer = (item.answer or "").strip()
        if not answer:
            continue
        if item.question in seen:
            raise ValidationError(f"Duplicate response for question {item.question}",
                                  field="responses")
        seen.add(item.question)
        responses.append((item.question, answer))
    if not responses:
        raise ValidationError("Please provide at least one response", field="responses")
    return False, None, responses


class StatusService:
    """Business logic for submitting and reading status records."""

    def __init__(
        self,
        status_repo: StatusRepository,
        question_repo: QuestionRepository,
        directory: DirectoryRepository,
        access: AccessScope,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._records = status_repo
        self._questions = question_repo
        self._directory = directory
        self._access = access
        self._clock = clock

    # ── Commands ──

    def submit(self, actor: Actor, submission: SubmissionRequest) -> dict[str, Any]:
        """Create or replace the record for (user, team, date)."""
        kind = "leave" if isinstance(submission, LeaveSubmission) else "status"
        try:
            result = self._submit(actor, submission)
        except Exception as exc:
            STATUS_SUBMISSIONS.labels(kind=kind, outcome=type(exc).__name__).inc()
            raise
        STATUS_SUBMISSIONS.labels(
            kind=kind, outcome="created" if result["created"] else "updated"
        ).inc()
        return result

    def _submit(self, actor: Actor, submission: SubmissionRequest) -> dict[str, Any]:
        is_leave, leave_reason, responses = normalise_payload(submission)
        record_date = parse_iso_date(submission.date, "date")
        now = self._clock()
        ensure_allowed(record_date, now)

        if self._directory.get_team(submission.team) is None:
            raise NotFound(f"Team {submission.team} not found")
        if self._directory.get_user(submission.user) is None:
            raise NotFound(f"User {submission.user} not found")
        if not self._directory.is_member(submission.team, submission.user):
            raise ValidationError("User is not a member of the team", field="user")
        if not actor.is_privileged and submission.user != actor.id:
            raise Forbidden("Employees may only submit their own status")

        question_ids = [qid for qid, _ in responses]
        missing = set(question_ids) - self._questions.existing_ids(question_ids)
        if missing:
            raise NotFound(f"Unknown questions: {', '.join(sorted(missing))}")

        existing = self._records.get_by_key(submission.user, submission.team, record_date)
        if not can_edit(actor, existing):
            logger.warning("Edit refused actor=%s record=%s", actor.id, existing["id"])
            raise Forbidden("Not allowed to edit this record")

        record, created = self._records.upsert(
            team_id=submission.team,
            user_id=submission.user,
            record_date=record_date,
            is_leave=is_leave,
            leave_reason=leave_reason,
            responses=responses,
            submitted_by=actor.id,
            submitted_at=now,
        )
        return {"created": created, "record": record}

    # ── Queries ──

    def find_records(
        self,
        actor: Actor,
        user_id: Optional[str] = None,
        team_id: Optional[str] = None,
        team_ids: Optional[list[str]] = None,
        user_ids: Optional[list[str]] = None,
        on_date: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        month: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        start = parse_optional_date(start_date, "start_date")
        end = parse_optional_date(end_date, "end_date")
        if month:
            month_start, month_end = month_bounds(month)
            start = max(start, month_start) if start else month_start
            end = min(end, month_end) if end else month_end
        if start and end and start > end:
            raise ValidationError("start_date must not be after end_date", field="start_date")

        query = self._access.scope_record_query(actor, {
            "user_id": user_id,
            "team_id": team_id,
            "team_ids": team_ids or None,
            "user_ids": user_ids or None,
        })
        return self._records.find(
            user_id=query["user_id"],
            team_id=query["team_id"],
            team_ids=query["team_ids"],
            user_ids=query["user_ids"],
            on_date=parse_optional_date(on_date, "date"),
            start_date=start,
            end_date=end,
        )

    def lookup(self, actor: Actor, team_id: str, user_id: str, on_date: str) -> dict[str, Any]:
        """The record for one slot plus whether ``actor`` may overwrite it."""
        record_date: date = parse_iso_date(on_date, "date")
        self._access.scope_record_query(actor, {
            "user_id": user_id, "team_id": team_id, "team_ids": None, "user_ids": None,
        })
        record = self._records.get_by_key(user_id, team_id, record_date)
        return {"record": record, "can_edit": can_edit(actor, record)}
