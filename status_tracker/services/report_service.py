# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: report aggregation.

Builds the dense team × user × question × date grid behind the spreadsheet
export. Rows are emitted in nested order:

    team (name, id) ─► member (name, id) ─► question (order, seq)

with one cell per calendar day of the requested range. Team and user names
appear only on the first row of their block, and a blank row separates
consecutive team blocks. Leave days never fill the grid; they are listed
separately in ``report["leave"]``.
"""

from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Optional

from status_tracker.core.config import settings
from status_tracker.core.dates import iter_dates, month_bounds, parse_optional_date
from status_tracker.core.exceptions import NotFound, ValidationError
from status_tracker.core.logging import get_logger
from status_tracker.metrics import REPORT_ROWS, REPORTS_GENERATED
from status_tracker.models.domain import Actor
from status_tracker.repositories.directory_repository import DirectoryRepository
from status_tracker.repositories.question_repository import QuestionRepository
from status_tracker.repositories.status_repository import StatusRepository
from status_tracker.services.access_scope import AccessScope
from status_tracker.services.question_service import applies_to_team

logger = get_logger(__name__)

HEADER_PREFIX = ["Team", "User", "Question"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_range(start_date: Optional[str], end_date: Optional[str],
                  month: Optional[str], today: date) -> tuple[date, date]:
    """
    Explicit start/end win, then ``month`` (YYYY-MM), then the current month.
    """
    start = parse_optional_date(start_date, "start_date")
    end = parse_optional_date(end_date, "end_date")
    if start and end:
        pass
    elif start or end:
        raise ValidationError("start_date and end_date must be given together",
                              field="start_date" if not start else "end_date")
    elif month:
        start, end = month_bounds(month)
    else:
        start, end = month_bounds(today.strftime("%Y-%m"))
    if start > end:
        raise ValidationError("start_date must not be after end_date", field="start_date")
    if (end - start).days + 1 > settings.REPORT_MAX_DAYS:
        raise ValidationError(
            f"Report range is limited to {settings.REPORT_MAX_DAYS} days", field="end_date"
        )
    return start, end


def build_grid(
    teams: list[dict[str, Any]],
    users_by_team: dict[str, list[dict[str, Any]]],
    questions_by_team: dict[str, list[dict[str, Any]]],
    records: Iterable[dict[str, Any]],
    dates: list[date],
) -> tuple[list[list[str]], list[dict[str, Any]]]:
    """
    Pure grid construction. Returns ``(rows, leave_entries)``; a separator
    row is an empty list.
    """
    answers: dict[tuple[str, str, str], dict[str, str]] = {}
    leave_days: dict[tuple[str, str], list[dict[str, Any]]] = {}
    for record in records:
        key = (record["team_id"], record["user_id"])
        if record["is_leave"]:
            leave_days.setdefault(key, []).append(record)
            continue
        answers[(record["team_id"], record["user_id"], record["date"])] = {
            r["question_id"]: r["answer"] for r in record["responses"]
        }

    date_keys = [d.isoformat() for d in dates]
    blocks: list[list[list[str]]] = []
    leave: list[dict[str, Any]] = []

    for team in teams:
        team_id = team["id"]
        users = users_by_team.get(team_id, [])
        questions = questions_by_team.get(team_id, [])
        block: list[list[str]] = []

        for user in users:
            for idx, question in enumerate(questions):
                row = [
                    "" if block else team["name"],
                    user["name"] if idx == 0 else "",
                    question["text"],
                ]
                for day in date_keys:
                    cell = answers.get((team_id, user["id"], day))
                    row.append(cell.get(question["id"], "") if cell else "")
                block.append(row)

            if questions:
                for record in leave_days.get((team_id, user["id"]), []):
                    leave.append({"team": team["name"], "user": user["name"],
                                  "date": record["date"], "reason": record["leave_reason"]})

        if block:
            blocks.append(block)

    rows: list[list[str]] = []
    for i, block in enumerate(blocks):
        if i:
            rows.append([])
        rows.extend(block)
    return rows, leave


class ReportService:
    """Aggregates status records into the exportable report grid."""

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

    def build_report(
        self,
        actor: Actor,
        team_ids: Optional[list[str]] = None,
        user_ids: Optional[list[str]] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        month: Optional[str] = None,
        output_format: str = "json",
    ) -> dict[str, Any]:
        """Raises Forbidden, ValidationError or NotFound."""
        accessible = self._access.accessible_teams(actor, team_ids)
        start, end = resolve_range(start_date, end_date, month, self._clock().date())
        dates = list(iter_dates(start, end))

        records = self._records.find(
            team_ids=accessible,
            user_ids=user_ids or None,
            start_date=start,
            end_date=end,
        )

        if team_ids:
            report_team_ids = accessible
        elif user_ids:
            report_team_ids = {r["team_id"] for r in records} & accessible
        else:
            report_team_ids = accessible

        teams = self._directory.list_teams(report_team_ids)
        if not teams:
            raise NotFound("No accessible teams or users found")

        members = self._directory.members_by_team([t["id"] for t in teams])
        wanted_users = set(user_ids or ())
        users_by_team = {
            tid: [m for m in team_members if not wanted_users or m["id"] in wanted_users]
            for tid, team_members in members.items()
        }

        answered = {
            (r["team_id"], resp["question_id"])
            for r in records for resp in r["responses"]
        }
        questions = self._questions.list(
            scope_team_ids=[t["id"] for t in teams], include_inactive=True,
        )
        questions_by_team = {
            t["id"]: [
                q for q in questions
                if applies_to_team(q, t["id"]) and (q["active"] or (t["id"], q["id"]) in answered)
            ]
            for t in teams
        }

        rows, leave = build_grid(teams, users_by_team, questions_by_team, records, dates)

        REPORTS_GENERATED.labels(format=output_format).inc()
        REPORT_ROWS.observe(len(rows))
        logger.info("Report built actor=%s teams=%d dates=%d records=%d rows=%d",
                    actor.id, len(teams), len(dates), len(records), len(rows))
        return {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "header": HEADER_PREFIX + [d.isoformat() for d in dates],
            "rows": rows,
            "leave": leave,
        }

    def report_options(self, actor: Actor) -> list[dict[str, Any]]:
        """
        Accessible teams with their members for filter dropdowns.
        A team whose member list fails to load is skipped.
        """
        teams = self._directory.list_teams(self._access.accessible_teams(actor))
        options: list[dict[str, Any]] = []
        for team in teams:
            try:
                members = self._directory.team_members(team["id"])
            except Exception as exc:
                logger.warning("Could not load members for team %s: %s", team["id"], exc)
                continue
            options.append({
                "id": team["id"],
                "name": team["name"],
                "members": [{"id": m["id"], "name": m["name"]} for m in members],
            })
        return options
