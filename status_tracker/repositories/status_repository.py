# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: status record data access.
One row per (user, team, date); the database constraint enforces it and
upsert() relies on ON CONFLICT, never on a read-then-insert.
"""
import uuid
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine

from status_tracker.core.logging import get_logger

logger = get_logger(__name__)

RECORD_COLS = (
    "r.id, r.team_id, t.name, r.user_id, u.name, r.record_date, r.is_leave, "
    "r.leave_reason, r.submitted_by, r.submitted_at, r.created_at"
)
RECORD_FROM = (
    "status_records r "
    "LEFT JOIN teams t ON t.id = r.team_id "
    "LEFT JOIN users u ON u.id = r.user_id"
)


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": row[0],
        "team_id": row[1],
        "team_name": row[2],
        "user_id": row[3],
        "user_name": row[4],
        "date": row[5],
        "is_leave": bool(row[6]),
        "leave_reason": row[7],
        "submitted_by": row[8],
        "submitted_at": row[9],
        "created_at": row[10],
        "responses": [],
    }


class StatusRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def upsert(self, team_id: str, user_id: str, record_date: date, is_leave: bool,
               leave_reason: Optional[str], responses: Sequence[Tuple[str, str]],
               submitted_by: str, submitted_at: datetime) -> Tuple[Dict[str, Any], bool]:
        """
        Create or overwrite the record for (user, team, date).

        Returns ``(record, created)``. On conflict the existing identity is
        kept, so ``created`` is True only when the fresh id was inserted.
        """
        new_id = str(uuid.uuid4())
        ts = submitted_at.isoformat()
        with self._engine.begin() as conn:
            record_id = conn.execute(
                text("""
                    INSERT INTO status_records
                        (id, team_id, user_id, record_date, is_leave, leave_reason,
                         submitted_by, submitted_at, created_at)
                    VALUES
                        (:id, :team_id, :user_id, :record_date, :is_leave, :leave_reason,
                         :submitted_by, :ts, :ts)
                    ON CONFLICT (user_id, team_id, record_date) DO UPDATE SET
                        is_leave = excluded.is_leave,
                        leave_reason = excluded.leave_reason,
                        submitted_by = excluded.submitted_by,
                        submitted_at = excluded.submitted_at
                    RETURNING id
                """),
                {"id": new_id, "team_id": team_id, "user_id": user_id,
                 "record_date": record_date.isoformat(), "is_leave": is_leave,
                 "leave_reason": leave_reason, "submitted_by": submitted_by, "ts": ts},
            ).scalar()
            conn.execute(text("DELETE FROM status_responses WHERE record_id = :rid"),
                         {"rid": record_id})
            rows = [
                {"rid": record_id, "pos": pos, "qid": qid, "answer": answer}
                for pos, (qid, answer) in enumerate(responses)
            ]
            if rows:
                conn.execute(
                    text("""
                        INSERT INTO status_responses (record_id, position, question_id, answer)
                        VALUES (:rid, :pos, :qid, :answer)
                    """),
                    rows,
                )
        created = record_id == new_id
        logger.info("Status record %s id=%s user=%s team=%s date=%s",
                    "created" if created else "updated", record_id, user_id, team_id,
                    record_date.isoformat())
        return self.get(record_id), created

    # ── Read ───────────────────────────────────────────────────────────

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        records = self._select(["r.id = :id"], {"id": record_id}, [])
        return records[0] if records else None

    def get_by_key(self, user_id: str, team_id: str, record_date: date) -> Optional[Dict[str, Any]]:
        records = self._select(
            ["r.user_id = :user_id", "r.team_id = :team_id", "r.record_date = :record_date"],
            {"user_id": user_id, "team_id": team_id, "record_date": record_date.isoformat()},
            [],
        )
        return records[0] if records else None

    def find(self, user_id: Optional[str] = None, team_id: Optional[str] = None,
             team_ids: Optional[Iterable[str]] = None, user_ids: Optional[Iterable[str]] = None,
             on_date: Optional[date] = None, start_date: Optional[date] = None,
             end_date: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        Records matching every given filter, ordered by (date, team, user).
        An empty ``team_ids`` / ``user_ids`` collection matches nothing.
        """
        conditions: List[str] = []
        params: Dict[str, Any] = {}
        expanding: List[str] = []
        if user_id:
            conditions.append("r.user_id = :user_id")
            params["user_id"] = user_id
        if team_id:
            conditions.append("r.team_id = :team_id")
            params["team_id"] = team_id
        for name, values in (("team_ids", team_ids), ("user_ids", user_ids)):
            if values is None:
                continue
            values = list(values)
            if not values:
                return []
            column = "r.team_id" if name == "team_ids" else "r.user_id"
            conditions.append(f"{column} IN :{name}")
            params[name] = values
            expanding.append(name)
        if on_date:
            conditions.append("r.record_date = :on_date")
            params["on_date"] = on_date.isoformat()
        if start_date:
            conditions.append("r.record_date >= :start_date")
            params["start_date"] = start_date.isoformat()
        if end_date:
            conditions.append("r.record_date <= :end_date")
            params["end_date"] = end_date.isoformat()
        return self._select(conditions, params, expanding)

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM status_records")).scalar() or 0

    # ── Private ────────────────────────────────────────────────────────

    def _select(self, conditions: List[str], params: Dict[str, Any],
                expanding: List[str]) -> List[Dict[str, Any]]:
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        record_stmt = text(
            f"SELECT {RECORD_COLS} FROM {RECORD_FROM}{where} "
            "ORDER BY r.record_date, r.team_id, r.user_id"
        )
        response_stmt = text(f"""
            SELECT s.record_id, s.question_id, q.text, s.answer
            FROM status_responses s
            LEFT JOIN questions q ON q.id = s.question_id
            WHERE s.record_id IN (SELECT r.id FROM status_records r{where})
            ORDER BY s.record_id, s.position
        """)
        if expanding:
            binds = [bindparam(name, expanding=True) for name in expanding]
            record_stmt = record_stmt.bindparams(*binds)
            response_stmt = response_stmt.bindparams(
                *(bindparam(name, expanding=True) for name in expanding))
        with self._engine.connect() as conn:
            records = [_row_to_dict(r) for r in conn.execute(record_stmt, params).fetchall()]
            if not records:
                return []
            by_id = {rec["id"]: rec for rec in records}
            for row in conn.execute(response_stmt, params).fetchall():
                record = by_id.get(row[0])
                if record is not None:
                    record["responses"].append(
                        {"question_id": row[1], "question_text": row[2], "answer": row[3]}
                    )
        return records
