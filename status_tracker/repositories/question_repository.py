# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: question registry data access.
Questions are ordered by (display_order, seq, id); seq is the insertion sequence.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine

QUESTION_COLS = "q.id, q.seq, q.text, q.is_common, q.display_order, q.active, q.created_by, q.created_at, q.updated_at"


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": row[0],
        "seq": row[1],
        "text": row[2],
        "is_common": bool(row[3]),
        "order": row[4] or 0,
        "active": bool(row[5]),
        "created_by": row[6],
        "created_at": row[7],
        "updated_at": row[8],
        "teams": [],
    }


class QuestionRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def create(self, question_id: str, text_: str, is_common: bool, team_ids: List[str],
               order: int, created_by: Optional[str], now: datetime) -> Dict[str, Any]:
        with self._engine.begin() as conn:
            seq = conn.execute(text("SELECT COALESCE(MAX(seq), 0) + 1 FROM questions")).scalar()
            conn.execute(
                text("""
                    INSERT INTO questions
                        (id, seq, text, is_common, display_order, active, created_by, created_at, updated_at)
                    VALUES
                        (:id, :seq, :text, :is_common, :order, :active, :created_by, :ts, :ts)
                """),
                {"id": question_id, "seq": seq, "text": text_, "is_common": is_common,
                 "order": order, "active": True, "created_by": created_by,
                 "ts": now.isoformat()},
            )
            self._replace_teams(conn, question_id, team_ids)
        return self.get(question_id)

    def update(self, question_id: str, fields: Dict[str, Any],
               team_ids: Optional[List[str]], now: datetime) -> Dict[str, Any]:
        """Apply a partial update. ``fields`` keys are column names."""
        assignments = [f"{col} = :{col}" for col in fields]
        assignments.append("updated_at = :updated_at")
        params = dict(fields, id=question_id, updated_at=now.isoformat())
        with self._engine.begin() as conn:
            conn.execute(
                text(f"UPDATE questions SET {', '.join(assignments)} WHERE id = :id"),
                params,
            )
            if team_ids is not None:
                self._replace_teams(conn, question_id, team_ids)
        return self.get(question_id)

    # ── Read ───────────────────────────────────────────────────────────

    def get(self, question_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {QUESTION_COLS} FROM questions q WHERE q.id = :id"),
                {"id": question_id},
            ).fetchone()
            if not row:
                return None
            question = _row_to_dict(row)
            question["teams"] = self._teams_for(conn, [question_id]).get(question_id, [])
        return question

    def list(self, is_common: Optional[bool] = None, team_id: Optional[str] = None,
             scope_team_ids: Optional[Iterable[str]] = None,
             include_inactive: bool = False) -> List[Dict[str, Any]]:
        """
        List questions ordered by (display_order, seq, id).

        ``team_id`` keeps questions linked to that team. ``scope_team_ids``
        keeps common questions plus those linked to any of the given teams.
        """
        conditions: List[str] = []
        params: Dict[str, Any] = {}
        expanding: List[str] = []
        if is_common is not None:
            conditions.append("q.is_common = :is_common")
            params["is_common"] = is_common
        if team_id:
            conditions.append(
                "q.id IN (SELECT question_id FROM question_teams WHERE team_id = :team_id)"
            )
            params["team_id"] = team_id
        if scope_team_ids is not None:
            scope = list(scope_team_ids)
            if scope:
                conditions.append(
                    "(q.is_common = :scope_common OR q.id IN "
                    "(SELECT question_id FROM question_teams WHERE team_id IN :scope))"
                )
                params["scope"] = scope
                expanding.append("scope")
            else:
                conditions.append("q.is_common = :scope_common")
            params["scope_common"] = True
        if not include_inactive:
            conditions.append("q.active = :active")
            params["active"] = True
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""

        stmt = text(f"SELECT {QUESTION_COLS} FROM questions q{where} "
                    "ORDER BY q.display_order, q.seq, q.id")
        if expanding:
            stmt = stmt.bindparams(*(bindparam(name, expanding=True) for name in expanding))
        with self._engine.connect() as conn:
            rows = conn.execute(stmt, params).fetchall()
            questions = [_row_to_dict(r) for r in rows]
            teams = self._teams_for(conn, [q["id"] for q in questions])
        for q in questions:
            q["teams"] = teams.get(q["id"], [])
        return questions

    def existing_ids(self, question_ids: Iterable[str]) -> Set[str]:
        ids = list(question_ids)
        if not ids:
            return set()
        stmt = text("SELECT id FROM questions WHERE id IN :ids").bindparams(
            bindparam("ids", expanding=True))
        with self._engine.connect() as conn:
            rows = conn.execute(stmt, {"ids": ids}).fetchall()
        return {r[0] for r in rows}

    # ── Private ────────────────────────────────────────────────────────

    def _teams_for(self, conn, question_ids: List[str]) -> Dict[str, List[str]]:
        if not question_ids:
            return {}
        stmt = text(
            "SELECT question_id, team_id FROM question_teams WHERE question_id IN :ids "
            "ORDER BY question_id, team_id"
        ).bindparams(bindparam("ids", expanding=True))
        result: Dict[str, List[str]] = {}
        for row in conn.execute(stmt, {"ids": question_ids}).fetchall():
            result.setdefault(row[0], []).append(row[1])
        return result

    def _replace_teams(self, conn, question_id: str, team_ids: List[str]):
        conn.execute(text("DELETE FROM question_teams WHERE question_id = :id"),
                     {"id": question_id})
        links = [{"qid": question_id, "tid": tid} for tid in dict.fromkeys(team_ids)]
        if links:
            conn.execute(
                text("INSERT INTO question_teams (question_id, team_id) VALUES (:qid, :tid)"),
                links,
            )
