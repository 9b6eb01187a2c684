# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: read access to users, projects, teams and memberships.
The directory is reference data owned elsewhere; write helpers exist only
for seeding.
"""
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine

from status_tracker.core.logging import get_logger
from status_tracker.models.domain import VALID_ROLES

logger = get_logger(__name__)

USER_COLS = "u.id, u.name, u.email, u.role"


def _user_to_dict(row) -> Dict[str, Any]:
    return {"id": row[0], "name": row[1], "email": row[2], "role": row[3]}


def _team_to_dict(row) -> Dict[str, Any]:
    return {"id": row[0], "name": row[1], "project_id": row[2]}


class DirectoryRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Users ──────────────────────────────────────────────────────────

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {USER_COLS} FROM users u WHERE u.id = :id"),
                {"id": user_id},
            ).fetchone()
            if not row:
                return None
            user = _user_to_dict(row)
            team_rows = conn.execute(
                text("SELECT team_id FROM team_members WHERE user_id = :id ORDER BY team_id"),
                {"id": user_id},
            ).fetchall()
        user["teams"] = [r[0] for r in team_rows]
        return user

    def team_ids_of_user(self, user_id: str) -> Set[str]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("SELECT team_id FROM team_members WHERE user_id = :id"),
                {"id": user_id},
            ).fetchall()
        return {r[0] for r in rows}

    # ── Teams ──────────────────────────────────────────────────────────

    def get_team(self, team_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT id, name, project_id FROM teams WHERE id = :id"),
                {"id": team_id},
            ).fetchone()
        return _team_to_dict(row) if row else None

    def list_teams(self, team_ids: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
        """Teams ordered by (name, id). ``None`` means every team."""
        if team_ids is None:
            stmt = text("SELECT id, name, project_id FROM teams ORDER BY name, id")
            params: Dict[str, Any] = {}
        else:
            ids = list(team_ids)
            if not ids:
                return []
            stmt = text(
                "SELECT id, name, project_id FROM teams WHERE id IN :ids ORDER BY name, id"
            ).bindparams(bindparam("ids", expanding=True))
            params = {"ids": ids}
        with self._engine.connect() as conn:
            rows = conn.execute(stmt, params).fetchall()
        return [_team_to_dict(r) for r in rows]

    def all_team_ids(self) -> Set[str]:
        with self._engine.connect() as conn:
            rows = conn.execute(text("SELECT id FROM teams")).fetchall()
        return {r[0] for r in rows}

    def team_ids_managed_by(self, user_id: str) -> Set[str]:
        """Teams that belong to any project the user manages."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("""
                    SELECT t.id FROM teams t
                    JOIN project_managers pm ON pm.project_id = t.project_id
                    WHERE pm.user_id = :uid
                """),
                {"uid": user_id},
            ).fetchall()
        return {r[0] for r in rows}

    def team_members(self, team_id: str) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT {USER_COLS} FROM users u
                    JOIN team_members tm ON tm.user_id = u.id
                    WHERE tm.team_id = :tid
                    ORDER BY u.name, u.id
                """),
                {"tid": team_id},
            ).fetchall()
        return [_user_to_dict(r) for r in rows]

    def members_by_team(self, team_ids: Iterable[str]) -> Dict[str, List[Dict[str, Any]]]:
        """Map team id -> members ordered by (name, id), in one query."""
        ids = list(team_ids)
        result: Dict[str, List[Dict[str, Any]]] = {tid: [] for tid in ids}
        if not ids:
            return result
        stmt = text(f"""
            SELECT tm.team_id, {USER_COLS} FROM users u
            JOIN team_members tm ON tm.user_id = u.id
            WHERE tm.team_id IN :ids
            ORDER BY tm.team_id, u.name, u.id
        """).bindparams(bindparam("ids", expanding=True))
        with self._engine.connect() as conn:
            rows = conn.execute(stmt, {"ids": ids}).fetchall()
        for r in rows:
            result[r[0]].append(_user_to_dict(r[1:]))
        return result

    def is_member(self, team_id: str, user_id: str) -> bool:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT 1 FROM team_members WHERE team_id = :tid AND user_id = :uid"),
                {"tid": team_id, "uid": user_id},
            ).fetchone()
        return row is not None

    # ── Seeding ────────────────────────────────────────────────────────

    def save_user(self, user_id: str, name: str, role: str, email: Optional[str] = None) -> None:
        if role not in VALID_ROLES:
            raise ValueError(f"Unknown role {role!r} for user {user_id}")
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO users (id, name, email, role) VALUES (:id, :name, :email, :role)
                    ON CONFLICT (id) DO UPDATE
                    SET name = excluded.name, email = excluded.email, role = excluded.role
                """),
                {"id": user_id, "name": name, "email": email, "role": role},
            )

    def save_project(self, project_id: str, name: str, manager_ids: Iterable[str] = ()) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO projects (id, name) VALUES (:id, :name)
                    ON CONFLICT (id) DO UPDATE SET name = excluded.name
                """),
                {"id": project_id, "name": name},
            )
            conn.execute(text("DELETE FROM project_managers WHERE project_id = :id"),
                         {"id": project_id})
            managers = [{"pid": project_id, "uid": uid} for uid in manager_ids]
            if managers:
                conn.execute(
                    text("INSERT INTO project_managers (project_id, user_id) VALUES (:pid, :uid)"),
                    managers,
                )

    def save_team(self, team_id: str, name: str, project_id: Optional[str] = None,
                  member_ids: Iterable[str] = ()) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO teams (id, name, project_id) VALUES (:id, :name, :pid)
                    ON CONFLICT (id) DO UPDATE
                    SET name = excluded.name, project_id = excluded.project_id
                """),
                {"id": team_id, "name": name, "pid": project_id},
            )
            conn.execute(text("DELETE FROM team_members WHERE team_id = :id"), {"id": team_id})
            members = [{"tid": team_id, "uid": uid} for uid in member_ids]
            if members:
                conn.execute(
                    text("INSERT INTO team_members (team_id, user_id) VALUES (:tid, :uid)"),
                    members,
                )

    def load_seed(self, data: Dict[str, Any]) -> None:
        """Load ``{"users": [...], "projects": [...], "teams": [...]}``."""
        for user in data.get("users", []):
            self.save_user(user["id"], user["name"], user["role"], user.get("email"))
        for project in data.get("projects", []):
            self.save_project(project["id"], project["name"], project.get("managers", []))
        for team in data.get("teams", []):
            self.save_team(team["id"], team["name"], team.get("project"), team.get("members", []))
        logger.info("Directory seeded users=%d projects=%d teams=%d",
                    len(data.get("users", [])), len(data.get("projects", [])),
                    len(data.get("teams", [])))

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))
