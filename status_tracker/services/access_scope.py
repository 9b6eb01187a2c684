# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: role-based scoping of teams and records.
"""

from typing import Any, Iterable, Optional

from status_tracker.core.exceptions import Forbidden
from status_tracker.core.logging import get_logger
from status_tracker.models.domain import Actor
from status_tracker.repositories.directory_repository import DirectoryRepository

logger = get_logger(__name__)


class AccessScope:
    """Role-based gate in front of reports and record queries."""

    def __init__(self, directory: DirectoryRepository) -> None:
        self._directory = directory

    def accessible_teams(self, actor: Actor,
                         requested_team_ids: Optional[Iterable[str]] = None) -> set[str]:
        """
        Team ids ``actor`` may report on. Raises Forbidden for employees and
        when any requested team is outside the actor's reach.
        """
        requested = {t for t in (requested_team_ids or ()) if t}

        if actor.is_admin:
            return requested or self._directory.all_team_ids()

        if actor.is_manager:
            managed = self._directory.team_ids_managed_by(actor.id)
            if not requested:
                return managed
            if not requested <= managed:
                logger.warning("Manager %s requested teams outside managed projects", actor.id)
                raise Forbidden("Requested teams are outside the managed projects")
            return requested

        logger.warning("Employee %s attempted to generate a report", actor.id)
        raise Forbidden("Only managers and admins can generate reports")

    def visible_team_ids(self, actor: Actor) -> Optional[set[str]]:
        """Teams whose questions the actor may browse. ``None`` means all."""
        if actor.is_admin:
            return None
        if actor.is_manager:
            return self._directory.team_ids_managed_by(actor.id)
        return self._directory.team_ids_of_user(actor.id)

    def scope_record_query(self, actor: Actor, query: dict[str, Any]) -> dict[str, Any]:
        """
        Narrow record-query filters to what ``actor`` may read.
        Employees read only their own records; managers only their teams.
        """
        scoped = dict(query)
        if actor.is_admin:
            return scoped

        if actor.is_manager:
            managed = self._directory.team_ids_managed_by(actor.id)
            requested = set(scoped.get("team_ids") or ())
            if scoped.get("team_id"):
                requested.add(scoped["team_id"])
            if requested and not requested <= managed:
                raise Forbidden("Requested teams are outside the managed projects")
            if not requested:
                scoped["team_ids"] = managed
            return scoped

        requested_users = set(scoped.get("user_ids") or ())
        if scoped.get("user_id"):
            requested_users.add(scoped["user_id"])
        if requested_users - {actor.id}:
            raise Forbidden("Employees may only read their own records")
        scoped["user_id"] = actor.id
        scoped["user_ids"] = None
        return scoped
