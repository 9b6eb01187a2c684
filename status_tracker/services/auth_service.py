# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Resolves bearer tokens into actors."""
from typing import Optional

from status_tracker.core.config import settings
from status_tracker.core.exceptions import Unauthenticated
from status_tracker.core.logging import get_logger
from status_tracker.models.domain import Actor
from status_tracker.repositories.directory_repository import DirectoryRepository

logger = get_logger(__name__)


class AuthService:
    def __init__(self, directory: DirectoryRepository, tokens: Optional[dict[str, str]] = None):
        self._directory = directory
        self._tokens = settings.AUTH_TOKENS if tokens is None else tokens

    def authenticate(self, authorization: Optional[str]) -> Actor:
        """Resolve an ``Authorization: Bearer <token>`` header into an actor."""
        scheme, _, token = (authorization or "").partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise Unauthenticated("Missing bearer token")
        user_id = self._tokens.get(token.strip())
        if user_id is None:
            raise Unauthenticated("Invalid bearer token")
        user = self._directory.get_user(user_id)
        if user is None:
            logger.warning("Token maps to unknown user %s", user_id)
            raise Unauthenticated("Invalid bearer token")
        return Actor(id=user["id"], name=user["name"], role=user["role"])
