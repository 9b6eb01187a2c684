# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Singleton repositories and services, exposed as FastAPI dependencies.
"""
from typing import Optional

from fastapi import Depends, Header

from status_tracker.core.database import engine
from status_tracker.models.domain import Actor
from status_tracker.repositories.directory_repository import DirectoryRepository
from status_tracker.repositories.question_repository import QuestionRepository
from status_tracker.repositories.status_repository import StatusRepository
from status_tracker.services.access_scope import AccessScope
from status_tracker.services.auth_service import AuthService
from status_tracker.services.question_service import QuestionService
from status_tracker.services.report_service import ReportService
from status_tracker.services.status_service import StatusService

# ── Singleton repository instances ──
_directory_repo = DirectoryRepository(engine)
_question_repo = QuestionRepository(engine)
_status_repo = StatusRepository(engine)

# ── Service instances (with injected dependencies) ──
_access = AccessScope(_directory_repo)
_auth_service = AuthService(_directory_repo)
_question_service = QuestionService(_question_repo, _directory_repo, _access)
_status_service = StatusService(_status_repo, _question_repo, _directory_repo, _access)
_report_service = ReportService(_status_repo, _question_repo, _directory_repo, _access)


# ── FastAPI dependency functions ──
def get_directory_repo() -> DirectoryRepository:
    return _directory_repo


def get_status_repo() -> StatusRepository:
    return _status_repo


def get_auth_service() -> AuthService:
    return _auth_service


def get_question_service() -> QuestionService:
    return _question_service


def get_status_service() -> StatusService:
    return _status_service


def get_report_service() -> ReportService:
    return _report_service


def get_current_actor(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> Actor:
    return auth.authenticate(authorization)
