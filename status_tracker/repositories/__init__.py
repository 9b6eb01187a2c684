# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access classes."""
from status_tracker.repositories.directory_repository import DirectoryRepository
from status_tracker.repositories.question_repository import QuestionRepository
from status_tracker.repositories.status_repository import StatusRepository

__all__ = ["DirectoryRepository", "QuestionRepository", "StatusRepository"]
