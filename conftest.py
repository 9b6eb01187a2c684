"""
Shared fixtures: an in-memory SQLite database seeded with a small directory.

    project p1 (managed by mgr1) ─► Alpha [alice, bob], Beta [carol]
    project p2 (managed by mgr2) ─► Gamma [alice]
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault(
    "AUTH_TOKENS",
    "admin-token:admin,mgr1-token:mgr1,mgr2-token:mgr2,"
    "alice-token:alice,bob-token:bob,carol-token:carol",
)
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import text  # noqa: E402

from status_tracker.core.database import engine, init_schema  # noqa: E402
from status_tracker.models.domain import Actor  # noqa: E402
from status_tracker.repositories import (  # noqa: E402
    DirectoryRepository,
    QuestionRepository,
    StatusRepository,
)
from status_tracker.services.access_scope import AccessScope  # noqa: E402

NOW = datetime(2024, 6, 10, 9, 30, tzinfo=timezone.utc)

SEED = {
    "users": [
        {"id": "admin", "name": "Ada Admin", "role": "admin"},
        {"id": "mgr1", "name": "Maya Manager", "role": "manager"},
        {"id": "mgr2", "name": "Omar Manager", "role": "manager"},
        {"id": "alice", "name": "Alice", "role": "employee", "email": "alice@example.com"},
        {"id": "bob", "name": "Bob", "role": "employee"},
        {"id": "carol", "name": "Carol", "role": "employee"},
    ],
    "projects": [
        {"id": "p1", "name": "Platform", "managers": ["mgr1"]},
        {"id": "p2", "name": "Growth", "managers": ["mgr2"]},
    ],
    "teams": [
        {"id": "team-a", "name": "Alpha", "project": "p1", "members": ["alice", "bob"]},
        {"id": "team-b", "name": "Beta", "project": "p1", "members": ["carol"]},
        {"id": "team-c", "name": "Gamma", "project": "p2", "members": ["alice"]},
    ],
}

TABLES = (
    "status_responses", "status_records", "question_teams", "questions",
    "team_members", "teams", "project_managers", "projects", "users",
)

ACTORS = {
    "admin": Actor(id="admin", name="Ada Admin", role="admin"),
    "mgr1": Actor(id="mgr1", name="Maya Manager", role="manager"),
    "mgr2": Actor(id="mgr2", name="Omar Manager", role="manager"),
    "alice": Actor(id="alice", name="Alice", role="employee"),
    "bob": Actor(id="bob", name="Bob", role="employee"),
    "carol": Actor(id="carol", name="Carol", role="employee"),
}


@pytest.fixture(autouse=True)
def reset_db():
    """Recreate the schema and re-seed the directory before each test."""
    with engine.begin() as conn:
        for table in TABLES:
            conn.execute(text(f"DROP TABLE IF EXISTS {table}"))
    init_schema(engine)
    DirectoryRepository(engine).load_seed(SEED)
    yield


@pytest.fixture
def actors():
    return ACTORS


@pytest.fixture
def directory():
    return DirectoryRepository(engine)


@pytest.fixture
def question_repo():
    return QuestionRepository(engine)


@pytest.fixture
def status_repo():
    return StatusRepository(engine)


@pytest.fixture
def access(directory):
    return AccessScope(directory)


@pytest.fixture
def add_question(question_repo):
    """Create a question directly in the registry."""
    counter = {"n": 0}

    def _add(text_, is_common=False, teams=(), order=0, active=True, created_by="mgr1"):
        counter["n"] += 1
        qid = f"q{counter['n']}"
        question = question_repo.create(qid, text_, is_common, list(teams), order, created_by, NOW)
        if not active:
            question = question_repo.update(qid, {"active": False}, None, NOW)
        return question

    return _add
