# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy engine factory and idempotent schema bootstrap."""
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from status_tracker.core.config import settings

# Dates are stored as ISO-8601 strings so the same SQL runs on
# PostgreSQL and SQLite.
SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id          VARCHAR(64) PRIMARY KEY,
        name        VARCHAR(255) NOT NULL,
        email       VARCHAR(255),
        role        VARCHAR(16) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS projects (
        id          VARCHAR(64) PRIMARY KEY,
        name        VARCHAR(255) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS project_managers (
        project_id  VARCHAR(64) NOT NULL REFERENCES projects(id),
        user_id     VARCHAR(64) NOT NULL REFERENCES users(id),
        PRIMARY KEY (project_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS teams (
        id          VARCHAR(64) PRIMARY KEY,
        name        VARCHAR(255) NOT NULL,
        project_id  VARCHAR(64) REFERENCES projects(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS team_members (
        team_id     VARCHAR(64) NOT NULL REFERENCES teams(id),
        user_id     VARCHAR(64) NOT NULL REFERENCES users(id),
        PRIMARY KEY (team_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS questions (
        id              VARCHAR(64) PRIMARY KEY,
        seq             INTEGER NOT NULL,
        text            TEXT NOT NULL,
        is_common       BOOLEAN NOT NULL DEFAULT FALSE,
        display_order   INTEGER NOT NULL DEFAULT 0,
        active          BOOLEAN NOT NULL DEFAULT TRUE,
        created_by      VARCHAR(64),
        created_at      VARCHAR(40) NOT NULL,
        updated_at      VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS question_teams (
        question_id VARCHAR(64) NOT NULL REFERENCES questions(id),
        team_id     VARCHAR(64) NOT NULL REFERENCES teams(id),
        PRIMARY KEY (question_id, team_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS status_records (
        id              VARCHAR(64) PRIMARY KEY,
        team_id         VARCHAR(64) NOT NULL REFERENCES teams(id),
        user_id         VARCHAR(64) NOT NULL REFERENCES users(id),
        record_date     VARCHAR(10) NOT NULL,
        is_leave        BOOLEAN NOT NULL DEFAULT FALSE,
        leave_reason    TEXT,
        submitted_by    VARCHAR(64) NOT NULL,
        submitted_at    VARCHAR(40) NOT NULL,
        created_at      VARCHAR(40) NOT NULL,
        CONSTRAINT uq_status_user_team_date UNIQUE (user_id, team_id, record_date)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS status_responses (
        record_id   VARCHAR(64) NOT NULL REFERENCES status_records(id),
        position    INTEGER NOT NULL,
        question_id VARCHAR(64) NOT NULL REFERENCES questions(id),
        answer      TEXT NOT NULL,
        PRIMARY KEY (record_id, position)
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_status_records_date ON status_records (record_date)",
    "CREATE INDEX IF NOT EXISTS ix_status_records_team ON status_records (team_id, record_date)",
)


def build_engine(url: str | None = None, **kwargs) -> Engine:
    url = url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise each thread gets its own empty database
            kwargs.setdefault("poolclass", StaticPool)
        return create_engine(url, **kwargs)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_recycle=settings.POOL_RECYCLE,
        **kwargs,
    )


def init_schema(engine: Engine) -> None:
    with engine.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(text(statement))


engine = build_engine()
