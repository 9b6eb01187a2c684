# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Environment-driven settings. Read once at import time.
"""

import os


def _parse_tokens(raw: str) -> dict[str, str]:
    """Parse ``token:user_id`` pairs separated by commas."""
    tokens: dict[str, str] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" in pair:
            token, user_id = pair.split(":", 1)
            if token.strip() and user_id.strip():
                tokens[token.strip()] = user_id.strip()
    return tokens


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "status-tracker")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8000"))

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./status_tracker.db")
    POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    # Bearer credentials: "token:user_id,token2:user_id2"
    AUTH_TOKENS: dict[str, str] = _parse_tokens(os.getenv("AUTH_TOKENS", ""))

    # JSON file with users/projects/teams loaded at startup (optional)
    DIRECTORY_SEED_FILE: str = os.getenv("DIRECTORY_SEED_FILE", "")

    EDIT_WINDOW_DAYS: int = int(os.getenv("EDIT_WINDOW_DAYS", "2"))
    REPORT_MAX_DAYS: int = int(os.getenv("REPORT_MAX_DAYS", "366"))
    REPORT_FILENAME: str = os.getenv("REPORT_FILENAME", "status-report.xlsx")

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"


settings = Settings()
