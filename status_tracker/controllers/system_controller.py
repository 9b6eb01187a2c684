# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: liveness, readiness and Prometheus scrape endpoints.
None of these require a bearer token.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from status_tracker.core.config import settings
from status_tracker.core.dependencies import get_directory_repo, get_status_repo
from status_tracker.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/ready")
def readiness_check():
    """Ready once the schema is reachable and the directory has been seeded."""
    try:
        get_directory_repo().verify_connection()
        teams = len(get_directory_repo().all_team_ids())
        records = get_status_repo().count()
    except Exception as exc:
        logger.error("Readiness check failed: %s", exc)
        return JSONResponse(status_code=503,
                            content={"status": "unavailable", "database": "disconnected"})
    return {"status": "ok", "database": "connected", "teams": teams, "records": records}


@router.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
