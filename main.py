# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Status Tracker Service
======================
Daily team status updates against a configurable question set, with a
spreadsheet export for managers and admins.

    submit ─► date window ─► edit eligibility ─► upsert (user, team, date)
    report ─► access scope ─► team × user × question × date grid ─► xlsx

Port: 8000
"""
import json
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from status_tracker.controllers import (
    auth_controller,
    question_controller,
    report_controller,
    status_controller,
    system_controller,
)
from status_tracker.core.config import settings
from status_tracker.core.database import engine, init_schema
from status_tracker.core.dependencies import get_directory_repo
from status_tracker.core.exceptions import Forbidden, ServerFault, StatusTrackerError
from status_tracker.core.logging import get_logger
from status_tracker.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(settings.SERVICE_NAME)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    try:
        init_schema(engine)
        logger.info("Database schema ready")
        if settings.DIRECTORY_SEED_FILE:
            with open(settings.DIRECTORY_SEED_FILE, encoding="utf-8") as fh:
                get_directory_repo().load_seed(json.load(fh))
    except Exception:
        logger.exception("Startup bootstrap failed, database may not be ready yet")
    yield
    engine.dispose()
    logger.info("Shutting down, connection pool disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Status Tracker Service",
    description="Daily status submissions and team status reports.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Error mapping ─────────────────────────────────────────────────────────
def _error_body(error: str, detail=None, field=None) -> dict:
    body = {"error": error, "detail": detail}
    if field:
        body["field"] = field
    return body


@app.exception_handler(StatusTrackerError)
async def domain_exception_handler(request: Request, exc: StatusTrackerError):
    request_id = getattr(request.state, "request_id", None)
    if isinstance(exc, ServerFault):
        logger.error("Server fault request_id=%s: %s", request_id, exc.message)
        detail = exc.message if settings.DEBUG else None
        return JSONResponse(status_code=500, content=_error_body(exc.error, detail))
    if isinstance(exc, Forbidden):
        logger.warning("Forbidden request_id=%s path=%s: %s",
                       request_id, request.url.path, exc.message)
        return JSONResponse(status_code=403, content=_error_body(exc.error, "Not authorized"))
    logger.info("Request rejected request_id=%s status=%d: %s",
                request_id, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code,
                        content=_error_body(exc.error, exc.message, exc.field))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    field = None
    if errors:
        loc = [str(p) for p in errors[0].get("loc", ()) if p not in ("body", "query")]
        field = ".".join(loc) or None
    detail = "; ".join(e.get("msg", "") for e in errors) or "Invalid request"
    return JSONResponse(status_code=422, content=_error_body("validation_error", detail, field))


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error")
    detail = str(exc) if settings.DEBUG else None
    return JSONResponse(status_code=500, content=_error_body("internal_server_error", detail))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    detail = str(exc) if settings.DEBUG else None
    return JSONResponse(status_code=500, content=_error_body("internal_server_error", detail))


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(auth_controller.router)
app.include_router(status_controller.router)
app.include_router(question_controller.router)
app.include_router(report_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.SERVICE_PORT)
