# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Domain exceptions, mapped to HTTP responses in main.py."""

from typing import Optional


class StatusTrackerError(Exception):
    """Base exception for every recoverable failure."""

    status_code = 500
    error = "internal_server_error"

    def __init__(self, message: str = "", field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(StatusTrackerError):
    """Malformed or incomplete input."""

    status_code = 422
    error = "validation_error"


class InvalidDate(ValidationError):
    """Submission date outside the rolling edit window."""

    error = "invalid_date"


class Unauthenticated(StatusTrackerError):
    status_code = 401
    error = "unauthenticated"


class Forbidden(StatusTrackerError):
    """Actor lacks rights. The message is never sent to the client."""

    status_code = 403
    error = "forbidden"


class NotFound(StatusTrackerError):
    status_code = 404
    error = "not_found"


class ServerFault(StatusTrackerError):
    """Storage or rendering failure."""

    status_code = 500
    error = "internal_server_error"
