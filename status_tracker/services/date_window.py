# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: rolling submission window.
"""

from datetime import date, datetime, timedelta

from status_tracker.core.config import settings
from status_tracker.core.exceptions import InvalidDate


def window_bounds(reference_now: datetime, days: int | None = None) -> tuple[date, date]:
    """Return the inclusive (earliest, latest) submission dates."""
    span = settings.EDIT_WINDOW_DAYS if days is None else days
    today = reference_now.date() if isinstance(reference_now, datetime) else reference_now
    return today - timedelta(days=span), today


def is_allowed(record_date: date, reference_now: datetime, days: int | None = None) -> bool:
    """True iff ``record_date`` is within ``days`` calendar days before today, inclusive."""
    earliest, latest = window_bounds(reference_now, days)
    return earliest <= record_date <= latest


def ensure_allowed(record_date: date, reference_now: datetime, days: int | None = None) -> None:
    if not is_allowed(record_date, reference_now, days):
        earliest, latest = window_bounds(reference_now, days)
        raise InvalidDate(
            f"Status can only be submitted for dates between {earliest.isoformat()} "
            f"and {latest.isoformat()}",
            field="date",
        )
