# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Date parsing helpers shared by record queries and reports."""
import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from status_tracker.core.exceptions import ValidationError


def parse_iso_date(value: str, field: str = "date") -> date:
    """Parse ``YYYY-MM-DD``; a full ISO timestamp is cut to its date part."""
    if isinstance(value, date):
        return value
    raw = (value or "").strip()
    try:
        if "T" in raw:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)", field=field)


def parse_optional_date(value: Optional[str], field: str) -> Optional[date]:
    return parse_iso_date(value, field) if value else None


def month_bounds(value: str, field: str = "month") -> tuple[date, date]:
    """First and last day of a ``YYYY-MM`` month."""
    try:
        year_s, month_s = (value or "").strip().split("-")
        year, month = int(year_s), int(month_s)
        last = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last)
    except (ValueError, calendar.IllegalMonthError):
        raise ValidationError(f"{field} must look like YYYY-MM", field=field)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end], ascending."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def split_ids(raw: Optional[str]) -> list[str]:
    """Split a comma-joined id list, dropping blanks and duplicates."""
    if not raw:
        return []
    return list(dict.fromkeys(part.strip() for part in raw.split(",") if part.strip()))
