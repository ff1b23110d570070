from datetime import date, datetime, timezone
from typing import Iterable, Optional

from .errors import InputValidationError
from .models import DateWindow, Source

ALLOWED_SOURCES = [s.value for s in Source]


def parse_iso_day(value: str) -> Optional[date]:
    """Strict YYYY-MM-DD, nothing else."""
    if not isinstance(value, str) or len(value) != 10:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def validate_inputs(
    company: str,
    start_date: str,
    end_date: str,
    source: str,
    allowed_sources: Iterable[str] = ALLOWED_SOURCES,
    today: Optional[date] = None,
) -> DateWindow:
    """Check the user's request once, up front, and return the date window."""
    if not company or not isinstance(company, str) or not company.strip():
        raise InputValidationError("Invalid company name.")

    start = parse_iso_day(start_date)
    if start is None:
        raise InputValidationError("Invalid start date. Use YYYY-MM-DD.")
    end = parse_iso_day(end_date)
    if end is None:
        raise InputValidationError("Invalid end date. Use YYYY-MM-DD.")

    now = today or datetime.now(timezone.utc).date()
    if start > end:
        raise InputValidationError("Start date must be before end date.")
    if start > now or end > now:
        raise InputValidationError("Start or end date cannot be in the future.")

    allowed = list(allowed_sources)
    if not source or source.lower() not in allowed:
        raise InputValidationError(f"Source must be one of: {', '.join(allowed)}")

    return DateWindow(start=start, end=end)
