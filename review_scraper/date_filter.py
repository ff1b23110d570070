"""
Date parsing and window filtering.

Review dates are compared by their UTC calendar day, so any instant on the
window's last day still counts as in range.
"""

from datetime import date, datetime, timezone
from typing import Iterable, Optional

from .models import DateWindow, Review

LONG_DATE_FORMATS = ["%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%d %b %Y"]


def parse_review_date(raw: Optional[str]) -> Optional[datetime]:
    """Parse an ISO or long-form English date into an aware UTC datetime.

    Returns None when the string is empty or in no format we know.
    """
    if not raw:
        return None
    text = raw.strip()
    if not text:
        return None

    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        dt = None
        for fmt in LONG_DATE_FORMATS:
            try:
                dt = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if dt is None:
            return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def review_day(dt: datetime) -> date:
    return dt.astimezone(timezone.utc).date()


def is_before_window(dt: datetime, window: DateWindow) -> bool:
    return review_day(dt) < window.start


def is_after_window(dt: datetime, window: DateWindow) -> bool:
    return review_day(dt) > window.end


def in_window(dt: datetime, window: DateWindow) -> bool:
    return window.start <= review_day(dt) <= window.end


def filter_reviews(reviews: Iterable[Review], window: DateWindow) -> list[Review]:
    """Keep reviews dated inside the window, in their original order."""
    return [r for r in reviews if in_window(r.date, window)]
