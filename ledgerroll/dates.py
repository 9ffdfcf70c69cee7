"""Date utilities for ledgerroll.

Month windows for the ledger core, and coercion of loosely typed date cells
coming from the store or CSV imports.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

from ledgerroll.logging_setup import get_logger

logger = get_logger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2999

# A four digit year, or a two digit year closing a numeric date (9/5/25)
_HAS_YEAR = re.compile(r"\d{4}|\d{1,2}[/.-]\d{1,2}[/.-]\d{2}\b")


def month_window(year: int, month: int) -> tuple[date, date]:
    """Calculate the inclusive bounds of a calendar month.

    Args:
        year: Four digit year.
        month: Month number (1-12).

    Returns:
        Tuple of (first_day, last_day).

    Raises:
        ValueError: If month is outside 1-12.
    """
    first = date(year, month, 1)
    next_month = (first.replace(day=28) + timedelta(days=4)).replace(day=1)
    return first, next_month - timedelta(days=1)


def month_label(year: int, month: int) -> str:
    """Human-readable month (e.g., "September 2025")."""
    return f"{calendar.month_name[month]} {year}"


def coerce_date(value: Any) -> date | None:
    """Coerce a store or CSV cell into a date.

    Accepts date and datetime objects (time is dropped) and text in any
    format pandas.to_datetime understands. Blank or unparseable values
    return None so callers can treat the row as missing a date. Text with
    no year (e.g. "Sep 5") or a year outside MIN_YEAR-MAX_YEAR is logged
    and also returns None.

    Args:
        value: Raw cell value.

    Returns:
        Date or None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    try:
        # ISO first so 2025-01-02 is never read day-first
        parsed = date.fromisoformat(text[:10])
    except ValueError:
        if not _HAS_YEAR.search(text):
            logger.warning("Date %r has no year; treated as missing", value)
            return None
        try:
            timestamp = pd.to_datetime(text, dayfirst=False)
        except (ValueError, pd.errors.ParserError, OverflowError):
            return None
        if pd.isna(timestamp):
            return None
        parsed = timestamp.date()

    if not MIN_YEAR <= parsed.year <= MAX_YEAR:
        logger.warning("Date %r is outside %d-%d; treated as missing", value, MIN_YEAR, MAX_YEAR)
        return None
    return parsed


def parse_date(raw_date: str) -> date:
    """Parse user-entered date text, failing loudly.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    parsed = coerce_date(raw_date)
    if parsed is None:
        raise ValueError(f"Could not parse date '{raw_date}'")
    return parsed
