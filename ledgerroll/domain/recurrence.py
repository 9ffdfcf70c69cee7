"""Pure functions for expanding recurring rules into occurrence dates.

This module contains the functional core for recurrence:
- No I/O operations
- No side effects
- Output depends only on (rule, month_start, month_end)

Day-of-month values are never clamped: a rule for the 31st has no
occurrence in a 30-day month.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from ledgerroll.domain.models import AccountName, CategoryName, Money


class Frequency(str, Enum):
    """Supported recurrence frequencies."""

    MONTHLY = "monthly"
    BIWEEKLY = "biweekly"
    WEEKLY = "weekly"
    YEARLY = "yearly"


_FREQUENCY_ALIASES = {
    "bi-weekly": Frequency.BIWEEKLY,
}

_STEP_DAYS = {
    Frequency.BIWEEKLY: 14,
    Frequency.WEEKLY: 7,
}


@dataclass(frozen=True)
class RecurrenceRule:
    """Immutable recurring transaction rule.

    ``amount`` is the magnitude as entered; the sign is applied later from
    the category. ``frequency`` keeps the raw text so unrecognized values
    can be reported by the caller.
    """

    description: str
    category: CategoryName
    amount: Money
    account: AccountName
    frequency: str | None
    start_date: date | None
    end_date: date | None = None
    day_of_month: int | None = None
    day_of_week: str | None = None
    active: bool = True


def parse_frequency(text: str | None) -> Frequency | None:
    """Parse frequency text, case-insensitive and whitespace tolerant.

    Args:
        text: Raw frequency text (e.g. "Monthly", " bi-weekly ").

    Returns:
        Frequency, or None if missing or unrecognized.
    """
    if not text:
        return None
    key = text.strip().lower()
    if key in _FREQUENCY_ALIASES:
        return _FREQUENCY_ALIASES[key]
    try:
        return Frequency(key)
    except ValueError:
        return None


def _within_bounds(candidate: date, rule: RecurrenceRule, month_start: date, month_end: date) -> bool:
    if rule.start_date is None:
        return False
    if candidate < max(rule.start_date, month_start):
        return False
    if candidate > month_end:
        return False
    return rule.end_date is None or candidate <= rule.end_date


def _monthly_candidates(rule: RecurrenceRule, month_start: date) -> list[date]:
    day = rule.day_of_month
    if day is None or not 1 <= day <= 31:
        return []
    try:
        return [date(month_start.year, month_start.month, day)]
    except ValueError:
        # Day does not exist in this month
        return []


def _yearly_candidates(rule: RecurrenceRule, month_start: date) -> list[date]:
    assert rule.start_date is not None
    try:
        return [date(month_start.year, rule.start_date.month, rule.start_date.day)]
    except ValueError:
        # 29 February in a non-leap year
        return []


def _stepped_candidates(rule: RecurrenceRule, month_start: date, month_end: date, step: int) -> list[date]:
    assert rule.start_date is not None
    current = rule.start_date
    if current < month_start:
        # Jump straight to the first step on or after month_start
        steps = -(-(month_start - current).days // step)
        current = current + timedelta(days=steps * step)

    candidates: list[date] = []
    while current <= month_end:
        candidates.append(current)
        current = current + timedelta(days=step)
    return candidates


def occurrence_dates(rule: RecurrenceRule, month_start: date, month_end: date) -> list[date]:
    """Calculate the dates a rule occurs on within a month window.

    Args:
        rule: Recurrence rule to expand.
        month_start: First day of the window (inclusive).
        month_end: Last day of the window (inclusive).

    Returns:
        Sorted list of unique occurrence dates. Empty when the rule has no
        start date, no frequency, or an unrecognized frequency.
    """
    frequency = parse_frequency(rule.frequency)
    if frequency is None or rule.start_date is None:
        return []

    if frequency is Frequency.MONTHLY:
        candidates = _monthly_candidates(rule, month_start)
    elif frequency is Frequency.YEARLY:
        candidates = _yearly_candidates(rule, month_start)
    else:
        candidates = _stepped_candidates(rule, month_start, month_end, _STEP_DAYS[frequency])

    return sorted({d for d in candidates if _within_bounds(d, rule, month_start, month_end)})
