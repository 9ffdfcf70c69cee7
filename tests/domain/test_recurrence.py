"""Tests for ledgerroll.domain.recurrence pure functions."""

from datetime import date, timedelta
from decimal import Decimal

from ledgerroll.dates import month_window
from ledgerroll.domain.models import AccountName, CategoryName, Money
from ledgerroll.domain.recurrence import Frequency, RecurrenceRule, occurrence_dates, parse_frequency


def make_rule(
    frequency: str | None,
    start_date: date | None,
    end_date: date | None = None,
    day_of_month: int | None = None,
) -> RecurrenceRule:
    return RecurrenceRule(
        description="Rule",
        category=CategoryName("Expense"),
        amount=Money(Decimal("10")),
        account=AccountName("Checking"),
        frequency=frequency,
        start_date=start_date,
        end_date=end_date,
        day_of_month=day_of_month,
    )


def expand(rule: RecurrenceRule, year: int, month: int) -> list[date]:
    start, end = month_window(year, month)
    return occurrence_dates(rule, start, end)


class TestParseFrequency:
    """Tests for parse_frequency."""

    def test_known_values(self) -> None:
        """Should parse each supported frequency."""
        assert parse_frequency("monthly") is Frequency.MONTHLY
        assert parse_frequency("biweekly") is Frequency.BIWEEKLY
        assert parse_frequency("weekly") is Frequency.WEEKLY
        assert parse_frequency("yearly") is Frequency.YEARLY

    def test_case_and_whitespace(self) -> None:
        """Should ignore case and surrounding whitespace."""
        assert parse_frequency("  Monthly ") is Frequency.MONTHLY

    def test_bi_weekly_alias(self) -> None:
        """Should accept the hyphenated spelling."""
        assert parse_frequency("Bi-Weekly") is Frequency.BIWEEKLY

    def test_unknown_and_missing(self) -> None:
        """Should return None for unknown or missing text."""
        assert parse_frequency("quarterly") is None
        assert parse_frequency("") is None
        assert parse_frequency(None) is None


class TestMonthly:
    """Tests for monthly expansion."""

    def test_single_occurrence_on_day(self) -> None:
        """Should produce the configured day."""
        rule = make_rule("monthly", date(2025, 1, 1), day_of_month=15)
        assert expand(rule, 2025, 9) == [date(2025, 9, 15)]

    def test_day_31_in_30_day_month_is_not_clamped(self) -> None:
        """Should produce nothing rather than the last day."""
        rule = make_rule("monthly", date(2025, 1, 1), day_of_month=31)
        for month in (4, 6, 9, 11):
            assert expand(rule, 2025, month) == []

    def test_day_31_in_31_day_month(self) -> None:
        """Should produce the 31st when it exists."""
        rule = make_rule("monthly", date(2025, 1, 1), day_of_month=31)
        assert expand(rule, 2025, 10) == [date(2025, 10, 31)]

    def test_day_29_february(self) -> None:
        """Should only occur in leap-year February."""
        rule = make_rule("monthly", date(2023, 1, 1), day_of_month=29)
        assert expand(rule, 2025, 2) == []
        assert expand(rule, 2024, 2) == [date(2024, 2, 29)]

    def test_before_start_date_excluded(self) -> None:
        """Should skip a candidate before the rule starts."""
        rule = make_rule("monthly", date(2025, 9, 20), day_of_month=15)
        assert expand(rule, 2025, 9) == []
        assert expand(rule, 2025, 10) == [date(2025, 10, 15)]

    def test_start_date_inclusive(self) -> None:
        """Should include a candidate on the start date."""
        rule = make_rule("monthly", date(2025, 9, 15), day_of_month=15)
        assert expand(rule, 2025, 9) == [date(2025, 9, 15)]

    def test_end_date_inclusive(self) -> None:
        """Should include a candidate on the end date and nothing after."""
        rule = make_rule("monthly", date(2025, 1, 1), end_date=date(2025, 9, 15), day_of_month=15)
        assert expand(rule, 2025, 9) == [date(2025, 9, 15)]
        assert expand(rule, 2025, 10) == []

    def test_invalid_day(self) -> None:
        """Should produce nothing for missing or out of range days."""
        assert expand(make_rule("monthly", date(2025, 1, 1)), 2025, 9) == []
        assert expand(make_rule("monthly", date(2025, 1, 1), day_of_month=0), 2025, 9) == []
        assert expand(make_rule("monthly", date(2025, 1, 1), day_of_month=32), 2025, 9) == []

    def test_start_after_window(self) -> None:
        """Should produce nothing for months before the rule starts."""
        rule = make_rule("monthly", date(2026, 1, 1), day_of_month=1)
        assert expand(rule, 2025, 12) == []


class TestBiweekly:
    """Tests for biweekly expansion."""

    def test_steps_from_start_date(self) -> None:
        """Should land every 14 days from the start date."""
        rule = make_rule("biweekly", date(2025, 9, 5))
        assert expand(rule, 2025, 9) == [date(2025, 9, 5), date(2025, 9, 19)]
        assert expand(rule, 2025, 10) == [date(2025, 10, 3), date(2025, 10, 17), date(2025, 10, 31)]

    def test_start_long_before_window(self) -> None:
        """Should keep the 14-day phase across many months."""
        start = date(2024, 1, 5)
        rule = make_rule("bi-weekly", start)
        result = expand(rule, 2025, 9)
        assert result
        for d in result:
            assert (d - start).days % 14 == 0

    def test_matches_set_definition(self) -> None:
        """Should equal {start + 14k} intersected with window and rule bounds."""
        start = date(2023, 11, 17)
        end = date(2024, 3, 8)
        rule = make_rule("biweekly", start, end_date=end)
        for year, month in [(2023, 11), (2023, 12), (2024, 1), (2024, 2), (2024, 3), (2024, 4)]:
            window_start, window_end = month_window(year, month)
            expected = []
            current = start
            while current <= window_end:
                if window_start <= current <= end:
                    expected.append(current)
                current += timedelta(days=14)
            assert expand(rule, year, month) == expected

    def test_leap_day_window_sorted_unique(self) -> None:
        """Should stay strictly sorted across 29 February."""
        rule = make_rule("biweekly", date(2024, 2, 1))
        result = expand(rule, 2024, 2)
        assert result == [date(2024, 2, 1), date(2024, 2, 15), date(2024, 2, 29)]
        assert result == sorted(set(result))

    def test_end_date_cuts_off(self) -> None:
        """Should stop at the end date."""
        rule = make_rule("biweekly", date(2025, 9, 5), end_date=date(2025, 9, 18))
        assert expand(rule, 2025, 9) == [date(2025, 9, 5)]

    def test_start_mid_month(self) -> None:
        """Should not produce dates before the start date."""
        rule = make_rule("biweekly", date(2025, 9, 25))
        assert expand(rule, 2025, 9) == [date(2025, 9, 25)]


class TestWeekly:
    """Tests for weekly expansion."""

    def test_every_seven_days(self) -> None:
        """Should land every 7 days."""
        rule = make_rule("weekly", date(2025, 8, 29))
        assert expand(rule, 2025, 9) == [
            date(2025, 9, 5),
            date(2025, 9, 12),
            date(2025, 9, 19),
            date(2025, 9, 26),
        ]


class TestYearly:
    """Tests for yearly expansion."""

    def test_anniversary_month_only(self) -> None:
        """Should occur only in the start date's month."""
        rule = make_rule("yearly", date(2023, 3, 14))
        assert expand(rule, 2025, 3) == [date(2025, 3, 14)]
        assert expand(rule, 2025, 4) == []

    def test_not_before_start(self) -> None:
        """Should not occur in a year before the start date."""
        rule = make_rule("yearly", date(2026, 3, 14))
        assert expand(rule, 2025, 3) == []

    def test_leap_day_start_in_non_leap_year(self) -> None:
        """Should skip a 29 February anniversary in non-leap years."""
        rule = make_rule("yearly", date(2024, 2, 29))
        assert expand(rule, 2025, 2) == []
        assert expand(rule, 2025, 3) == []
        assert expand(rule, 2028, 2) == [date(2028, 2, 29)]


class TestDegenerateRules:
    """Tests for rules that cannot produce occurrences."""

    def test_unknown_frequency(self) -> None:
        """Should produce nothing for an unknown frequency."""
        assert expand(make_rule("fortnightly-ish", date(2025, 1, 1)), 2025, 9) == []

    def test_missing_frequency(self) -> None:
        """Should produce nothing without a frequency."""
        assert expand(make_rule(None, date(2025, 1, 1), day_of_month=1), 2025, 9) == []

    def test_missing_start_date(self) -> None:
        """Should produce nothing without a start date."""
        assert expand(make_rule("monthly", None, day_of_month=1), 2025, 9) == []

    def test_deterministic(self) -> None:
        """Should return identical output on repeated calls."""
        rule = make_rule("weekly", date(2025, 1, 3))
        assert expand(rule, 2025, 9) == expand(rule, 2025, 9)
