"""Tests for ledgerroll.dates pure functions."""

import logging
from datetime import date, datetime

import pytest

from ledgerroll.dates import coerce_date, month_label, month_window, parse_date


class TestMonthWindow:
    """Tests for month_window."""

    def test_january_window(self) -> None:
        """Should span the whole of January."""
        assert month_window(2025, 1) == (date(2025, 1, 1), date(2025, 1, 31))

    def test_december_window_stays_in_year(self) -> None:
        """Should end on 31 December, not cross into next year."""
        assert month_window(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))

    def test_february_non_leap_year(self) -> None:
        """Should handle February in non-leap year."""
        assert month_window(2025, 2) == (date(2025, 2, 1), date(2025, 2, 28))

    def test_february_leap_year(self) -> None:
        """Should handle February in leap year."""
        assert month_window(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_thirty_day_month(self) -> None:
        """Should handle 30-day months."""
        assert month_window(2025, 4) == (date(2025, 4, 1), date(2025, 4, 30))

    def test_all_months_of_year(self) -> None:
        """Should correctly handle all 12 months."""
        last_days = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
        for month_num in range(1, 13):
            start, end = month_window(2025, month_num)
            assert start == date(2025, month_num, 1)
            assert end == date(2025, month_num, last_days[month_num - 1])

    def test_invalid_month_number_raises_valueerror(self) -> None:
        """Should raise ValueError for invalid month number."""
        with pytest.raises(ValueError):
            month_window(2025, 13)


class TestMonthLabel:
    """Tests for month_label."""

    def test_label(self) -> None:
        """Should render full month name and year."""
        assert month_label(2025, 9) == "September 2025"


class TestCoerceDate:
    """Tests for coerce_date."""

    def test_date_passes_through(self) -> None:
        """Should return date objects unchanged."""
        assert coerce_date(date(2025, 9, 5)) == date(2025, 9, 5)

    def test_datetime_drops_time(self) -> None:
        """Should drop the time part of datetimes."""
        assert coerce_date(datetime(2025, 9, 5, 13, 45)) == date(2025, 9, 5)

    def test_iso_text(self) -> None:
        """Should parse ISO text."""
        assert coerce_date("2025-09-05") == date(2025, 9, 5)

    def test_iso_text_with_time(self) -> None:
        """Should parse ISO timestamps."""
        assert coerce_date("2025-09-05T08:00:00") == date(2025, 9, 5)

    def test_us_style_text(self) -> None:
        """Should read slash dates month first."""
        assert coerce_date("9/5/2025") == date(2025, 9, 5)

    def test_blank_is_none(self) -> None:
        """Should treat blank and None as missing."""
        assert coerce_date("") is None
        assert coerce_date("   ") is None
        assert coerce_date(None) is None

    def test_garbage_is_none(self) -> None:
        """Should treat unparseable text as missing."""
        assert coerce_date("not a date") is None

    def test_text_without_year_is_missing(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should not invent a year for partial dates."""
        with caplog.at_level(logging.WARNING, logger="ledgerroll"):
            assert coerce_date("Sep 5") is None
            assert coerce_date("15th") is None
        assert "has no year" in caplog.text

    def test_two_digit_year(self) -> None:
        """Should accept a numeric date ending in a two digit year."""
        assert coerce_date("9/5/25") == date(2025, 9, 5)

    def test_year_out_of_range_is_missing(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should reject implausible years."""
        with caplog.at_level(logging.WARNING, logger="ledgerroll"):
            assert coerce_date("0001-09-05") is None
            assert coerce_date("Sep 5 1066") is None
        assert "treated as missing" in caplog.text


class TestParseDate:
    """Tests for parse_date."""

    def test_valid(self) -> None:
        """Should return the parsed date."""
        assert parse_date("2025-10-01") == date(2025, 10, 1)

    def test_invalid_raises(self) -> None:
        """Should raise ValueError for unparseable text."""
        with pytest.raises(ValueError, match="Could not parse date"):
            parse_date("whenever")
