"""
Tests for calendar date helpers.
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from money_tracker.dates import (
    format_currency,
    format_date,
    format_month,
    month_key,
    month_key_label,
    parse_iso_date,
    to_iso_date,
)


class TestParseIsoDate:
    """Tests for parsing stored YYYY-MM-DD strings."""

    def test_parses_string(self):
        """Test parsing a plain date string."""
        assert parse_iso_date("2024-01-31") == date(2024, 1, 31)

    def test_strips_whitespace(self):
        """Test that surrounding whitespace is ignored."""
        assert parse_iso_date(" 2024-02-01 ") == date(2024, 2, 1)

    def test_passes_dates_through(self):
        """Test that date objects are returned unchanged."""
        d = date(2023, 12, 31)
        assert parse_iso_date(d) is d

    @pytest.mark.parametrize("bad", ["", "2024/01/31", "2024-13-01", "2024-02-30", "Jan 5", "2024-01-31T00:00:00Z"])
    def test_rejects_invalid(self, bad):
        """Test that non-dates raise ValueError."""
        with pytest.raises(ValueError):
            parse_iso_date(bad)

    def test_round_trip(self):
        """Test that to_iso_date writes what parse_iso_date reads."""
        d = date(2024, 3, 7)
        assert to_iso_date(d) == "2024-03-07"
        assert parse_iso_date(to_iso_date(d)) == d


class TestMonthKey:
    """Tests for month keys, which must follow the calendar date as written."""

    def test_zero_padded(self):
        """Test YYYY-MM formatting."""
        assert month_key("2024-01-05") == "2024-01"
        assert month_key(date(2024, 11, 30)) == "2024-11"

    def test_last_day_of_month_string(self):
        """Test that the last day of a month stays in that month."""
        assert month_key("2024-01-31") == "2024-01"
        assert month_key("2024-02-01") == "2024-02"

    @pytest.mark.parametrize("offset_hours", [-12, -5, 0, 5, 14])
    def test_late_evening_in_any_offset(self, offset_hours):
        """Test that 23:30 local time on Jan 31 is January in every timezone."""
        tz = timezone(timedelta(hours=offset_hours))
        moment = datetime(2024, 1, 31, 23, 30, tzinfo=tz)
        assert month_key(moment) == "2024-01"

    def test_keys_sort_chronologically(self):
        """Test that lexicographic order of keys is time order."""
        keys = [month_key(d) for d in ["2023-12-31", "2024-10-01", "2024-02-15"]]
        assert sorted(keys) == ["2023-12", "2024-02", "2024-10"]


class TestFormatting:
    """Tests for display formatting."""

    def test_format_date(self):
        """Test short date formatting."""
        assert format_date("2024-01-05") == "Jan 5, 2024"

    def test_format_month(self):
        """Test month heading formatting."""
        assert format_month("2024-01-31") == "January 2024"
        assert month_key_label("2023-12") == "December 2023"

    @pytest.mark.parametrize("amount,expected", [
        (Decimal("1234.5"), "$1,234.50"),
        (Decimal("0"), "$0.00"),
        (None, "$0.00"),
        (Decimal("-12"), "-$12.00"),
        (450, "$450.00"),
        (Decimal("1000000"), "$1,000,000.00"),
    ])
    def test_format_currency(self, amount, expected):
        """Test currency formatting."""
        assert format_currency(amount) == expected

    def test_format_currency_symbol(self):
        """Test a custom currency symbol."""
        assert format_currency(Decimal("5"), "€") == "€5.00"
