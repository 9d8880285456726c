"""Tests for utils/dates.py - UTC clock and UK date handling."""

from datetime import date, timezone

import pytest

from utils.dates import (
    format_time,
    format_uk_date,
    is_valid_uk_date,
    now_utc,
    parse_uk_date,
    today_iso,
)


class TestNowUtc:

    def test_is_timezone_aware_utc(self):
        assert now_utc().tzinfo == timezone.utc


class TestTodayIso:

    def test_format(self):
        value = today_iso()
        assert len(value) == 10
        assert date.fromisoformat(value)

    def test_unknown_timezone_raises(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            today_iso("Mars/Olympus_Mons")


class TestUkDates:

    def test_parse(self):
        assert parse_uk_date("05/11/2025") == date(2025, 11, 5)

    def test_parse_strips_whitespace(self):
        assert parse_uk_date(" 01/01/2026 ") == date(2026, 1, 1)

    @pytest.mark.parametrize("value", ["2025-11-05", "31/02/2025", "13/13/2025", ""])
    def test_parse_rejects(self, value):
        with pytest.raises(ValueError, match="DD/MM/YYYY"):
            parse_uk_date(value)

    def test_format(self):
        assert format_uk_date(date(2025, 3, 9)) == "09/03/2025"

    def test_is_valid(self):
        assert is_valid_uk_date("29/02/2024")
        assert not is_valid_uk_date("29/02/2025")


class TestFormatTime:

    @pytest.mark.parametrize("value,expected", [
        ("09:00", "9:00 AM"),
        ("00:30", "12:30 AM"),
        ("12:00", "12:00 PM"),
        ("17:45", "5:45 PM"),
        ("09:00-17:00", "9:00 AM - 5:00 PM"),
        ("All day", "All day"),
    ])
    def test_twelve_hour(self, value, expected):
        assert format_time(value) == expected
