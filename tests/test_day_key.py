"""Tests for src.core.day_key — timezone-aware day key arithmetic."""

import pytest
from datetime import date, datetime, timezone

from src.core.day_key import (
    CalendarValidationError,
    add_days,
    day_keys_in_range,
    day_label,
    days_between,
    format_day_key,
    format_day_key_range,
    is_day_key_in_range,
    parse_day_key,
    today_key,
    validate_weekday,
    weekday_of,
)


class TestParseDayKey:
    def test_valid(self):
        assert parse_day_key("2026-02-05") == date(2026, 2, 5)

    def test_wrong_format(self):
        with pytest.raises(CalendarValidationError):
            parse_day_key("2026-2-5")

    def test_out_of_range_day(self):
        with pytest.raises(CalendarValidationError):
            parse_day_key("2026-02-30")

    def test_out_of_range_month(self):
        with pytest.raises(CalendarValidationError):
            parse_day_key("2026-13-01")

    def test_time_component_rejected(self):
        with pytest.raises(CalendarValidationError):
            parse_day_key("2026-02-05T10:00:00")

    def test_non_string_rejected(self):
        with pytest.raises(CalendarValidationError):
            parse_day_key(20260205)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_day_key("garbage")


class TestTodayKey:
    def test_same_instant_differs_by_zone(self):
        # 03:30 UTC is still the previous evening in New York
        instant = datetime(2026, 2, 5, 3, 30, tzinfo=timezone.utc)
        assert today_key("UTC", instant) == "2026-02-05"
        assert today_key("America/New_York", instant) == "2026-02-04"
        assert today_key("Asia/Tokyo", instant) == "2026-02-05"

    def test_ahead_of_utc(self):
        instant = datetime(2026, 2, 4, 20, 0, tzinfo=timezone.utc)
        assert today_key("Pacific/Auckland", instant) == "2026-02-05"

    def test_defaults_to_now(self):
        key = today_key("UTC")
        assert parse_day_key(key)

    def test_unknown_timezone(self):
        with pytest.raises(CalendarValidationError):
            today_key("Mars/Olympus_Mons")

    def test_naive_datetime_treated_as_utc(self):
        assert format_day_key(datetime(2026, 2, 5, 3, 30), "America/New_York") == "2026-02-04"


class TestWeekdayOf:
    @pytest.mark.parametrize("day_key, expected", [
        ("2026-02-01", 0),  # Sunday
        ("2026-02-02", 1),
        ("2026-02-05", 4),  # Thursday
        ("2026-02-07", 6),  # Saturday
    ])
    def test_weekday(self, day_key, expected):
        assert weekday_of(day_key) == expected

    def test_invalid_key(self):
        with pytest.raises(CalendarValidationError):
            weekday_of("not-a-day")


class TestValidateWeekday:
    def test_in_range(self):
        assert validate_weekday(0) == 0
        assert validate_weekday(6) == 6

    @pytest.mark.parametrize("bad", [-1, 7, "1", 1.0, True, None])
    def test_out_of_range(self, bad):
        with pytest.raises(CalendarValidationError):
            validate_weekday(bad)


class TestArithmetic:
    def test_add_days_across_month(self):
        assert add_days("2026-01-30", 3) == "2026-02-02"

    def test_add_negative_days(self):
        assert add_days("2026-03-01", -1) == "2026-02-28"

    def test_add_days_across_dst(self):
        # US DST starts 2026-03-08; day keys have no clock to shift
        assert add_days("2026-03-07", 2) == "2026-03-09"

    def test_days_between(self):
        assert days_between("2026-02-01", "2026-02-08") == 7
        assert days_between("2026-02-08", "2026-02-01") == -7

    def test_in_range_inclusive(self):
        assert is_day_key_in_range("2026-02-01", "2026-02-01", "2026-02-07")
        assert is_day_key_in_range("2026-02-07", "2026-02-01", "2026-02-07")
        assert not is_day_key_in_range("2026-02-08", "2026-02-01", "2026-02-07")

    def test_range(self, week):
        assert day_keys_in_range("2026-02-01", "2026-02-07") == week

    def test_empty_range(self):
        assert day_keys_in_range("2026-02-07", "2026-02-01") == []


class TestLabels:
    def test_day_label(self):
        assert day_label("2026-02-01") == "S"
        assert day_label("2026-02-04") == "W"

    def test_format_range(self):
        assert format_day_key_range("2026-01-24", "2026-01-30") == "Jan 24 - Jan 30"

    def test_format_range_across_months(self):
        assert format_day_key_range("2026-01-29", "2026-02-04") == "Jan 29 - Feb 4"
