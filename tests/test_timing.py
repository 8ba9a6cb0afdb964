"""Tests for next-notification-time and time formatting helpers."""

from datetime import datetime, timedelta, timezone

import pytest
import pytz

from app.services.timing import (
    compute_next,
    format_alert_time,
    format_local_time,
    hour_label,
    local_hour_at,
    minutes_until_next_slot,
)

BASE = datetime(2024, 1, 15, 0, 17, 42, 123456, tzinfo=timezone.utc)
ZONES = ["UTC", "Europe/Paris", "America/New_York", "Asia/Kolkata", "Australia/Adelaide", "Asia/Tokyo"]


class TestComputeNext:

    @pytest.mark.parametrize("tz_name", ZONES)
    @pytest.mark.parametrize("offset_hours", range(24))
    def test_lands_on_next_even_local_hour(self, tz_name, offset_hours):
        now = BASE + timedelta(hours=offset_hours)
        tz = pytz.timezone(tz_name)
        local_now = now.astimezone(tz)

        result = compute_next(now, tz_name)
        local_result = result.astimezone(tz)

        assert result.tzinfo is not None
        assert local_result.hour % 2 == 0
        assert local_result.hour == (local_now.hour + 2 - local_now.hour % 2) % 24
        assert (local_result.minute, local_result.second, local_result.microsecond) == (0, 0, 0)
        assert timedelta(0) < result - now <= timedelta(hours=2)

    def test_new_york_example(self):
        # 13:20 UTC = 08:20 em Nova York (EST) -> 10:00 local = 15:00 UTC
        now = datetime(2024, 1, 15, 13, 20, tzinfo=timezone.utc)
        assert compute_next(now, "America/New_York") == datetime(2024, 1, 15, 15, 0, tzinfo=timezone.utc)

    def test_even_hour_moves_to_following_boundary(self):
        now = datetime(2024, 1, 15, 14, 0, tzinfo=timezone.utc)
        assert compute_next(now, "UTC") == datetime(2024, 1, 15, 16, 0, tzinfo=timezone.utc)

    def test_wraps_past_midnight(self):
        now = datetime(2024, 1, 15, 23, 10, tzinfo=timezone.utc)
        assert compute_next(now, "UTC") == datetime(2024, 1, 16, 0, 0, tzinfo=timezone.utc)

    def test_spring_forward_gap_lands_an_hour_later(self):
        # 05:30 UTC = 00:30 EST; 02:00 local não existe em 10/03 -> 03:00 EDT = 07:00 UTC
        now = datetime(2024, 3, 10, 5, 30, tzinfo=timezone.utc)
        result = compute_next(now, "America/New_York")
        assert result == datetime(2024, 3, 10, 7, 0, tzinfo=timezone.utc)
        assert result.astimezone(pytz.timezone("America/New_York")).hour == 3
        assert result - now == timedelta(hours=1, minutes=30)

    def test_fall_back_repeated_hour_is_waited_out(self):
        # 04:30 UTC = 00:30 EDT; 01:xx se repete em 03/11 -> 02:00 EST = 07:00 UTC
        now = datetime(2024, 11, 3, 4, 30, tzinfo=timezone.utc)
        result = compute_next(now, "America/New_York")
        assert result == datetime(2024, 11, 3, 7, 0, tzinfo=timezone.utc)
        assert result.astimezone(pytz.timezone("America/New_York")).hour == 2
        assert result - now == timedelta(hours=2, minutes=30)

    @pytest.mark.parametrize("tz_name", ["Not/AZone", "", None])
    def test_unknown_timezone_falls_back_to_utc(self, tz_name):
        now = datetime(2024, 1, 15, 9, 45, tzinfo=timezone.utc)
        assert compute_next(now, tz_name) == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    def test_is_idempotent(self):
        now = datetime(2024, 6, 1, 12, 30, tzinfo=timezone.utc)
        assert compute_next(now, "Europe/Paris") == compute_next(now, "Europe/Paris")

    def test_naive_now_is_treated_as_utc(self):
        assert compute_next(datetime(2024, 1, 15, 9, 45), "UTC") == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


class TestLocalHour:

    def test_local_hour_in_timezone(self):
        now = datetime(2024, 6, 1, 12, 30, tzinfo=timezone.utc)
        assert local_hour_at(now, "Europe/Paris") == 14
        assert local_hour_at(now, "Asia/Tokyo") == 21
        assert local_hour_at(now, "bogus") == 12


class TestMinutesUntilNextSlot:

    @pytest.mark.parametrize(
        "hour,minute,expected",
        [(13, 20, 40), (14, 0, 0), (14, 30, 90), (15, 59, 1), (0, 1, 119)],
    )
    def test_alignment(self, hour, minute, expected):
        now = datetime(2024, 1, 15, hour, minute)
        assert minutes_until_next_slot(now) == expected


class TestFormatting:

    @pytest.mark.parametrize(
        "hour,label",
        [(0, "12 AM"), (1, "1 AM"), (11, "11 AM"), (12, "12 PM"), (14, "2 PM"), (23, "11 PM")],
    )
    def test_hour_label(self, hour, label):
        assert hour_label(hour) == label

    def test_format_local_time_includes_minutes(self):
        instant = datetime(2024, 1, 15, 19, 5, tzinfo=timezone.utc)
        assert format_local_time(instant, "America/New_York") == "2:05 PM"

    def test_format_alert_time(self):
        dt = datetime.fromisoformat("2021-01-05T21:47:00-05:00")
        assert format_alert_time(dt) == "Jan 5, 2021, 9:47 PM"

    def test_format_alert_time_missing(self):
        assert format_alert_time(None) == "Unknown"
