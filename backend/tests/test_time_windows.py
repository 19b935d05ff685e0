from __future__ import annotations
from datetime import datetime, timedelta, timezone
from fitclub.services.time_windows import (
    day_window_utc, week_window_utc, previous_week_window_utc, week_id, in_window, remaining_label,
)
import pytest


def test_kst_week_starts_monday_midnight_local():
    """Sunday late evening KST still belongs to the week that began the previous Monday"""
    now = datetime(2025, 1, 12, 14, 30, tzinfo=timezone.utc)  # Sun 2025-01-12 23:30 KST
    start, end = week_window_utc(now, "Asia/Seoul")

    # Mon 2025-01-06 00:00 KST = 2025-01-05 15:00Z
    assert start == datetime(2025, 1, 5, 15, 0, tzinfo=timezone.utc)
    assert end - start == timedelta(days=7)
    assert start.tzinfo == timezone.utc


def test_monday_just_after_local_midnight_opens_new_week():
    now = datetime(2025, 1, 12, 15, 0, 1, tzinfo=timezone.utc)  # Mon 2025-01-13 00:00:01 KST
    start, _ = week_window_utc(now, "Asia/Seoul")
    assert start == datetime(2025, 1, 12, 15, 0, tzinfo=timezone.utc)


def test_window_is_half_open():
    now = datetime(2025, 1, 8, 3, 0, tzinfo=timezone.utc)
    start, end = week_window_utc(now, "Asia/Seoul")
    assert in_window(start, start, end)
    assert not in_window(end, start, end)
    assert in_window(end - timedelta(microseconds=1), start, end)


def test_previous_week_is_adjacent():
    now = datetime(2025, 1, 8, 3, 0, tzinfo=timezone.utc)
    cur_start, _ = week_window_utc(now, "Asia/Seoul")
    prev_start, prev_end = previous_week_window_utc(now, "Asia/Seoul")
    assert prev_end == cur_start
    assert cur_start - prev_start == timedelta(days=7)


def test_previous_week_across_dst_change_ny():
    """US DST starts Sun 2025-03-09, so the week ending that day is one hour short"""
    now = datetime(2025, 3, 12, 16, 0, tzinfo=timezone.utc)  # Wed, EDT
    start, end = week_window_utc(now, "America/New_York")
    prev_start, prev_end = previous_week_window_utc(now, "America/New_York")

    # Mon 2025-03-10 00:00 EDT = 04:00Z, Mon 2025-03-03 00:00 EST = 05:00Z
    assert start == datetime(2025, 3, 10, 4, 0, tzinfo=timezone.utc)
    assert prev_start == datetime(2025, 3, 3, 5, 0, tzinfo=timezone.utc)
    assert prev_end == start
    assert prev_end - prev_start == timedelta(days=7) - timedelta(hours=1)


def test_week_id_is_local_monday():
    now = datetime(2025, 1, 12, 14, 30, tzinfo=timezone.utc)
    start, _ = week_window_utc(now, "Asia/Seoul")
    assert week_id(start, "Asia/Seoul") == "2025-01-06"


def test_day_window_kst():
    now = datetime(2025, 1, 10, 16, 0, tzinfo=timezone.utc)  # 2025-01-11 01:00 KST
    start, end = day_window_utc(now, "Asia/Seoul")
    assert start == datetime(2025, 1, 10, 15, 0, tzinfo=timezone.utc)
    assert end == datetime(2025, 1, 11, 15, 0, tzinfo=timezone.utc)


def test_invalid_timezone_raises():
    with pytest.raises(Exception):
        week_window_utc(datetime.now(timezone.utc), "Invalid/Timezone")


@pytest.mark.parametrize("delta,expected", [
    (timedelta(days=2, hours=3, minutes=20), "2d 3h left"),
    (timedelta(hours=5, minutes=10), "5h 10m left"),
    (timedelta(minutes=7, seconds=30), "7m left"),
    (timedelta(seconds=20), "1m left"),
    (timedelta(0), "expired"),
    (timedelta(minutes=-5), "expired"),
])
def test_remaining_label(delta, expected):
    now = datetime(2025, 1, 8, tzinfo=timezone.utc)
    assert remaining_label(now + delta, now) == expected
