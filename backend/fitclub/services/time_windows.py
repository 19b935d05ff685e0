from __future__ import annotations
from datetime import date, datetime, time, timedelta, timezone as dt_tz
from zoneinfo import ZoneInfo


def _local_midnight_utc(d: date, tz: ZoneInfo) -> datetime:
    # fold=0: a repeated midnight (rare, e.g. some DST rules) resolves to its first occurrence
    return datetime.combine(d, time(0, 0), tzinfo=tz).astimezone(dt_tz.utc)


def day_window_utc(now_utc: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """
    Local calendar day containing `now_utc` in `tz_name`, as a UTC [start, end) pair.

    Examples:
        >>> from datetime import datetime, timezone
        >>> now = datetime(2025, 1, 10, 16, 0, tzinfo=timezone.utc)  # 2025-01-11 01:00 KST
        >>> start, end = day_window_utc(now, "Asia/Seoul")
        >>> start.isoformat(), end.isoformat()
        ('2025-01-10T15:00:00+00:00', '2025-01-11T15:00:00+00:00')
    """
    tz = ZoneInfo(tz_name)
    local_day = now_utc.astimezone(tz).date()
    return _local_midnight_utc(local_day, tz), _local_midnight_utc(local_day + timedelta(days=1), tz)


def week_window_utc(now_utc: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """
    Local week (Monday 00:00 to next Monday 00:00) containing `now_utc`,
    converted to UTC. Membership is half-open: start <= t < end.

    Args:
        now_utc: Aware instant to anchor on
        tz_name: IANA timezone the week is anchored in (e.g. "Asia/Seoul")

    Returns:
        Tuple of (start_utc, end_utc) datetime objects

    Examples:
        >>> from datetime import datetime, timezone
        >>> now = datetime(2025, 1, 12, 16, 0, tzinfo=timezone.utc)  # Mon 2025-01-13 01:00 KST
        >>> start, end = week_window_utc(now, "Asia/Seoul")
        >>> start.isoformat()
        '2025-01-12T15:00:00+00:00'
    """
    tz = ZoneInfo(tz_name)
    local_day = now_utc.astimezone(tz).date()
    monday = local_day - timedelta(days=local_day.weekday())  # Monday = 0
    return _local_midnight_utc(monday, tz), _local_midnight_utc(monday + timedelta(days=7), tz)


def previous_week_window_utc(now_utc: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """The full week before the one containing `now_utc`."""
    start_utc, _ = week_window_utc(now_utc, tz_name)
    # step back into the previous week and recompute, so DST shifts between weeks are honored
    return week_window_utc(start_utc - timedelta(seconds=1), tz_name)


def week_id(start_utc: datetime, tz_name: str) -> str:
    """Local ISO date of the week's Monday, e.g. '2025-01-06'."""
    return start_utc.astimezone(ZoneInfo(tz_name)).date().isoformat()


def in_window(ts: datetime, start_utc: datetime, end_utc: datetime) -> bool:
    return start_utc <= ts < end_utc


def remaining_label(expires_at: datetime, now_utc: datetime) -> str:
    diff = expires_at - now_utc
    if diff.total_seconds() <= 0:
        return "expired"

    total_minutes = int(diff.total_seconds() // 60)
    days, rest = divmod(total_minutes, 60 * 24)
    hours, minutes = divmod(rest, 60)

    if days >= 1:
        return f"{days}d {hours}h left"
    if hours >= 1:
        return f"{hours}h {minutes}m left"
    return f"{max(1, minutes)}m left"
