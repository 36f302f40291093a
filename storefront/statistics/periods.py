"""Reporting windows, all computed in UTC"""
from datetime import datetime, timedelta, timezone
import calendar


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def month_ago(now: datetime) -> datetime:
    """Midnight on the same day of the previous month, clamped to that month's length"""
    year, month = (now.year - 1, 12) if now.month == 1 else (now.year, now.month - 1)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return datetime(year, month, day, tzinfo=timezone.utc)


def week_ago(now: datetime) -> datetime:
    return now - timedelta(days=7)


def trailing_year_start(now: datetime) -> datetime:
    """First day of the month eleven months back, so the window spans twelve calendar months"""
    months = now.year * 12 + (now.month - 1) - 11
    return datetime(months // 12, months % 12 + 1, 1, tzinfo=timezone.utc)
