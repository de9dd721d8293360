# File: src/stockpilot/utils/datetime.py
"""Timezone-aware datetime utilities for the store's business calendar."""

import os
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

# Store timezone (Philippines, UTC+8, no DST)
APP_TIMEZONE = ZoneInfo(os.getenv("APP_TIMEZONE", "Asia/Manila"))


def now_local() -> datetime:
    """Get current datetime in the store timezone."""
    return datetime.now(APP_TIMEZONE)


def today_local() -> date:
    """Get today's business date in the store timezone."""
    return now_local().date()


def now_utc() -> datetime:
    """Get current UTC datetime as NAIVE for database storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def date_range(start: date, end: date) -> list[date]:
    """Inclusive list of dates from start to end (empty if start > end)."""
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days
