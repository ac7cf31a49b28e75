"""Cadence keys: one calendar day (YYYY-MM-DD) or one ISO week (YYYY-Www)."""
import re
from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

DAY_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
WEEK_KEY_PATTERN = re.compile(r"^\d{4}-W\d{2}$")


def day_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def week_key(value: date) -> str:
    iso_year, iso_week, _ = value.isocalendar()
    return f"{iso_year:04d}-W{iso_week:02d}"


def parse_day_key(key: str) -> date:
    return date.fromisoformat(key)


def normalize_day_key(value: Optional[str]) -> Optional[str]:
    """Accept YYYY-MM-DD as is, reduce other ISO dates/datetimes to their day"""
    if not value:
        return None
    value = value.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        if DAY_KEY_PATTERN.match(value):
            return day_key(date.fromisoformat(value))
        return day_key(datetime.fromisoformat(value))
    except ValueError:
        return None


def is_week_key(value: str) -> bool:
    return bool(WEEK_KEY_PATTERN.match(value))


def day_range(start: date, days: int) -> List[str]:
    return [day_key(start + timedelta(days=offset)) for offset in range(days)]


def days_between(start: date, end: date) -> List[str]:
    """Every day key from start to end, both included"""
    if end < start:
        return []
    return day_range(start, (end - start).days + 1)


def week_range(start: date, weeks: int) -> List[str]:
    keys: List[str] = []
    for offset in range(weeks):
        key = week_key(start + timedelta(days=7 * offset))
        if key not in keys:
            keys.append(key)
    return keys


def weeks_between(start: date, end: date) -> List[str]:
    if end < start:
        return []
    keys = week_range(start, (end - start).days // 7 + 1)
    last = week_key(end)
    if last not in keys:
        keys.append(last)
    return keys


def local_now(timezone: str) -> datetime:
    return datetime.now(ZoneInfo(timezone))


def is_in_cron_window(now: datetime, minutes: int) -> bool:
    """The unforced cron only runs right after local midnight"""
    return now.hour == 0 and 0 <= now.minute < minutes
