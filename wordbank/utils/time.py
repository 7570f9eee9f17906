from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from wordbank.config import get_settings


def _load_zone():
    tz_name = get_settings().tz
    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        return timezone(timedelta(hours=9), name="Asia/Tokyo")


LOCAL_TZ = _load_zone()


def now_local() -> datetime:
    return datetime.now(LOCAL_TZ)


def add_days(moment: datetime, days: int) -> datetime:
    return moment + timedelta(days=days)


def parse_datetime(value: Any, default: datetime) -> datetime:
    """Coerce a stored timestamp into an aware datetime, falling back to ``default``."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    if isinstance(value, str):
        candidate = value.strip()
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=timezone.utc)
            return parsed
        except ValueError:
            return default

    return default
