from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from src.config import settings


def to_utc(value: datetime, tz_name: Optional[str] = None) -> datetime:
    """Normalize an entered datetime to naive UTC.

    Values without an offset are read as local time in the election timezone.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=ZoneInfo(tz_name or settings.ELECTION_TIMEZONE))
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utc_to_local(value: datetime, tz_name: Optional[str] = None) -> str:
    """Render a naive UTC datetime as local "YYYY-MM-DDTHH:MM" for display."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(ZoneInfo(tz_name or settings.ELECTION_TIMEZONE))
    return local.strftime("%Y-%m-%dT%H:%M")
