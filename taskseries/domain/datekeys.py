"""Calendar day keys (``yyyy-MM-dd``) in the business timezone.

Stored timestamps are naive UTC, the same way ``utcnow`` writes them. A date key
is the calendar day such an instant falls on in the business timezone, so a task
due late in the evening in New York still belongs to that New York day.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ValidationError

DEFAULT_TIMEZONE = "America/New_York"
DATE_KEY_FORMAT = "%Y-%m-%d"


def get_zone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"unknown timezone: {tz_name!r}") from exc


def parse_date_key(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"invalid date key: {value!r}") from exc


def format_date_key(value: date) -> str:
    return value.strftime(DATE_KEY_FORMAT)


def date_key_for_instant(instant: datetime, tz_name: str = DEFAULT_TIMEZONE) -> str:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return format_date_key(instant.astimezone(get_zone(tz_name)).date())


def end_of_day_utc(date_key: str, tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """Last moment of the business day ``date_key`` as a naive UTC datetime."""
    local = datetime.combine(parse_date_key(date_key), time.max, tzinfo=get_zone(tz_name))
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def today_date_key(tz_name: str = DEFAULT_TIMEZONE, now: datetime | None = None) -> str:
    return date_key_for_instant(now or datetime.now(timezone.utc), tz_name)
