"""
Timestamp Primitives
====================

Parsing and display helpers for instants coming out of the data store.

The store hands back timestamps both with and without a UTC offset. Every
offset-less value is UTC: it is never read as local wall-clock time, so a
deadline means the same instant on every host.
"""

from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mantra.core import ConfigurationException, InvalidTimestampException

NOT_SET = "Not set"
INVALID_DATE = "Invalid date"

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# str.format templates over the fields produced by _date_fields()
SLA_TIME_PATTERN = "{mon} {day}, {year} at {hour12}:{minute} {ampm} {tz}"
TICKET_DATE_PATTERN = "{mon} {day02}, {year}"
TICKET_DATETIME_PATTERN = "{mon} {day}, {year} {hour12}:{minute} {ampm} {tz}"
SHORT_DATETIME_PATTERN = "{mon} {day02}, {hour24}:{minute}"
DATE_KEY_PATTERN = "{year}-{month02}-{day02}"


def parse_instant(value: Any) -> datetime:
    """
    Parse ``value`` into an aware UTC datetime.

    Raises:
        InvalidTimestampException: if the value is missing or unparseable
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidTimestampException(value) from exc
    else:
        raise InvalidTimestampException(value)

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def try_parse_instant(value: Any) -> Optional[datetime]:
    """Lenient :func:`parse_instant`: returns None instead of raising."""
    try:
        return parse_instant(value)
    except InvalidTimestampException:
        return None


def parse_optional_instant(value: Any) -> Optional[datetime]:
    """Parse ``value`` unless it is None."""
    if value is None:
        return None
    return parse_instant(value)


@lru_cache(maxsize=32)
def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationException(f"Unknown timezone: {name}") from exc


def _date_fields(moment: datetime) -> dict[str, Any]:
    hour12 = moment.hour % 12 or 12
    return {
        "year": f"{moment.year:04d}",
        "month02": f"{moment.month:02d}",
        "mon": _MONTHS[moment.month - 1],
        "day": moment.day,
        "day02": f"{moment.day:02d}",
        "hour12": hour12,
        "hour24": f"{moment.hour:02d}",
        "minute": f"{moment.minute:02d}",
        "ampm": "AM" if moment.hour < 12 else "PM",
        "tz": moment.tzname() or "",
    }


def format_in_timezone(value: Any, pattern: str, tz_name: str) -> str:
    """
    Render ``value`` in ``tz_name`` using a ``str.format`` pattern.

    Missing values render as ``"Not set"`` and unparseable ones as
    ``"Invalid date"``; display code never raises on bad rows.
    """
    if value is None or value == "":
        return NOT_SET
    moment = try_parse_instant(value)
    if moment is None:
        return INVALID_DATE
    return pattern.format(**_date_fields(moment.astimezone(get_zone(tz_name))))


def format_sla_time(value: Any, tz_name: str) -> str:
    return format_in_timezone(value, SLA_TIME_PATTERN, tz_name)


def format_ticket_date(value: Any, tz_name: str) -> str:
    return format_in_timezone(value, TICKET_DATE_PATTERN, tz_name)


def format_ticket_datetime(value: Any, tz_name: str) -> str:
    return format_in_timezone(value, TICKET_DATETIME_PATTERN, tz_name)


def format_short_datetime(value: Any, tz_name: str) -> str:
    return format_in_timezone(value, SHORT_DATETIME_PATTERN, tz_name)


def to_date_key(value: Any, tz_name: str) -> str:
    """Calendar day (``YYYY-MM-DD``) of ``value`` in ``tz_name``."""
    moment = parse_instant(value).astimezone(get_zone(tz_name))
    return DATE_KEY_PATTERN.format(**_date_fields(moment))


def day_range_bounds(
    date_from: Optional[date],
    date_to: Optional[date],
    tz_name: str,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    UTC bounds for calendar days ``date_from..date_to`` in ``tz_name``.

    The lower bound is inclusive. The upper bound is the start of the day
    after ``date_to`` and is exclusive, so the whole of ``date_to`` counts.
    """
    zone = get_zone(tz_name)
    start = end = None
    if date_from is not None:
        start = datetime.combine(date_from, time.min, tzinfo=zone).astimezone(timezone.utc)
    if date_to is not None:
        end = datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=zone).astimezone(timezone.utc)
    return start, end
