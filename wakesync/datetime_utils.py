"""Shared datetime helpers: zone offsets, device timestamps and clock formatting."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta, tzinfo
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TimeFormat = Literal["12", "24"]

_HHMM_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

DAYLIGHT_LABEL = "Daylight time"
STANDARD_LABEL = "Standard time"


def utc_now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Ensure datetime is in UTC timezone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def resolve_zone(zone: str | tzinfo) -> tzinfo:
    """Return a tzinfo for a zone name, raising ValueError for unknown names."""
    if not isinstance(zone, str):
        return zone
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {zone!r}") from exc


def zone_offset(zone: str | tzinfo, now: datetime | None = None) -> timedelta:
    """Offset of the zone's wall clock from UTC at ``now``.

    Both wall clocks are rendered for the same instant and differenced, so the
    result follows daylight-saving transitions without a lookup table.
    """
    instant = ensure_utc(now or utc_now())
    zone_wall = instant.astimezone(resolve_zone(zone)).replace(tzinfo=None)
    utc_wall = instant.replace(tzinfo=None)
    return zone_wall - utc_wall


def is_daylight_saving(offset: timedelta, standard_offset: timedelta) -> bool:
    return offset > standard_offset


def format_utc_offset(offset: timedelta) -> str:
    """Render an offset as ``UTC+10``, ``UTC-3`` or ``UTC+5:30``."""
    total_minutes = int(offset.total_seconds() // 60)
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    if minutes:
        return f"UTC{sign}{hours}:{minutes:02d}"
    return f"UTC{sign}{hours}"


def zone_label(zone: str | tzinfo, now: datetime | None = None, daylight: bool | None = None) -> str:
    """Human label such as ``AEDT (UTC+11)`` for the zone at ``now``.

    Zones the tz database names only numerically (``+04``) are labelled
    ``Daylight time`` or ``Standard time`` instead. ``daylight`` decides which;
    when omitted the zone's own DST flag is used.
    """
    instant = ensure_utc(now or utc_now())
    local = instant.astimezone(resolve_zone(zone))
    offset = zone_offset(zone, instant)
    abbreviation = local.tzname() or ""
    if not abbreviation.isalpha():
        if daylight is None:
            daylight = bool(local.dst())
        abbreviation = DAYLIGHT_LABEL if daylight else STANDARD_LABEL
    return f"{abbreviation} ({format_utc_offset(offset)})"


def device_timestamp_ms(now: datetime, offset: timedelta) -> int:
    """Epoch milliseconds of ``now`` shifted onto the zone's wall clock.

    The device keeps local time in its RTC, so it is handed the local wall
    clock expressed as if it were UTC.
    """
    utc_ms = int(ensure_utc(now).timestamp() * 1000)
    return utc_ms + int(offset.total_seconds() * 1000)


def parse_time_string(value: str | None) -> tuple[int, int] | None:
    """Parse ``HH:MM`` into (hour, minute). Returns None if invalid."""
    if not value:
        return None
    match = _HHMM_PATTERN.match(value)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def format_time_of_day(hour: int, minute: int, second: int | None = None, time_format: str = "24") -> str:
    """Format a time of day under the 12/24 hour display rule.

    12-hour output zero-pads ``hour % 12 or 12`` and appends AM/PM, so
    midnight renders as ``12``.
    """
    tail = f":{minute:02d}" if second is None else f":{minute:02d}:{second:02d}"
    if time_format == "12":
        suffix = "PM" if hour >= 12 else "AM"
        return f"{hour % 12 or 12:02d}{tail} {suffix}"
    return f"{hour:02d}{tail}"


def format_alarm_time(value: str, time_format: str = "24") -> str:
    """Format an ``HH:MM`` alarm entry; unparseable values pass through unchanged."""
    parsed = parse_time_string(value)
    if parsed is None:
        return value
    hour, minute = parsed
    return format_time_of_day(hour, minute, time_format=time_format)
