"""Configuration helpers for the wakesync controller."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta

from wakesync.datetime_utils import resolve_zone
from wakesync.utils import parse_bool, parse_float, strip_or_none

DEFAULT_BASE_URL = "http://192.168.4.1"
DEFAULT_TIMEZONE = "Australia/Sydney"
DEFAULT_STANDARD_OFFSET_HOURS = 10.0


@dataclass(frozen=True)
class RefreshConfig:
    clock_seconds: float
    mode_seconds: float
    history_seconds: float


@dataclass(frozen=True)
class ControllerConfig:
    base_url: str
    timezone: str
    standard_offset: timedelta
    timeout: float
    verify_ssl: bool
    refresh: RefreshConfig
    notification_seconds: float

    @staticmethod
    def from_env(env: dict[str, str] | None = None) -> ControllerConfig:
        source = env if env is not None else os.environ
        base_url = strip_or_none(source.get("WAKESYNC_BASE_URL")) or DEFAULT_BASE_URL
        timezone = strip_or_none(source.get("WAKESYNC_TIMEZONE")) or DEFAULT_TIMEZONE
        resolve_zone(timezone)

        standard_hours = parse_float(source.get("WAKESYNC_STANDARD_OFFSET_HOURS"), DEFAULT_STANDARD_OFFSET_HOURS)

        refresh = RefreshConfig(
            clock_seconds=_positive(parse_float(source.get("WAKESYNC_CLOCK_REFRESH_SECONDS"), 1.0), 1.0),
            mode_seconds=_positive(parse_float(source.get("WAKESYNC_MODE_REFRESH_SECONDS"), 60.0), 60.0),
            history_seconds=_positive(parse_float(source.get("WAKESYNC_HISTORY_REFRESH_SECONDS"), 300.0), 300.0),
        )

        return ControllerConfig(
            base_url=base_url.rstrip("/"),
            timezone=timezone,
            standard_offset=timedelta(hours=standard_hours),
            timeout=_positive(parse_float(source.get("WAKESYNC_TIMEOUT_SECONDS"), 5.0), 5.0),
            verify_ssl=parse_bool(source.get("WAKESYNC_VERIFY_SSL"), True),
            refresh=refresh,
            notification_seconds=_positive(parse_float(source.get("WAKESYNC_NOTIFICATION_SECONDS"), 3.0), 3.0),
        )


def _positive(value: float, default: float) -> float:
    return value if value > 0 else default
