"""Client-side caches of device state and the pure reducers that replace them.

Every cache held here mirrors a full server response. Reducers take the
current :class:`AppState` plus a decoded payload and return the next state;
nothing is patched in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar

from wakesync.utils import coerce_int_field

LOGGER = logging.getLogger("wakesync.state")

DEFAULT_TIME_FORMAT = "24"
DEFAULT_THEME = "light"
TIME_FORMATS = ("12", "24")

MODE_SET_TIMES = "set_times"
MODE_REGULAR_INTERVAL = "regular_interval"
MODE_RANDOM_INTERVAL = "random_interval"


class ValidationError(ValueError):
    """Operator input rejected before any request is issued."""


@dataclass(frozen=True, slots=True)
class Alarm:
    id: int
    time: str
    active: bool

    @classmethod
    def from_payload(cls, payload: Any) -> Alarm | None:
        if not isinstance(payload, dict):
            return None
        raw_id = payload.get("id")
        if isinstance(raw_id, bool) or raw_id is None:
            return None
        try:
            alarm_id = int(raw_id)
        except (TypeError, ValueError):
            return None
        return cls(id=alarm_id, time=str(payload.get("time") or ""), active=bool(payload.get("active")))


@dataclass(frozen=True, slots=True)
class Settings:
    time_format: str = DEFAULT_TIME_FORMAT
    theme: str = DEFAULT_THEME

    @classmethod
    def from_payload(cls, payload: Any) -> Settings:
        """Fill defaults for anything missing or malformed; applying twice changes nothing."""
        if not isinstance(payload, dict):
            return cls()
        time_format = str(payload.get("timeFormat") or "").strip()
        if time_format not in TIME_FORMATS:
            time_format = DEFAULT_TIME_FORMAT
        theme = payload.get("theme")
        if not isinstance(theme, str) or not theme.strip():
            theme = DEFAULT_THEME
        return cls(time_format=time_format, theme=theme.strip())

    def to_payload(self) -> dict[str, str]:
        return {"timeFormat": self.time_format, "theme": self.theme}


@dataclass(frozen=True, slots=True)
class SetTimes:
    key: ClassVar[str] = MODE_SET_TIMES
    path: ClassVar[str] = "/api/mode/set-times"
    title: ClassVar[str] = "Set Times"

    def to_payload(self) -> dict[str, int]:
        return {}


@dataclass(frozen=True, slots=True)
class RegularInterval:
    hours: int
    minutes: int

    key: ClassVar[str] = MODE_REGULAR_INTERVAL
    path: ClassVar[str] = "/api/mode/regular-interval"
    title: ClassVar[str] = "Regular Interval"

    def to_payload(self) -> dict[str, int]:
        return {"hours": self.hours, "minutes": self.minutes}


@dataclass(frozen=True, slots=True)
class RandomInterval:
    hours: int
    minutes: int

    key: ClassVar[str] = MODE_RANDOM_INTERVAL
    path: ClassVar[str] = "/api/mode/random-interval"
    title: ClassVar[str] = "Random Interval"

    def to_payload(self) -> dict[str, int]:
        return {"hours": self.hours, "minutes": self.minutes}


ScheduleMode = SetTimes | RegularInterval | RandomInterval


@dataclass(frozen=True, slots=True)
class ModeStatus:
    active_mode: str
    reg_interval_hours: int = 0
    reg_interval_minutes: int = 0
    rand_interval_hours: int = 0
    rand_interval_minutes: int = 0
    next_activation_time: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> ModeStatus | None:
        if not isinstance(payload, dict) or "activeMode" not in payload:
            return None
        next_time = payload.get("nextActivationTime")
        return cls(
            active_mode=str(payload.get("activeMode") or ""),
            reg_interval_hours=coerce_int_field(payload.get("regIntervalHours")),
            reg_interval_minutes=coerce_int_field(payload.get("regIntervalMinutes")),
            rand_interval_hours=coerce_int_field(payload.get("randIntervalHours")),
            rand_interval_minutes=coerce_int_field(payload.get("randIntervalMinutes")),
            next_activation_time=str(next_time) if next_time else None,
        )


@dataclass(frozen=True, slots=True)
class EventRecord:
    type: str
    mode: str
    time_str: str
    message: str
    timestamp: int | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> EventRecord | None:
        if not isinstance(payload, dict):
            return None
        timestamp = payload.get("timestamp")
        return cls(
            type=str(payload.get("type") or ""),
            mode=str(payload.get("mode") or ""),
            time_str=str(payload.get("timeStr") or ""),
            message=str(payload.get("message") or ""),
            timestamp=coerce_int_field(timestamp) if timestamp is not None else None,
        )


@dataclass(frozen=True, slots=True)
class EventStats:
    total_events: int
    success_count: int
    error_count: int
    retention_hours: int = 24

    @classmethod
    def from_payload(cls, payload: Any) -> EventStats | None:
        if not isinstance(payload, dict) or "totalEvents" not in payload:
            return None
        retention = payload.get("retentionHours")
        return cls(
            total_events=coerce_int_field(payload.get("totalEvents")),
            success_count=coerce_int_field(payload.get("successCount")),
            error_count=coerce_int_field(payload.get("errorCount")),
            retention_hours=coerce_int_field(retention) if retention is not None else 24,
        )


@dataclass(frozen=True, slots=True)
class DeviceTime:
    hour: int
    minute: int
    second: int
    date: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> DeviceTime | None:
        if not isinstance(payload, dict):
            return None
        try:
            hour = int(payload["hour"])
            minute = int(payload["minute"])
            second = int(payload["second"])
        except (KeyError, TypeError, ValueError):
            return None
        if not (0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 60):
            return None
        date = payload.get("date")
        return cls(hour=hour, minute=minute, second=second, date=str(date) if date else None)


@dataclass(frozen=True, slots=True)
class ServoPosition:
    """Feeder carousel position; compartment 0 is the empty home slot."""

    compartment: int
    angle: int
    max_compartment: int

    @classmethod
    def from_payload(cls, payload: Any) -> ServoPosition | None:
        if not isinstance(payload, dict) or "compartment" not in payload:
            return None
        return cls(
            compartment=coerce_int_field(payload.get("compartment")),
            angle=coerce_int_field(payload.get("angle")),
            max_compartment=coerce_int_field(payload.get("maxCompartment")),
        )


def parse_alarms(payload: Any) -> tuple[Alarm, ...] | None:
    """Decode a full alarm collection, preserving server order."""
    if not isinstance(payload, list):
        return None
    alarms = []
    for item in payload:
        alarm = Alarm.from_payload(item)
        if alarm is None:
            LOGGER.debug("Skipping malformed alarm entry: %s", item)
            continue
        alarms.append(alarm)
    return tuple(alarms)


def parse_events(payload: Any) -> tuple[EventRecord, ...] | None:
    if not isinstance(payload, list):
        return None
    return tuple(record for record in (EventRecord.from_payload(item) for item in payload) if record)


@dataclass(frozen=True, slots=True)
class AppState:
    settings: Settings = field(default_factory=Settings)
    alarms: tuple[Alarm, ...] = ()
    mode: ModeStatus | None = None
    events: tuple[EventRecord, ...] = ()
    stats: EventStats | None = None
    device_time: DeviceTime | None = None
    clock_error: bool = False
    wifi_ssid: str | None = None
    battery: int | None = None
    servo: ServoPosition | None = None


def with_settings(state: AppState, settings: Settings) -> AppState:
    return replace(state, settings=settings)


def with_alarms(state: AppState, alarms: tuple[Alarm, ...]) -> AppState:
    return replace(state, alarms=tuple(alarms))


def with_mode(state: AppState, mode: ModeStatus) -> AppState:
    return replace(state, mode=mode)


def with_events(state: AppState, events: tuple[EventRecord, ...]) -> AppState:
    return replace(state, events=tuple(events))


def with_stats(state: AppState, stats: EventStats) -> AppState:
    return replace(state, stats=stats)


def with_device_time(state: AppState, device_time: DeviceTime) -> AppState:
    return replace(state, device_time=device_time, clock_error=False)


def with_clock_error(state: AppState) -> AppState:
    return replace(state, device_time=None, clock_error=True)


def with_wifi_ssid(state: AppState, ssid: str | None) -> AppState:
    return replace(state, wifi_ssid=ssid)


def with_battery(state: AppState, battery: int | None) -> AppState:
    return replace(state, battery=battery)


def with_servo(state: AppState, servo: ServoPosition) -> AppState:
    return replace(state, servo=servo)


StateListener = Callable[[AppState], None]


class StateStore:
    """Owns the current AppState and applies reducers to it.

    Each category (alarms, mode, clock, ...) hands out increasing tickets when
    a request is issued. A response is committed only if no response with a
    newer ticket for the same category has already been applied, so a slow
    refresh cannot overwrite the result of a later mutation.
    """

    def __init__(self, state: AppState | None = None) -> None:
        self._state = state or AppState()
        self._issued: dict[str, int] = {}
        self._applied: dict[str, int] = {}
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def ticket(self, category: str) -> int:
        issued = self._issued.get(category, 0) + 1
        self._issued[category] = issued
        return issued

    def commit(self, category: str, ticket: int, reducer: Callable[..., AppState], *args: Any) -> bool:
        if ticket <= self._applied.get(category, 0):
            LOGGER.debug("Dropping stale %s response (ticket %s)", category, ticket)
            return False
        self._applied[category] = ticket
        self.apply(reducer, *args)
        return True

    def apply(self, reducer: Callable[..., AppState], *args: Any) -> AppState:
        next_state = reducer(self._state, *args)
        if next_state == self._state:
            return next_state
        self._state = next_state
        for listener in list(self._listeners):
            try:
                listener(next_state)
            except Exception:  # pylint: disable=broad-except
                LOGGER.exception("State listener failed")
        return next_state
