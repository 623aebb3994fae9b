"""Pure rendering of AppState into display-ready values.

Nothing here touches the network or mutates state; rendering the same state
twice yields equal views. Alarm rows carry their id so a front end can route
button presses back through ``WakeController.dispatch``.
"""

from __future__ import annotations

from dataclasses import dataclass

from wakesync.datetime_utils import format_alarm_time, format_time_of_day

from .modes import mode_label, next_activation_label
from .notifications import Notice
from .state import AppState, DeviceTime, EventRecord, EventStats, ServoPosition

CLOCK_PLACEHOLDER = "--:--:--"
CLOCK_ERROR = "Error"
EMPTY_ALARMS = "No times set"
EMPTY_EVENTS = "No events in the past 24 hours"


@dataclass(frozen=True, slots=True)
class AlarmRow:
    id: int
    label: str
    active: bool
    toggle_label: str


@dataclass(frozen=True, slots=True)
class EventRow:
    type: str
    mode: str
    time_str: str
    message: str


@dataclass(frozen=True, slots=True)
class IntervalInputs:
    reg_hours: int
    reg_minutes: int
    rand_hours: int
    rand_minutes: int


@dataclass(frozen=True, slots=True)
class View:
    clock: str
    theme_class: str
    time_format: str
    alarms: tuple[AlarmRow, ...]
    alarms_empty_text: str | None
    mode: str
    next_activation: str
    intervals: IntervalInputs
    events: tuple[EventRow, ...]
    events_empty_text: str | None
    stats: str
    wifi_ssid: str
    battery: str
    servo: str
    notice: str | None
    notice_persistent: bool


def render_clock(device_time: DeviceTime | None, clock_error: bool, time_format: str) -> str:
    if clock_error:
        return CLOCK_ERROR
    if device_time is None:
        return CLOCK_PLACEHOLDER
    return format_time_of_day(device_time.hour, device_time.minute, device_time.second, time_format)


def render_stats(stats: EventStats | None) -> str:
    if stats is None:
        return ""
    return (
        f"{stats.total_events} events in the past {stats.retention_hours}h "
        f"({stats.success_count} ok, {stats.error_count} errors)"
    )


def render_servo(servo: ServoPosition | None) -> str:
    if servo is None:
        return ""
    return f"Compartment {servo.compartment} of {servo.max_compartment} ({servo.angle} deg)"


def _event_row(record: EventRecord) -> EventRow:
    return EventRow(type=record.type, mode=record.mode, time_str=record.time_str, message=record.message)


def render_view(state: AppState, notice: Notice | None = None) -> View:
    time_format = state.settings.time_format
    alarm_rows = tuple(
        AlarmRow(
            id=alarm.id,
            label=format_alarm_time(alarm.time, time_format),
            active=alarm.active,
            toggle_label="ON" if alarm.active else "OFF",
        )
        for alarm in state.alarms
    )
    mode = state.mode
    intervals = IntervalInputs(
        reg_hours=mode.reg_interval_hours if mode else 0,
        reg_minutes=mode.reg_interval_minutes if mode else 0,
        rand_hours=mode.rand_interval_hours if mode else 0,
        rand_minutes=mode.rand_interval_minutes if mode else 0,
    )
    return View(
        clock=render_clock(state.device_time, state.clock_error, time_format),
        theme_class=f"{state.settings.theme}-theme",
        time_format=time_format,
        alarms=alarm_rows,
        alarms_empty_text=None if alarm_rows else EMPTY_ALARMS,
        mode=mode_label(mode),
        next_activation=next_activation_label(mode),
        intervals=intervals,
        events=tuple(_event_row(record) for record in state.events),
        events_empty_text=None if state.events else EMPTY_EVENTS,
        stats=render_stats(state.stats),
        wifi_ssid=state.wifi_ssid or "",
        battery="" if state.battery is None else f"{state.battery}%",
        servo=render_servo(state.servo),
        notice=notice.text if notice else None,
        notice_persistent=bool(notice and notice.persistent),
    )
