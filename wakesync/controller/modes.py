"""Wake-scheduling mode selection.

Exactly one of three modes is active on the device. Activating one implicitly
deactivates the others there; the client only submits a transition and then
mirrors the device's reported ``activeMode``.
"""

from __future__ import annotations

import logging
from typing import Any

from wakesync.utils import coerce_int_field

from .gateway import DeviceGateway, Failure
from .notifications import NotificationSurface
from .state import (
    MODE_RANDOM_INTERVAL,
    MODE_REGULAR_INTERVAL,
    MODE_SET_TIMES,
    ModeStatus,
    RandomInterval,
    RegularInterval,
    ScheduleMode,
    SetTimes,
    StateStore,
    ValidationError,
    with_mode,
)

LOGGER = logging.getLogger("wakesync.modes")

MODE_PATH = "/api/mode"
NOT_SET = "Not set"
MODE_LOAD_FAILED = "Failed to load mode status"


def validate_interval(hours: int, minutes: int) -> None:
    if hours < 0 or minutes < 0:
        raise ValidationError("Interval values cannot be negative")
    if hours == 0 and minutes == 0:
        raise ValidationError("Please set an interval greater than 0")


def build_mode(kind: str, hours: Any = 0, minutes: Any = 0) -> ScheduleMode:
    """Build a mode descriptor from raw form input, validating interval modes."""
    if kind == MODE_SET_TIMES:
        return SetTimes()
    hours_value = coerce_int_field(hours)
    minutes_value = coerce_int_field(minutes)
    validate_interval(hours_value, minutes_value)
    if kind == MODE_REGULAR_INTERVAL:
        return RegularInterval(hours=hours_value, minutes=minutes_value)
    if kind == MODE_RANDOM_INTERVAL:
        return RandomInterval(hours=hours_value, minutes=minutes_value)
    raise ValidationError(f"Unknown mode: {kind}")


def mode_label(status: ModeStatus | None) -> str:
    if status is None:
        return ""
    if status.active_mode == MODE_SET_TIMES:
        return SetTimes.title
    if status.active_mode == MODE_REGULAR_INTERVAL:
        return f"{RegularInterval.title} ({status.reg_interval_hours}h {status.reg_interval_minutes}m)"
    if status.active_mode == MODE_RANDOM_INTERVAL:
        return f"{RandomInterval.title} ({status.rand_interval_hours}h {status.rand_interval_minutes}m)"
    return status.active_mode


def next_activation_label(status: ModeStatus | None) -> str:
    if status is None or not status.next_activation_time:
        return NOT_SET
    return status.next_activation_time


class ScheduleModeManager:
    def __init__(self, *, gateway: DeviceGateway, store: StateStore, notifier: NotificationSurface) -> None:
        self._gateway = gateway
        self._store = store
        self._notifier = notifier

    async def refresh(self) -> ModeStatus | None:
        ticket = self._store.ticket("mode")
        result = await self._gateway.get(MODE_PATH)
        if isinstance(result, Failure):
            self._notifier.report_failure("mode", MODE_LOAD_FAILED)
            return None
        status = ModeStatus.from_payload(result.value)
        if status is None:
            LOGGER.warning("Device returned an unreadable mode payload: %s", result.value)
            self._notifier.report_failure("mode", MODE_LOAD_FAILED)
            return None
        self._notifier.report_recovery("mode")
        self._store.commit("mode", ticket, with_mode, status)
        return status

    async def submit(self, mode: ScheduleMode) -> ModeStatus | None:
        """Request a single transition, then mirror the device's full mode status."""
        if isinstance(mode, (RegularInterval, RandomInterval)):
            try:
                validate_interval(mode.hours, mode.minutes)
            except ValidationError as exc:
                self._notifier.show(str(exc))
                return None
        result = await self._gateway.post(mode.path, mode.to_payload())
        if isinstance(result, Failure):
            self._notifier.show(f"Failed to set mode to {mode.title}")
            return None
        status = await self.refresh()
        if status is None:
            self._notifier.show(f"Could not confirm mode change to {mode.title}")
            return None
        self._notifier.show(f"Mode Set To {mode.title}")
        return status

    async def set_times(self) -> ModeStatus | None:
        return await self.submit(SetTimes())

    async def regular_interval(self, hours: Any, minutes: Any) -> ModeStatus | None:
        return await self._submit_interval(MODE_REGULAR_INTERVAL, hours, minutes)

    async def random_interval(self, hours: Any, minutes: Any) -> ModeStatus | None:
        return await self._submit_interval(MODE_RANDOM_INTERVAL, hours, minutes)

    async def _submit_interval(self, kind: str, hours: Any, minutes: Any) -> ModeStatus | None:
        try:
            mode = build_mode(kind, hours, minutes)
        except ValidationError as exc:
            self._notifier.show(str(exc))
            return None
        return await self.submit(mode)
