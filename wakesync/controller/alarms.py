"""Explicit wake-time list, reconciled wholesale against the device's copy."""

from __future__ import annotations

import logging
from typing import Any

from wakesync.datetime_utils import parse_time_string

from .gateway import DeviceGateway, Failure, GatewayResult
from .notifications import NotificationSurface
from .state import Alarm, StateStore, ValidationError, parse_alarms, with_alarms

LOGGER = logging.getLogger("wakesync.alarms")

ALARMS_PATH = "/api/alarms"


def validate_alarm_time(value: str | None) -> str:
    """Return the canonical ``HH:MM`` form of an operator-entered time."""
    if not value or not value.strip():
        raise ValidationError("Please select a time")
    parsed = parse_time_string(value)
    if parsed is None:
        raise ValidationError(f"Invalid time: {value.strip()}")
    hour, minute = parsed
    return f"{hour:02d}:{minute:02d}"


class AlarmReconciler:
    """Create/toggle/delete alarms; every success replaces the whole cached list."""

    def __init__(self, *, gateway: DeviceGateway, store: StateStore, notifier: NotificationSurface) -> None:
        self._gateway = gateway
        self._store = store
        self._notifier = notifier

    async def refresh(self) -> tuple[Alarm, ...] | None:
        ticket = self._store.ticket("alarms")
        alarms = self._reconcile(ticket, await self._gateway.get(ALARMS_PATH))
        if alarms is None:
            self._notifier.report_failure("alarms", "Failed to load alarms")
        return alarms

    async def create(self, time_value: str | None) -> tuple[Alarm, ...] | None:
        try:
            time_str = validate_alarm_time(time_value)
        except ValidationError as exc:
            self._notifier.show(str(exc))
            return None
        ticket = self._store.ticket("alarms")
        alarms = self._reconcile(ticket, await self._gateway.post(ALARMS_PATH, {"time": time_str}))
        if alarms is None:
            self._notifier.show("Failed to add alarm")
            return None
        self._notifier.show("Alarm added successfully")
        return alarms

    async def toggle(self, alarm_id: int) -> tuple[Alarm, ...] | None:
        ticket = self._store.ticket("alarms")
        alarms = self._reconcile(ticket, await self._gateway.patch(f"{ALARMS_PATH}/{int(alarm_id)}"))
        if alarms is None:
            self._notifier.show("Failed to update alarm")
            return None
        toggled = find_alarm(alarms, alarm_id)
        if toggled is None:
            self._notifier.show("Alarm no longer exists")
        else:
            self._notifier.show(f"Alarm {'enabled' if toggled.active else 'disabled'}")
        return alarms

    async def delete(self, alarm_id: int) -> tuple[Alarm, ...] | None:
        ticket = self._store.ticket("alarms")
        alarms = self._reconcile(ticket, await self._gateway.delete(f"{ALARMS_PATH}/{int(alarm_id)}"))
        if alarms is None:
            self._notifier.show("Failed to delete alarm")
            return None
        self._notifier.show("Alarm deleted")
        return alarms

    def _reconcile(self, ticket: int, result: GatewayResult) -> tuple[Alarm, ...] | None:
        if isinstance(result, Failure):
            return None
        alarms = parse_alarms(result.value)
        if alarms is None:
            LOGGER.warning("Device returned an unreadable alarm list: %s", _preview(result.value))
            return None
        self._notifier.report_recovery("alarms")
        self._store.commit("alarms", ticket, with_alarms, alarms)
        return alarms


def find_alarm(alarms: tuple[Alarm, ...], alarm_id: int) -> Alarm | None:
    for alarm in alarms:
        if alarm.id == alarm_id:
            return alarm
    return None


def _preview(value: Any, limit: int = 120) -> str:
    text = repr(value)
    return text if len(text) <= limit else text[:limit] + "..."
