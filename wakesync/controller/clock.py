"""Device clock synchronisation and the once-a-second clock display refresh.

The device's RTC stores local wall-clock time, not UTC. Synchronising
therefore pushes ``utc_now + offset`` where the offset is derived by rendering
the same instant in the target zone and in UTC, which picks up daylight
saving automatically. The configured standard offset only classifies the
result as standard or daylight time for the operator.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from wakesync.datetime_utils import (
    device_timestamp_ms,
    format_utc_offset,
    is_daylight_saving,
    resolve_zone,
    utc_now,
    zone_label,
    zone_offset,
)

from .gateway import DeviceGateway, Failure
from .notifications import NotificationSurface
from .state import DeviceTime, StateStore, with_clock_error, with_device_time

LOGGER = logging.getLogger("wakesync.clock")

SYNC_PATH = "/api/sync-time"
TIME_PATH = "/api/time"


class ClockSynchronizer:
    def __init__(
        self,
        *,
        gateway: DeviceGateway,
        store: StateStore,
        notifier: NotificationSurface,
        timezone: str,
        standard_offset: timedelta,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._notifier = notifier
        self._zone = resolve_zone(timezone)
        self._standard_offset = standard_offset
        self._clock = clock

    def offset(self, now: datetime | None = None) -> timedelta:
        return zone_offset(self._zone, now or self._clock())

    def is_daylight_saving(self, now: datetime | None = None) -> bool:
        return is_daylight_saving(self.offset(now), self._standard_offset)

    def zone_label(self, now: datetime | None = None) -> str:
        now = now or self._clock()
        return zone_label(self._zone, now, daylight=self.is_daylight_saving(now))

    async def sync(self) -> bool:
        """Push the zone's current wall clock to the device as its new time."""
        now = self._clock()
        offset = self.offset(now)
        label = self.zone_label(now)
        timestamp = device_timestamp_ms(now, offset)
        LOGGER.info(
            "Time sync: utc=%s offset=%s (%s) dst=%s timestamp=%s",
            now.isoformat(),
            format_utc_offset(offset),
            label,
            is_daylight_saving(offset, self._standard_offset),
            timestamp,
        )
        result = await self._gateway.post(SYNC_PATH, {"timestamp": timestamp})
        if isinstance(result, Failure) or not _sync_succeeded(result.value):
            self._notifier.show("Failed to sync time")
            return False
        self._notifier.show(f"System time synced to {label}")
        await self.refresh_display()
        return True

    async def refresh_display(self) -> DeviceTime | None:
        ticket = self._store.ticket("clock")
        result = await self._gateway.get(TIME_PATH)
        device_time = None if isinstance(result, Failure) else DeviceTime.from_payload(result.value)
        if device_time is None:
            if not isinstance(result, Failure):
                LOGGER.warning("Device returned an unreadable time payload: %s", result.value)
            self._notifier.report_failure("clock", "Lost contact with the device clock")
            self._store.commit("clock", ticket, with_clock_error)
            return None
        self._notifier.report_recovery("clock")
        self._store.commit("clock", ticket, with_device_time, device_time)
        return device_time


def _sync_succeeded(payload: object) -> bool:
    return isinstance(payload, dict) and payload.get("success") is True
