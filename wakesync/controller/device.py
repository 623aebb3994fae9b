"""Device-level settings and actions: display settings, WiFi, sleep, manual trigger, battery."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from wakesync.utils import coerce_int_field

from .events import Confirm, confirmed
from .gateway import DeviceGateway, Failure
from .notifications import NotificationSurface
from .state import (
    TIME_FORMATS,
    ServoPosition,
    Settings,
    StateStore,
    ValidationError,
    with_battery,
    with_servo,
    with_settings,
    with_wifi_ssid,
)

LOGGER = logging.getLogger("wakesync.device")

SETTINGS_PATH = "/api/settings"
WIFI_PATH = "/api/wifi"
SLEEP_PATH = "/api/sleep"
TRIGGER_PATH = "/api/trigger-now"
BATTERY_PATH = "/api/battery"
SERVO_PATH = "/api/servo"
RESET_MOTOR_PATH = "/api/reset-motor"

SSID_LENGTH = (8, 32)
PASSWORD_LENGTH = (8, 63)

SLEEP_PROMPT = "Enter sleep mode now? Device will wake at next scheduled time."
SLEEP_FOLLOW_UP_SECONDS = 2.0


@dataclass(frozen=True, slots=True)
class WifiCredentials:
    ssid: str
    password: str

    def __repr__(self) -> str:
        return f"WifiCredentials(ssid={self.ssid!r}, password='***')"

    def to_payload(self) -> dict[str, str]:
        return {"ssid": self.ssid, "password": self.password}


def validate_wifi_credentials(ssid: str | None, password: str | None) -> WifiCredentials:
    ssid = ssid or ""
    password = password or ""
    low, high = SSID_LENGTH
    if not low <= len(ssid) <= high:
        raise ValidationError(f"SSID must be {low}-{high} characters")
    low, high = PASSWORD_LENGTH
    if not low <= len(password) <= high:
        raise ValidationError(f"Password must be {low}-{high} characters")
    return WifiCredentials(ssid=ssid, password=password)


def validate_settings(time_format: str | None, theme: str | None) -> Settings:
    time_format = (time_format or "").strip()
    if time_format not in TIME_FORMATS:
        raise ValidationError("Time format must be 12 or 24")
    theme = (theme or "").strip()
    if not theme:
        raise ValidationError("Please choose a theme")
    return Settings(time_format=time_format, theme=theme)


class SettingsManager:
    def __init__(self, *, gateway: DeviceGateway, store: StateStore, notifier: NotificationSurface) -> None:
        self._gateway = gateway
        self._store = store
        self._notifier = notifier

    async def load(self) -> Settings | None:
        ticket = self._store.ticket("settings")
        result = await self._gateway.get(SETTINGS_PATH)
        if isinstance(result, Failure):
            self._notifier.report_failure("settings", "Failed to load settings")
            return None
        self._notifier.report_recovery("settings")
        settings = Settings.from_payload(result.value)
        self._store.commit("settings", ticket, with_settings, settings)
        return settings

    async def save(self, time_format: str | None, theme: str | None) -> Settings | None:
        try:
            settings = validate_settings(time_format, theme)
        except ValidationError as exc:
            self._notifier.show(str(exc))
            return None
        result = await self._gateway.post(SETTINGS_PATH, settings.to_payload(), expect_json=False)
        if isinstance(result, Failure):
            self._notifier.show("Failed to save settings")
            return None
        # The device acknowledges with plain text; read back the stored copy.
        stored = await self.load()
        if stored is None:
            self._store.commit("settings", self._store.ticket("settings"), with_settings, settings)
            stored = settings
        self._notifier.show("Settings saved successfully")
        return stored


class WifiManager:
    def __init__(self, *, gateway: DeviceGateway, store: StateStore, notifier: NotificationSurface) -> None:
        self._gateway = gateway
        self._store = store
        self._notifier = notifier

    async def load(self) -> str | None:
        ticket = self._store.ticket("wifi")
        result = await self._gateway.get(WIFI_PATH)
        if isinstance(result, Failure) or not isinstance(result.value, dict):
            self._notifier.report_failure("wifi", "Failed to load WiFi settings")
            return None
        self._notifier.report_recovery("wifi")
        ssid = result.value.get("ssid")
        ssid = str(ssid) if ssid else None
        self._store.commit("wifi", ticket, with_wifi_ssid, ssid)
        return ssid

    async def save(self, ssid: str | None, password: str | None) -> bool:
        try:
            credentials = validate_wifi_credentials(ssid, password)
        except ValidationError as exc:
            self._notifier.show(str(exc))
            return False
        LOGGER.info("Updating WiFi SSID to %s", credentials.ssid)
        result = await self._gateway.post(WIFI_PATH, credentials.to_payload())
        if isinstance(result, Failure):
            self._notifier.show(result.detail or "Failed to save WiFi settings")
            return False
        payload = result.value if isinstance(result.value, dict) else {}
        if payload.get("error"):
            self._notifier.show(str(payload["error"]))
            return False
        await self.load()
        self._notifier.show(str(payload.get("message") or "WiFi settings saved"))
        return True


class DeviceActions:
    """Sleep, manual trigger, motor reset, battery and servo readouts."""

    def __init__(
        self,
        *,
        gateway: DeviceGateway,
        store: StateStore,
        notifier: NotificationSurface,
        on_sleep: Callable[[], Awaitable[None]] | None = None,
        follow_up_delay: float = SLEEP_FOLLOW_UP_SECONDS,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._notifier = notifier
        self._on_sleep = on_sleep
        self._follow_up_delay = follow_up_delay

    async def sleep(self, confirm: Confirm) -> bool:
        if not await confirmed(confirm, SLEEP_PROMPT):
            return False
        self._notifier.show("Entering sleep mode...", persistent=True)
        result = await self._gateway.post(SLEEP_PATH)
        if isinstance(result, Failure):
            self._notifier.show("Failed to enter sleep mode")
            return False
        if self._on_sleep:
            await self._on_sleep()
        await asyncio.sleep(self._follow_up_delay)
        self._notifier.show("Device is now sleeping. Disconnect from WiFi.", persistent=True)
        return True

    async def trigger_now(self) -> bool:
        result = await self._gateway.post(TRIGGER_PATH, expect_json=False)
        if isinstance(result, Failure):
            self._notifier.show("Failed to trigger activation")
            return False
        self._notifier.show("Activation triggered")
        return True

    async def battery(self) -> int | None:
        ticket = self._store.ticket("battery")
        result = await self._gateway.get(BATTERY_PATH)
        if isinstance(result, Failure) or not isinstance(result.value, dict) or "battery" not in result.value:
            self._notifier.report_failure("battery", "Failed to read battery level")
            return None
        self._notifier.report_recovery("battery")
        level = max(0, min(100, coerce_int_field(result.value.get("battery"))))
        self._store.commit("battery", ticket, with_battery, level)
        return level

    async def servo(self) -> ServoPosition | None:
        ticket = self._store.ticket("servo")
        result = await self._gateway.get(SERVO_PATH)
        position = None if isinstance(result, Failure) else ServoPosition.from_payload(result.value)
        if position is None:
            self._notifier.report_failure("servo", "Failed to read feeder position")
            return None
        self._notifier.report_recovery("servo")
        self._store.commit("servo", ticket, with_servo, position)
        return position

    async def reset_motor(self) -> bool:
        """Return the carousel to compartment 0, then read back its position."""
        result = await self._gateway.post(RESET_MOTOR_PATH, expect_json=False)
        if isinstance(result, Failure):
            self._notifier.show("Failed to reset motor")
            return False
        await self.servo()
        self._notifier.show("Motor reset to home position")
        return True
