"""Controller wiring: owns the state store, components and refresh cycles."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .alarms import AlarmReconciler
from .clock import ClockSynchronizer
from .config import ControllerConfig
from .device import DeviceActions, SettingsManager, WifiManager
from .events import Confirm, EventHistoryViewer
from .gateway import DeviceGateway
from .modes import ScheduleModeManager
from .notifications import Notice, NotificationSurface
from .refresh import CLOCK_CYCLE, HISTORY_CYCLE, MODE_CYCLE, RefreshOrchestrator
from .state import AppState, StateStore
from .view import View, render_view

LOGGER = logging.getLogger("wakesync.app")

RenderCallback = Callable[[View], None]
Handler = Callable[..., Awaitable[Any]]


def _decline(_prompt: str) -> bool:
    return False


class WakeController:
    """Single entry point for user intents and the owner of all cached state."""

    def __init__(
        self,
        config: ControllerConfig,
        *,
        gateway: DeviceGateway | None = None,
        confirm: Confirm | None = None,
        on_render: RenderCallback | None = None,
    ) -> None:
        self.config = config
        self.gateway = gateway or DeviceGateway.from_config(config)
        self.store = StateStore()
        self.notifier = NotificationSurface(
            dismiss_after=config.notification_seconds,
            on_change=self._handle_notice,
        )
        self.orchestrator = RefreshOrchestrator()
        parts = {"gateway": self.gateway, "store": self.store, "notifier": self.notifier}
        self.clock = ClockSynchronizer(
            **parts,
            timezone=config.timezone,
            standard_offset=config.standard_offset,
        )
        self.modes = ScheduleModeManager(**parts)
        self.alarms = AlarmReconciler(**parts)
        self.events = EventHistoryViewer(**parts)
        self.settings = SettingsManager(**parts)
        self.wifi = WifiManager(**parts)
        self.device = DeviceActions(**parts, on_sleep=self.orchestrator.stop_all)
        self._confirm = confirm or _decline
        self._on_render = on_render
        self.store.subscribe(self._handle_state)
        self._cycle_actions: dict[str, Callable[[], Awaitable[Any]]] = {
            CLOCK_CYCLE: self.clock.refresh_display,
            MODE_CYCLE: self._refresh_status,
            HISTORY_CYCLE: self.events.refresh,
        }
        self._handlers: dict[str, Handler] = {
            "alarm.create": self._create_alarm,
            "alarm.toggle": self._toggle_alarm,
            "alarm.delete": self._delete_alarm,
            "mode.set_times": self._set_times,
            "mode.regular_interval": self._regular_interval,
            "mode.random_interval": self._random_interval,
            "clock.sync": self._sync_clock,
            "events.clear": self._clear_events,
            "events.refresh": self._refresh_events,
            "settings.save": self._save_settings,
            "wifi.save": self._save_wifi,
            "device.sleep": self._sleep,
            "device.trigger": self._trigger,
            "device.reset_motor": self._reset_motor,
            "notification.dismiss": self._dismiss_notice,
        }

    @property
    def state(self) -> AppState:
        return self.store.state

    @property
    def actions(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def view(self) -> View:
        return render_view(self.store.state, self.notifier.current)

    async def start(self) -> None:
        """Load every cache from the device, push the time, then start the cycles."""
        LOGGER.info("Connecting to device at %s", self.config.base_url)
        await self.settings.load()
        await self.alarms.refresh()
        await self.modes.refresh()
        await self.events.refresh()
        await self.wifi.load()
        await self.device.battery()
        await self.device.servo()
        await self.clock.sync()
        self.start_cycles()

    def start_cycles(self) -> None:
        refresh = self.config.refresh
        periods = {
            CLOCK_CYCLE: refresh.clock_seconds,
            MODE_CYCLE: refresh.mode_seconds,
            HISTORY_CYCLE: refresh.history_seconds,
        }
        for name, period in periods.items():
            self.orchestrator.start(name, period, self._cycle_actions[name])

    async def close(self) -> None:
        await self.orchestrator.stop_all()
        self.notifier.dismiss()
        await self.gateway.close()

    async def dispatch(self, action: str, **params: Any) -> Any:
        handler = self._handlers.get(action)
        if handler is None:
            raise KeyError(f"Unknown action: {action}")
        LOGGER.debug("Dispatching %s", action)
        return await handler(**params)

    async def refresh_now(self, name: str) -> None:
        if not await self.orchestrator.trigger(name):
            await self._cycle_actions[name]()

    async def _refresh_status(self) -> None:
        await self.modes.refresh()
        await self.device.battery()
        await self.device.servo()

    async def _create_alarm(self, time: str | None = None) -> Any:
        alarms = await self.alarms.create(time)
        if alarms is not None:
            await self.refresh_now(MODE_CYCLE)
        return alarms

    async def _toggle_alarm(self, alarm_id: int) -> Any:
        alarms = await self.alarms.toggle(int(alarm_id))
        if alarms is not None:
            await self.refresh_now(MODE_CYCLE)
        return alarms

    async def _delete_alarm(self, alarm_id: int) -> Any:
        alarms = await self.alarms.delete(int(alarm_id))
        if alarms is not None:
            await self.refresh_now(MODE_CYCLE)
        return alarms

    async def _set_times(self) -> Any:
        return await self.modes.set_times()

    async def _regular_interval(self, hours: Any = 0, minutes: Any = 0) -> Any:
        return await self.modes.regular_interval(hours, minutes)

    async def _random_interval(self, hours: Any = 0, minutes: Any = 0) -> Any:
        return await self.modes.random_interval(hours, minutes)

    async def _sync_clock(self) -> bool:
        return await self.clock.sync()

    async def _clear_events(self, confirm: Confirm | None = None) -> Any:
        return await self.events.clear(confirm or self._confirm)

    async def _refresh_events(self) -> None:
        await self.refresh_now(HISTORY_CYCLE)

    async def _save_settings(self, time_format: str | None = None, theme: str | None = None) -> Any:
        return await self.settings.save(time_format, theme)

    async def _save_wifi(self, ssid: str | None = None, password: str | None = None) -> bool:
        return await self.wifi.save(ssid, password)

    async def _sleep(self, confirm: Confirm | None = None) -> bool:
        return await self.device.sleep(confirm or self._confirm)

    async def _trigger(self) -> bool:
        triggered = await self.device.trigger_now()
        if triggered:
            await self.refresh_now(HISTORY_CYCLE)
            await self.refresh_now(MODE_CYCLE)
        return triggered

    async def _reset_motor(self) -> bool:
        return await self.device.reset_motor()

    async def _dismiss_notice(self) -> None:
        self.notifier.dismiss()

    def _handle_state(self, _state: AppState) -> None:
        self._render()

    def _handle_notice(self, _notice: Notice | None) -> None:
        self._render()

    def _render(self) -> None:
        if self._on_render:
            self._on_render(self.view())
