"""Past-24h event history and aggregate counters reported by the device."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable

from .gateway import DeviceGateway, Failure
from .notifications import NotificationSurface
from .state import EventRecord, EventStats, StateStore, parse_events, with_events, with_stats

LOGGER = logging.getLogger("wakesync.events")

EVENTS_PATH = "/api/events"
STATS_PATH = "/api/events/stats"

CLEAR_PROMPT = "Clear all event history? This cannot be undone."

Confirm = Callable[[str], bool | Awaitable[bool]]


async def confirmed(confirm: Confirm, prompt: str) -> bool:
    """Ask the operator; accepts plain or async confirmation callbacks."""
    answer = confirm(prompt)
    if inspect.isawaitable(answer):
        answer = await answer
    return bool(answer)


class EventHistoryViewer:
    def __init__(self, *, gateway: DeviceGateway, store: StateStore, notifier: NotificationSurface) -> None:
        self._gateway = gateway
        self._store = store
        self._notifier = notifier

    async def list(self) -> tuple[EventRecord, ...] | None:
        ticket = self._store.ticket("events")
        result = await self._gateway.get(EVENTS_PATH)
        if isinstance(result, Failure):
            self._notifier.report_failure("events", "Failed to load event history")
            return None
        events = parse_events(result.value)
        if events is None:
            LOGGER.warning("Device returned an unreadable event list")
            self._notifier.report_failure("events", "Failed to load event history")
            return None
        self._notifier.report_recovery("events")
        self._store.commit("events", ticket, with_events, events)
        return events

    async def stats(self) -> EventStats | None:
        ticket = self._store.ticket("stats")
        result = await self._gateway.get(STATS_PATH)
        if isinstance(result, Failure):
            self._notifier.report_failure("stats", "Failed to load event statistics")
            return None
        stats = EventStats.from_payload(result.value)
        if stats is None:
            LOGGER.warning("Device returned unreadable event stats: %s", result.value)
            self._notifier.report_failure("stats", "Failed to load event statistics")
            return None
        self._notifier.report_recovery("stats")
        self._store.commit("stats", ticket, with_stats, stats)
        return stats

    async def refresh(self) -> None:
        events = await self.list()
        stats = await self.stats()
        if events is None or stats is None:
            LOGGER.debug("History refresh incomplete (events=%s stats=%s)", events is not None, stats is not None)

    async def clear(self, confirm: Confirm) -> EventStats | None:
        """Clear the device history after confirmation, then re-read its counters."""
        if not await confirmed(confirm, CLEAR_PROMPT):
            LOGGER.debug("Event history clear declined")
            return None
        ticket = self._store.ticket("events")
        result = await self._gateway.delete(EVENTS_PATH)
        if isinstance(result, Failure):
            self._notifier.show("Failed to clear event history")
            return None
        self._store.commit("events", ticket, with_events, ())
        stats = await self.stats()
        self._notifier.show("Event history cleared")
        return stats
