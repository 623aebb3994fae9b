"""Tests for the event history viewer."""

from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import pytest
from wakesync.controller.events import CLEAR_PROMPT, EVENTS_PATH, STATS_PATH, EventHistoryViewer
from wakesync.controller.state import EventStats

pytestmark = pytest.mark.anyio

EVENTS = [
    {"timestamp": 2, "type": "ERROR", "mode": "system", "timeStr": "15-01-2026 10:00:00", "message": "Jam"},
    {"timestamp": 1, "type": "SUCCESS", "mode": "set_times", "timeStr": "15-01-2026 09:00:00", "message": "Fed"},
]


def _stats(total: int) -> dict:
    return {"totalEvents": total, "successCount": total, "errorCount": 0, "retentionHours": 24}


class TestEventHistoryViewer:
    async def test_refresh_loads_events_and_stats(self, routed_gateway, store, notifier):
        gateway = routed_gateway({("GET", EVENTS_PATH): EVENTS, ("GET", STATS_PATH): _stats(2)})
        viewer = EventHistoryViewer(gateway=gateway, store=store, notifier=notifier)
        await viewer.refresh()
        assert [event.message for event in store.state.events] == ["Jam", "Fed"]
        assert store.state.stats.total_events == 2

    async def test_clear_declined_issues_nothing(self, gateway, store, notifier):
        viewer = EventHistoryViewer(gateway=gateway, store=store, notifier=notifier)
        confirm = Mock(return_value=False)
        assert await viewer.clear(confirm) is None
        confirm.assert_called_once_with(CLEAR_PROMPT)
        gateway.delete.assert_not_awaited()

    async def test_clear_refetches_stats_from_device(self, routed_gateway, store, notifier):
        # The device keeps one event it logged while clearing; the client must show that, not zero.
        stats_calls = []

        def _stats_after_clear(_body):
            stats_calls.append(1)
            return _stats(2 if len(stats_calls) == 1 else 1)

        gateway = routed_gateway(
            {
                ("GET", EVENTS_PATH): EVENTS,
                ("GET", STATS_PATH): _stats_after_clear,
                ("DELETE", EVENTS_PATH): {"status": "ok"},
            }
        )
        viewer = EventHistoryViewer(gateway=gateway, store=store, notifier=notifier)
        await viewer.refresh()
        stats = await viewer.clear(lambda _prompt: True)
        assert stats == EventStats(total_events=1, success_count=1, error_count=0, retention_hours=24)
        assert store.state.events == ()
        assert store.state.stats.total_events == 1
        assert len(stats_calls) == 2
        assert notifier.current.text == "Event history cleared"

    async def test_clear_accepts_async_confirmation(self, routed_gateway, store, notifier):
        gateway = routed_gateway({("DELETE", EVENTS_PATH): {"status": "ok"}, ("GET", STATS_PATH): _stats(0)})
        viewer = EventHistoryViewer(gateway=gateway, store=store, notifier=notifier)
        confirm = AsyncMock(return_value=True)
        await viewer.clear(confirm)
        gateway.delete.assert_awaited_once_with(EVENTS_PATH)

    async def test_failed_clear_keeps_history(self, routed_gateway, store, notifier):
        gateway = routed_gateway({("GET", EVENTS_PATH): EVENTS, ("GET", STATS_PATH): _stats(2)})
        viewer = EventHistoryViewer(gateway=gateway, store=store, notifier=notifier)
        await viewer.refresh()
        assert await viewer.clear(lambda _prompt: True) is None
        assert len(store.state.events) == 2
        assert notifier.current.text == "Failed to clear event history"

    async def test_load_failures_notified_once_per_category(self, routed_gateway, store, notifier):
        gateway = routed_gateway({("GET", STATS_PATH): _stats(0)})
        viewer = EventHistoryViewer(gateway=gateway, store=store, notifier=notifier)
        await viewer.refresh()
        assert notifier.current.text == "Failed to load event history"
        notifier.dismiss()
        await viewer.refresh()
        assert notifier.current is None
        assert store.state.stats.total_events == 0

    async def test_stats_failure_is_reported(self, routed_gateway, store, notifier):
        gateway = routed_gateway({("GET", EVENTS_PATH): EVENTS, ("GET", STATS_PATH): {"unexpected": True}})
        viewer = EventHistoryViewer(gateway=gateway, store=store, notifier=notifier)
        assert await viewer.stats() is None
        assert notifier.current.text == "Failed to load event statistics"
