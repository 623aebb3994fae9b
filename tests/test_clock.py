"""Tests for the clock synchronizer."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from wakesync.controller.clock import SYNC_PATH, TIME_PATH, ClockSynchronizer
from wakesync.controller.gateway import Failure, Ok
from wakesync.controller.state import DeviceTime, Settings, with_settings
from wakesync.controller.view import render_view

pytestmark = pytest.mark.anyio

SUMMER = datetime(2026, 1, 15, 0, 0, tzinfo=UTC)
WINTER = datetime(2026, 7, 15, 0, 0, tzinfo=UTC)


def _make_clock(gateway, store, notifier, now=SUMMER):
    return ClockSynchronizer(
        gateway=gateway,
        store=store,
        notifier=notifier,
        timezone="Australia/Sydney",
        standard_offset=timedelta(hours=10),
        clock=lambda: now,
    )


class TestOffsets:
    def test_summer_offset_is_daylight_saving(self, gateway, store, notifier):
        clock = _make_clock(gateway, store, notifier)
        assert clock.offset() == timedelta(hours=11)
        assert clock.is_daylight_saving() is True
        assert clock.zone_label() == "AEDT (UTC+11)"

    def test_winter_offset_is_standard(self, gateway, store, notifier):
        clock = _make_clock(gateway, store, notifier, now=WINTER)
        assert clock.offset() == timedelta(hours=10)
        assert clock.is_daylight_saving() is False
        assert clock.zone_label() == "AEST (UTC+10)"

    def test_unknown_zone_rejected(self, gateway, store, notifier):
        with pytest.raises(ValueError):
            ClockSynchronizer(
                gateway=gateway,
                store=store,
                notifier=notifier,
                timezone="Atlantis/Capital",
                standard_offset=timedelta(0),
            )


class TestSync:
    async def test_sync_pushes_shifted_timestamp(self, routed_gateway, store, notifier):
        gateway = routed_gateway(
            {
                ("POST", SYNC_PATH): {"success": True},
                ("GET", TIME_PATH): {"hour": 11, "minute": 0, "second": 1},
            }
        )
        clock = _make_clock(gateway, store, notifier)
        assert await clock.sync() is True
        expected = int(SUMMER.timestamp() * 1000) + 11 * 3600 * 1000
        gateway.post.assert_awaited_once_with(SYNC_PATH, {"timestamp": expected})
        assert notifier.current.text == "System time synced to AEDT (UTC+11)"
        assert store.state.device_time == DeviceTime(11, 0, 1)

    async def test_sync_reported_failure(self, routed_gateway, store, notifier):
        gateway = routed_gateway({("POST", SYNC_PATH): {"success": False}})
        clock = _make_clock(gateway, store, notifier)
        assert await clock.sync() is False
        assert notifier.current.text == "Failed to sync time"
        gateway.get.assert_not_awaited()

    async def test_sync_transport_failure(self, gateway, store, notifier):
        clock = _make_clock(gateway, store, notifier)
        assert await clock.sync() is False
        assert notifier.current.text == "Failed to sync time"


class TestDisplayRefresh:
    async def test_refresh_stores_device_time(self, gateway, store, notifier):
        gateway.get.return_value = Ok({"hour": 0, "minute": 5, "second": 9, "date": "2026-01-15"})
        clock = _make_clock(gateway, store, notifier)
        result = await clock.refresh_display()
        assert result == DeviceTime(0, 5, 9, "2026-01-15")
        store.apply(with_settings, Settings(time_format="12"))
        assert render_view(store.state).clock == "12:05:09 AM"

    async def test_failed_fetch_shows_error_not_stale_time(self, gateway, store, notifier):
        gateway.get.return_value = Ok({"hour": 9, "minute": 0, "second": 0})
        clock = _make_clock(gateway, store, notifier)
        await clock.refresh_display()
        gateway.get.return_value = Failure(kind="transport", reason="timeout")
        assert await clock.refresh_display() is None
        assert store.state.clock_error is True
        assert render_view(store.state).clock == "Error"

    async def test_malformed_payload_is_an_error(self, gateway, store, notifier):
        gateway.get.return_value = Ok({"hour": "x"})
        clock = _make_clock(gateway, store, notifier)
        assert await clock.refresh_display() is None
        assert store.state.clock_error is True

    async def test_display_failure_notified_once(self, gateway, store, notifier):
        clock = _make_clock(gateway, store, notifier)
        await clock.refresh_display()
        assert notifier.current.text == "Lost contact with the device clock"
        notifier.dismiss()
        await clock.refresh_display()
        assert notifier.current is None
        gateway.get.return_value = Ok({"hour": 9, "minute": 0, "second": 0})
        await clock.refresh_display()
        gateway.get.return_value = Failure(kind="transport", reason="timeout")
        await clock.refresh_display()
        assert notifier.current.text == "Lost contact with the device clock"


class TestNumericZoneLabels:
    @pytest.mark.parametrize(
        ("standard_hours", "expected"),
        [(4, "Standard time (UTC+4)"), (3, "Daylight time (UTC+4)")],
    )
    def test_label_follows_configured_standard_offset(self, gateway, store, notifier, standard_hours, expected):
        clock = ClockSynchronizer(
            gateway=gateway,
            store=store,
            notifier=notifier,
            timezone="Asia/Dubai",
            standard_offset=timedelta(hours=standard_hours),
            clock=lambda: WINTER,
        )
        assert clock.zone_label() == expected
