"""Tests for schedule mode selection."""

from __future__ import annotations

import pytest
from wakesync.controller.gateway import Failure, Ok
from wakesync.controller.modes import (
    MODE_PATH,
    ScheduleModeManager,
    build_mode,
    mode_label,
    next_activation_label,
    validate_interval,
)
from wakesync.controller.state import ModeStatus, RandomInterval, RegularInterval, SetTimes, ValidationError

pytestmark = pytest.mark.anyio

REGULAR_STATUS = {
    "activeMode": "regular_interval",
    "regIntervalHours": 2,
    "regIntervalMinutes": 30,
    "randIntervalHours": 1,
    "randIntervalMinutes": 0,
    "nextActivationTime": "15-01-2026 14:30",
}


class TestValidation:
    def test_zero_interval_rejected(self):
        with pytest.raises(ValidationError, match="greater than 0"):
            validate_interval(0, 0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            validate_interval(-1, 30)

    @pytest.mark.parametrize(("hours", "minutes"), [(0, 1), (1, 0), (24, 59)])
    def test_positive_accepted(self, hours, minutes):
        validate_interval(hours, minutes)

    def test_build_mode_coerces_form_values(self):
        assert build_mode("regular_interval", "2", "") == RegularInterval(hours=2, minutes=0)
        assert build_mode("random_interval", None, "45") == RandomInterval(hours=0, minutes=45)
        assert build_mode("set_times") == SetTimes()

    def test_build_mode_unknown(self):
        with pytest.raises(ValidationError):
            build_mode("hourly", 1, 0)


class TestLabels:
    def test_regular_label(self):
        assert mode_label(ModeStatus.from_payload(REGULAR_STATUS)) == "Regular Interval (2h 30m)"

    def test_random_label(self):
        status = ModeStatus(active_mode="random_interval", rand_interval_hours=1, rand_interval_minutes=0)
        assert mode_label(status) == "Random Interval (1h 0m)"

    def test_set_times_label(self):
        assert mode_label(ModeStatus(active_mode="set_times")) == "Set Times"

    def test_next_activation_not_set(self):
        assert next_activation_label(ModeStatus(active_mode="set_times")) == "Not set"
        assert next_activation_label(None) == "Not set"


class TestScheduleModeManager:
    @pytest.mark.parametrize("method", ["regular_interval", "random_interval"])
    async def test_zero_interval_issues_no_requests(self, gateway, store, notifier, method):
        manager = ScheduleModeManager(gateway=gateway, store=store, notifier=notifier)
        result = await getattr(manager, method)(0, 0)
        assert result is None
        assert gateway.method_calls == []
        assert notifier.current.text == "Please set an interval greater than 0"

    async def test_submit_descriptor_directly_is_validated(self, gateway, store, notifier):
        manager = ScheduleModeManager(gateway=gateway, store=store, notifier=notifier)
        assert await manager.submit(RandomInterval(hours=0, minutes=0)) is None
        gateway.post.assert_not_awaited()

    async def test_interval_submission_refetches_status(self, routed_gateway, store, notifier):
        gateway = routed_gateway(
            {
                ("POST", "/api/mode/regular-interval"): {"status": "ok"},
                ("GET", MODE_PATH): REGULAR_STATUS,
            }
        )
        manager = ScheduleModeManager(gateway=gateway, store=store, notifier=notifier)
        status = await manager.regular_interval("2", "30")
        gateway.post.assert_awaited_once_with("/api/mode/regular-interval", {"hours": 2, "minutes": 30})
        gateway.get.assert_awaited_once_with(MODE_PATH)
        assert status.next_activation_time == "15-01-2026 14:30"
        assert store.state.mode == status
        assert notifier.current.text == "Mode Set To Regular Interval"

    async def test_reflects_device_mode_not_request(self, routed_gateway, store, notifier):
        gateway = routed_gateway(
            {
                ("POST", "/api/mode/set-times"): {"status": "ok"},
                ("GET", MODE_PATH): REGULAR_STATUS,
            }
        )
        manager = ScheduleModeManager(gateway=gateway, store=store, notifier=notifier)
        await manager.set_times()
        gateway.post.assert_awaited_once_with("/api/mode/set-times", {})
        assert store.state.mode.active_mode == "regular_interval"

    async def test_failed_submission_keeps_cache(self, routed_gateway, store, notifier):
        gateway = routed_gateway({("GET", MODE_PATH): REGULAR_STATUS})
        manager = ScheduleModeManager(gateway=gateway, store=store, notifier=notifier)
        before = await manager.refresh()
        assert await manager.random_interval(1, 0) is None
        assert store.state.mode == before
        assert notifier.current.text == "Failed to set mode to Random Interval"

    async def test_refresh_ignores_unreadable_payload(self, routed_gateway, store, notifier):
        gateway = routed_gateway({("GET", MODE_PATH): {"status": "ok"}})
        manager = ScheduleModeManager(gateway=gateway, store=store, notifier=notifier)
        assert await manager.refresh() is None
        assert store.state.mode is None

    async def test_refresh_failure_notified_once(self, gateway, store, notifier):
        manager = ScheduleModeManager(gateway=gateway, store=store, notifier=notifier)
        assert await manager.refresh() is None
        assert notifier.current.text == "Failed to load mode status"
        notifier.dismiss()
        assert await manager.refresh() is None
        assert notifier.current is None

    async def test_refresh_recovery_rearms_notice(self, gateway, store, notifier):
        manager = ScheduleModeManager(gateway=gateway, store=store, notifier=notifier)
        await manager.refresh()
        gateway.get.return_value = Ok(REGULAR_STATUS)
        assert await manager.refresh() is not None
        gateway.get.return_value = Failure(kind="transport", reason="timeout")
        notifier.dismiss()
        await manager.refresh()
        assert notifier.current.text == "Failed to load mode status"

    async def test_unconfirmed_change_is_not_reported_as_success(self, routed_gateway, store, notifier):
        gateway = routed_gateway({("POST", "/api/mode/set-times"): {"status": "ok"}})
        manager = ScheduleModeManager(gateway=gateway, store=store, notifier=notifier)
        assert await manager.set_times() is None
        assert store.state.mode is None
        assert notifier.current.text == "Could not confirm mode change to Set Times"
