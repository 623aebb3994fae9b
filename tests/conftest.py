"""Shared test fixtures for the wakesync test suite.

This module provides reusable fixtures for common test scenarios including:
- Device gateway doubles
- State store and notification surface instances
- Configuration objects
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest
from wakesync.controller.config import ControllerConfig, RefreshConfig
from wakesync.controller.gateway import DeviceGateway, Failure, Ok
from wakesync.controller.notifications import NotificationSurface
from wakesync.controller.state import StateStore

# ============================================================================
# Pytest Configuration
# ============================================================================


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio backend for async tests."""
    return "asyncio"


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    return Mock(spec=logging.Logger)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def controller_config():
    """Controller config with long refresh periods so cycles never fire on their own."""
    return ControllerConfig(
        base_url="http://device.local",
        timezone="Australia/Sydney",
        standard_offset=timedelta(hours=10),
        timeout=1.0,
        verify_ssl=True,
        refresh=RefreshConfig(clock_seconds=3600, mode_seconds=3600, history_seconds=3600),
        notification_seconds=3.0,
    )


# ============================================================================
# Gateway Fixtures
# ============================================================================


@pytest.fixture
def gateway():
    """Gateway double; every call fails unless a test configures it."""
    mock = AsyncMock(spec=DeviceGateway)
    failure = Failure(kind="transport", reason="not configured")
    mock.get.return_value = failure
    mock.post.return_value = failure
    mock.patch.return_value = failure
    mock.delete.return_value = failure
    return mock


@pytest.fixture
def routes():
    """Factory turning a ``{(method, path): value}`` table into a side_effect.

    Values that are Failure instances are returned as-is; anything else is
    wrapped in Ok. Callables receive the request body and return the value.

    Usage:
        gateway.get.side_effect = routes({("GET", "/api/mode"): {...}})["GET"]
    """

    def _build(table: dict[tuple[str, str], Any]) -> dict[str, Any]:
        def _wrap(value: Any) -> Any:
            return value if isinstance(value, Failure) else Ok(value)

        def _resolve(method: str, path: str, body: Any = None) -> Any:
            key = (method, path)
            if key not in table:
                return Failure(kind="status", reason=f"no route for {method} {path}", status_code=404)
            value = table[key]
            if callable(value):
                value = value(body)
            return _wrap(value)

        async def _get(path: str) -> Any:
            return _resolve("GET", path)

        async def _post(path: str, body: Any = None, *, expect_json: bool = True) -> Any:
            return _resolve("POST", path, body)

        async def _patch(path: str) -> Any:
            return _resolve("PATCH", path)

        async def _delete(path: str) -> Any:
            return _resolve("DELETE", path)

        return {"GET": _get, "POST": _post, "PATCH": _patch, "DELETE": _delete}

    return _build


@pytest.fixture
def routed_gateway(gateway, routes):
    """Factory wiring a route table into the gateway double."""

    def _wire(table: dict[tuple[str, str], Any]):
        handlers = routes(table)
        gateway.get.side_effect = handlers["GET"]
        gateway.post.side_effect = handlers["POST"]
        gateway.patch.side_effect = handlers["PATCH"]
        gateway.delete.side_effect = handlers["DELETE"]
        return gateway

    return _wire


# ============================================================================
# State Fixtures
# ============================================================================


@pytest.fixture
def store():
    return StateStore()


@pytest.fixture
def notifier():
    return NotificationSurface(dismiss_after=60.0)
