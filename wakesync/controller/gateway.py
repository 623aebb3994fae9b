"""Async JSON/HTTP gateway to the scheduling device."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from .config import ControllerConfig

LOGGER = logging.getLogger("wakesync.gateway")

FailureKind = Literal["transport", "decode", "status"]


class DeviceGatewayError(RuntimeError):
    """Generic device API failure."""

    kind: FailureKind = "transport"

    def __init__(self, message: str, *, status_code: int | None = None, detail: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class DeviceDecodeError(DeviceGatewayError):
    """Raised when the device answers with a body that is not the expected JSON."""

    kind: FailureKind = "decode"


class DeviceStatusError(DeviceGatewayError):
    """Raised when the device answers with an HTTP error status."""

    kind: FailureKind = "status"


@dataclass(frozen=True, slots=True)
class Ok:
    value: Any


@dataclass(frozen=True, slots=True)
class Failure:
    """Sentinel for a call that produced no state change on the client."""

    kind: FailureKind
    reason: str
    status_code: int | None = None
    detail: str | None = None

    def __bool__(self) -> bool:
        return False


GatewayResult = Ok | Failure


@dataclass(slots=True)
class DeviceGateway:
    base_url: str
    timeout: float = 5.0
    verify_ssl: bool = True
    _client: httpx.AsyncClient = field(init=False, repr=False)
    _closed: bool = field(init=False, default=True, repr=False)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("Device base URL is not configured")
        self._client = httpx.AsyncClient(
            base_url=self.base_url.rstrip("/"),
            headers={"Accept": "application/json"},
            timeout=self.timeout,
            verify=self.verify_ssl,
            trust_env=False,
        )
        self._closed = False

    @classmethod
    def from_config(cls, config: ControllerConfig) -> DeviceGateway:
        return cls(config.base_url, timeout=config.timeout, verify_ssl=config.verify_ssl)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()

    async def get(self, path: str) -> GatewayResult:
        return await self.request("GET", path)

    async def post(self, path: str, body: Any = None, *, expect_json: bool = True) -> GatewayResult:
        return await self.request("POST", path, body=body, expect_json=expect_json)

    async def patch(self, path: str) -> GatewayResult:
        return await self.request("PATCH", path)

    async def delete(self, path: str) -> GatewayResult:
        return await self.request("DELETE", path)

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        expect_json: bool = True,
    ) -> GatewayResult:
        """Perform one round trip; every error collapses into a Failure."""
        try:
            value = await self._request(method, path, body=body, expect_json=expect_json)
        except DeviceGatewayError as exc:
            LOGGER.warning("Device %s %s failed (%s): %s", method, path, exc.kind, exc)
            return Failure(kind=exc.kind, reason=str(exc), status_code=exc.status_code, detail=exc.detail)
        return Ok(value)

    async def _request(self, method: str, path: str, *, body: Any, expect_json: bool) -> Any:
        kwargs: dict[str, Any] = {}
        if body is not None:
            kwargs["json"] = body
        LOGGER.debug("Device request %s %s", method, path)
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise DeviceGatewayError(f"Failed to contact device: {exc}") from exc
        if response.status_code >= 400:
            detail = _error_text(response)
            raise DeviceStatusError(
                f"Device error {response.status_code}: {detail}",
                status_code=response.status_code,
                detail=detail,
            )
        if not expect_json:
            return {"status": response.text.strip()}
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
            raise DeviceDecodeError(
                f"Device returned a non-JSON body for {method} {path}",
                status_code=response.status_code,
            ) from exc


def _error_text(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError):
        return response.text.strip() or response.reason_phrase
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return response.text.strip() or response.reason_phrase
