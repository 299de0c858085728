import asyncio
from collections.abc import Callable
from http import HTTPStatus
from typing import Any

import httpx

from ip_locator.clients.base import BaseIPLookupClient
from ip_locator.models.common import LookupResult


class MockResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = {} if payload is None else payload
        self.text = text

    def json(self) -> Any:
        return self._payload


class MockAsyncClient:
    """Minimal async context-manager mock for httpx.AsyncClient.

    Every requested URL is appended to `calls`, so tests can check what was sent.
    """

    def __init__(self, response: MockResponse, calls: list[str] | None = None) -> None:
        self._response = response
        self._calls = calls if calls is not None else []

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str) -> MockResponse:
        self._calls.append(url)
        return self._response


class FailingAsyncClient:
    """Async client that raises a RequestError on enter to simulate network failure."""

    def __init__(self, url: str, *args: Any, **kwargs: Any) -> None:
        self._url = url

    async def __aenter__(self) -> "FailingAsyncClient":
        request = httpx.Request("GET", self._url)
        raise httpx.RequestError("Network failure", request=request)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str) -> MockResponse:
        return MockResponse(status_code=HTTPStatus.OK, payload={})


def make_fake_async_client(
    response: MockResponse, calls: list[str] | None = None
) -> Callable[..., MockAsyncClient]:
    """Factory for a fake httpx.AsyncClient returning a fixed response."""

    def _fake_client(*args: Any, **kwargs: Any) -> MockAsyncClient:
        return MockAsyncClient(response, calls)

    return _fake_client


def make_transport_async_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[..., httpx.AsyncClient]:
    """Factory for a real httpx.AsyncClient whose requests go to `handler`.

    URL building and validation stay httpx's own; nothing reaches the network.
    """
    real_async_client = httpx.AsyncClient

    def _client(*args: Any, **kwargs: Any) -> httpx.AsyncClient:
        return real_async_client(*args, transport=httpx.MockTransport(handler), **kwargs)

    return _client


def unreachable_handler(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"request should have been rejected before sending: {request.url}")


def ipwhois_payload(**overrides: Any) -> dict[str, Any]:
    """A successful ipwho.is response body for 8.8.8.8."""
    payload: dict[str, Any] = {
        "ip": "8.8.8.8",
        "success": True,
        "type": "IPv4",
        "country": "United States",
        "country_code": "US",
        "region": "Kansas",
        "region_code": "KS",
        "city": "Cheney",
        "latitude": 37.751,
        "longitude": -97.822,
        "flag": {"img": "https://cdn.ipwhois.io/flags/us.svg", "emoji": "🇺🇸"},
        "connection": {"asn": 15169, "org": "Google LLC", "isp": "Google LLC", "domain": "google.com"},
        "timezone": {
            "id": "America/Chicago",
            "abbr": "CDT",
            "utc": "-05:00",
            "current_time": "2024-06-01T08:30:00-05:00",
        },
    }
    payload.update(overrides)
    return payload


def make_result(**overrides: Any) -> LookupResult:
    fields: dict[str, Any] = {
        "ip": "8.8.8.8",
        "city": "Cheney",
        "region_code": "KS",
        "country": "United States",
        "flag_img": "https://cdn.ipwhois.io/flags/us.svg",
        "timezone_id": "America/Chicago",
        "current_time": "2024-06-01T08:30:00-05:00",
        "isp": "Google LLC",
        "latitude": 37.751,
        "longitude": -97.822,
    }
    fields.update(overrides)
    return LookupResult(**fields)


class ScriptedLookupClient(BaseIPLookupClient):
    """Test double returning (or raising) a configured outcome per address.

    An address with a gate blocks until the gate's event is set, which lets a
    test control the order in which concurrent lookups complete.
    """

    def __init__(
        self,
        outcomes: dict[str, LookupResult | Exception],
        gates: dict[str, asyncio.Event] | None = None,
    ) -> None:
        self._outcomes = outcomes
        self._gates = gates or {}
        self.calls: list[str] = []

    async def lookup(self, address: str) -> LookupResult:
        self.calls.append(address)
        gate = self._gates.get(address)
        if gate is not None:
            await gate.wait()
        outcome = self._outcomes[address]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome
