from http import HTTPStatus
from typing import Any

import httpx
from pydantic import ValidationError

from ip_locator.clients.base import BaseIPLookupClient
from ip_locator.errors import (
    InvalidIpError,
    IpLookupFailedError,
    IpNotFoundError,
    ReservedIpError,
    UpstreamServiceError,
)
from ip_locator.logger import logger
from ip_locator.models.common import LookupResult


class IpWhoIsClient(BaseIPLookupClient):
    """Client for the https://ipwho.is/ IP geolocation API.

    Every call performs exactly one GET request. There are no retries and no
    caching; the timeout is fixed.
    """

    def __init__(self, base_url: str = "https://ipwho.is", timeout_seconds: float = 5.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def build_url(self, address: str) -> str:
        # The address is inserted as typed; the provider does its own validation.
        return f"{self._base_url}/{address}"

    async def lookup(self, address: str) -> LookupResult:
        """Look up `address`, or the caller's own address when it is empty."""
        url = self.build_url(address)
        logger.debug(f"Requesting IP provider url={url}")

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            # InvalidURL covers typed text httpx refuses to put on the wire.
            raise UpstreamServiceError(f"Request to IP provider failed: {repr(exc)}") from exc

        self._handle_http_errors(response)

        data = self._parse_json(response)
        self._handle_provider_status(data)

        return self._normalize_payload(data)

    def _handle_http_errors(self, response: httpx.Response) -> None:
        """Reject responses that cannot carry a usable lookup payload.

        ipwho.is answers 200 for both successful and failed lookups, so 4xx
        bodies are still parsed; only server-side failures are fatal here.
        """
        status_code = response.status_code

        if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            raise UpstreamServiceError(f"IP provider returned HTTP {status_code}: {response.text}")

    def _handle_provider_status(self, data: dict[str, Any]) -> None:
        """Normalize the `success`/`message` pair into domain exceptions.

        Examples:
            { "ip": "not-an-ip", "success": false, "message": "Invalid IP address" }
            { "ip": "127.0.0.1", "success": false, "message": "Reserved range" }
        """
        if data.get("success") is True:
            return

        message = data.get("message")
        message = str(message) if message else None
        lower_msg = (message or "").lower()

        if "invalid" in lower_msg:
            raise InvalidIpError(message)

        if "reserved" in lower_msg or "private" in lower_msg:
            raise ReservedIpError(message)

        if not message or "not found" in lower_msg:
            raise IpNotFoundError(message)

        raise IpLookupFailedError(message)

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamServiceError(f"Failed to decode IP provider response as JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise UpstreamServiceError(f"Unexpected IP provider response shape: {type(data).__name__}")
        return data

    @staticmethod
    def _normalize_payload(data: dict[str, Any]) -> LookupResult:
        """Map ipwho.is's nested response into our flat schema."""
        flag = data.get("flag") or {}
        timezone = data.get("timezone") or {}
        connection = data.get("connection") or {}

        try:
            return LookupResult(
                ip=str(data.get("ip") or ""),
                city=str(data.get("city") or ""),
                region_code=str(data.get("region_code") or ""),
                country=str(data.get("country") or ""),
                flag_img=str(flag.get("img") or ""),
                timezone_id=str(timezone.get("id") or ""),
                current_time=str(timezone.get("current_time") or ""),
                isp=str(connection.get("isp") or ""),
                latitude=data.get("latitude"),
                longitude=data.get("longitude"),
            )
        except (AttributeError, ValidationError) as exc:
            raise UpstreamServiceError(f"Malformed IP provider response: {exc}") from exc
