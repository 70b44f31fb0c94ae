"""
Typed proxy client for the timetable backend.

Every backend call in the portal goes through `ApiClient.request`, which
standardizes:
- headers (``Content-Type: application/json`` merged with overrides)
- JSON serialization of structured request bodies
- empty-body handling (204 -> None)
- error surfacing (non-2xx and undecodable bodies -> `ApiError`)

Transport failures (connection refused, DNS, timeouts) are raised by httpx
before any response exists and propagate unchanged.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from portal.config import PortalSettings
from portal.errors import ApiError

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def build_async_client(
    settings: Optional[PortalSettings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    extra_headers: Optional[dict[str, str]] = None,
) -> httpx.AsyncClient:
    """
    Create an `httpx.AsyncClient` pointed at the backend.

    Args:
        settings: Portal settings (default: read from environment)
        transport: Optional transport override (used by tests)
        extra_headers: Headers sent with every request

    Returns:
        Configured async client; the caller owns it and must close it
    """
    settings = settings or PortalSettings()
    headers = {"Accept": "application/json"}
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=settings.backend_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers=headers,
        transport=transport,
    )


def _error_message(response: httpx.Response) -> tuple[str, Optional[str]]:
    """Extract (message, server_message) from a failed response."""
    server_message = None
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        server_message = str(data["message"])
    return server_message or f"HTTP error! status: {response.status_code}", server_message


class ApiClient:
    """
    Minimal JSON-over-HTTP client bound to a base path.

    Example:
        >>> async with ApiClient.from_settings(settings) as client:
        ...     departments = await client.get("/admin/departments")
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_path: str = "",
    ):
        """
        Initialize the client.

        Args:
            http_client: Underlying httpx client (base URL, timeout, transport)
            base_path: Fixed path prefix for every endpoint, e.g. "/api"
        """
        self.http_client = http_client
        self.base_path = base_path.rstrip("/")

    @classmethod
    def from_settings(
        cls,
        settings: Optional[PortalSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> ApiClient:
        """Build a client (and its httpx client) from settings."""
        settings = settings or PortalSettings()
        return cls(
            build_async_client(settings, transport=transport),
            base_path=settings.api_base_path,
        )

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
        allow_not_found: bool = False,
    ) -> Any:
        """
        Send one request and decode its JSON response.

        Args:
            endpoint: Path relative to the base path, e.g. "/timetable"
            method: HTTP method
            body: Request body; anything but str/bytes is JSON-encoded
            headers: Header overrides merged over the JSON defaults
            allow_not_found: Return None on 404 instead of raising

        Returns:
            Parsed JSON, or None for a 204 (and for a 404 if allowed)

        Raises:
            ApiError: On a non-2xx status or a 2xx body that is not JSON
            httpx.TransportError: If no response was received
        """
        url = f"{self.base_path}{endpoint}"
        merged_headers = {**JSON_HEADERS, **(headers or {})}

        content: Optional[str | bytes] = None
        if body is not None:
            content = body if isinstance(body, (str, bytes)) else json.dumps(body)

        try:
            response = await self.http_client.request(
                method, url, content=content, headers=merged_headers
            )
        except httpx.HTTPError as e:
            logger.error("API request failed: %s (%s)", endpoint, e)
            raise

        if response.status_code == 404 and allow_not_found:
            logger.debug("API request %s: not found", endpoint)
            return None

        if not response.is_success:
            message, server_message = _error_message(response)
            logger.error("API request failed: %s (%s)", endpoint, message)
            raise ApiError(
                message,
                status_code=response.status_code,
                endpoint=endpoint,
                server_message=server_message,
            )

        # Empty responses (e.g. DELETE)
        if response.status_code == 204:
            return None

        try:
            return response.json()
        except ValueError:
            message = f"Invalid JSON in response (status: {response.status_code})"
            logger.error("API request failed: %s (%s)", endpoint, message)
            raise ApiError(message, status_code=response.status_code, endpoint=endpoint)

    # Convenience methods

    async def get(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request(endpoint, method="GET", **kwargs)

    async def post(self, endpoint: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request(endpoint, method="POST", body=data, **kwargs)

    async def put(self, endpoint: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request(endpoint, method="PUT", body=data, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request(endpoint, method="DELETE", **kwargs)

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
