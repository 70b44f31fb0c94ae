"""Shared fixtures: a scripted fake backend behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Callable, Union

import httpx
import pytest

from portal.client.api_client import ApiClient
from portal.config import PortalSettings

Scripted = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeBackend:
    """
    Route table for `httpx.MockTransport` that records every request.

    Each route holds a script of responses consumed in order; the last entry
    repeats. An entry may be a response, an exception to raise, or a callable
    building the response from the request.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Scripted]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *script: Scripted) -> None:
        self.routes[(method.upper(), path)] = list(script)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def json_body(self, request: httpx.Request) -> Any:
        return json.loads(request.content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        script = self.routes.get((request.method, request.url.path))
        if not script:
            return httpx.Response(418, json={"message": f"unexpected {request.method} {request.url.path}"})

        entry = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(entry, Exception):
            raise entry
        if callable(entry) and not isinstance(entry, httpx.Response):
            return entry(request)
        return entry


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def settings() -> PortalSettings:
    return PortalSettings(
        _env_file=None,
        backend_url="http://backend.test",
        api_base_path="/api",
        poll_interval_seconds=0.01,
        poll_timeout_seconds=5.0,
        semester="SPRING",
        academic_year="2025-2026",
    )


@pytest.fixture
def make_client(backend: FakeBackend, settings: PortalSettings) -> Callable[[], ApiClient]:
    """Factory for clients wired to the fake backend."""

    def factory() -> ApiClient:
        return ApiClient.from_settings(settings, transport=httpx.MockTransport(backend))

    return factory
