from __future__ import annotations

from typing import Callable

import httpx
import pytest

import restwrap.client


class Recorder:
    """MockTransport handler that records every request it sees."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def record() -> Callable[[Callable[[httpx.Request], httpx.Response]], Recorder]:
    return Recorder


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    waits: list[float] = []
    monkeypatch.setattr(restwrap.client.time, "sleep", waits.append)
    return waits
