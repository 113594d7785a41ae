import asyncio
import os
from typing import Any, Callable, List

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("APP_ENV", "test")


@pytest.fixture()
def settings():
    from pos_mirror.config import Settings

    return Settings()


@pytest.fixture()
def app(settings):
    """
    Fresh app per test so every test gets its own connection registry.
    """
    from pos_mirror.main import create_app

    return create_app(settings)


@pytest.fixture()
def client(app):
    """
    One portal (event loop) shared by HTTP calls and websocket sessions, so
    server-side broadcasts can reach sockets opened by the test.
    """
    with TestClient(app) as c:
        yield c


def join(ws, display: bool = False) -> None:
    """Register (optionally as a display) and wait until the relay has seen us."""
    if display:
        ws.send_json({"type": "customer_display_connected", "timestamp": "2025-01-01T00:00:00Z"})
    ws.send_json({"type": "ping"})
    assert ws.receive_json() == {"type": "pong"}


class _Handle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Virtual clock; timers only fire from ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: List[_Handle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Handle:
        h = _Handle(self.now + delay, callback)
        self._timers.append(h)
        return h

    def pending(self) -> List[_Handle]:
        return [h for h in self._timers if not h.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = sorted(
                (h for h in self._timers if not h.cancelled and h.when <= target),
                key=lambda h: h.when,
            )
            if not due:
                break
            h = due[0]
            self._timers.remove(h)
            self.now = h.when
            h.callback()
        self.now = target


@pytest.fixture()
def scheduler() -> FakeScheduler:
    return FakeScheduler()


class RecordingSender:
    def __init__(self) -> None:
        self.sent: List[Any] = []

    def send(self, envelope) -> bool:
        self.sent.append(envelope)
        return True

    def types(self) -> List[str]:
        return [e.type for e in self.sent]


@pytest.fixture()
def sender() -> RecordingSender:
    return RecordingSender()


class FakeSocket:
    """Stands in for a websockets client connection."""

    def __init__(self, incoming=(), keep_open: bool = True):
        self.incoming = list(incoming)
        self.keep_open = keep_open
        self.sent: List[str] = []
        self._closed_event = None

    @property
    def _closed(self) -> asyncio.Event:
        if self._closed_event is None:
            self._closed_event = asyncio.Event()
        return self._closed_event

    async def send(self, text: str) -> None:
        self.sent.append(text)

    async def close(self) -> None:
        self._closed.set()

    def __aiter__(self):
        return self._messages()

    async def _messages(self):
        for m in self.incoming:
            await asyncio.sleep(0)
            yield m
        if self.keep_open:
            await self._closed.wait()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self._closed.set()


class FakeConnect:
    """``connect`` replacement: hands out queued sockets or raises queued errors."""

    def __init__(self, outcomes=()):
        self.outcomes = list(outcomes)
        self.urls: List[str] = []

    def __call__(self, url: str):
        self.urls.append(url)
        if not self.outcomes:
            raise OSError("connection refused")
        item = self.outcomes.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


async def until(predicate: Callable[[], bool], steps: int = 200) -> None:
    for _ in range(steps):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")
