import asyncio
from typing import Callable, List, Optional

import pytest

from pumpchat.config import ChatSettings
from pumpchat.network.transport.base import BaseTransport, TransportClosed

_CLOSED = object()


class ScriptedTransport(BaseTransport):
    """In-memory transport: records sent frames, receives whatever is fed."""

    def __init__(self, settings=None, *, fail_with: Optional[Exception] = None) -> None:
        self._settings = settings
        self.fail_with = fail_with
        self.sent: List[str] = []
        self.closed = False
        self.connected = False
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def connect(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.connected = True

    async def send(self, frame: str) -> None:
        if self.closed:
            raise TransportClosed("closed")
        self.sent.append(frame)

    async def receive(self) -> str:
        item = await self._inbox.get()
        if item is _CLOSED:
            raise TransportClosed("peer closed")
        return item

    async def close(self) -> None:
        self.closed = True
        self._inbox.put_nowait(_CLOSED)

    def feed(self, *frames: str) -> None:
        for frame in frames:
            self._inbox.put_nowait(frame)

    def drop(self) -> None:
        self._inbox.put_nowait(_CLOSED)


class TransportPool:
    """Factory handing out a fresh scripted transport per connection attempt."""

    def __init__(self, fail_with: Optional[Exception] = None) -> None:
        self.fail_with = fail_with
        self.created: List[ScriptedTransport] = []

    def __call__(self, settings) -> ScriptedTransport:
        transport = ScriptedTransport(settings, fail_with=self.fail_with)
        self.created.append(transport)
        return transport

    @property
    def current(self) -> ScriptedTransport:
        return self.created[-1]


async def wait_for(predicate: Callable[[], bool], *, timeout: float = 0.5, interval: float = 0.005) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


def make_settings(**overrides) -> ChatSettings:
    values = {
        "room_id": "room-1",
        "username": "tester",
        "reconnect_base_delay_seconds": 30.0,
        "ack_sweep_interval_seconds": 60.0,
    }
    values.update(overrides)
    return ChatSettings(**values)


def message(msg_id: str, text: str = "gm", **extra) -> dict:
    payload = {
        "id": msg_id,
        "roomId": "room-1",
        "username": "degen",
        "userAddress": "addr-1",
        "message": text,
        "profile_image": "https://example.invalid/p.png",
        "timestamp": "2024-01-01T00:00:00.000Z",
        "messageType": "REGULAR",
        "expiresAt": 1704067200,
    }
    payload.update(extra)
    return payload


@pytest.fixture
def pool() -> TransportPool:
    return TransportPool()
