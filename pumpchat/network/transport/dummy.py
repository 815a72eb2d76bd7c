"""No-op transport for offline testing."""

from __future__ import annotations

import asyncio
import logging

from .base import BaseTransport, TransportClosed

LOGGER = logging.getLogger(__name__)


class DummyTransport(BaseTransport):
    """Accepts every frame and never receives one until closed."""

    def __init__(self, settings=None) -> None:
        self._settings = settings
        self._closed = asyncio.Event()

    async def connect(self) -> None:
        LOGGER.debug("Dummy transport connect()")
        self._closed.clear()

    async def send(self, frame: str) -> None:
        LOGGER.debug("Dummy transport send(): %s", frame)

    async def receive(self) -> str:
        await self._closed.wait()
        raise TransportClosed("dummy transport closed")

    async def close(self) -> None:
        LOGGER.debug("Dummy transport close()")
        self._closed.set()
