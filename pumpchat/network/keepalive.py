"""Client-side ping loop driven by the server-advertised interval."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

LOGGER = logging.getLogger(__name__)


class Keepalive:
    """Sends a ping every ``interval`` seconds until stopped."""

    def __init__(self, send_ping: Callable[[], Awaitable[object]]) -> None:
        self._send_ping = send_ping
        self._task: Optional[asyncio.Task[None]] = None
        self._interval: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    def start(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError("keepalive interval must be positive")
        self.stop()
        self._interval = float(interval)
        self._task = asyncio.create_task(self._run(), name="chat-keepalive")
        LOGGER.debug("Keepalive started (every %.2fs)", self._interval)

    def stop(self) -> None:
        """Stop pinging. Safe to call repeatedly and from inside the ping task."""

        task = self._task
        self._task = None
        if task is None or task.done():
            return
        if task is not asyncio.current_task():
            task.cancel()
        LOGGER.debug("Keepalive stopped")

    async def _run(self) -> None:
        me = asyncio.current_task()
        assert self._interval is not None
        interval = self._interval
        while self._task is me:
            await asyncio.sleep(interval)
            if self._task is not me:
                return
            try:
                await self._send_ping()
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning("Keepalive ping failed: %s", exc)
