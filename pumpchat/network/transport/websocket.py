"""WebSocket transport implementation."""

from __future__ import annotations

import logging
from typing import Optional

import websockets
from websockets.asyncio.client import ClientConnection

from pumpchat.config import ChatSettings
from pumpchat.network.transport.base import BaseTransport, TransportClosed, TransportNotReady

LOGGER = logging.getLogger(__name__)


class WebSocketTransport(BaseTransport):
    """WebSocket-based transport speaking raw Engine.IO text frames."""

    def __init__(self, settings: ChatSettings) -> None:
        self._settings = settings
        self._ws: Optional[ClientConnection] = None

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "*/*",
            "Accept-Language": "en-US,en;q=0.9",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }

    async def connect(self) -> None:
        LOGGER.info("Connecting to chat WebSocket at %s", self._settings.ws_url)
        # Engine.IO runs its own ping/pong on top of the socket.
        self._ws = await websockets.connect(
            str(self._settings.ws_url),
            origin=self._settings.origin,
            additional_headers=self._headers(),
            user_agent_header=self._settings.user_agent,
            ping_interval=None,
            open_timeout=None,
        )

    async def send(self, frame: str) -> None:
        if not self._ws:
            raise TransportNotReady("WebSocket transport not connected")
        LOGGER.debug("WebSocket send: %s", frame)
        try:
            await self._ws.send(frame)
        except websockets.ConnectionClosed as exc:
            raise TransportClosed(str(exc)) from exc

    async def receive(self) -> str:
        if not self._ws:
            raise TransportNotReady("WebSocket transport not connected")
        try:
            raw = await self._ws.recv()
        except websockets.ConnectionClosed as exc:
            raise TransportClosed(str(exc)) from exc
        LOGGER.debug("WebSocket receive: %s", raw)
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return raw

    async def close(self) -> None:
        if self._ws:
            LOGGER.info("Closing WebSocket transport")
            await self._ws.close()
            self._ws = None
