"""Client bootstrap entrypoint for session wiring."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Type

from pumpchat.config import ChatSettings, get_settings
from pumpchat.events import (
    ClientError,
    Connected,
    Disconnected,
    GaveUp,
    HistoryReady,
    MessageReceived,
    Reconnecting,
    ServerError,
)
from pumpchat.network.client import ChatClient
from pumpchat.network.transport.base import BaseTransport
from pumpchat.network.transport.dummy import DummyTransport
from pumpchat.network.transport.websocket import WebSocketTransport
from pumpchat.relay import RelayQueue

LOGGER = logging.getLogger(__name__)


def _attach_lifecycle_logging(client: ChatClient) -> None:
    room = client.settings.room_id
    client.subscribe(Connected, lambda ev: LOGGER.info("Chat connected to room %s", ev.room_id))
    client.subscribe(Disconnected, lambda ev: LOGGER.info("Chat disconnected from room %s: %s", room, ev.reason))
    client.subscribe(
        Reconnecting,
        lambda ev: LOGGER.info("Chat reconnecting to room %s (attempt %s, %.1fs)", room, ev.attempt, ev.delay),
    )
    client.subscribe(
        GaveUp,
        lambda ev: LOGGER.critical("Chat gave up on room %s after %s attempts", room, ev.attempts),
    )
    client.subscribe(
        HistoryReady,
        lambda ev: LOGGER.info("Chat history ready for room %s (%s messages)", room, len(ev.messages)),
    )
    client.subscribe(
        MessageReceived,
        lambda ev: LOGGER.info("[NEW MESSAGE] %s: %s", ev.message.username, ev.message.message),
    )
    client.subscribe(ServerError, lambda ev: LOGGER.error("Chat server error: %s", ev.payload))
    client.subscribe(ClientError, lambda ev: LOGGER.warning("Chat client error: %s", ev.reason))


async def setup(settings: Optional[ChatSettings] = None) -> tuple[ChatClient, RelayQueue]:
    """Construct, wire, and start a chat client plus its relay queue."""

    settings = settings or get_settings()
    resolved_cls: Type[BaseTransport]
    resolved_cls = WebSocketTransport if settings.transport == "websocket" else DummyTransport
    LOGGER.debug("Initialising chat client via %s", resolved_cls.__name__)

    client = ChatClient(settings=settings, transport_factory=lambda s: resolved_cls(s))
    relay = RelayQueue(maxlen=settings.relay_queue_max)
    relay.attach(client)
    _attach_lifecycle_logging(client)

    await client.connect()
    return client, relay


async def serve_forever(settings: Optional[ChatSettings] = None) -> None:
    """Keep one chat client running until cancelled, then tear it down."""

    client, relay = await setup(settings)
    try:
        await asyncio.Future()  # block until cancelled
    except asyncio.CancelledError:
        LOGGER.info("Chat client shutdown requested")
        raise
    finally:
        relay.detach()
        await client.disconnect()
