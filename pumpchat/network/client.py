"""Public facade for a pump.fun chat room (session + event subscription)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from shared.models.chat import ChatMessage

from pumpchat.config import ChatSettings
from pumpchat.events import EventBus, Handler
from pumpchat.network.session import Session
from pumpchat.network.session_state import ConnectionState
from pumpchat.network.transport.base import BaseTransport

LOGGER = logging.getLogger(__name__)


@dataclass
class ChatClient:
    """Connect/disconnect/send/query surface over a single chat session.

    Callers never see frames or the transport. State changes surface only as
    events (see ``pumpchat.events``) and through the query methods below.
    """

    settings: ChatSettings
    transport_factory: Callable[[ChatSettings], BaseTransport]
    bus: EventBus = field(default_factory=EventBus)

    session: Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.session = Session(
            settings=self.settings,
            transport_factory=self.transport_factory,
            bus=self.bus,
        )

    @property
    def state(self) -> ConnectionState:
        return self.session.state

    async def connect(self) -> None:
        await self.session.connect()

    async def disconnect(self) -> None:
        await self.session.disconnect()

    async def send_message(self, text: str) -> bool:
        return await self.session.send_message(text)

    def get_messages(self, limit: Optional[int] = None) -> tuple[ChatMessage, ...]:
        return self.session.history.snapshot(limit)

    def get_latest_message(self) -> Optional[ChatMessage]:
        return self.session.history.latest()

    def is_active(self) -> bool:
        return self.session.state is ConnectionState.ACTIVE

    def subscribe(self, event_type: type, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for one event type; returns an unsubscribe callable."""

        return self.bus.subscribe(event_type, handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        return self.bus.subscribe_all(handler)
