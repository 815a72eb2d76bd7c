"""Lifecycle and domain events published by the chat client."""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from shared.models.chat import ChatMessage

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Connected:
    room_id: str


@dataclass(frozen=True)
class Disconnected:
    reason: Optional[str] = None
    by_client: bool = False


@dataclass(frozen=True)
class Reconnecting:
    attempt: int
    delay: float


@dataclass(frozen=True)
class GaveUp:
    attempts: int


@dataclass(frozen=True)
class MessageReceived:
    message: ChatMessage


@dataclass(frozen=True)
class HistoryReady:
    messages: tuple[ChatMessage, ...]


@dataclass(frozen=True)
class UserLeft:
    payload: Any


@dataclass(frozen=True)
class ServerError:
    payload: Any


@dataclass(frozen=True)
class ClientError:
    reason: str


ChatEvent = Union[
    Connected,
    Disconnected,
    Reconnecting,
    GaveUp,
    MessageReceived,
    HistoryReady,
    UserLeft,
    ServerError,
    ClientError,
]

Handler = Callable[[Any], Awaitable[None] | None]


class EventBus:
    """Callback table keyed by event type.

    Handlers run in registration order on the emitting task. Coroutine
    handlers are awaited. A raising handler is logged and skipped.
    """

    def __init__(self) -> None:
        self._handlers: Dict[type, List[Handler]] = defaultdict(list)
        self._catch_all: List[Handler] = []

    def subscribe(self, event_type: type, handler: Handler) -> Callable[[], None]:
        LOGGER.debug("Registering handler for %s: %s", event_type.__name__, handler)
        handlers = self._handlers[event_type]
        handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        self._catch_all.append(handler)

        def _unsubscribe() -> None:
            if handler in self._catch_all:
                self._catch_all.remove(handler)

        return _unsubscribe

    async def emit(self, event: ChatEvent) -> None:
        for handler in [*self._handlers.get(type(event), ()), *self._catch_all]:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:  # noqa: BLE001
                LOGGER.exception("Event handler failed for %s: %s", type(event).__name__, handler)
