"""Hand-off queue between the chat client and the dialogue scheduler."""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Optional

from shared.models.chat import ChatMessage, RelayedMessage

from pumpchat.events import MessageReceived
from pumpchat.network.client import ChatClient

LOGGER = logging.getLogger(__name__)


class RelayQueue:
    """Collects inbound chat lines until the scheduler drains them."""

    def __init__(self, maxlen: int = 500) -> None:
        self._items: Deque[ChatMessage] = deque(maxlen=maxlen)
        self._drops = 0
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, client: ChatClient) -> None:
        self.detach()
        self._unsubscribe = client.subscribe(MessageReceived, self._on_message)

    def detach(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def __len__(self) -> int:
        return len(self._items)

    @property
    def drops(self) -> int:
        return self._drops

    def push(self, message: ChatMessage) -> None:
        if self._items.maxlen is not None and len(self._items) >= self._items.maxlen:
            self._drops += 1
            LOGGER.warning("Relay queue full; dropping oldest message id=%s", self._items[0].id)
        self._items.append(message)

    def drain(self) -> list[ChatMessage]:
        """Remove and return everything queued, oldest first."""

        drained = list(self._items)
        self._items.clear()
        return drained

    def drain_relayed(self) -> list[RelayedMessage]:
        return [RelayedMessage.from_chat(message) for message in self.drain()]

    def _on_message(self, event: MessageReceived) -> None:
        self.push(event.message)
