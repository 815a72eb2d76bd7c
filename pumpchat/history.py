"""Bounded in-memory history of received chat messages."""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, Optional

from shared.models.chat import ChatMessage


class HistoryBuffer:
    """FIFO store that evicts the oldest message once ``capacity`` is reached."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("history capacity must be positive")
        self._items: Deque[ChatMessage] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    def __len__(self) -> int:
        return len(self._items)

    def append(self, message: ChatMessage) -> None:
        self._items.append(message)

    def replace(self, messages: Iterable[ChatMessage]) -> None:
        """Swap the contents for ``messages``, keeping only the newest ``capacity``."""

        self._items.clear()
        self._items.extend(messages)

    def snapshot(self, limit: Optional[int] = None) -> tuple[ChatMessage, ...]:
        """Return the most recent ``limit`` messages (all when ``None``), oldest first."""

        items = tuple(self._items)
        if limit is None:
            return items
        if limit <= 0:
            return ()
        return items[-limit:]

    def latest(self) -> Optional[ChatMessage]:
        return self._items[-1] if self._items else None

    def clear(self) -> None:
        self._items.clear()
