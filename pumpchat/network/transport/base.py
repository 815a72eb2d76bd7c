"""Transport abstractions for the chat session."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TransportClosed(RuntimeError):
    """Raised by ``receive`` once the peer or the client has closed the socket."""


class TransportNotReady(RuntimeError):
    """Raised when IO is attempted before ``connect`` succeeded."""


class BaseTransport(ABC):
    """Abstract text-frame socket owned by a single session."""

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def send(self, frame: str) -> None:
        ...

    @abstractmethod
    async def receive(self) -> str:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...
