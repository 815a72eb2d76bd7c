"""Transport implementations for the chat session."""

from .base import BaseTransport, TransportClosed, TransportNotReady
from .dummy import DummyTransport
from .websocket import WebSocketTransport

__all__ = ["BaseTransport", "TransportClosed", "TransportNotReady", "DummyTransport", "WebSocketTransport"]
