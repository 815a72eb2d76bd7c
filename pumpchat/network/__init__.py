"""Network stack (transport/session/client) for the pump.fun chat room."""

from pumpchat.network.client import ChatClient
from pumpchat.network.correlator import AckCorrelator, AckKind, PendingAck
from pumpchat.network.keepalive import Keepalive
from pumpchat.network.reconnect import ReconnectPolicy
from pumpchat.network.session import Session
from pumpchat.network.session_state import ConnectionState, SessionTracker
from pumpchat.network.transport.base import BaseTransport, TransportClosed
from pumpchat.network.transport.dummy import DummyTransport
from pumpchat.network.transport.websocket import WebSocketTransport

__all__ = [
    "ChatClient",
    "Session",
    "SessionTracker",
    "ConnectionState",
    "AckCorrelator",
    "AckKind",
    "PendingAck",
    "Keepalive",
    "ReconnectPolicy",
    "BaseTransport",
    "TransportClosed",
    "DummyTransport",
    "WebSocketTransport",
]
