"""Live-chat client for pump.fun token rooms."""

from pumpchat.config import ChatSettings, get_settings
from pumpchat.events import (
    ChatEvent,
    ClientError,
    Connected,
    Disconnected,
    EventBus,
    GaveUp,
    HistoryReady,
    MessageReceived,
    Reconnecting,
    ServerError,
    UserLeft,
)
from pumpchat.history import HistoryBuffer
from pumpchat.network.client import ChatClient
from pumpchat.network.session_state import ConnectionState
from pumpchat.relay import RelayQueue

__all__ = [
    "ChatSettings",
    "get_settings",
    "ChatClient",
    "ConnectionState",
    "HistoryBuffer",
    "RelayQueue",
    "EventBus",
    "ChatEvent",
    "Connected",
    "Disconnected",
    "Reconnecting",
    "GaveUp",
    "MessageReceived",
    "HistoryReady",
    "UserLeft",
    "ServerError",
    "ClientError",
]
