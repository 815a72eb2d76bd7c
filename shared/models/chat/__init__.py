from .message import ChatMessage, RelayedMessage
from .payloads import (
    ConnectInfo,
    GetMessageHistoryPayload,
    HandshakePayload,
    JoinRoomPayload,
    SendMessagePayload,
)

__all__ = [
    "ChatMessage",
    "RelayedMessage",
    "ConnectInfo",
    "HandshakePayload",
    "JoinRoomPayload",
    "GetMessageHistoryPayload",
    "SendMessagePayload",
]
