from .frames import (
    PING,
    PONG,
    Frame,
    FrameDecodeError,
    FrameKind,
    encode_event,
    encode_handshake,
    extract_message_list,
    parse_frame,
)

__all__ = [
    "PING",
    "PONG",
    "Frame",
    "FrameDecodeError",
    "FrameKind",
    "encode_event",
    "encode_handshake",
    "extract_message_list",
    "parse_frame",
]
