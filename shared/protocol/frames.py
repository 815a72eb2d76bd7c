"""Codec for the numeric-prefixed Engine.IO/Socket.IO text frames."""

from __future__ import annotations

import enum
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel

from shared.models.chat import HandshakePayload

PING = "2"
PONG = "3"

_PREFIX = re.compile(r"^(\d+)")

Payload = Dict[str, Any] | BaseModel


class FrameDecodeError(ValueError):
    """Raised when a recognised frame carries a payload that is not valid JSON."""


class FrameKind(str, enum.Enum):
    CONNECT_INFO = "0"
    HANDSHAKE = "40"
    DISCONNECT = "41"
    EVENT = "42"
    ACK = "43"
    PING = "2"
    PONG = "3"


@dataclass(frozen=True)
class Frame:
    kind: FrameKind
    data: Any = None
    ack_id: Optional[int] = None


def _payload_dict(payload: Payload) -> Dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(by_alias=True)
    return payload


def _load(prefix: str, body: str) -> Any:
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise FrameDecodeError(f"invalid JSON after prefix {prefix!r}: {exc.msg}") from exc


def _disconnect_reason(body: str) -> Optional[str]:
    if not body:
        return None
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return None
    if isinstance(parsed, str):
        return parsed
    if isinstance(parsed, dict) and parsed.get("reason"):
        return str(parsed["reason"])
    return None


def parse_frame(raw: str) -> Optional[Frame]:
    """Decode a raw text frame.

    Returns ``None`` for prefixes this client does not speak. Raises
    ``FrameDecodeError`` when a known prefix is followed by malformed JSON.
    A ``41`` reason is optional, so an unreadable one is treated as absent.
    """

    match = _PREFIX.match(raw)
    if not match:
        return None
    prefix = match.group(1)
    body = raw[len(prefix):]

    if prefix == "0":
        return Frame(FrameKind.CONNECT_INFO, _load(prefix, body) if body else {})
    if prefix == "40":
        return Frame(FrameKind.HANDSHAKE)
    if prefix == "41":
        return Frame(FrameKind.DISCONNECT, _disconnect_reason(body))
    if prefix == "42":
        return Frame(FrameKind.EVENT, _load(prefix, body))
    if prefix == "43":
        return Frame(FrameKind.ACK, _load(prefix, body))
    if len(prefix) == 3 and prefix.startswith("43"):
        return Frame(FrameKind.ACK, _load(prefix, body), ack_id=int(prefix[2]))
    if prefix == "2":
        return Frame(FrameKind.PING)
    if prefix == "3":
        return Frame(FrameKind.PONG)
    return None


def encode_handshake(payload: HandshakePayload) -> str:
    return FrameKind.HANDSHAKE.value + json.dumps(payload.model_dump(), separators=(",", ":"))


def encode_event(name: str, payload: Payload, *, ack_id: Optional[int] = None) -> str:
    """Serialise ``42[<ack_id>]["name",{...}]``."""

    if ack_id is not None and not 0 <= ack_id <= 9:
        raise ValueError(f"ack id out of range: {ack_id}")
    body = json.dumps([name, _payload_dict(payload)], separators=(",", ":"))
    return f"{FrameKind.EVENT.value}{'' if ack_id is None else ack_id}{body}"


def extract_message_list(args: Any) -> Optional[list[Any]]:
    """Pull the message array out of a history response.

    The server answers in one of three shapes: ``[{"messages": [...]}]``,
    ``[[...]]`` or a bare array of message objects.
    """

    if not isinstance(args, list):
        return None
    if not args:
        return None
    first = args[0]
    if isinstance(first, dict) and isinstance(first.get("messages"), list):
        return first["messages"]
    if isinstance(first, list):
        return first
    if all(isinstance(item, dict) and "id" in item for item in args):
        return args
    return None
