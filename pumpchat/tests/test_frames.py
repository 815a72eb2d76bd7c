import json

import pytest

from shared.models.chat import GetMessageHistoryPayload, HandshakePayload, SendMessagePayload
from shared.protocol.frames import (
    FrameDecodeError,
    FrameKind,
    encode_event,
    encode_handshake,
    extract_message_list,
    parse_frame,
)


def test_parse_connect_info_carries_json_payload():
    frame = parse_frame('0{"sid":"abc","pingInterval":25000,"pingTimeout":20000}')
    assert frame.kind is FrameKind.CONNECT_INFO
    assert frame.data["pingInterval"] == 25000
    assert frame.ack_id is None


@pytest.mark.parametrize(
    "raw, kind",
    [("40", FrameKind.HANDSHAKE), ('40{"sid":"x"}', FrameKind.HANDSHAKE), ("2", FrameKind.PING), ("3", FrameKind.PONG)],
)
def test_parse_control_frames(raw, kind):
    assert parse_frame(raw).kind is kind


def test_parse_event_frame():
    frame = parse_frame('42["newMessage",{"id":"m1"}]')
    assert frame.kind is FrameKind.EVENT
    assert frame.data == ["newMessage", {"id": "m1"}]


def test_parse_generic_and_correlated_acks():
    generic = parse_frame('43[{"messages":[]}]')
    assert generic.kind is FrameKind.ACK
    assert generic.ack_id is None

    correlated = parse_frame('437[{"error":"Authentication required"}]')
    assert correlated.kind is FrameKind.ACK
    assert correlated.ack_id == 7
    assert correlated.data == [{"error": "Authentication required"}]


@pytest.mark.parametrize(
    "raw, reason",
    [("41", None), ('41"kicked"', "kicked"), ('41{"reason":"idle"}', "idle"), ("41{oops", None)],
)
def test_parse_disconnect_reason_is_optional(raw, reason):
    frame = parse_frame(raw)
    assert frame.kind is FrameKind.DISCONNECT
    assert frame.data == reason


@pytest.mark.parametrize("raw", ["", "hello", "5", "44[]", "4310[]", "421[\"x\"]", "6"])
def test_unrecognised_prefixes_are_dropped(raw):
    assert parse_frame(raw) is None


@pytest.mark.parametrize("raw", ['42["newMessage",', "43{bad", "432[", '0{"pingInterval":'])
def test_malformed_json_after_known_prefix_raises(raw):
    with pytest.raises(FrameDecodeError):
        parse_frame(raw)


def test_encode_event_with_and_without_ack_id():
    payload = GetMessageHistoryPayload(room_id="room-1", limit=50)
    assert (
        encode_event("getMessageHistory", payload, ack_id=3)
        == '423["getMessageHistory",{"roomId":"room-1","before":null,"limit":50}]'
    )
    assert encode_event("ping", {"a": 1}) == '42["ping",{"a":1}]'


def test_encode_event_escapes_user_text():
    payload = SendMessagePayload(room_id="room-1", message='say "gm"\n', username="tester")
    frame = encode_event("sendMessage", payload, ack_id=0)
    assert frame.startswith("420")
    assert json.loads(frame[3:]) == [
        "sendMessage",
        {"roomId": "room-1", "message": 'say "gm"\n', "username": "tester"},
    ]


def test_encode_event_rejects_multi_digit_ack_id():
    with pytest.raises(ValueError):
        encode_event("joinRoom", {}, ack_id=10)


def test_encode_handshake():
    frame = encode_handshake(HandshakePayload(origin="https://pump.fun", timestamp=1700000000000))
    assert frame == '40{"origin":"https://pump.fun","timestamp":1700000000000,"token":null}'


def test_extract_message_list_accepts_three_shapes():
    messages = [{"id": "m1"}, {"id": "m2"}]
    assert extract_message_list([{"messages": messages}]) == messages
    assert extract_message_list([messages]) == messages
    assert extract_message_list(messages) == messages


@pytest.mark.parametrize("args", [[{"error": None}], [], {"messages": []}, None, ["ok"]])
def test_extract_message_list_rejects_non_history_payloads(args):
    assert extract_message_list(args) is None
