import json

import pytest

from conftest import make_settings, message
from pumpchat.network.client import ChatClient
from pumpchat.relay import RelayQueue
from shared.models.chat import ChatMessage, RelayedMessage


@pytest.mark.asyncio
async def test_drain_hands_over_and_clears_received_messages(pool):
    client = ChatClient(settings=make_settings(), transport_factory=pool)
    relay = RelayQueue()
    relay.attach(client)
    await client.connect()

    for i in range(3):
        await client.session.handle_frame('42["newMessage",' + json.dumps(message(f"m{i}", f"text {i}")) + "]")

    drained = relay.drain()
    assert [m.id for m in drained] == ["m0", "m1", "m2"]
    assert relay.drain() == []
    assert len(client.get_messages()) == 3

    relay.detach()
    await client.session.handle_frame('42["newMessage",' + json.dumps(message("m3")) + "]")
    assert len(relay) == 0
    await client.disconnect()


def test_drain_relayed_maps_sender_and_text():
    relay = RelayQueue()
    relay.push(ChatMessage(id="m1", username="degen", message="wen moon"))
    assert relay.drain_relayed() == [RelayedMessage(sender="degen", text="wen moon")]
    assert len(relay) == 0


def test_full_queue_drops_oldest():
    relay = RelayQueue(maxlen=2)
    for i in range(3):
        relay.push(ChatMessage(id=f"m{i}"))
    assert relay.drops == 1
    assert [m.id for m in relay.drain()] == ["m1", "m2"]
