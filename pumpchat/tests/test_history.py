import pytest

from pumpchat.history import HistoryBuffer
from shared.models.chat import ChatMessage


def _msg(i: int) -> ChatMessage:
    return ChatMessage(id=f"m{i}", message=f"text {i}")


@pytest.mark.parametrize("capacity, received", [(1, 3), (3, 10), (100, 101)])
def test_keeps_only_last_capacity_messages_in_arrival_order(capacity, received):
    buffer = HistoryBuffer(capacity)
    for i in range(received):
        buffer.append(_msg(i))

    assert len(buffer) == capacity
    assert [m.id for m in buffer.snapshot()] == [f"m{i}" for i in range(received - capacity, received)]


def test_snapshot_limit_returns_most_recent_entries():
    buffer = HistoryBuffer(10)
    for i in range(5):
        buffer.append(_msg(i))

    assert [m.id for m in buffer.snapshot(2)] == ["m3", "m4"]
    assert [m.id for m in buffer.snapshot(5)] == ["m0", "m1", "m2", "m3", "m4"]
    assert len(buffer.snapshot(50)) == 5
    assert buffer.snapshot(0) == ()


def test_snapshot_is_immune_to_later_mutation():
    buffer = HistoryBuffer(2)
    buffer.append(_msg(0))
    snapshot = buffer.snapshot()
    buffer.append(_msg(1))
    buffer.append(_msg(2))

    assert isinstance(snapshot, tuple)
    assert [m.id for m in snapshot] == ["m0"]


def test_replace_respects_capacity():
    buffer = HistoryBuffer(3)
    buffer.append(_msg(99))
    buffer.replace(_msg(i) for i in range(5))
    assert [m.id for m in buffer.snapshot()] == ["m2", "m3", "m4"]


def test_latest_and_clear():
    buffer = HistoryBuffer(3)
    assert buffer.latest() is None
    buffer.append(_msg(1))
    buffer.append(_msg(2))
    assert buffer.latest().id == "m2"
    buffer.clear()
    assert buffer.latest() is None


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        HistoryBuffer(0)
