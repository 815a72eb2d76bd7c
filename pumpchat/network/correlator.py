"""Correlation of outbound requests with their numbered acknowledgments.

Socket.IO pairs a ``42<n>`` request with a ``43<n>`` response. The server only
accepts a single digit, so ids cycle through 0-9. An id that comes round
again while its previous request is still pending replaces that entry; with
at most ten requests in flight this never happens in practice.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

LOGGER = logging.getLogger(__name__)

ACK_ID_SLOTS = 10


class AckKind(str, enum.Enum):
    JOIN_ROOM = "joinRoom"
    GET_MESSAGE_HISTORY = "getMessageHistory"
    SEND_MESSAGE = "sendMessage"


@dataclass(frozen=True)
class PendingAck:
    ack_id: int
    kind: AckKind
    created_at: float


class AckCorrelator:
    """Issues cyclic ack ids and remembers which request each one belongs to."""

    def __init__(self, ttl: float = 30.0, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = float(ttl)
        self._clock = clock
        self._next_id = 0
        self._pending: Dict[int, PendingAck] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, ack_id: object) -> bool:
        return ack_id in self._pending

    def pending(self) -> Dict[int, PendingAck]:
        return dict(self._pending)

    def allocate(self, kind: AckKind, *, now: Optional[float] = None) -> int:
        ack_id = self._next_id
        self._next_id = (self._next_id + 1) % ACK_ID_SLOTS
        previous = self._pending.get(ack_id)
        if previous is not None:
            LOGGER.debug("Ack id %s reused while %s still pending", ack_id, previous.kind.value)
        created_at = self._clock() if now is None else now
        self._pending[ack_id] = PendingAck(ack_id=ack_id, kind=kind, created_at=created_at)
        return ack_id

    def resolve(self, ack_id: int) -> Optional[AckKind]:
        entry = self._pending.pop(ack_id, None)
        return entry.kind if entry else None

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop entries older than the TTL and return how many were removed."""

        current = self._clock() if now is None else now
        stale = [ack_id for ack_id, entry in self._pending.items() if current - entry.created_at > self._ttl]
        for ack_id in stale:
            entry = self._pending.pop(ack_id)
            LOGGER.debug("Dropping stale ack id=%s kind=%s", ack_id, entry.kind.value)
        return len(stale)

    def clear(self) -> None:
        self._pending.clear()
