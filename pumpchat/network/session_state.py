"""Connection state tracking for the chat session."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone


class ConnectionState(enum.Enum):
    """Client-side state machine for one room session."""

    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    HANDSHAKING = "HANDSHAKING"
    JOINING = "JOINING"
    FETCHING_HISTORY = "FETCHING_HISTORY"
    ACTIVE = "ACTIVE"


@dataclass
class SessionTracker:
    """Current state plus the instant it was entered."""

    state: ConnectionState = ConnectionState.DISCONNECTED
    last_transition_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def transition(self, next_state: ConnectionState) -> None:
        """Move into a new state, validating allowed transitions."""

        if not self._is_valid_transition(self.state, next_state):
            raise ValueError(f"Invalid transition {self.state.value} → {next_state.value}")
        self.state = next_state
        self.last_transition_at = datetime.now(tz=timezone.utc)

    @staticmethod
    def _is_valid_transition(current: ConnectionState, nxt: ConnectionState) -> bool:
        if nxt is ConnectionState.DISCONNECTED:
            return current is not ConnectionState.DISCONNECTED
        allowed = {
            ConnectionState.DISCONNECTED: {ConnectionState.CONNECTING},
            ConnectionState.CONNECTING: {ConnectionState.HANDSHAKING},
            ConnectionState.HANDSHAKING: {ConnectionState.JOINING},
            ConnectionState.JOINING: {ConnectionState.FETCHING_HISTORY},
            ConnectionState.FETCHING_HISTORY: {ConnectionState.ACTIVE},
            ConnectionState.ACTIVE: set(),
        }
        return nxt in allowed.get(current, set())
