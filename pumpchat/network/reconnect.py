"""Bounded exponential backoff for re-establishing the chat transport."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ReconnectPolicy:
    base_delay: float = 1.0
    max_delay: float = 30.0
    max_attempts: int = 5
    attempts: int = 0

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts

    def next_delay(self) -> Optional[float]:
        """Consume one attempt and return its delay, or ``None`` when out of attempts."""

        if self.exhausted:
            return None
        self.attempts += 1
        return min(self.max_delay, self.base_delay * (2 ** self.attempts))

    def reset(self) -> None:
        self.attempts = 0
