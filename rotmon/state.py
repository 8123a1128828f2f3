from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .decoder import Action


class MonitorPhase(str, Enum):
    """Lifecycle of a single EncoderMonitor.run() call."""
    UNINITIALIZED = "uninitialized"
    READING_INITIAL_CLOCK = "reading_initial_clock"
    SUBSCRIBED = "subscribed"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class DecoderState:
    """Levels remembered between edge evaluations.

    Owned by one monitor for the duration of one run. previous_clock is
    overwritten after every evaluation, whether or not an action came out of it."""
    previous_clock: int
    previous_switch: Optional[int] = None


@dataclass
class ActionCounter:
    """Running position kept by the action consumer."""
    position: int = 0
    clockwise: int = 0
    counter_clockwise: int = 0
    clicks: int = 0

    def apply(self, action: Action) -> int:
        if action is Action.CLOCKWISE:
            self.clockwise += 1
            self.position += 1
        elif action is Action.COUNTER_CLOCKWISE:
            self.counter_clockwise += 1
            self.position -= 1
        elif action is Action.CLICK:
            self.clicks += 1
        return self.position
