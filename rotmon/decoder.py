from __future__ import annotations

from enum import Enum
from typing import Optional


class Action(str, Enum):
    """A discrete user action produced by the encoder."""
    CLOCKWISE = "clockwise"
    COUNTER_CLOCKWISE = "counterclockwise"
    CLICK = "click"

    def __str__(self) -> str:
        return self.value


def decode(previous_clock: int, current_clock: int, current_data: int) -> Optional[Action]:
    """Classify a clock transition into a rotation direction.

    Only a rising clock edge counts. Falling edges and repeated reads of the
    same clock level return None, so one mechanical detent (clock up, then
    down) yields exactly one action.

    On a rising edge the data line decides the direction: data still low means
    counter-clockwise, data already high means clockwise.

    Noise is not filtered here. A bouncing contact can produce a rising edge
    with a transitional data level and therefore a spurious action.
    """
    if previous_clock == current_clock or current_clock != 1:
        return None
    if current_data != current_clock:
        return Action.COUNTER_CLOCKWISE
    return Action.CLOCKWISE


def detect_press(previous_switch: int, current_switch: int) -> Optional[Action]:
    """Return CLICK on the press edge of an active-low push switch (1 -> 0)."""
    if previous_switch == 1 and current_switch == 0:
        return Action.CLICK
    return None
