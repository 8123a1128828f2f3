from __future__ import annotations

import time


def now_s() -> float:
    """Monotonic clock in seconds."""
    return time.monotonic()


def as_level(state) -> int:
    """Normalize a pin state (bool, int or float) to a binary line level."""
    return 1 if state else 0
