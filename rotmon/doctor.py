from __future__ import annotations

import collections
import queue
import threading
from typing import Dict, Optional, Sequence

from .decoder import decode
from .util import as_level, now_s


def _fmt_levels(pins: Sequence[int], levels) -> str:
    return " ".join(f"gpio{pin}={as_level(v)}" for pin, v in zip(pins, levels))


def run_doctor(provider, pins: Sequence[int], duration_s: float, stop: Optional[threading.Event] = None) -> Dict[int, int]:
    """Print raw levels on every edge so wiring can be checked by turning the knob.

    Safe: no actions are published. The first two pins are treated as clock and
    data, so each edge also shows what the decoder would make of it.

    Returns:
        Edge count per pin.
    """
    stop = stop if stop is not None else threading.Event()
    print("Doctor Mode (safe):")
    print("  - No actions are published.")
    print("  - Turn the knob both ways; press the switch if one is wired.")
    print(f"  - Listening for {duration_s:.1f}s. Ctrl+C to exit early.")
    print()

    edges = queue.Queue()
    counts = collections.Counter()
    sub = provider.subscribe(pins, edges.put)
    try:
        levels = sub.values()
        print(f"  initial {_fmt_levels(pins, levels)}")
        previous_clock = as_level(levels[0])
        deadline = now_s() + duration_s
        while now_s() < deadline and not stop.is_set():
            try:
                pin = edges.get(timeout=0.1)
            except queue.Empty:
                continue
            counts[pin] += 1
            levels = sub.values()
            clock = as_level(levels[0])
            action = decode(previous_clock, clock, as_level(levels[1]))
            previous_clock = clock
            line = f"  EDGE gpio{pin} {_fmt_levels(pins, levels)}"
            if action is not None:
                line += f" => {action.value}"
            print(line)
    finally:
        sub.close()

    print()
    for pin in pins:
        if counts[pin]:
            print(f"  OK: gpio{pin} edges={counts[pin]}")
        else:
            print(f"  WARN: no edges seen on gpio{pin} (check wiring/bias).")
    return {pin: counts[pin] for pin in pins}
