from __future__ import annotations

import threading
from typing import Callable, Optional, Sequence, Tuple

from gpiozero import DigitalInputDevice

from .errors import LineAccessError, RuntimeReadFailure, SubscriptionError
from .util import as_level


# ---------------- Hardware line provider ----------------
#
# The monitor only needs three things from the hardware: a one-shot read of a
# single line, a subscription that reports "something changed" on a set of lines,
# and the current levels of the subscribed lines. Any object with read_line()
# and subscribe() works; GpioLineProvider is the gpiozero implementation.


def lgpio_factory(chip: int = 0):
    """Create the lgpio pin factory for a gpiochip (Pi 5 / Debian Trixie+).

    Imported on demand so the package (and its tests, which use gpiozero's
    MockFactory) can be loaded on machines without lgpio.
    """
    from gpiozero.pins.lgpio import LGPIOFactory
    return LGPIOFactory(chip=chip)


def _edge_handler(on_edge: Callable[[int], None], pin: int):
    def handler():
        on_edge(pin)
    return handler


class LineSubscription:
    """Edge subscription on a fixed set of lines.

    Holds one DigitalInputDevice per line with callbacks on both edges. The
    lines stay claimed until close() is called.
    """
    def __init__(self, pins: Sequence[int], devices):
        self.pins = tuple(pins)
        self._devices = list(devices)
        self._lock = threading.Lock()
        self.closed = False

    def values(self) -> Tuple[int, ...]:
        """Current raw levels, in the order the pins were subscribed."""
        if self.closed:
            raise RuntimeReadFailure(f"read lines {list(self.pins)}: subscription released")
        try:
            return tuple(as_level(dev.pin.state) for dev in self._devices)
        except Exception as e:
            raise RuntimeReadFailure(f"read lines {list(self.pins)}: {e}") from e

    def close(self):
        """Release all lines. Only the first call does anything."""
        with self._lock:
            if self.closed:
                return
            self.closed = True
            devices, self._devices = self._devices, []
        for dev in devices:
            dev.close()


class GpioLineProvider:
    """gpiozero-backed access to encoder lines on one gpiochip.

    Lines are requested as plain inputs without bias unless pull_up is set
    (True for pull-up, False for pull-down). Levels are always the raw pin
    state, so a pull-up never inverts what the decoder sees.
    """
    def __init__(self, chip: int = 0, pull_up: Optional[bool] = None, pin_factory=None):
        self.chip = chip
        self.pull_up = pull_up
        self.pin_factory = pin_factory if pin_factory is not None else lgpio_factory(chip)

    def _open(self, pin: int) -> DigitalInputDevice:
        if self.pull_up is None:
            return DigitalInputDevice(pin, pull_up=None, active_state=True, pin_factory=self.pin_factory)
        return DigitalInputDevice(pin, pull_up=self.pull_up, pin_factory=self.pin_factory)

    def read_line(self, pin: int) -> int:
        """Claim a line, read its level once and release it again."""
        try:
            dev = self._open(pin)
        except Exception as e:
            raise LineAccessError(f"request line {pin} on gpiochip{self.chip}: {e}") from e
        try:
            return as_level(dev.pin.state)
        except Exception as e:
            raise LineAccessError(f"read line {pin} on gpiochip{self.chip}: {e}") from e
        finally:
            dev.close()

    def subscribe(self, pins: Sequence[int], on_edge: Callable[[int], None]) -> LineSubscription:
        """Claim all pins for rising and falling edge notification.

        on_edge(pin) is invoked from gpiozero's callback thread for every edge.
        If any line cannot be claimed, the ones already claimed are released.
        """
        devices = []
        try:
            for pin in pins:
                dev = self._open(pin)
                devices.append(dev)
                handler = _edge_handler(on_edge, pin)
                dev.when_activated = handler
                dev.when_deactivated = handler
        except Exception as e:
            for dev in devices:
                dev.close()
            raise SubscriptionError(f"request lines {list(pins)} on gpiochip{self.chip}: {e}") from e
        return LineSubscription(pins, devices)
