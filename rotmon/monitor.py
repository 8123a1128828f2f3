from __future__ import annotations

import queue
import threading
from typing import Optional, Tuple

from .channel import ChannelClosed
from .decoder import Action, decode, detect_press
from .errors import LineAccessError, RuntimeReadFailure, SinkClosedError, SubscriptionError
from .logging import JsonLogger, NullLogger
from .state import DecoderState, MonitorPhase
from .util import as_level, now_s


class EncoderMonitor:
    """Rotary encoder monitor.

    Seeds the decoder with one-shot reads of the clock line (and the switch
    line, when one is wired), subscribes to edges on the clock and data lines
    (plus the optional push switch), and hands every decoded action to the
    sink in the order the edges arrived.

    Edge callbacks only enqueue the edge. The thread that called run() drains
    that queue, so decoding and the DecoderState it mutates are never touched
    by two edges at once, no matter how the line provider delivers callbacks.
    """
    def __init__(
        self,
        provider,
        clock_pin: int,
        data_pin: int,
        logger: Optional[JsonLogger] = None,
        switch_pin: Optional[int] = None,
        verbose: bool = False,
        poll_interval_s: float = 0.1,
    ):
        """
        Initialize the monitor.

        Args:
            provider: Line provider with read_line(pin) and subscribe(pins, on_edge).
            clock_pin: Line number of the encoder clock (CLK / A) output.
            data_pin: Line number of the encoder data (DT / B) output.
            logger: Optional event observer; events are dropped when omitted.
            switch_pin: Optional line of an active-low push switch (SW).
            verbose: Also log the levels read for every edge.
            poll_interval_s: How often the drain loop checks for cancellation.

        Construction touches no hardware; lines are claimed by run().
        """
        self.provider = provider
        self.clock_pin = int(clock_pin)
        self.data_pin = int(data_pin)
        self.switch_pin = int(switch_pin) if switch_pin is not None else None
        self.logger = logger if logger is not None else NullLogger()
        self.verbose = bool(verbose)
        self.poll_interval_s = float(poll_interval_s)

        self.phase = MonitorPhase.UNINITIALIZED
        self.state: Optional[DecoderState] = None
        self._events = queue.Queue()
        self._subscription = None

    @property
    def pins(self) -> Tuple[int, ...]:
        if self.switch_pin is None:
            return (self.clock_pin, self.data_pin)
        return (self.clock_pin, self.data_pin, self.switch_pin)

    def run(self, cancel: threading.Event, actions) -> None:
        """Monitor the encoder until cancel is set.

        Returns None only after cancellation. Raises LineAccessError when an
        initial line read fails (no subscription is attempted),
        SubscriptionError when the lines cannot be subscribed, RuntimeReadFailure
        when a level read fails mid-stream, and SinkClosedError when the
        consumer closes the sink before cancellation.

        The subscription is released on every exit path once it exists, and
        the sink is closed when run() returns or raises.

        A decided action is always handed over, even if cancel fires while
        put() is blocked, so the consumer must keep draining during shutdown
        (or close the sink).
        """
        if self.phase is not MonitorPhase.UNINITIALIZED:
            raise RuntimeError("EncoderMonitor.run() can only be called once; create a new monitor")

        self.logger.emit(
            "encoder_started",
            clock_pin=self.clock_pin,
            data_pin=self.data_pin,
            switch_pin=self.switch_pin,
        )
        try:
            self.phase = MonitorPhase.READING_INITIAL_CLOCK
            self.state = DecoderState(previous_clock=self._read_initial("clock", self.clock_pin))
            if self.switch_pin is not None:
                # Seeded up front so a press on the very first edge is not lost.
                self.state.previous_switch = self._read_initial("switch", self.switch_pin)
            self._subscription = self._subscribe()
            self.phase = MonitorPhase.SUBSCRIBED
            try:
                self._drain(cancel, actions)
            finally:
                self.phase = MonitorPhase.CLOSING
                self._subscription.close()
                self.logger.emit("unsubscribed", pending_edges=self._events.qsize())
        finally:
            actions.close()
            self.phase = MonitorPhase.CLOSED
            self.logger.emit("encoder_finished")

    def _read_initial(self, line: str, pin: int) -> int:
        """One-shot read of a line before subscribing; failures end the run."""
        try:
            value = as_level(self.provider.read_line(pin))
        except Exception as e:
            self.logger.emit("initial_read_failed", line=line, pin=pin, error=str(e))
            if isinstance(e, LineAccessError):
                raise
            raise LineAccessError(f"read {line} line {pin}: {e}") from e
        self.logger.emit(f"initial_{line}", pin=pin, value=value)
        return value

    def _subscribe(self):
        try:
            sub = self.provider.subscribe(self.pins, self._on_edge)
        except Exception as e:
            self.logger.emit("subscribe_failed", pins=list(self.pins), error=str(e))
            if isinstance(e, SubscriptionError):
                raise
            raise SubscriptionError(f"subscribe to lines {list(self.pins)}: {e}") from e
        self.logger.emit("subscribed", pins=list(self.pins))
        return sub

    def _on_edge(self, pin: int):
        """Edge callback from the line provider. Never blocks."""
        self._events.put((pin, now_s()))

    def _drain(self, cancel: threading.Event, actions):
        """Evaluate queued edges in arrival order until cancelled."""
        while not cancel.is_set():
            try:
                pin, ts = self._events.get(timeout=self.poll_interval_s)
            except queue.Empty:
                continue
            self._handle_edge(pin, ts, cancel, actions)

    def _read_levels(self) -> Tuple[int, ...]:
        try:
            levels = self._subscription.values()
        except Exception as e:
            self.logger.emit("read_failed", pins=list(self.pins), error=str(e))
            if isinstance(e, RuntimeReadFailure):
                raise
            raise RuntimeReadFailure(f"read lines {list(self.pins)}: {e}") from e
        return tuple(as_level(v) for v in levels)

    def _handle_edge(self, pin: int, ts: float, cancel: threading.Event, actions):
        levels = self._read_levels()
        clock, data = levels[0], levels[1]
        if self.verbose:
            self.logger.emit(
                "levels",
                pin=pin,
                clock=clock,
                data=data,
                latency_ms=round((now_s() - ts) * 1000.0, 3),
            )

        action = decode(self.state.previous_clock, clock, data)
        if action is not None:
            self._publish(action, cancel, actions)
        # Track every clock level, not just rising edges, so the next rise is seen.
        self.state.previous_clock = clock

        if self.switch_pin is None:
            return
        switch = levels[2]
        click = detect_press(self.state.previous_switch, switch)
        if click is not None:
            self._publish(click, cancel, actions)
        self.state.previous_switch = switch

    def _publish(self, action: Action, cancel: threading.Event, actions):
        """Hand an action to the sink, blocking until the consumer takes it."""
        self.logger.emit("action", action=action.value)
        try:
            actions.put(action)
        except ChannelClosed:
            if cancel.is_set():
                self.logger.emit("action_dropped", action=action.value, reason="sink closed during shutdown")
                return
            self.logger.emit("sink_closed", action=action.value)
            raise SinkClosedError("action sink closed by the consumer before cancellation") from None
