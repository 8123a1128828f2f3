from __future__ import annotations

import queue
import threading
from typing import Iterator, Optional

from .decoder import Action
from .util import now_s

_EMPTY = object()


class ChannelClosed(Exception):
    """Raised by put()/get() once the channel has been closed."""


class ActionChannel:
    """Unbuffered, ordered hand-off of actions from the monitor to a consumer.

    put() does not return until a consumer has taken the action, so a slow
    consumer slows the producer down instead of losing actions. There is no
    internal buffer: at most one action is in flight at a time.

    Either side may close the channel. The producer closes it when it is done;
    a consumer that stops draining should close it too, which wakes up a
    blocked put() with ChannelClosed.
    """
    def __init__(self):
        self._cond = threading.Condition()
        self._pending = _EMPTY
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, action: Action) -> None:
        """Hand an action to a consumer, blocking until it has been taken."""
        with self._cond:
            # Single producer, but keep hand-offs strictly one at a time.
            while self._pending is not _EMPTY and not self._closed:
                self._cond.wait()
            if self._closed:
                raise ChannelClosed("action channel is closed")
            self._pending = action
            self._cond.notify_all()
            while self._pending is action and not self._closed:
                self._cond.wait()
            if self._pending is action:
                # Closed before anyone took it.
                self._pending = _EMPTY
                raise ChannelClosed("action channel closed before hand-off")

    def get(self, timeout: Optional[float] = None) -> Action:
        """Take the next action.

        Raises ChannelClosed once the channel is closed and nothing is pending,
        queue.Empty if timeout expires first.
        """
        deadline = None if timeout is None else now_s() + timeout
        with self._cond:
            while self._pending is _EMPTY:
                if self._closed:
                    raise ChannelClosed("action channel is closed")
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - now_s()
                if remaining <= 0:
                    raise queue.Empty
                self._cond.wait(remaining)
            action = self._pending
            self._pending = _EMPTY
            self._cond.notify_all()
            return action

    def close(self) -> None:
        """Mark the stream finished. Safe to call more than once."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[Action]:
        while True:
            try:
                yield self.get()
            except ChannelClosed:
                return
