from __future__ import annotations

from typing import Optional


class EncoderError(Exception):
    """Base class for failures that end a monitor run.

    ``phase`` names where the run failed: ``initial_read``, ``subscribe``,
    ``runtime`` or ``publish``."""
    phase = "unknown"

    def __init__(self, message: str, phase: Optional[str] = None):
        super().__init__(message)
        if phase is not None:
            self.phase = phase


class LineAccessError(EncoderError):
    """A line could not be opened or read while seeding the decoder."""
    phase = "initial_read"


class SubscriptionError(EncoderError):
    """The edge subscription on the encoder lines could not be opened."""
    phase = "subscribe"


class RuntimeReadFailure(EncoderError):
    """Reading line levels failed while the subscription was active."""
    phase = "runtime"


class SinkClosedError(EncoderError):
    """The action consumer closed the sink before the monitor was cancelled."""
    phase = "publish"
