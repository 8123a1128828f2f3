"""rotmon package for rotary-monitor."""

from .channel import ActionChannel, ChannelClosed
from .decoder import Action, decode, detect_press
from .errors import EncoderError, LineAccessError, RuntimeReadFailure, SinkClosedError, SubscriptionError
from .monitor import EncoderMonitor
from .state import ActionCounter, DecoderState, MonitorPhase

__all__ = [
    "Action",
    "ActionChannel",
    "ActionCounter",
    "ChannelClosed",
    "DecoderState",
    "EncoderError",
    "EncoderMonitor",
    "LineAccessError",
    "MonitorPhase",
    "RuntimeReadFailure",
    "SinkClosedError",
    "SubscriptionError",
    "decode",
    "detect_press",
]
