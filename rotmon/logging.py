from __future__ import annotations

import json
import sys
import time
from typing import Optional, TextIO


def _timestamp(t: float) -> str:
    """Local time with milliseconds, e.g. 2024-05-01 12:00:00.123."""
    return time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(t)) + f'.{int((t - int(t)) * 1000):03d}'


class JsonLogger:
    """Minimal structured logger.

    Emits one line per event (startup, subscription, decoded actions, failures),
    either as JSON or as `[timestamp] event k=v ...`, so logs are easy to grep
    and machine-parse."""
    def __init__(self, enable_json: bool, stream: Optional[TextIO] = None):
        """Create a logger.

        Args:
            enable_json: Emit JSON objects instead of plain text lines.
            stream: File-like object for output (defaults to stdout at emit time).
        """
        self.enable_json = enable_json
        self.stream = stream

    def emit(self, event: str, **fields):
        """Emit an event with a name and optional key/value fields."""
        out = self.stream if self.stream is not None else sys.stdout
        t = time.time()
        if self.enable_json:
            payload = {"ts": t, "ts_iso": _timestamp(t), "event": event, **fields}
            print(json.dumps(payload, sort_keys=True, default=str), file=out, flush=True)
            return
        msg = f"[{_timestamp(t)}] {event}"
        if fields:
            msg += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        print(msg, file=out, flush=True)


class NullLogger(JsonLogger):
    """Logger that drops every event; used when no logger is injected."""
    def __init__(self):
        super().__init__(enable_json=False)

    def emit(self, event: str, **fields):
        pass
