import builtins
import importlib.util
import sys
import threading
from pathlib import Path

import pytest

from fakes import CapturingLogger

REPO_ROOT = Path(__file__).resolve().parents[1]


def load_module():
    """Load the rotary-monitor.py entry script as a module (its name has a dash)."""
    script = REPO_ROOT / "rotary-monitor.py"
    spec = importlib.util.spec_from_file_location("rotary_monitor", script)
    mod = importlib.util.module_from_spec(spec)
    sys.modules["rotary_monitor"] = mod
    assert spec.loader is not None
    spec.loader.exec_module(mod)
    return mod

# Expose helper for tests without explicit imports.
builtins.load_module = load_module


@pytest.fixture
def cancel():
    return threading.Event()


@pytest.fixture
def logger():
    return CapturingLogger()
