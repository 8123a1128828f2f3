#!/usr/bin/env python3
#
# Rotary encoder monitor
#
# Watches the clock and data lines of a mechanical rotary encoder (KY-040 style)
# and turns their edges into clockwise / counter-clockwise actions, plus clicks
# when the push switch is wired. The running position is printed after every
# action until the process is interrupted.
#

from __future__ import annotations

from rotmon.channel import ActionChannel, ChannelClosed
from rotmon.cli import main, run_monitor
from rotmon.config import (
    bias_to_pull_up,
    build_arg_parser,
    check_pins,
    config_defaults_from,
    load_toml_config,
    parse_args,
    resolved_config_dict,
)
from rotmon.constants import VERSION
from rotmon.decoder import Action, decode, detect_press
from rotmon.logging import JsonLogger
from rotmon.monitor import EncoderMonitor
from rotmon.state import ActionCounter, DecoderState, MonitorPhase


if __name__ == "__main__":
    raise SystemExit(main())
