from __future__ import annotations

VERSION = "1.0.0"

DEFAULT_CHIP = 0
DEFAULT_POLL_INTERVAL_S = 0.1
DEFAULT_DOCTOR_DURATION_S = 10.0

# Line bias choices accepted by --bias / [gpio] bias.
BIAS_CHOICES = ("none", "pull-up", "pull-down")


USAGE_EXAMPLES = """\
Usage examples:
  # KY-040 on gpiochip0: CLK on GPIO17, DT on GPIO18
  python rotary-monitor.py --clock-pin 17 --data-pin 18

  # Include the push switch (SW) and use the internal pull-ups
  python rotary-monitor.py --clock-pin 17 --data-pin 18 --switch-pin 27 --bias pull-up

  # Per-edge level logging as JSON
  python rotary-monitor.py --clock-pin 17 --data-pin 18 --verbose --json

  # Wiring diagnostic: print raw levels on every edge for 20 seconds
  python rotary-monitor.py --doctor --doctor-duration 20 --clock-pin 17 --data-pin 18

  # Settings from a TOML file (CLI flags still win)
  python rotary-monitor.py --config /etc/rotary-monitor.toml
"""
