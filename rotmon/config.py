from __future__ import annotations

import argparse
from argparse import RawDescriptionHelpFormatter
from typing import List, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib

from .constants import (
    BIAS_CHOICES,
    DEFAULT_CHIP,
    DEFAULT_DOCTOR_DURATION_S,
    DEFAULT_POLL_INTERVAL_S,
    USAGE_EXAMPLES,
)


def load_toml_config(path: str) -> dict:
    """Load TOML configuration from path."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _get_cfg(cfg: dict, section: str, key: str, default=None):
    sec = cfg.get(section, {})
    if not isinstance(sec, dict):
        return default
    return sec.get(key, default)


def config_defaults_from(cfg: dict) -> dict:
    """Map TOML config into argparse defaults."""
    return {
        "chip": _get_cfg(cfg, "gpio", "chip", DEFAULT_CHIP),
        "clock_pin": _get_cfg(cfg, "gpio", "clock_pin", None),
        "data_pin": _get_cfg(cfg, "gpio", "data_pin", None),
        "switch_pin": _get_cfg(cfg, "gpio", "switch_pin", None),
        "bias": _get_cfg(cfg, "gpio", "bias", "none"),
        "poll_interval": _get_cfg(cfg, "monitor", "poll_interval", DEFAULT_POLL_INTERVAL_S),
        "verbose": _get_cfg(cfg, "logging", "verbose", False),
        "json": _get_cfg(cfg, "logging", "json", False),
        "no_banner": _get_cfg(cfg, "logging", "no_banner", False),
        "doctor_duration": _get_cfg(cfg, "doctor", "duration", DEFAULT_DOCTOR_DURATION_S),
    }


def resolved_config_dict(args) -> dict:
    return {
        "gpio": {
            "chip": args.chip,
            "clock_pin": args.clock_pin,
            "data_pin": args.data_pin,
            "switch_pin": args.switch_pin,
            "bias": args.bias,
        },
        "monitor": {
            "poll_interval": args.poll_interval,
        },
        "logging": {
            "verbose": bool(args.verbose),
            "json": bool(args.json),
            "no_banner": bool(args.no_banner),
        },
        "doctor": {
            "duration": args.doctor_duration,
        },
    }


def build_arg_parser(defaults=None):
    """Construct the CLI argument parser."""
    ap = argparse.ArgumentParser(
        prog="rotary-monitor",
        description="Decode a rotary encoder's clock/data lines into clockwise/counter-clockwise actions.",
        epilog=USAGE_EXAMPLES,
        formatter_class=RawDescriptionHelpFormatter,
    )
    # Defaults come from the built-in values, optionally overridden by a TOML file.
    if defaults is None:
        defaults = config_defaults_from({})
    ap.set_defaults(**defaults)
    ap.add_argument("--chip", type=int, help="gpiochip number the encoder is wired to (default: 0).")
    ap.add_argument("--clock-pin", type=int, help="GPIO line number of the encoder clock (CLK) pin.")
    ap.add_argument("--data-pin", type=int, help="GPIO line number of the encoder data (DT) pin.")
    ap.add_argument("--switch-pin", type=int, help="Optional GPIO line number of the push switch (SW) pin.")
    ap.add_argument("--bias", choices=BIAS_CHOICES,
                    help="Line bias: none (module has its own pull-ups), pull-up or pull-down.")
    ap.add_argument("--poll-interval", type=float,
                    help="Seconds between cancellation checks while no edges arrive.")

    ap.add_argument("--verbose", dest="verbose", action="store_true", help="Verbose logging (levels read on every edge).")
    ap.add_argument("--no-verbose", dest="verbose", action="store_false", help="Disable verbose logging.")
    json_group = ap.add_mutually_exclusive_group()
    json_group.add_argument("--json", dest="json", action="store_true", help="Emit JSON log events.")
    json_group.add_argument("--no-json", dest="json", action="store_false", help="Disable JSON log output.")
    ap.add_argument("--no-banner", dest="no_banner", action="store_true", help="Disable the startup banner.")
    ap.add_argument("--banner", dest="no_banner", action="store_false", help="Enable the startup banner.")

    ap.add_argument("--doctor", action="store_true", help="Print raw line levels on every edge, then exit.")
    ap.add_argument("--doctor-duration", type=float, help="How long --doctor listens for edges, in seconds.")
    ap.add_argument("--config", help="Path to a TOML config file. CLI args override config values.")
    ap.add_argument("--print-config", action="store_true", help="Print the resolved configuration and exit.")
    ap.add_argument("--version", action="store_true", help="Print version and exit.")
    return ap


def parse_args(argv: Optional[List[str]] = None):
    """Parse argv with TOML values (from --config) as defaults.

    Returns the parser (for usage output) and the parsed namespace.
    """
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config")
    known, _ = pre.parse_known_args(argv)
    cfg = load_toml_config(known.config) if known.config else {}
    ap = build_arg_parser(config_defaults_from(cfg))
    return ap, ap.parse_args(argv)


def bias_to_pull_up(bias: str) -> Optional[bool]:
    """Translate a --bias choice into gpiozero's pull_up argument."""
    if bias == "pull-up":
        return True
    if bias == "pull-down":
        return False
    return None


def check_pins(args) -> List[str]:
    """Validate the encoder pin arguments.

    Clock and data pins are required and must be positive; the switch pin is
    optional but must be positive when given. No line may be used twice.

    Returns:
        A list of human-readable problems (empty when the pins are usable).
    """
    problems = []
    pins = {}
    for flag, name in (("--clock-pin", "clock_pin"), ("--data-pin", "data_pin"), ("--switch-pin", "switch_pin")):
        value = getattr(args, name, None)
        if value is None:
            if name != "switch_pin":
                problems.append(f"{flag} is required")
            continue
        if value <= 0:
            problems.append(f"{flag} must be a positive GPIO line number (got {value})")
            continue
        if value in pins:
            problems.append(f"{flag} uses line {value}, already used by {pins[value]}")
            continue
        pins[value] = flag
    return problems
