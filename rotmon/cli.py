from __future__ import annotations

import json
import signal
import sys
import threading
from typing import Optional

from .channel import ActionChannel
from .config import bias_to_pull_up, build_arg_parser, check_pins, parse_args, resolved_config_dict
from .constants import VERSION
from .doctor import run_doctor
from .errors import EncoderError
from .gpio import GpioLineProvider
from .logging import JsonLogger
from .monitor import EncoderMonitor
from .state import ActionCounter


def run_monitor(args, provider, logger: JsonLogger, stop: threading.Event, counter: Optional[ActionCounter] = None) -> int:
    """Run the encoder monitor in a worker thread and count actions on this one.

    Prints the running position after every action. Returns the process exit
    code: 0 after a clean cancellation, 3 if the monitor failed.
    """
    counter = counter if counter is not None else ActionCounter()
    actions = ActionChannel()
    mon = EncoderMonitor(
        provider,
        clock_pin=args.clock_pin,
        data_pin=args.data_pin,
        switch_pin=args.switch_pin,
        logger=logger,
        verbose=args.verbose,
        poll_interval_s=args.poll_interval,
    )
    failures = []

    def _run():
        try:
            mon.run(stop, actions)
        except Exception as e:
            failures.append(e)
            logger.emit("monitor_failed", phase=getattr(e, "phase", "unknown"), error=str(e))

    t = threading.Thread(target=_run, name="encoder-monitor", daemon=True)
    t.start()

    # Drains until run() closes the channel, so a publish never blocks shutdown.
    for action in actions:
        position = counter.apply(action)
        if args.verbose:
            logger.emit("position", action=action.value, position=position)
        print(position, flush=True)

    t.join(timeout=max(1.0, 5 * float(args.poll_interval)))
    if stop.is_set() and not failures:
        logger.emit("interrupted")
    return 3 if failures else 0


def main(argv=None):
    """CLI entry point. Parses args, opens the gpiochip and runs the monitor until interrupted."""
    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv:
        build_arg_parser().print_help()
        return 0

    ap, args = parse_args(argv)

    if args.version:
        print(VERSION)
        return 0

    # Print resolved configuration and exit (does not touch GPIO).
    if args.print_config:
        print(json.dumps(resolved_config_dict(args), indent=2, sort_keys=True))
        return 0

    problems = check_pins(args)
    if problems:
        for problem in problems:
            print(f"ERROR: {problem}", file=sys.stderr)
        ap.print_usage(sys.stderr)
        return 1

    logger = JsonLogger(enable_json=bool(args.json))
    try:
        provider = GpioLineProvider(chip=args.chip, pull_up=bias_to_pull_up(args.bias))
    except Exception as e:
        logger.emit("chip_open_failed", chip=args.chip, error=str(e))
        return 2

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())

    if args.doctor:
        pins = [p for p in (args.clock_pin, args.data_pin, args.switch_pin) if p is not None]
        try:
            run_doctor(provider, pins, args.doctor_duration, stop=stop)
        except EncoderError as e:
            logger.emit("doctor_failed", phase=e.phase, error=str(e))
            return 3
        return 0

    if not args.no_banner:
        print(f"rotary-monitor {VERSION}")
        # Structured startup event for log scraping
        logger.emit(
            "startup",
            version=VERSION,
            chip=args.chip,
            clock_pin=args.clock_pin,
            data_pin=args.data_pin,
            switch_pin=args.switch_pin,
            bias=args.bias,
            poll_interval=args.poll_interval,
            verbose=args.verbose,
        )

    return run_monitor(args, provider, logger, stop)


if __name__ == "__main__":
    raise SystemExit(main())
