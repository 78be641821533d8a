"""Command line tools for pin tables, error codes, the GPIO lock and input reads."""

from __future__ import annotations

import argparse
import json
import signal
import sys
import threading
from typing import Any, Dict, List, Optional

from . import errors, status
from .board import describe
from .client import connect
from .config import DEFAULT_LOCK_PATH, DEFAULT_PORT, DEFAULT_TIMEOUT_MS, configure_logging
from .errors import GpioError
from .lockfile import ProcessLock
from .pinmap import family_for, gpio_label, iter_pins


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(description="Raspberry Pi GPIO tools for pigpiod")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING)")

    sub = parser.add_subparsers(dest="cmd", required=True)

    pins_cmd = sub.add_parser("pins", help="Show the connector pin table of a board type")
    pins_cmd.add_argument("--board", type=int, default=3, help="Board type 0..4")
    pins_cmd.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    errors_cmd = sub.add_parser("errors", help="List exit codes and daemon status codes")
    errors_cmd.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    lock_cmd = sub.add_parser("lock", help="Hold the GPIO lock until SIGTERM or SIGINT")
    lock_cmd.add_argument("path", nargs="?", default=DEFAULT_LOCK_PATH, help="Lock file")
    lock_cmd.add_argument("--create", action="store_true", help="Create the lock file if missing")

    read_cmd = sub.add_parser("read", help="Read input levels of connector pins")
    read_cmd.add_argument("pins", type=int, nargs="+", help="Connector pin numbers")
    read_cmd.add_argument("--board", type=int, default=3, help="Board type 0..4")
    read_cmd.add_argument("--host", default=None, help="pigpiod host")
    read_cmd.add_argument("--port", type=int, default=DEFAULT_PORT, help="pigpiod port")
    read_cmd.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS, help="Connect and read timeout")

    return parser.parse_args(argv)


def _report(exc: GpioError) -> int:
    print(f"rpi-gpiod: {exc.text} ({exc})", file=sys.stderr)
    return exc.code


def cmd_pins(args: argparse.Namespace) -> int:
    family = family_for(args.board)
    rows = [{"pin": pin, "gpio": gpio, "label": gpio_label(gpio)} for pin, gpio in iter_pins(args.board)]
    if args.json:
        print(json.dumps({"family": family.name, "pins": rows}, indent=2))
        return errors.EXIT_OK
    print(f"{family.name}: {family.header_pins} pin header")
    for row in rows:
        print(f"  pin {row['pin']:2d}  {row['label']}")
    return errors.EXIT_OK


def cmd_errors(args: argparse.Namespace) -> int:
    codes = [{"code": code, "text": text} for code, text in sorted(errors.ERROR_TEXT.items()) if code]
    statuses = [{"status": code, "name": name, "text": text} for code, name, text in status.all_statuses()]
    if args.json:
        print(json.dumps({"exit_codes": codes, "statuses": statuses}, indent=2))
        return errors.EXIT_OK
    print("exit codes:")
    for row in codes:
        print(f"  {row['code']:3d}  {row['text']}")
    print("pigpiod status codes:")
    for row in statuses:
        print(f"  {row['status']:5d}  {row['name']:<18s} {row['text']}")
    return errors.EXIT_OK


def cmd_lock(args: argparse.Namespace, stop_event: Optional[threading.Event] = None) -> int:
    lock = ProcessLock(args.path, create=args.create)
    try:
        lock.acquire()
    except GpioError as exc:
        return _report(exc)

    stop = stop_event or threading.Event()

    def shutdown(_signum=None, _frame=None):
        stop.set()

    if stop_event is None:
        signal.signal(signal.SIGTERM, shutdown)
        signal.signal(signal.SIGINT, shutdown)
    try:
        print(f"holding lock {args.path}", flush=True)
        stop.wait()
    finally:
        lock.release()
    return errors.EXIT_OK


def cmd_read(args: argparse.Namespace) -> int:
    descriptor = describe(args.board, args.host, args.port, args.timeout_ms)
    rows: List[Dict[str, Any]] = []
    try:
        gpios = [(pin, descriptor.gpio_for_pin(f"pin {pin}", pin)) for pin in args.pins]
        with connect(descriptor) as conn:
            for pin, gpio in gpios:
                result = conn.read(gpio)
                rows.append({"pin": pin, "gpio": gpio, "result": result})
    except GpioError as exc:
        return _report(exc)
    for row in rows:
        result = row["result"]
        level = str(result.value) if result.ok else status.status_name(result.status)
        print(f"pin {row['pin']:2d}  {gpio_label(row['gpio'])}  {level}")
    return errors.EXIT_OK


COMMANDS = {
    "pins": cmd_pins,
    "errors": cmd_errors,
    "lock": cmd_lock,
    "read": cmd_read,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    args = parse_args(argv)
    configure_logging(args.log_level)
    return COMMANDS[args.cmd](args)


if __name__ == "__main__":
    raise SystemExit(main())
