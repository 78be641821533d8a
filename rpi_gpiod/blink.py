"""Traffic light LED blink service.

Drives a red, a yellow and a green LED through pigpiod in a 600 ms cycle:
red on for 200 ms, then green joins and yellow toggles, red goes off after
another 100 ms and green 100 ms later, followed by 200 ms dark. An optional
low active button switches an optional buzzer.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .board import describe
from .config import AppConfig, HostEnvironment, configure_logging, load_config
from .cycle import CycleTimer
from .errors import EXIT_OK, GpioError
from .pinmap import GPIO_IGNORE
from .protocol import HIGH, LOW, Mode, Pud
from .session import GpioSession

LOGGER = logging.getLogger(__name__)

TICK_S = 0.1
PAD_STRENGTH_MA = 14

# red, yellow, green connector pins of the traffic light boards
PRESETS: Dict[str, Tuple[int, int, int]] = {
    "default": (11, 22, 13),
    "north": (29, 31, 33),
    "east": (36, 38, 40),
    "south": (11, 13, 15),
    "west": (16, 18, 22),
}


@dataclass
class LedPins:
    red: int = 11
    yellow: int = 22
    green: int = 13
    buzzer: int = 0  # 0: not wired
    button: int = 0

    @classmethod
    def preset(cls, name: str) -> "LedPins":
        red, yellow, green = PRESETS[name]
        return cls(red=red, yellow=yellow, green=green)


class BlinkService:
    """Blink loop on top of a started :class:`GpioSession`."""

    def __init__(
        self,
        session: GpioSession,
        pins: LedPins,
        *,
        stop_event: Optional[threading.Event] = None,
        timer: Optional[CycleTimer] = None,
    ) -> None:
        self.session = session
        self.pins = pins
        self.stop_event = stop_event or threading.Event()
        self.timer = timer or CycleTimer(TICK_S)
        self.cycles = 0
        self.red = self.yellow = self.green = False
        self._gpio: Dict[str, int] = {}
        self._button_prev = False

    def setup(self) -> None:
        """Map pins to GPIOs and configure them; raises InvalidPinError."""
        session = self.session
        self._gpio = {
            "red": session.gpio("red LED", self.pins.red),
            "green": session.gpio("grn LED", self.pins.green),
            "yellow": session.gpio("yel LED", self.pins.yellow),
            "buzzer": session.gpio("buzzerH", self.pins.buzzer, allow_unwired=True),
            "button": session.gpio("buttonL", self.pins.button, allow_unwired=True),
        }
        conn = session.connection
        LOGGER.info("Set mode output rd ye gn/up, pad 0 %d mA", PAD_STRENGTH_MA)
        conn.log_command(conn.set_mode(self._gpio["red"], Mode.OUTPUT))
        conn.log_command(conn.init_as_output(self._gpio["green"]))
        conn.log_command(conn.set_pull_resistor(self._gpio["green"], Pud.UP))
        conn.log_command(conn.init_as_output(self._gpio["yellow"]))
        conn.log_command(conn.set_mode(self._gpio["buzzer"], Mode.OUTPUT))
        conn.log_command(conn.set_drive_strength(0, PAD_STRENGTH_MA))
        conn.log_command(conn.init_as_pulled_up_input(self._gpio["button"]))

    @property
    def gpios(self) -> Dict[str, int]:
        return dict(self._gpio)

    def _set(self, name: str, on: bool) -> None:
        conn = self.session.connection
        conn.log_if_bad(conn.set_output(self._gpio[name], HIGH if on else LOW))

    def _poll_button(self) -> None:
        button = self._gpio.get("button", GPIO_IGNORE)
        if button == GPIO_IGNORE:
            return
        conn = self.session.connection
        pressed = conn.read(button).value == 0  # low active
        if pressed != self._button_prev:
            self._button_prev = pressed
            self._set("buzzer", pressed)

    def _delay(self, ticks: int) -> bool:
        for _ in range(ticks):
            self._poll_button()
            if not self.timer.wait(self.stop_event):
                return False
        return True

    def step_cycle(self) -> bool:
        """Run one full blink cycle; False once a stop was requested."""
        self.session.trigger_watchdog()
        self.red = True
        self._set("red", True)
        if not self._delay(2):
            return False
        self.yellow = not self.yellow
        self._set("yellow", self.yellow)
        self.green = True
        self._set("green", True)
        if not self._delay(1):
            return False
        self.red = False
        self._set("red", False)
        if not self._delay(1):
            return False
        self.green = False
        self._set("green", False)
        if not self._delay(2):
            return False
        self.cycles += 1
        return True

    def run(self, limit: Optional[int] = None) -> int:
        """Blink until stopped or ``limit`` cycles are done; return cycles run."""
        LOGGER.info("Blink loop started")
        self.timer.restart()
        while not self.stop_event.is_set():
            if limit is not None and self.cycles >= limit:
                break
            if not self.step_cycle():
                break
        LOGGER.info("Blink loop ended, cycles/overruns %d/%d", self.cycles, self.timer.overruns)
        return self.cycles


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments for the blink service."""
    parser = argparse.ArgumentParser(description="Blink three LEDs on a Raspberry Pi via pigpiod")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--board", type=int, default=None, help="Board type 0..4 (unknown values mean 3)")
    parser.add_argument("--host", default=None, help="pigpiod host (default: local on a Pi, else .67 in the LAN)")
    parser.add_argument("--port", type=int, default=None, help="pigpiod port")
    parser.add_argument("--timeout-ms", type=int, default=None, help="Connect and read timeout")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="default", help="LED pin preset")
    parser.add_argument("--red", type=int, default=None, help="Connector pin of the red LED")
    parser.add_argument("--yellow", type=int, default=None, help="Connector pin of the yellow LED")
    parser.add_argument("--green", type=int, default=None, help="Connector pin of the green LED")
    parser.add_argument("--buzzer", type=int, default=0, help="Connector pin of a buzzer (0: none)")
    parser.add_argument("--button", type=int, default=0, help="Connector pin of a low active button (0: none)")
    parser.add_argument("--no-lock", action="store_true", help="Run without the GPIO lock file")
    parser.add_argument("--lock-path", default=None, help="GPIO lock file")
    parser.add_argument("--watchdog", default=None, help="Watchdog device to arm, e.g. /dev/watchdog")
    parser.add_argument("--cycles", type=int, default=None, help="Stop after this many cycles")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING)")
    return parser.parse_args(argv)


def _pins_from_args(args: argparse.Namespace) -> LedPins:
    pins = LedPins.preset(args.preset)
    if args.red is not None:
        pins.red = args.red
    if args.yellow is not None:
        pins.yellow = args.yellow
    if args.green is not None:
        pins.green = args.green
    pins.buzzer = args.buzzer
    pins.button = args.button
    return pins


def build_session(args: argparse.Namespace, config: AppConfig, environment: HostEnvironment) -> GpioSession:
    board = config.board
    descriptor = describe(
        args.board if args.board is not None else board.type,
        args.host if args.host is not None else board.host,
        args.port if args.port is not None else board.port,
        args.timeout_ms if args.timeout_ms is not None else board.timeout_ms,
        environment=environment,
    )
    use_watchdog = args.watchdog is not None or config.watchdog.enabled
    return GpioSession(
        descriptor,
        lock_path=args.lock_path or config.lock.path,
        use_lock=config.lock.enabled and not args.no_lock,
        lock_create=config.lock.create,
        watchdog_device=args.watchdog or config.watchdog.device,
        use_watchdog=use_watchdog,
        nowayout_path=config.watchdog.nowayout_path,
    )


def _fail(exc: GpioError) -> int:
    LOGGER.error("%s", exc)
    print(f"rpi-gpiod-blink: {exc.text} ({exc})", file=sys.stderr)
    return exc.code


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the blink service."""
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except GpioError as exc:
        configure_logging(args.log_level or "INFO")
        return _fail(exc)
    configure_logging(args.log_level or config.logging.level)

    session = build_session(args, config, HostEnvironment.detect())
    try:
        session.start()
    except GpioError as exc:
        return _fail(exc)
    LOGGER.info("Connected %s", session.descriptor)

    stop_event = threading.Event()

    def shutdown(_signum=None, _frame=None):
        LOGGER.info("Shutting down")
        stop_event.set()

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)

    service = BlinkService(session, _pins_from_args(args), stop_event=stop_event)
    try:
        try:
            service.setup()
        except GpioError as exc:
            return _fail(exc)
        service.run(args.cycles)
    finally:
        session.stop()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
