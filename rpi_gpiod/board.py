"""Board variants and their daemon connection parameters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

from . import pinmap
from .config import DEFAULT_PORT, DEFAULT_TIMEOUT_MS, HostEnvironment
from .errors import InvalidPinError

PORT_MIN = 20
PORT_MAX = 65535
TIMEOUT_MIN_MS = 300
TIMEOUT_MAX_MS = 50000


class BoardType(IntEnum):
    PI0 = 0
    PI1 = 1
    PI2 = 2
    PI3 = 3
    PI4 = 4

    @classmethod
    def normalize(cls, value: Any) -> "BoardType":
        """Return the board type for ``value``; anything unknown is ``PI3``."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.PI3


@dataclass(frozen=True, eq=False)
class BoardDescriptor:
    """One target board: its family plus the daemon's host, port and timeout.

    Two descriptors are equal when their board types are equal, whatever
    their endpoints. Use :meth:`same_endpoint` before reusing a connection.
    """

    type: BoardType
    host: str
    port: int
    timeout_ms: int

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoardDescriptor):
            return NotImplemented
        return self.type == other.type

    def __hash__(self) -> int:
        return hash(int(self.type))

    @property
    def family(self) -> pinmap.BoardFamily:
        return pinmap.family_for(self.type)

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    def same_endpoint(self, other: "BoardDescriptor") -> bool:
        return (self.host, self.port, self.timeout_ms) == (other.host, other.port, other.timeout_ms)

    def pin_for_gpio(self, gpio: int) -> int:
        return self.family.table.pin_for(gpio)

    def gpio_for_pin(self, label: str, pin: int, *, allow_unwired: bool = False) -> int:
        """Return the GPIO on connector ``pin``.

        Raises :class:`InvalidPinError` naming ``label`` when the pin is a
        power, ground or ID pin or does not exist on this board. Pin 0 means
        "not wired" and is accepted only with ``allow_unwired``; it then
        yields :data:`pinmap.GPIO_IGNORE`.
        """
        if pin == 0 and allow_unwired:
            return pinmap.GPIO_IGNORE
        gpio = self.family.table.gpio_for(pin)
        if pin <= 0 or not pinmap.is_gpio(gpio):
            raise InvalidPinError(label, pin, gpio, pinmap.gpio_label(gpio))
        return gpio

    def gpio_for_pin_checked(self, label: str, pin: int, *, allow_unwired: bool = False) -> int:
        """Like :meth:`gpio_for_pin` but also rejects lines the daemon can't drive."""
        gpio = self.gpio_for_pin(label, pin, allow_unwired=allow_unwired)
        if gpio == pinmap.GPIO_IGNORE:
            return gpio
        if gpio > self.family.max_output_gpio:
            raise InvalidPinError(label, pin, gpio, f"{pinmap.gpio_label(gpio)} not usable for output")
        return gpio

    def __str__(self) -> str:
        return f"{self.family.name} (type {int(self.type)}) @ {self.host}:{self.port}"


def describe(
    type: Any,
    host: Optional[str] = None,
    port: int = 0,
    timeout_ms: int = 0,
    *,
    environment: Optional[HostEnvironment] = None,
) -> BoardDescriptor:
    """Build a descriptor, clamping out-of-range connection values to defaults."""
    board_type = BoardType.normalize(type)
    port = int(port or 0)
    if port < PORT_MIN or port > PORT_MAX:
        port = DEFAULT_PORT
    timeout_ms = int(timeout_ms or 0)
    if timeout_ms < TIMEOUT_MIN_MS or timeout_ms > TIMEOUT_MAX_MS:
        timeout_ms = DEFAULT_TIMEOUT_MS
    if host is None or len(host.strip()) < 3:
        env = environment if environment is not None else HostEnvironment.detect()
        host = env.default_host()
    return BoardDescriptor(type=board_type, host=host.strip(), port=port, timeout_ms=timeout_ms)
