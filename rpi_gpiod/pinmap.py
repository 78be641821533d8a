"""Static pin/GPIO tables for the supported Raspberry Pi board families.

Physical connector pins are numbered 1..40 (26 on the oldest boards). The
8-pin P5 connector of revision 2 boards is remapped onto pins 31..38. Entries
of ``pin_to_gpio`` that are not GPIO lines carry one of the sentinel codes
below; they are never valid line numbers for the daemon.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

GPIO_MIN = 0
GPIO_MAX = 53  # daemon accepts 0..53
GPIO_OUT_MAX = 31  # outputs are restricted to bank 0

GPIO_IGNORE = 57  # pin 0: signal not wired, operations are no-ops
PIN_GND = 90
PIN_3V3 = 93
PIN_5V = 95
PIN_ID = 97  # HAT ID EEPROM (ID_SD / ID_SC)
PIN_NONE = 99

SENTINELS = frozenset({GPIO_IGNORE, PIN_GND, PIN_3V3, PIN_5V, PIN_ID, PIN_NONE})

_LABELS = {
    GPIO_IGNORE: "ignore",
    PIN_GND: "gnd",
    PIN_3V3: "3V3",
    PIN_5V: "5V0",
    PIN_ID: "ID",
    PIN_NONE: "none",
}

IG, G, V3, V5, ID, NO = GPIO_IGNORE, PIN_GND, PIN_3V3, PIN_5V, PIN_ID, PIN_NONE


@dataclass(frozen=True)
class PinMapTable:
    """Mutually inverse GPIO->pin and pin->GPIO lookups for one family."""

    gpio_to_pin: Tuple[int, ...]
    pin_to_gpio: Tuple[int, ...]

    def pin_for(self, gpio: int) -> int:
        """Return the connector pin of ``gpio`` or 0 if it has none."""
        if gpio < 0 or gpio >= len(self.gpio_to_pin):
            return 0
        return self.gpio_to_pin[gpio]

    def gpio_for(self, pin: int) -> int:
        """Return the GPIO (or sentinel) on connector ``pin``."""
        if pin < 0 or pin >= len(self.pin_to_gpio):
            return PIN_NONE
        return self.pin_to_gpio[pin]


@dataclass(frozen=True)
class BoardFamily:
    """Boards sharing one header layout and GPIO numbering."""

    name: str
    header_pins: int
    table: PinMapTable
    max_output_gpio: int = GPIO_OUT_MAX


# fmt: off
_PI1 = PinMapTable(
    gpio_to_pin=(
    #    0   1   2   3   4   5   6   7   8   9
         3,  5,  0,  0,  7,  0,  0, 26, 24, 21,   #  0..9
        19, 23,  0,  0,  8, 10,  0, 11, 12,  0,   # 10..19
         0, 13, 15, 16, 18, 22,                   # 20..25
    ),
    pin_to_gpio=(
    #    0   1   2   3   4   5   6   7   8   9
        IG, V3, V5,  0, V5,  1,  G,  4, 14,  G,   #  0..9
        15, 17, 18, 21,  G, 22, 23, V3, 24, 10,   # 10..19
         G,  9, 25, 11,  8,  G,  7,               # 20..26
    ),
)

_PI2 = PinMapTable(
    gpio_to_pin=(
    #    0   1   2   3   4   5   6   7   8   9
         0,  0,  3,  5,  7,  0,  0, 26, 24, 21,   #  0..9
        19, 23,  0,  0,  8, 10,  0, 11, 12,  0,   # 10..19
         0, 13, 15, 16, 18, 22,  0,  0, 33, 34,   # 20..29
        35, 36,                                   # 30..31 (P5)
    ),
    pin_to_gpio=(
    #    0   1   2   3   4   5   6   7   8   9
        IG, V3, V5,  2, V5,  3,  G,  4, 14,  G,   #  0..9
        15, 17, 18, 21,  G, 22, 23, V3, 24, 10,   # 10..19
         G,  9, 25, 11,  8,  G,  7, NO, NO, NO,   # 20..29
        NO, V5, V3, 28, 29, 30, 31,  G,  G,       # 30..38 (P5 as 31..38)
    ),
)

_PI3 = PinMapTable(
    gpio_to_pin=(
    #    0   1   2   3   4   5   6   7   8   9
         0,  0,  3,  5,  7, 29, 31, 26, 24, 21,   #  0..9 (0, 1 reserved for ID)
        19, 23, 32, 33,  8, 10, 36, 11, 12, 35,   # 10..19
        38, 40, 15, 16, 18, 22, 37, 13,           # 20..27
    ),
    pin_to_gpio=(
    #    0   1   2   3   4   5   6   7   8   9
        IG, V3, V5,  2, V5,  3,  G,  4, 14,  G,   #  0..9
        15, 17, 18, 27,  G, 22, 23, V3, 24, 10,   # 10..19
         G,  9, 25, 11,  8,  G,  7, ID, ID,  5,   # 20..29
         G,  6, 12, 13,  G, 19, 16, 26, 20,  G,   # 30..39
        21,                                       # 40
    ),
)
# fmt: on

del IG, G, V3, V5, ID, NO

PI1 = BoardFamily(name="Pi1", header_pins=26, table=_PI1, max_output_gpio=25)
PI2 = BoardFamily(name="Pi2", header_pins=38, table=_PI2)
PI3 = BoardFamily(name="Pi3", header_pins=40, table=_PI3)

# board type code -> family; 0 (Zero), 3 and 4 share the 40-pin layout
FAMILIES: Dict[int, BoardFamily] = {0: PI3, 1: PI1, 2: PI2, 3: PI3, 4: PI3}
DEFAULT_BOARD = 3


def family_for(board: int) -> BoardFamily:
    """Return the family record for a board type code (unknown -> default)."""
    return FAMILIES.get(int(board), FAMILIES[DEFAULT_BOARD])


def pin_for(board: int, gpio: int) -> int:
    """Return the connector pin of ``gpio`` on ``board`` or 0."""
    return family_for(board).table.pin_for(gpio)


def gpio_for(board: int, pin: int) -> int:
    """Return the GPIO on connector ``pin`` of ``board`` or a sentinel."""
    return family_for(board).table.gpio_for(pin)


def is_gpio(value: int) -> bool:
    """True if ``value`` is a real line number, not a sentinel."""
    return GPIO_MIN <= value <= GPIO_MAX


def gpio_may_out(gpio: int) -> bool:
    """True if output to ``gpio`` is allowable (bank 0 or the ignore code)."""
    return GPIO_MIN <= gpio <= GPIO_OUT_MAX or gpio == GPIO_IGNORE


def gpio_label(gpio: int) -> str:
    """Format a GPIO number or sentinel for reports."""
    if gpio in _LABELS:
        return _LABELS[gpio]
    if not is_gpio(gpio):
        return "none"
    prefix = "GPIO" if gpio <= GPIO_OUT_MAX else "gpio"
    return f"{prefix}{gpio:02d}"


def iter_pins(board: int) -> Iterator[Tuple[int, int]]:
    """Yield ``(pin, gpio)`` for every connector pin of ``board``."""
    table = family_for(board).table
    for pin in range(1, len(table.pin_to_gpio)):
        yield pin, table.pin_to_gpio[pin]
