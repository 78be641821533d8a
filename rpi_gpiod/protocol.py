"""Binary command frames of the pigpiod socket interface.

Every request is four little-endian uint32 words: opcode, p1, p2 and p3, the
length of extension data (always 0 here). The response echoes the first three
words followed by a signed int32 result, negative on failure.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import FrozenSet, Iterator, Tuple

from . import status as st

REQUEST = struct.Struct("<IIII")
RESPONSE = struct.Struct("<IIIi")
FRAME_SIZE = 16

CMD_MAX = 117
U32_MASK = 0xFFFFFFFF


class Cmd(IntEnum):
    MODES = 0
    MODEG = 1
    PUD = 2
    READ = 3
    WRITE = 4
    PWM = 5
    PFS = 7
    SERVO = 8
    BR1 = 10
    BR2 = 11
    BC1 = 12
    BS1 = 14
    TICK = 16
    HWVER = 17
    PFG = 23
    PIGPV = 26
    GDC = 83
    GPW = 84
    PADS = 102
    PADG = 103


class Mode(IntEnum):
    INPUT = 0
    OUTPUT = 1
    ALT5 = 2
    ALT4 = 3
    ALT0 = 4
    ALT1 = 5
    ALT2 = 6
    ALT3 = 7


class Pud(IntEnum):
    OFF = 0
    DOWN = 1
    UP = 2
    DEFAULT = 3  # leave as is
    KEEP = 4  # leave as is


LOW = 0
HIGH = 1

# fmt: off
COMMAND_NAMES: Tuple[str, ...] = (
    "MODES", "MODEG", "PUD", "READ", "WRITE", "PWM", "PRS", "PFS", "SERVO", "WDOG",   # 0
    "BR1", "BR2", "BC1", "BC2", "BS1", "BS2", "TICK", "HWVER", "NO", "NB",            # 10
    "NP", "NC", "PRG", "PFG", "PRRG", "HELP", "PIGPV", "WVCLR", "WVAG", "WVAS",       # 20
    "bad30", "bad31", "WVBSY", "WVHLT", "WVSM", "WVSP", "WVSC", "TRIG", "PROC", "PROCD",
    "PROCR", "PROCS", "SLRO", "SLR", "SLRC", "PROCP", "MICS", "MILS", "PARSE", "WVCRE",
    "WVDEL", "WVTX", "WVTXR", "WVNEW", "I2CO", "I2CC", "I2CRD", "I2CWD", "I2CWQ", "I2CRS",
    "I2CWS", "I2CRB", "I2CWB", "I2CRW", "I2CWW", "I2CRK", "I2CWK", "I2CRI", "I2CWI", "I2CPC",
    "I2CPK", "SPIO", "SPIC", "SPIR", "SPIW", "SPIX", "SERO", "SERC", "SERRB", "SERWB",
    "SERR", "SERW", "SERDA", "GDC", "GPW", "HC", "HP", "CF1", "CF2", "BI2CC",         # 80
    "BI2CO", "BI2CZ", "I2CZ", "WVCHA", "SLRI", "CGI", "CSI", "FG", "FN", "NOIB",
    "WVTXM", "WVTAT", "PADS", "PADG", "FO", "FC", "FR", "FW", "FS", "FL",             # 100
    "SHELL", "BSPIC", "BSPIO", "BSPIX", "BSCX", "EVM", "EVT", "PROCU",                # 110
)

# results are unsigned values, never errors
UINT32_RESULT: FrozenSet[int] = frozenset({10, 11, 16, 17, 26})

# need extension data this client never sends
HAS_EXTENSION: FrozenSet[int] = frozenset({
    28, 29, 37, 38, 40, 42, 54, 57, 62, 64, 66, 67, 68, 69, 70, 71, 74, 75,
    76, 81, 86, 87, 88, 90, 91, 92, 93, 98, 104, 107, 108, 109, 110, 112,
    113, 114, 117,
})
# fmt: on


def command_name(opcode: int) -> str:
    if 0 <= opcode < len(COMMAND_NAMES):
        return COMMAND_NAMES[opcode]
    return "none"


def is_sendable(opcode: int) -> bool:
    """True if ``opcode`` exists and needs no extension data."""
    return 0 <= opcode <= CMD_MAX and opcode not in HAS_EXTENSION


def encode_request(opcode: int, p1: int = 0, p2: int = 0, p3: int = 0) -> bytes:
    return REQUEST.pack(opcode & U32_MASK, p1 & U32_MASK, p2 & U32_MASK, p3 & U32_MASK)


def decode_response(frame: bytes) -> Tuple[int, int, int, int]:
    """Return ``(opcode, p1, p2, result)`` of a 16 byte response frame."""
    if len(frame) != FRAME_SIZE:
        raise ValueError(f"response frame must be {FRAME_SIZE} bytes, got {len(frame)}")
    return RESPONSE.unpack(frame)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command; ``sent`` is False when decided locally."""

    opcode: int
    p1: int
    p2: int
    status: int
    sent: bool = True

    @property
    def failed(self) -> bool:
        if self.opcode in UINT32_RESULT:
            return False
        return self.status < 0

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def value(self) -> int:
        if self.opcode in UINT32_RESULT:
            return self.status & U32_MASK
        return self.status

    @property
    def name(self) -> str:
        return command_name(self.opcode)

    def describe(self) -> str:
        text = f"{self.name}({self.p1}, {self.p2}) -> {self.value}"
        if self.failed:
            text += f" {st.status_name(self.status)}: {st.status_text(self.status)}"
        if not self.sent:
            text += " (not sent)"
        return text

    def __iter__(self) -> Iterator[int]:
        return iter((self.status, self.value))


def local_result(opcode: int, p1: int = 0, p2: int = 0, status: int = st.OK) -> CommandResult:
    return CommandResult(opcode=int(opcode), p1=int(p1), p2=int(p2), status=int(status), sent=False)
