"""Synchronous socket client for the pigpiod GPIO daemon.

One :class:`ProtocolConnection` carries strictly ordered request/response
pairs; a lock keeps a single exchange in flight. Negative daemon statuses are
returned in :class:`~rpi_gpiod.protocol.CommandResult` objects, never raised.
Only socket failures raise, as :class:`DaemonConnectionError`.
"""

from __future__ import annotations

import itertools
import logging
import socket
import threading
from typing import Dict, Iterable, List, Optional

from . import status as st
from .board import BoardDescriptor
from .errors import DaemonConnectionError, DaemonTimeoutError
from .output_claims import OutputClaims
from .pinmap import GPIO_IGNORE, GPIO_MAX, GPIO_OUT_MAX
from .protocol import (
    FRAME_SIZE,
    U32_MASK,
    Cmd,
    CommandResult,
    Mode,
    Pud,
    decode_response,
    encode_request,
    is_sendable,
    local_result,
)

LOGGER = logging.getLogger(__name__)

PAD_MAX = 2
PAD_MA_MIN = 1
PAD_MA_MAX = 16
PWM_DUTY_MAX = 40000
SERVO_MIN = 500
SERVO_MAX = 2500

_owner_ids = itertools.count(1)


def connect(
    descriptor: BoardDescriptor,
    *,
    logger: Optional[logging.Logger] = None,
    claims: Optional[OutputClaims] = None,
    owner: Optional[str] = None,
) -> "ProtocolConnection":
    """Open a connection to the daemon named by ``descriptor``.

    The descriptor's timeout bounds the connect and every later read.
    """
    log = logger or LOGGER
    address = (descriptor.host, descriptor.port)
    try:
        sock = socket.create_connection(address, timeout=descriptor.timeout_s)
    except socket.timeout as exc:
        raise DaemonTimeoutError(f"Timeout connecting pigpiod at {descriptor.host}:{descriptor.port}") from exc
    except OSError as exc:
        raise DaemonConnectionError(f"Can't connect pigpiod at {descriptor.host}:{descriptor.port}: {exc}") from exc
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    log.info("Connected to pigpiod at %s:%d", descriptor.host, descriptor.port)
    return ProtocolConnection(sock, descriptor, logger=logger, claims=claims, owner=owner)


class ProtocolConnection:
    """An open daemon connection plus the output lines it claimed."""

    def __init__(
        self,
        sock: socket.socket,
        descriptor: BoardDescriptor,
        *,
        logger: Optional[logging.Logger] = None,
        claims: Optional[OutputClaims] = None,
        owner: Optional[str] = None,
    ) -> None:
        self.descriptor = descriptor
        self._sock: Optional[socket.socket] = sock
        self._logger = logger or LOGGER
        self._claims = claims if claims is not None else OutputClaims()
        self.owner = owner or f"{descriptor.host}:{descriptor.port}#{next(_owner_ids)}"
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        state = "open" if self.connected else "closed"
        return f"<ProtocolConnection {self.owner} {state} outputs={self.outputs}>"

    def __enter__(self) -> "ProtocolConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        return self._sock is not None

    @property
    def claims(self) -> OutputClaims:
        return self._claims

    @property
    def outputs(self) -> List[int]:
        """GPIO lines this connection currently drives as outputs."""
        return sorted(self._claims.claims_for_owner(self.owner))

    @property
    def output_mask(self) -> int:
        return self._claims.bank_mask(self.owner)

    # -- raw exchange -------------------------------------------------------

    def send_command(self, opcode: int, p1: int = 0, p2: int = 0, p3: int = 0) -> CommandResult:
        """Send one command frame and return the daemon's answer."""
        if not is_sendable(opcode) or p3 != 0:
            return local_result(opcode, p1, p2, st.CMD_BAD)
        request = encode_request(opcode, p1, p2, p3)
        with self._lock:
            sock = self._sock
            if sock is None:
                raise DaemonConnectionError(f"Not connected to pigpiod ({self.owner})")
            # after any failure the stream is out of step; drop the socket
            try:
                sock.sendall(request)
                frame = self._recv_frame(sock)
            except socket.timeout as exc:
                self._drop_socket(sock)
                raise DaemonTimeoutError(
                    f"Timeout waiting for pigpiod answer to command {int(opcode)}; effect unknown"
                ) from exc
            except OSError as exc:
                self._drop_socket(sock)
                raise DaemonConnectionError(f"Socket failure on command {int(opcode)}: {exc}") from exc
            echo_cmd, echo_p1, _, result = decode_response(frame)
            if echo_cmd != opcode & U32_MASK or echo_p1 != p1 & U32_MASK:
                self._drop_socket(sock)
                raise DaemonConnectionError(
                    f"pigpiod answered command {echo_cmd}({echo_p1}) to {int(opcode)}({int(p1)})"
                )
        return CommandResult(opcode=int(opcode), p1=int(p1), p2=int(p2), status=result)

    def _drop_socket(self, sock: socket.socket) -> None:
        self._sock = None
        try:
            sock.close()
        except OSError as exc:
            self._logger.debug("Ignoring error closing pigpiod socket: %s", exc)
        self._logger.warning("Dropped pigpiod connection %s:%d", self.descriptor.host, self.descriptor.port)

    @staticmethod
    def _recv_frame(sock: socket.socket) -> bytes:
        chunks = []
        remaining = FRAME_SIZE
        while remaining > 0:
            chunk = sock.recv(remaining)
            if not chunk:
                got = FRAME_SIZE - remaining
                raise DaemonConnectionError(
                    f"pigpiod closed the socket after {got} of {FRAME_SIZE} bytes "
                    f"({st.status_name(st.SOCK_READ_LEN)})"
                )
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _claim_after(self, result: CommandResult, gpio: int) -> CommandResult:
        if result.ok:
            self._claims.claim(self.owner, gpio)
        return result

    # -- modes and levels ---------------------------------------------------

    def set_mode(self, gpio: int, mode: int) -> CommandResult:
        if gpio == GPIO_IGNORE:
            return local_result(Cmd.MODES, gpio, mode)
        if gpio < 0 or gpio > GPIO_MAX:
            return local_result(Cmd.MODES, gpio, mode, st.BAD_GPIO)
        if mode < 0 or mode > 7:
            return local_result(Cmd.MODES, gpio, mode, st.BAD_MODE)
        if mode == Mode.OUTPUT:
            self._claims.check(self.owner, gpio)
            return self._claim_after(self.send_command(Cmd.MODES, gpio, mode), gpio)
        result = self.send_command(Cmd.MODES, gpio, mode)
        if result.ok and mode == Mode.INPUT:
            self._claims.release(self.owner, gpio)
        return result

    def get_mode(self, gpio: int) -> CommandResult:
        if gpio == GPIO_IGNORE:
            return local_result(Cmd.MODEG, gpio)
        if gpio < 0 or gpio > GPIO_MAX:
            return local_result(Cmd.MODEG, gpio, 0, st.BAD_GPIO)
        return self.send_command(Cmd.MODEG, gpio)

    def set_output(self, gpio: int, level: int) -> CommandResult:
        level = int(level)
        if gpio == GPIO_IGNORE:
            return local_result(Cmd.WRITE, gpio, level)
        if gpio < 0 or gpio > GPIO_OUT_MAX:
            return local_result(Cmd.WRITE, gpio, level, st.BAD_USER_GPIO)
        if level not in (0, 1):
            return local_result(Cmd.WRITE, gpio, level, st.BAD_LEVEL)
        self._claims.check(self.owner, gpio)
        return self._claim_after(self.send_command(Cmd.WRITE, gpio, level), gpio)

    def read(self, gpio: int) -> CommandResult:
        """Read the level of ``gpio``; the unwired pin reads low."""
        if gpio == GPIO_IGNORE:
            return local_result(Cmd.READ, gpio)
        if gpio < 0 or gpio > GPIO_MAX:
            return local_result(Cmd.READ, gpio, 0, st.BAD_GPIO)
        return self.send_command(Cmd.READ, gpio)

    def set_pull_resistor(self, gpio: int, pud: int) -> CommandResult:
        if pud < Pud.OFF or pud > Pud.KEEP:
            return local_result(Cmd.PUD, gpio, pud, st.BAD_PUD)
        if gpio == GPIO_IGNORE:
            return local_result(Cmd.PUD, gpio, pud)
        if gpio < 0 or gpio > GPIO_OUT_MAX:
            return local_result(Cmd.PUD, gpio, pud, st.BAD_USER_GPIO)
        if pud > Pud.UP:
            return local_result(Cmd.PUD, gpio, pud)
        return self.send_command(Cmd.PUD, gpio, pud)

    # -- pads ---------------------------------------------------------------

    def set_drive_strength(self, pad: int, milliamps: int) -> CommandResult:
        if pad < 0 or pad > PAD_MAX:
            return local_result(Cmd.PADS, pad, milliamps, st.BAD_PAD)
        if milliamps < PAD_MA_MIN or milliamps > PAD_MA_MAX:
            return local_result(Cmd.PADS, pad, milliamps, st.BAD_STRENGTH)
        return self.send_command(Cmd.PADS, pad, milliamps)

    def get_drive_strength(self, pad: int) -> CommandResult:
        if pad < 0 or pad > PAD_MAX:
            return local_result(Cmd.PADG, pad, 0, st.BAD_PAD)
        return self.send_command(Cmd.PADG, pad)

    # -- PWM and servo ------------------------------------------------------

    def _user_gpio(self, opcode: int, gpio: int, value: int = 0) -> Optional[CommandResult]:
        if gpio == GPIO_IGNORE:
            return local_result(opcode, gpio, value)
        if gpio < 0 or gpio > GPIO_OUT_MAX:
            return local_result(opcode, gpio, value, st.BAD_USER_GPIO)
        return None

    def set_pwm_duty(self, gpio: int, duty: int) -> CommandResult:
        early = self._user_gpio(Cmd.PWM, gpio, duty)
        if early is not None:
            return early
        if duty < 0 or duty > PWM_DUTY_MAX:
            return local_result(Cmd.PWM, gpio, duty, st.BAD_DUTYCYCLE)
        self._claims.check(self.owner, gpio)
        return self._claim_after(self.send_command(Cmd.PWM, gpio, duty), gpio)

    def get_pwm_duty(self, gpio: int) -> CommandResult:
        return self._user_gpio(Cmd.GDC, gpio) or self.send_command(Cmd.GDC, gpio)

    def set_pwm_frequency(self, gpio: int, hertz: int) -> CommandResult:
        early = self._user_gpio(Cmd.PFS, gpio, hertz)
        if early is not None:
            return early
        return self.send_command(Cmd.PFS, gpio, hertz)

    def get_pwm_frequency(self, gpio: int) -> CommandResult:
        return self._user_gpio(Cmd.PFG, gpio) or self.send_command(Cmd.PFG, gpio)

    def set_servo_pulse(self, gpio: int, width_us: int) -> CommandResult:
        """Set the servo pulse width in microseconds; 0 switches pulses off."""
        early = self._user_gpio(Cmd.SERVO, gpio, width_us)
        if early is not None:
            return early
        if width_us != 0 and (width_us < SERVO_MIN or width_us > SERVO_MAX):
            return local_result(Cmd.SERVO, gpio, width_us, st.BAD_PULSEWIDTH)
        self._claims.check(self.owner, gpio)
        return self._claim_after(self.send_command(Cmd.SERVO, gpio, width_us), gpio)

    def get_servo_pulse(self, gpio: int) -> CommandResult:
        return self._user_gpio(Cmd.GPW, gpio) or self.send_command(Cmd.GPW, gpio)

    # -- banks and info -----------------------------------------------------

    def read_bank(self, bank: int = 1) -> CommandResult:
        """Read the levels of bank 1 (GPIO 0..31) or bank 2 (32..53)."""
        return self.send_command(Cmd.BR2 if bank == 2 else Cmd.BR1)

    def _bank_write(self, opcode: Cmd, mask: int) -> CommandResult:
        mask &= U32_MASK
        if mask == 0:
            return local_result(opcode, 0)
        lines = [line for line in range(GPIO_OUT_MAX + 1) if mask & (1 << line)]
        for line in lines:
            self._claims.check(self.owner, line)
        result = self.send_command(opcode, mask)
        if result.ok:
            for line in lines:
                self._claims.claim(self.owner, line)
        return result

    def set_bank_bits(self, mask: int) -> CommandResult:
        """Drive the bank 0 lines in ``mask`` high."""
        return self._bank_write(Cmd.BS1, mask)

    def clear_bank_bits(self, mask: int) -> CommandResult:
        """Drive the bank 0 lines in ``mask`` low."""
        return self._bank_write(Cmd.BC1, mask)

    def hardware_revision(self) -> CommandResult:
        return self.send_command(Cmd.HWVER)

    def daemon_version(self) -> CommandResult:
        return self.send_command(Cmd.PIGPV)

    def tick(self) -> CommandResult:
        """Daemon microsecond tick, wrapping at 2**32."""
        return self.send_command(Cmd.TICK)

    # -- initialisation helpers ---------------------------------------------

    def init_as_input(self, gpio: int) -> CommandResult:
        return self.set_mode(gpio, Mode.INPUT)

    def _init_pulled_input(self, gpio: int, pud: int) -> CommandResult:
        result = self.init_as_input(gpio)
        if result.failed:
            return result
        return self.set_pull_resistor(gpio, pud)

    def init_as_pulled_up_input(self, gpio: int) -> CommandResult:
        """Input for a switch or open collector to ground."""
        return self._init_pulled_input(gpio, Pud.UP)

    def init_as_pulled_down_input(self, gpio: int) -> CommandResult:
        return self._init_pulled_input(gpio, Pud.DOWN)

    def init_as_output(self, gpio: int, level: Optional[int] = None) -> CommandResult:
        """Make ``gpio`` an output and optionally set its initial level."""
        if gpio != GPIO_IGNORE and (gpio < 0 or gpio > GPIO_OUT_MAX):
            return local_result(Cmd.MODES, gpio, Mode.OUTPUT, st.BAD_USER_GPIO)
        result = self.set_mode(gpio, Mode.OUTPUT)
        if result.failed or level is None:
            return result
        return self.set_output(gpio, level)

    def init_as_inputs(self, gpios: Iterable[int]) -> List[CommandResult]:
        return [self.init_as_input(gpio) for gpio in gpios]

    def init_as_outputs(self, gpios: Iterable[int]) -> List[CommandResult]:
        return [self.init_as_output(gpio) for gpio in gpios]

    # -- logging ------------------------------------------------------------

    def log_command(self, result: CommandResult) -> CommandResult:
        if result.failed:
            self._logger.warning("%s", result.describe())
        else:
            self._logger.info("%s", result.describe())
        return result

    def log_if_bad(self, result: CommandResult) -> CommandResult:
        if result.failed:
            self._logger.warning("%s", result.describe())
        return result

    # -- shutdown -----------------------------------------------------------

    def release_outputs(self) -> Dict[int, CommandResult]:
        """Switch every claimed output back to input and forget the claims.

        The claims are cleared even when a command fails. A socket failure
        is logged and re-raised after clearing.
        """
        results: Dict[int, CommandResult] = {}
        lines = self.outputs
        try:
            for line in lines:
                result = self.send_command(Cmd.MODES, line, Mode.INPUT)
                results[line] = result
                self.log_if_bad(result)
                if result.ok:
                    self._logger.debug("Released GPIO%02d to input", line)
        except DaemonConnectionError:
            self._logger.error("Connection lost while releasing outputs %s", lines)
            raise
        finally:
            self._claims.release_owner(self.owner)
        return results

    def disconnect(self) -> None:
        with self._lock:
            sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            sock.close()
        except OSError as exc:
            self._logger.debug("Ignoring error closing pigpiod socket: %s", exc)
        self._logger.info("Disconnected from pigpiod at %s:%d", self.descriptor.host, self.descriptor.port)

    def close(self) -> None:
        """Release outputs, then disconnect."""
        try:
            if self.connected:
                self.release_outputs()
            else:
                self._claims.release_owner(self.owner)
        finally:
            self.disconnect()
