"""Error taxonomy and process exit codes.

Each exception carries the exit code an application should terminate with
when the error is fatal to startup. The codes are shared with the shell and
C tools that use the same lock file; do not renumber them.
"""

from __future__ import annotations

from typing import Dict, Optional

EXIT_OK = 0
EXIT_FAILURE = 1
ERR_CONFIG = 78
ERR_PIGPIOD_CON = 85
ERR_ASSIGN_PIN = 86
ERR_NO_LOCK_PROC = 96
ERR_NO_LOCK_FILE = 97  # also the exit value of justLock
ERR_NOT_LOCKED = 98  # also the exit value of justLock
ERR_NO_GPIO_LOCK = 99
ERR_OPEN_WDOG = 100
ERR_CLOSE_WDOG = 101

ERROR_TEXT: Dict[int, str] = {
    EXIT_OK: "",
    ERR_CONFIG: "bad configuration",
    ERR_PIGPIOD_CON: "can't connect pigpioD",
    ERR_ASSIGN_PIN: "no IO pin",
    ERR_NO_LOCK_PROC: "no lock process",
    ERR_NO_LOCK_FILE: "no lock file",
    ERR_NOT_LOCKED: "can't lock the lock file",
    ERR_NO_GPIO_LOCK: "don't has the GPIO lock",
    ERR_OPEN_WDOG: "can't open watchdog",
    ERR_CLOSE_WDOG: "can't close watchdog",
}


def error_text(code: int) -> str:
    """Return the stable description of an exit/error code."""
    return ERROR_TEXT.get(int(code), f"error {int(code)}")


class GpioError(RuntimeError):
    """Base class for all errors raised by this package."""

    code = EXIT_FAILURE

    @property
    def text(self) -> str:
        return error_text(self.code)


class ConfigError(GpioError, ValueError):
    """Raised when a configuration file or value is unusable."""

    code = ERR_CONFIG


class InvalidPinError(GpioError, ValueError):
    """Raised when a connector pin does not carry a usable GPIO line."""

    code = ERR_ASSIGN_PIN

    def __init__(self, label: str, pin: int, gpio: Optional[int] = None, reason: str = "") -> None:
        self.label = label
        self.pin = pin
        self.gpio = gpio
        self.reason = reason
        detail = f" = {reason}" if reason else ""
        super().__init__(f"pin {pin} for {label}{detail}")


class DaemonConnectionError(GpioError, ConnectionError):
    """Raised when the GPIO daemon cannot be reached or the socket fails."""

    code = ERR_PIGPIOD_CON


class DaemonTimeoutError(DaemonConnectionError, TimeoutError):
    """Connect or read exceeded the descriptor timeout; command effect unknown."""


class LockError(GpioError):
    """Base class for lock file errors."""


class LockFailedError(LockError):
    code = ERR_NO_LOCK_PROC


class NoLockFileError(LockError):
    code = ERR_NO_LOCK_FILE


class AlreadyLockedError(LockError):
    code = ERR_NOT_LOCKED


class WatchdogError(GpioError):
    """Base class for watchdog errors; applications may run without one."""

    code = ERR_OPEN_WDOG


class NoGpioLockError(WatchdogError):
    code = ERR_NO_GPIO_LOCK


class WatchdogOpenError(WatchdogError):
    code = ERR_OPEN_WDOG


class WatchdogTriggerError(WatchdogError):
    code = ERR_OPEN_WDOG


class WatchdogCloseError(WatchdogError):
    code = ERR_CLOSE_WDOG
