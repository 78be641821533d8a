"""Hardware watchdog supervision through the Linux watchdog device.

Every write re-arms the timer. Writing the magic character ``V`` right before
closing disarms it, unless the driver was built with ``nowayout``; such a
watchdog keeps counting after close and resets the board.
"""

from __future__ import annotations

import enum
import logging
import os
from typing import Optional

from .config import DEFAULT_WATCHDOG
from .errors import NoGpioLockError, WatchdogCloseError, WatchdogOpenError, WatchdogTriggerError
from .lockfile import ProcessLock

LOGGER = logging.getLogger(__name__)

TRIGGER = b"X"
MAGIC_CLOSE = b"V"


class CloseStatus(enum.Enum):
    DISARMED = "disarmed"
    UNVERIFIED = "unverified"  # nowayout setting unknown
    MAY_STILL_RESET = "may still reset"
    NOT_OPEN = "not open"


def nowayout_path_for(device: str) -> str:
    name = os.path.basename(device)
    # the legacy /dev/watchdog node is the first device
    if name == "watchdog":
        name = "watchdog0"
    return os.path.join("/sys/class/watchdog", name, "nowayout")


class Watchdog:
    def __init__(
        self,
        device: str = DEFAULT_WATCHDOG,
        *,
        nowayout_path: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.device = device
        self.nowayout_path = nowayout_path or nowayout_path_for(device)
        self._logger = logger or LOGGER
        self._fd: Optional[int] = None

    def __repr__(self) -> str:
        return f"<Watchdog {self.device} open={self.is_open}>"

    @property
    def is_open(self) -> bool:
        return self._fd is not None

    def open(self, lock: Optional[ProcessLock] = None) -> "Watchdog":
        """Open and thereby arm the watchdog.

        With ``lock`` given the caller must hold it; only the hardware owner
        may arm the timer.
        """
        if self._fd is not None:
            return self
        if lock is not None and not lock.locked:
            raise NoGpioLockError(f"Opening {self.device} requires the GPIO lock {lock.path}")
        try:
            self._fd = os.open(self.device, os.O_WRONLY)
        except OSError as exc:
            raise WatchdogOpenError(f"Can't open watchdog {self.device}: {exc}") from exc
        self._logger.info("Watchdog %s opened", self.device)
        return self

    def trigger(self) -> None:
        if self._fd is None:
            raise WatchdogTriggerError(f"Watchdog {self.device} is not open")
        try:
            os.write(self._fd, TRIGGER)
        except OSError as exc:
            raise WatchdogTriggerError(f"Can't trigger watchdog {self.device}: {exc}") from exc

    def nowayout(self) -> Optional[bool]:
        """Return the driver's nowayout flag, or None if it can't be read."""
        try:
            with open(self.nowayout_path, "r", encoding="ascii") as handle:
                text = handle.read().strip()
        except OSError:
            return None
        if text not in ("0", "1"):
            return None
        return text == "1"

    def close(self) -> CloseStatus:
        """Disarm with the magic character and close the device."""
        fd, self._fd = self._fd, None
        if fd is None:
            return CloseStatus.NOT_OPEN
        try:
            os.write(fd, MAGIC_CLOSE)
        except OSError as exc:
            raise WatchdogCloseError(f"Can't disarm watchdog {self.device}: {exc}") from exc
        finally:
            try:
                os.close(fd)
            except OSError as exc:
                self._logger.warning("Closing watchdog %s failed: %s", self.device, exc)

        flag = self.nowayout()
        if flag is None:
            status = CloseStatus.UNVERIFIED
            self._logger.info("Watchdog %s closed, nowayout unknown", self.device)
        elif flag:
            status = CloseStatus.MAY_STILL_RESET
            self._logger.warning("Watchdog %s has nowayout set; the board may still reset", self.device)
        else:
            status = CloseStatus.DISARMED
            self._logger.info("Watchdog %s disarmed", self.device)
        return status
