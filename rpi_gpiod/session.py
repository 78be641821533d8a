"""Ordered startup and shutdown of lock, daemon connection and watchdog."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .board import BoardDescriptor
from .client import ProtocolConnection, connect
from .config import DEFAULT_LOCK_PATH, DEFAULT_WATCHDOG
from .errors import GpioError, WatchdogError
from .lockfile import ProcessLock
from .watchdog import CloseStatus, Watchdog

LOGGER = logging.getLogger(__name__)


class GpioSession:
    """Own the GPIO hardware for the lifetime of one application run.

    ``start()`` takes the lock, connects and arms the watchdog in that order.
    ``stop()`` undoes it in reverse: outputs released, socket closed, watchdog
    disarmed, lock released. Every step of ``stop()`` runs even when an
    earlier one fails.
    """

    def __init__(
        self,
        descriptor: BoardDescriptor,
        *,
        lock_path: str = DEFAULT_LOCK_PATH,
        use_lock: bool = True,
        lock_create: bool = False,
        watchdog_device: str = DEFAULT_WATCHDOG,
        use_watchdog: bool = False,
        nowayout_path: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        connector: Callable[..., ProtocolConnection] = connect,
    ) -> None:
        self.descriptor = descriptor
        self._logger = logger or LOGGER
        self._connector = connector
        self.lock: Optional[ProcessLock] = ProcessLock(lock_path, create=lock_create) if use_lock else None
        self.watchdog: Optional[Watchdog] = (
            Watchdog(watchdog_device, nowayout_path=nowayout_path, logger=self._logger) if use_watchdog else None
        )
        self._connection: Optional[ProtocolConnection] = None
        self.watchdog_status: Optional[CloseStatus] = None
        self._started = False

    def __enter__(self) -> "GpioSession":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def connection(self) -> ProtocolConnection:
        if self._connection is None:
            raise GpioError("GPIO session is not started")
        return self._connection

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> "GpioSession":
        if self._started:
            return self
        if self.lock is not None:
            self.lock.acquire()
        try:
            self._connection = self._connector(self.descriptor, logger=self._logger)
        except Exception:
            if self.lock is not None:
                self.lock.release()
            raise
        if self.watchdog is not None:
            try:
                self.watchdog.open(self.lock)
            except WatchdogError as exc:
                self._logger.warning("Running without watchdog: %s (%s)", exc, exc.text)
        self._started = True
        return self

    def gpio(self, label: str, pin: int, *, allow_unwired: bool = False) -> int:
        """Map connector ``pin`` on the connected board to an output-capable GPIO."""
        return self.connection.descriptor.gpio_for_pin_checked(label, pin, allow_unwired=allow_unwired)

    def trigger_watchdog(self) -> bool:
        if self.watchdog is None or not self.watchdog.is_open:
            return False
        try:
            self.watchdog.trigger()
        except WatchdogError as exc:
            self._logger.warning("%s", exc)
            return False
        return True

    def stop(self) -> None:
        connection, self._connection = self._connection, None
        self._started = False
        try:
            if connection is not None and connection.connected:
                connection.release_outputs()
        finally:
            try:
                if connection is not None:
                    connection.disconnect()
            finally:
                try:
                    self._close_watchdog()
                finally:
                    if self.lock is not None:
                        self.lock.release()

    def _close_watchdog(self) -> None:
        if self.watchdog is None or not self.watchdog.is_open:
            return
        try:
            self.watchdog_status = self.watchdog.close()
        except WatchdogError as exc:
            self._logger.warning("%s (%s)", exc, exc.text)
