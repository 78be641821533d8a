"""Single hardware owner lock on a well-known file.

The lock is taken with ``flock(2)``, the primitive the C ``justLock`` helper
and the shell's ``flock(1)`` use. Cooperating programs must use flock too;
POSIX record locks (``fcntl(F_SETLK)``) do not conflict with it.
"""

from __future__ import annotations

import errno
import fcntl
import logging
import os
from typing import Optional

from .config import DEFAULT_LOCK_PATH
from .errors import AlreadyLockedError, LockFailedError, NoLockFileError

LOGGER = logging.getLogger(__name__)


class ProcessLock:
    """Exclusive, non-blocking lock on ``path``; the OS frees it on process death."""

    def __init__(self, path: str = DEFAULT_LOCK_PATH, *, create: bool = False) -> None:
        self.path = path
        self.create = create
        self._fd: Optional[int] = None

    def __repr__(self) -> str:
        return f"<ProcessLock {self.path} locked={self.locked}>"

    def __enter__(self) -> "ProcessLock":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @property
    def locked(self) -> bool:
        return self._fd is not None

    def acquire(self) -> "ProcessLock":
        if self._fd is not None:
            return self
        flags = os.O_RDONLY | (os.O_CREAT if self.create else 0)
        try:
            fd = os.open(self.path, flags, 0o664)
        except OSError as exc:
            raise NoLockFileError(f"Can't open lock file {self.path}: {exc}") from exc
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as exc:
            os.close(fd)
            if exc.errno in (errno.EWOULDBLOCK, errno.EAGAIN):
                raise AlreadyLockedError(f"Lock file {self.path} is held by another process") from exc
            raise LockFailedError(f"Can't lock {self.path}: {exc}") from exc
        self._fd = fd
        LOGGER.info("Acquired lock %s", self.path)
        return self

    def release(self) -> None:
        fd, self._fd = self._fd, None
        if fd is None:
            return
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        except OSError as exc:
            LOGGER.warning("Unlocking %s failed: %s", self.path, exc)
        finally:
            os.close(fd)
        LOGGER.info("Released lock %s", self.path)


def acquire(path: str = DEFAULT_LOCK_PATH, create: bool = False) -> ProcessLock:
    """Acquire the lock on ``path`` or raise a :class:`~rpi_gpiod.errors.LockError`."""
    return ProcessLock(path, create=create).acquire()
