"""Bookkeeping of GPIO lines driven as outputs, per owner."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from .errors import ERR_ASSIGN_PIN, GpioError


class GpioClaimError(GpioError):
    """Raised when a line is already driven by another owner."""

    code = ERR_ASSIGN_PIN


@dataclass(frozen=True)
class OutputClaim:
    line: int
    owner: str


class OutputClaims:
    """Track which owner drives which GPIO line as output.

    One connection uses a private registry. Connections sharing a registry
    fail hard on collisions instead of fighting over the same line.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._drivers: Dict[int, str] = {}

    def _ensure_free(self, owner: str, line: int) -> None:
        # caller holds self._lock
        driver = self._drivers.get(line)
        if driver is not None and driver != owner:
            raise GpioClaimError(f"GPIO line {line} already claimed by {driver}")

    def check(self, owner: str, line: int) -> None:
        """Raise :class:`GpioClaimError` if ``line`` is driven by someone else."""
        with self._lock:
            self._ensure_free(owner, int(line))

    def claim(self, owner: str, line: int) -> None:
        if not owner:
            raise GpioClaimError("GPIO owner must be non-empty")
        line = int(line)
        with self._lock:
            self._ensure_free(owner, line)
            self._drivers[line] = owner

    def release(self, owner: str, line: int) -> None:
        with self._lock:
            if self._drivers.get(int(line)) == owner:
                del self._drivers[int(line)]

    def release_owner(self, owner: str) -> Set[int]:
        """Drop all claims of ``owner`` and return the lines it held."""
        with self._lock:
            held = {line for line, driver in self._drivers.items() if driver == owner}
            for line in held:
                del self._drivers[line]
        return held

    def owner_for_line(self, line: int) -> Optional[str]:
        with self._lock:
            return self._drivers.get(int(line))

    def claims_for_owner(self, owner: str) -> Set[int]:
        with self._lock:
            return {line for line, driver in self._drivers.items() if driver == owner}

    def bank_mask(self, owner: str) -> int:
        """Bit mask of the bank 0 lines ``owner`` drives."""
        return sum(1 << line for line in self.claims_for_owner(owner) if line <= 31)

    def snapshot(self) -> List[OutputClaim]:
        with self._lock:
            return [OutputClaim(line, driver) for line, driver in sorted(self._drivers.items())]
