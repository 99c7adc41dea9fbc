"""
Tick sources for the staking engine.

The engine never reads wall-clock time. The host supplies a monotonically
non-decreasing integer tick (a ledger sequence number) per call.
"""

from abc import ABC, abstractmethod
from typing import Callable

from ..constants import MAX_TICK


class Clock(ABC):
    """Host-supplied tick source."""

    @abstractmethod
    def now(self) -> int:
        """Current tick."""


class LedgerClock(Clock):
    """Manually advanced tick counter."""

    def __init__(self, start: int = 0):
        if start < 0 or start > MAX_TICK:
            raise ValueError(f"Tick {start} out of range")
        self._tick = start

    def now(self) -> int:
        return self._tick

    def advance(self, by: int = 1) -> int:
        if by < 0:
            raise ValueError("Ticks never go backwards")
        return self.set(self._tick + by)

    def set(self, tick: int) -> int:
        if tick < self._tick:
            raise ValueError(f"Tick {tick} is before current tick {self._tick}")
        if tick > MAX_TICK:
            raise ValueError(f"Tick {tick} out of range")
        self._tick = tick
        return self._tick


class HostClock(Clock):
    """Reads the tick from a host callback, rejecting regressions."""

    def __init__(self, source: Callable[[], int]):
        self._source = source
        self._last = 0

    def now(self) -> int:
        tick = int(self._source())
        if tick < self._last:
            raise ValueError(f"Host tick went backwards: {tick} < {self._last}")
        if tick > MAX_TICK:
            raise ValueError(f"Tick {tick} out of range")
        self._last = tick
        return tick
