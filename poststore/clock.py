"""
Injectable Millisecond Clock
============================

Every timestamp the store assigns is read through a clock object so that
tests can pin time.

MODES:
- LIVE: reads wall-clock time in milliseconds since epoch
- REPLAY: returns a pre-recorded tick sequence, then raises ClockExhausted

Timestamps are non-authoritative. Nothing in the store relies on them being
monotonic; ids carry ordering.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List
import time


class ClockExhausted(Exception):
    """Raised when a replay clock runs out of ticks."""
    pass


def now_ms() -> int:
    """Wall-clock time in whole milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


@dataclass
class Clock:
    """Millisecond clock for entry timestamps."""
    _ticks: List[int] = field(default_factory=list)
    _current_index: int = 0
    _is_live: bool = True

    def now(self) -> int:
        if self._is_live:
            return now_ms()
        if self._current_index >= len(self._ticks):
            raise ClockExhausted(
                f"Replay clock exhausted at index {self._current_index}. "
                f"Recorded run had {len(self._ticks)} ticks."
            )
        tick = self._ticks[self._current_index]
        self._current_index += 1
        return tick

    @classmethod
    def live(cls) -> Clock:
        return cls(_is_live=True)

    @classmethod
    def replay(cls, ticks: List[int]) -> Clock:
        """Create a clock that returns `ticks` in order."""
        return cls(_ticks=list(ticks), _current_index=0, _is_live=False)
