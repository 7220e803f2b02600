"""
Clock Tests
===========

Live and replay modes of the injectable millisecond clock.
"""

import time

import pytest

from poststore.clock import Clock, ClockExhausted


class TestClock:

    def test_live_returns_epoch_millis(self):
        before = int(time.time() * 1000)
        value = Clock.live().now()
        after = int(time.time() * 1000)
        assert isinstance(value, int)
        assert before - 1 <= value <= after + 1

    def test_replay_returns_ticks_in_order(self):
        clock = Clock.replay([5, 3, 9])
        assert [clock.now(), clock.now(), clock.now()] == [5, 3, 9]

    def test_replay_exhaustion(self):
        clock = Clock.replay([1])
        clock.now()
        with pytest.raises(ClockExhausted, match="1 ticks"):
            clock.now()

    def test_replay_copies_ticks(self):
        ticks = [1, 2]
        clock = Clock.replay(ticks)
        ticks.clear()
        assert clock.now() == 1
