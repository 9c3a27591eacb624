"""Millisecond clocks used for hold-to-fire and explosion timing."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_millis(self) -> int: ...


class SystemClock:
    """Wall clock backed by ``time.monotonic``."""

    def now_millis(self) -> int:
        return int(time.monotonic() * 1000)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: int = 0) -> None:
        self._now = start

    def now_millis(self) -> int:
        return self._now

    def advance(self, millis: int) -> int:
        if millis < 0:
            raise ValueError("cannot move a clock backwards")
        self._now += millis
        return self._now


__all__ = ["Clock", "ManualClock", "SystemClock"]
