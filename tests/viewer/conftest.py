"""Shared fixtures for viewer tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest


class ManualHandle:
    """Stand-in for asyncio.TimerHandle."""

    def __init__(self, callback: Callable[..., Any], args: tuple) -> None:
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualClock:
    """Frame clock advanced explicitly by tests.

    ``tick()`` fires every callback scheduled before the tick started, which
    is exactly one display frame for each animated customer.
    """

    def __init__(self) -> None:
        self._scheduled: list[ManualHandle] = []
        self.delays: list[float] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(callback, args)
        self._scheduled.append(handle)
        self.delays.append(delay)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._scheduled if not h.cancelled())

    def tick(self, frames: int = 1) -> None:
        for _ in range(frames):
            due, self._scheduled = self._scheduled, []
            for handle in due:
                if not handle.cancelled():
                    handle.callback(*handle.args)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()
