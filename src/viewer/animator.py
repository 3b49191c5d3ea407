"""MotionAnimator - per-customer frame loop moving markers toward targets.

Every tracked customer owns exactly one pending frame timer while it is
animated.  Each frame moves the customer ``speed`` pixels along the straight
line to its target, then re-arms the timer for the next frame.  On arrival
(remaining distance below one step) the position snaps onto the target and
the target becomes the exit, unconditionally, so a customer that reaches the
exit keeps re-targeting the exit and stays put.

Scheduling goes through a frame clock with asyncio's ``call_later``
signature.  By default that is the running event loop, so all animation
steps, snapshot handling and HTTP handlers share one cooperative timeline
and never run in parallel.  ``stop()`` cancels the pending TimerHandle, so a
stopped customer is guaranteed not to step again.
"""

from __future__ import annotations

import asyncio
import math
from typing import TYPE_CHECKING, Any, Callable, Protocol

if TYPE_CHECKING:
    from .layout import StoreLayout
    from .proxies import ProxyLayer
    from .registry import TrackedEntity

DEFAULT_SPEED = 2.0  # pixels per frame
DEFAULT_FRAME_INTERVAL = 1.0 / 60.0


class FrameClock(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Any:
        ...


class MotionAnimator:
    """Drives one cancellable frame loop per tracked customer."""

    def __init__(
        self,
        layout: StoreLayout,
        proxies: ProxyLayer,
        speed: float = DEFAULT_SPEED,
        frame_interval: float = DEFAULT_FRAME_INTERVAL,
        clock: FrameClock | None = None,
    ) -> None:
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self._layout = layout
        self._proxies = proxies
        self.speed = speed
        self.frame_interval = frame_interval
        self._clock = clock
        self._running: set[int] = set()
        self.frames_stepped: int = 0

    @property
    def running_ids(self) -> set[int]:
        return set(self._running)

    def start(self, entity: TrackedEntity) -> bool:
        """Begin animating ``entity``.  No-op if it already has a live loop.

        Returns True if a new loop was started.
        """
        if entity.animation_handle is not None:
            return False
        self._schedule(entity)
        return True

    def stop(self, entity: TrackedEntity) -> None:
        """Cancel the pending frame, if any, and clear the handle."""
        handle = entity.animation_handle
        if handle is None:
            return
        handle.cancel()
        entity.animation_handle = None
        self._running.discard(entity.id)

    def step(self, entity: TrackedEntity) -> None:
        """Advance ``entity`` by one frame and move its proxy."""
        cx, cy = entity.current_position
        tx, ty = entity.target_position
        dx = tx - cx
        dy = ty - cy
        distance = math.hypot(dx, dy)

        if distance < self.speed:
            entity.current_position = (tx, ty)
            entity.target_position = self._layout.exit_position
        else:
            entity.current_position = (
                cx + dx / distance * self.speed,
                cy + dy / distance * self.speed,
            )

        # Proxy may already be gone if retirement raced a pending frame.
        self._proxies.move(entity.id, entity.current_position)

    # -- Internal ----------------------------------------------------------

    def _get_clock(self) -> FrameClock:
        if self._clock is None:
            self._clock = asyncio.get_running_loop()
        return self._clock

    def _schedule(self, entity: TrackedEntity) -> None:
        entity.animation_handle = self._get_clock().call_later(
            self.frame_interval, self._on_frame, entity,
        )
        self._running.add(entity.id)

    def _on_frame(self, entity: TrackedEntity) -> None:
        entity.animation_handle = None
        self._running.discard(entity.id)
        self.step(entity)
        self.frames_stepped += 1
        self._schedule(entity)
