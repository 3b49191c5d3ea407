"""ViewerEngine - owns all client-side simulation state.

One engine instance holds the tracked customer map, the proxy overlay, the
animator, the latest snapshot and the four presentation surfaces.  Nothing
here is module-global; the application creates an engine in its lifespan and
hands it to the transport and the HTTP routers.

Message flow (all on the event loop, never interleaved mid-message):

    raw text -> decode_message -> registry.reconcile -> latest = snapshot
             -> render surfaces

Reconciliation finishes (records, proxies, animation loops) before the
snapshot becomes ``latest``, so hover queries and frame requests never see a
half-applied update.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from loguru import logger

from .animator import DEFAULT_FRAME_INTERVAL, DEFAULT_SPEED, FrameClock, MotionAnimator
from .interaction import DEFAULT_HOVER_RADIUS, HoverInfo, describe_hover, hit_test
from .layout import StoreLayout
from .proxies import ProxyLayer
from .registry import EntityRegistry
from .snapshot import Snapshot, decode_message
from .surfaces import (
    PANEL_BG,
    STORE_BG,
    SURFACE_NAMES,
    Surface,
    draw_markers,
    render_concurrency,
    render_log,
    render_stats,
    render_store,
)


class ViewerEngine:
    """Reconciles the snapshot stream into animated, renderable customers."""

    def __init__(
        self,
        layout: StoreLayout | None = None,
        speed: float = DEFAULT_SPEED,
        frame_interval: float = DEFAULT_FRAME_INTERVAL,
        hover_radius: float = DEFAULT_HOVER_RADIUS,
        clock: FrameClock | None = None,
        store_size: tuple[int, int] = (800, 600),
        panel_size: tuple[int, int] = (400, 200),
        font_path: str | None = None,
    ) -> None:
        self.layout = layout or StoreLayout()
        self.proxies = ProxyLayer()
        self.animator = MotionAnimator(
            self.layout, self.proxies,
            speed=speed, frame_interval=frame_interval, clock=clock,
        )
        self.registry = EntityRegistry(self.layout, self.animator, self.proxies)
        self.hover_radius = hover_radius
        self._latest: Snapshot | None = None

        self.surfaces: dict[str, Surface] = {
            "store": Surface("store", *store_size, background=STORE_BG, font_path=font_path),
            "stats": Surface("stats", *panel_size, background=PANEL_BG, font_path=font_path),
            "concurrency": Surface("concurrency", *panel_size, background=PANEL_BG, font_path=font_path),
            "log": Surface("log", *panel_size, background=PANEL_BG, font_path=font_path),
        }
        self._renderers: dict[str, Callable[[Surface, Snapshot | None], None]] = {
            "store": lambda s, snap: render_store(s, snap, self.layout),
            "stats": render_stats,
            "concurrency": render_concurrency,
            "log": render_log,
        }

        # Stats
        self.messages_received: int = 0
        self.snapshots_applied: int = 0
        self.messages_ignored: int = 0
        self.resets: int = 0

        self.render()

    @property
    def latest(self) -> Snapshot | None:
        return self._latest

    # -- Snapshot stream ---------------------------------------------------

    def handle_message(self, raw: str | bytes) -> bool:
        """Handle one raw transport message.

        Returns True if it was a state update.  Never raises for bad input.
        """
        self.messages_received += 1
        snapshot = decode_message(raw)
        if snapshot is None:
            self.messages_ignored += 1
            return False
        self.apply(snapshot)
        return True

    def apply(self, snapshot: Snapshot) -> None:
        """Reconcile ``snapshot``, publish it as latest, then redraw."""
        self.registry.reconcile(snapshot)
        self._latest = snapshot
        self.snapshots_applied += 1
        self.render()

    def reset(self) -> None:
        """Tear down all tracked customers before a fresh simulation run."""
        count = len(self.registry)
        self.registry.reset()
        self._latest = None
        self.resets += 1
        self.render()
        logger.info(f"Viewer reset ({count} customers torn down)")

    # -- Presentation ------------------------------------------------------

    def render(self) -> None:
        for name in SURFACE_NAMES:
            self._renderers[name](self.surfaces[name], self._latest)

    def surface(self, name: str) -> Surface:
        """Look up a surface by name.

        Raises:
            KeyError: If no surface has that name.
        """
        if name not in self.surfaces:
            raise KeyError(f"Unknown surface '{name}'")
        return self.surfaces[name]

    def compose(self, name: str) -> np.ndarray:
        """Current frame for ``name``; the store frame gets the marker overlay."""
        surface = self.surface(name)
        if name == "store":
            return draw_markers(surface.frame, self.proxies)
        return surface.frame.copy()

    def get_jpeg(self, name: str, quality: int = 80) -> bytes:
        surface = self.surface(name)
        return surface.to_jpeg(quality, frame=self.compose(name))

    # -- Interaction -------------------------------------------------------

    def hit_test(self, x: float, y: float) -> int | None:
        return hit_test((x, y), self._latest, self.hover_radius)

    def hover(self, x: float, y: float) -> HoverInfo | None:
        return describe_hover((x, y), self._latest, self.hover_radius)

    # -- Introspection -----------------------------------------------------

    def get_state(self) -> dict:
        latest = self._latest
        return {
            "tracked": sorted(self.registry.ids()),
            "tracked_count": len(self.registry),
            "animating": len(self.animator.running_ids),
            "proxies": len(self.proxies),
            "customers": [t.to_dict() for t in self.registry.get_all()],
            "latest": None if latest is None else {
                "customer_count": len(latest.records),
                "customer_categories": dict(latest.customer_categories),
                "average_purchase_count": latest.average_purchase_count,
                "store_load": latest.store_load,
                "goroutine_count": latest.goroutine_count,
                "channel_count": latest.channel_count,
            },
            "messages_received": self.messages_received,
            "snapshots_applied": self.snapshots_applied,
            "messages_ignored": self.messages_ignored,
            "resets": self.resets,
        }
