"""Presentation surfaces - fixed-size BGR frames redrawn from each snapshot.

Four independent surfaces:

  - store        (800x600) department zones, exit, customer markers
  - stats        (400x200) active customers, per-category counts, averages
  - concurrency  (400x200) goroutine / channel counts reported by the server
  - log          (400x200) last 10 technical log lines

Every render function clears its surface, redraws the backdrop, then draws
the snapshot.  None of them keep state between calls.  Coordinates are the
simulation's scene coordinates; no world-to-pixel transform is applied.

Text uses OpenCV's Hershey font by default, which only covers ASCII.  When
a TrueType font path is configured the surface draws text through Pillow
instead, so Cyrillic department names and log lines render correctly.

Color conventions (BGR):
  - STORE_BG:     (240, 240, 240)  -- #f0f0f0
  - PANEL_BG:     (255, 255, 255)
  - ZONE_FILL:    (211, 211, 211)  -- #d3d3d3
  - CUSTOMER_RED: (0, 0, 255)
  - EXIT_GREEN:   (80, 160, 40)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFont

if TYPE_CHECKING:
    from .layout import StoreLayout
    from .proxies import MarkerProxy
    from .snapshot import Snapshot

# -- BGR color constants ---------------------------------------------------

STORE_BG = (240, 240, 240)
PANEL_BG = (255, 255, 255)
ZONE_FILL = (211, 211, 211)
BLACK = (0, 0, 0)
CUSTOMER_RED = (0, 0, 255)
EXIT_GREEN = (80, 160, 40)

LOG_TAIL = 10
MARKER_RADIUS = 10

SURFACE_NAMES = ("store", "stats", "concurrency", "log")


class Surface:
    """A fixed-size drawing target backed by a BGR uint8 numpy frame."""

    def __init__(
        self,
        name: str,
        width: int,
        height: int,
        background: tuple[int, int, int] = PANEL_BG,
        font_path: str | None = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface {name} needs positive size, got {width}x{height}")
        self.name = name
        self.width = width
        self.height = height
        self.background = background
        self.frame = np.zeros((height, width, 3), dtype=np.uint8)
        self._font_path = font_path or None
        self._fonts: dict[int, ImageFont.FreeTypeFont] = {}
        self.render_count = 0
        self.clear()

    def clear(self) -> None:
        self.frame[:] = self.background

    def text(
        self,
        frame: np.ndarray,
        text: str,
        org: tuple[int, int],
        size: int = 16,
        color: tuple[int, int, int] = BLACK,
    ) -> None:
        """Draw ``text`` with its baseline-left corner at ``org``."""
        if self._font_path is None:
            cv2.putText(
                frame, text, org, cv2.FONT_HERSHEY_SIMPLEX,
                size / 30.0, color, 1, cv2.LINE_AA,
            )
            return

        font = self._fonts.get(size)
        if font is None:
            font = ImageFont.truetype(self._font_path, size)
            self._fonts[size] = font
        img = Image.fromarray(np.ascontiguousarray(frame[:, :, ::-1]))
        draw = ImageDraw.Draw(img)
        draw.text(org, text, font=font, fill=color[::-1], anchor="ls")
        frame[:] = np.asarray(img)[:, :, ::-1]

    def to_jpeg(self, quality: int = 80, frame: np.ndarray | None = None) -> bytes:
        """Encode the surface (or an overlaid copy of it) as JPEG bytes."""
        ok, buf = cv2.imencode(
            ".jpg", self.frame if frame is None else frame,
            [cv2.IMWRITE_JPEG_QUALITY, quality],
        )
        if not ok:
            raise RuntimeError(f"JPEG encoding failed for surface {self.name}")
        return buf.tobytes()


# -- Render functions ------------------------------------------------------


def render_store(surface: Surface, snapshot: Snapshot | None, layout: StoreLayout) -> None:
    """Backdrop: department zones with labels and waiting counts, plus the exit."""
    surface.clear()
    frame = surface.frame

    waiting: dict[str, int] = {}
    if snapshot is not None:
        for category, count in snapshot.customer_categories.items():
            zone = layout.find_zone(category)
            if zone is not None:
                waiting[zone.name] = waiting.get(zone.name, 0) + count

    for zone in layout.zones:
        p1 = (int(zone.x), int(zone.y))
        p2 = (int(zone.x + zone.width), int(zone.y + zone.height))
        cv2.rectangle(frame, p1, p2, ZONE_FILL, -1)
        cv2.rectangle(frame, p1, p2, BLACK, 1)
        surface.text(frame, zone.name, (p1[0] + 10, p1[1] - 10), size=14)
        if zone.name in waiting:
            cx, cy = zone.centroid
            surface.text(frame, str(waiting[zone.name]), (int(cx) - 5, int(cy) + 5), size=18)

    ex, ey = (int(v) for v in layout.exit_position)
    cv2.rectangle(frame, (ex - 25, ey - 25), (ex + 25, ey + 25), EXIT_GREEN, 2)
    surface.text(frame, "EXIT", (ex - 18, ey + 5), size=14, color=EXIT_GREEN)
    surface.render_count += 1


def draw_markers(frame: np.ndarray, proxies: Iterable[MarkerProxy]) -> np.ndarray:
    """Overlay customer markers on a copy of ``frame``."""
    out = frame.copy()
    for proxy in proxies:
        center = (int(round(proxy.position[0])), int(round(proxy.position[1])))
        cv2.circle(out, center, MARKER_RADIUS, CUSTOMER_RED, -1, cv2.LINE_AA)
        cv2.putText(
            out, str(proxy.entity_id), (center[0] + MARKER_RADIUS + 2, center[1] + 4),
            cv2.FONT_HERSHEY_SIMPLEX, 0.4, BLACK, 1, cv2.LINE_AA,
        )
    return out


def render_stats(surface: Surface, snapshot: Snapshot | None) -> None:
    surface.clear()
    if snapshot is None:
        surface.render_count += 1
        return
    frame = surface.frame
    categories = " ".join(f"{k}: {v}" for k, v in snapshot.customer_categories.items())
    surface.text(frame, f"Active customers: {len(snapshot.entities)}", (10, 30))
    surface.text(frame, f"By category: {categories or '-'}", (10, 60))
    surface.text(frame, f"Average purchases: {snapshot.average_purchase_count:.2f}", (10, 90))
    surface.text(frame, f"Store load: {snapshot.store_load:.2f}", (10, 120))
    surface.render_count += 1


def render_concurrency(surface: Surface, snapshot: Snapshot | None) -> None:
    surface.clear()
    if snapshot is None:
        surface.render_count += 1
        return
    frame = surface.frame
    surface.text(frame, f"Goroutines: {snapshot.goroutine_count}", (10, 30))
    surface.text(frame, f"Channels: {snapshot.channel_count}", (10, 60))
    surface.render_count += 1


def render_log(surface: Surface, snapshot: Snapshot | None) -> None:
    """Last LOG_TAIL technical log lines, oldest at the top."""
    surface.clear()
    if snapshot is None:
        surface.render_count += 1
        return
    frame = surface.frame
    for i, line in enumerate(snapshot.log_tail(LOG_TAIL)):
        surface.text(frame, line, (10, 20 + i * 15), size=12)
    surface.render_count += 1
