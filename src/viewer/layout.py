"""Store layout - department zones and intent-to-destination resolution.

Matching policy: a zone is eligible when the customer's desired category is
contained in the zone's display name (case-sensitive).  The first eligible
zone in declared order wins.  This is deliberately a substring test, not a
key lookup: the server sends short category words ("Молочный") while zones
carry full labels ("Молочный отдел").

Customers with no matching zone head for the exit.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

EXIT_POSITION: tuple[float, float] = (750.0, 575.0)


@dataclass(frozen=True)
class Zone:
    """A named rectangular department."""

    name: str
    x: float
    y: float
    width: float
    height: float

    @property
    def centroid(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


DEFAULT_ZONES: tuple[Zone, ...] = (
    Zone("Молочный отдел", 200, 100, 100, 200),
    Zone("Отдел овощей", 400, 100, 100, 200),
    Zone("Отдел мяса", 600, 100, 100, 200),
    Zone("Отдел хлеба", 200, 350, 100, 200),
    Zone("Отдел сахара", 400, 350, 100, 200),
)


class StoreLayout:
    """Ordered zones plus the fallback (exit) destination."""

    def __init__(
        self,
        zones: tuple[Zone, ...] | list[Zone] | None = None,
        exit_position: tuple[float, float] = EXIT_POSITION,
    ) -> None:
        self._zones = tuple(DEFAULT_ZONES if zones is None else zones)
        self._exit = (float(exit_position[0]), float(exit_position[1]))

    @property
    def zones(self) -> tuple[Zone, ...]:
        return self._zones

    @property
    def exit_position(self) -> tuple[float, float]:
        return self._exit

    def find_zone(self, category: str) -> Zone | None:
        """First zone whose name contains ``category``, or None."""
        for zone in self._zones:
            if category in zone.name:
                return zone
        return None

    def resolve(self, category: str) -> tuple[float, float]:
        """Destination point for a desired category."""
        zone = self.find_zone(category)
        if zone is None:
            return self._exit
        return zone.centroid


def load_layout(path: str | Path) -> StoreLayout:
    """Load zones and exit from a JSON layout file.

    Format::

        {"zones": [{"name": ..., "x": ..., "y": ..., "width": ..., "height": ...}],
         "exit": {"x": 750, "y": 575}}

    A missing file, or a file without a ``zones`` key, falls back to the
    default zones.

    Raises:
        ValueError: If the file exists but is not a valid layout.
    """
    layout_path = Path(path)
    if not layout_path.exists():
        logger.warning(f"Store layout not found: {layout_path} (using defaults)")
        return StoreLayout()

    try:
        data = json.loads(layout_path.read_text(encoding="utf-8"))
        zones = [
            Zone(
                name=str(z["name"]),
                x=float(z["x"]),
                y=float(z["y"]),
                width=float(z["width"]),
                height=float(z["height"]),
            )
            for z in data["zones"]
        ] if "zones" in data else list(DEFAULT_ZONES)
        exit_data = data.get("exit")
        exit_position = (
            (float(exit_data["x"]), float(exit_data["y"])) if exit_data else EXIT_POSITION
        )
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Invalid store layout {layout_path}: {e}") from e

    logger.info(f"Store layout: loaded {len(zones)} zones from {layout_path}")
    return StoreLayout(zones, exit_position)
