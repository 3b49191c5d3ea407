"""Pointer hit-testing against the latest snapshot.

Hit-tests use the *wire* positions from the snapshot, not the animated
positions, and a fixed circular radius matching the 50px customer icon.
When several customers overlap the pointer, the first in snapshot order
wins.
"""

from __future__ import annotations

from dataclasses import dataclass

from .snapshot import Entity, Snapshot

DEFAULT_HOVER_RADIUS = 25.0


@dataclass(frozen=True)
class HoverInfo:
    """Tooltip content for the customer under the pointer."""

    entity_id: int
    category: str

    @property
    def text(self) -> str:
        return f"ID: {self.entity_id}\nОтдел: {self.category}"

    def to_dict(self) -> dict:
        return {
            "visible": True,
            "id": self.entity_id,
            "category": self.category,
            "text": self.text,
        }


def _find_hit(
    pointer: tuple[float, float],
    snapshot: Snapshot | None,
    radius: float,
) -> Entity | None:
    if snapshot is None:
        return None
    px, py = pointer
    r2 = radius * radius
    for entity in snapshot.entities:
        dx = px - entity.position[0]
        dy = py - entity.position[1]
        if dx * dx + dy * dy <= r2:
            return entity
    return None


def hit_test(
    pointer: tuple[float, float],
    snapshot: Snapshot | None,
    radius: float = DEFAULT_HOVER_RADIUS,
) -> int | None:
    """Id of the customer under ``pointer``, or None."""
    entity = _find_hit(pointer, snapshot, radius)
    return entity.id if entity is not None else None


def describe_hover(
    pointer: tuple[float, float],
    snapshot: Snapshot | None,
    radius: float = DEFAULT_HOVER_RADIUS,
) -> HoverInfo | None:
    """Tooltip for the customer under ``pointer``; None hides the tooltip."""
    entity = _find_hit(pointer, snapshot, radius)
    if entity is None:
        return None
    return HoverInfo(entity_id=entity.id, category=entity.desired_category)
