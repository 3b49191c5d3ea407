"""EntityRegistry - reconciles full-state snapshots into tracked customers.

The registry is the only owner of TrackedEntity records.  Each snapshot is
diffed against the tracked set:

  - new id       -> create record (position seeded from the wire), create
                    its proxy, start its animation loop
  - existing id  -> refresh desired category and target only; the current
                    position is mid-flight and belongs to the animator
  - missing id   -> stop animation, then remove proxy, then forget it

Stopping always happens before proxy removal so a pending frame can never
touch a retired marker.  When reconcile() returns, tracked ids, proxy ids
and snapshot ids are the same set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from .animator import MotionAnimator
from .layout import StoreLayout
from .proxies import ProxyLayer
from .snapshot import Entity, Snapshot


@dataclass
class TrackedEntity:
    """Engine-owned presentation record for one customer."""

    id: int
    current_position: tuple[float, float]
    target_position: tuple[float, float]
    desired_category: str
    animation_handle: Any = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "current_position": {"x": self.current_position[0], "y": self.current_position[1]},
            "target_position": {"x": self.target_position[0], "y": self.target_position[1]},
            "desired_category": self.desired_category,
            "animating": self.animation_handle is not None,
        }


class EntityRegistry:
    """Tracked customer set kept in lock-step with the snapshot stream."""

    def __init__(
        self,
        layout: StoreLayout,
        animator: MotionAnimator,
        proxies: ProxyLayer,
    ) -> None:
        self._layout = layout
        self._animator = animator
        self._proxies = proxies
        self._tracked: dict[int, TrackedEntity] = {}
        self.created_total: int = 0
        self.retired_total: int = 0
        self.skipped_total: int = 0

    def reconcile(self, snapshot: Snapshot) -> dict[int, TrackedEntity]:
        """Apply ``snapshot`` and return the tracked set (a shallow copy)."""
        seen: set[int] = set()

        for record in snapshot.records:
            try:
                entity = Entity.from_wire(record)
            except ValueError as e:
                self.skipped_total += 1
                logger.warning(f"Skipping malformed customer: {e}")
                continue

            seen.add(entity.id)
            tracked = self._tracked.get(entity.id)
            if tracked is None:
                self._create(entity)
            else:
                tracked.desired_category = entity.desired_category
                tracked.target_position = self._layout.resolve(entity.desired_category)

        for entity_id in [tid for tid in self._tracked if tid not in seen]:
            self._retire(entity_id)

        return dict(self._tracked)

    def reset(self) -> None:
        """Tear down every tracked customer."""
        for entity_id in list(self._tracked):
            self._retire(entity_id)

    def get(self, entity_id: int) -> TrackedEntity | None:
        return self._tracked.get(entity_id)

    def get_all(self) -> list[TrackedEntity]:
        return list(self._tracked.values())

    def ids(self) -> set[int]:
        return set(self._tracked)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._tracked

    def __len__(self) -> int:
        return len(self._tracked)

    # -- Internal ----------------------------------------------------------

    def _create(self, entity: Entity) -> None:
        tracked = TrackedEntity(
            id=entity.id,
            current_position=entity.position,
            target_position=self._layout.resolve(entity.desired_category),
            desired_category=entity.desired_category,
        )
        self._tracked[entity.id] = tracked
        self._proxies.create(entity.id, tracked.current_position)
        self._animator.start(tracked)
        self.created_total += 1
        logger.debug(f"Tracking customer {entity.id} -> {entity.desired_category}")

    def _retire(self, entity_id: int) -> None:
        tracked = self._tracked.pop(entity_id)
        self._animator.stop(tracked)
        self._proxies.remove(entity_id)
        self.retired_total += 1
        logger.debug(f"Retired customer {entity_id}")
