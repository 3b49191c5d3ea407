"""Snapshot decoding - raw WebSocket payloads into typed state snapshots.

The simulation server pushes the *full* store state every ~100ms.  There is
no delta information: each Snapshot replaces the previous one as current
truth.  Messages without a ``customers`` field (control acknowledgements,
the empty end-of-run frame where the server sends ``customers`` as null) are not
state updates and decode to None.

Customer records are kept in wire form on the Snapshot.  The reconciler
parses them one by one so a single malformed record is skipped without
discarding the rest of the snapshot.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from loguru import logger


@dataclass(frozen=True)
class Entity:
    """One customer as seen on the wire."""

    id: int
    position: tuple[float, float]
    desired_category: str

    @classmethod
    def from_wire(cls, record: Any) -> Entity:
        """Parse a wire record.

        Raises:
            ValueError: If a required field is missing or has the wrong type.
        """
        if not isinstance(record, dict):
            raise ValueError(f"customer record is not an object: {record!r}")
        try:
            entity_id = record["id"]
            pos = record["current_position"]
            x, y = pos["x"], pos["y"]
            category = record["desired_product"]["category"]
        except (KeyError, TypeError) as e:
            raise ValueError(f"customer record missing field {e}: {record!r}") from None

        if isinstance(entity_id, bool) or not isinstance(entity_id, int):
            raise ValueError(f"customer id is not an integer: {entity_id!r}")
        for v in (x, y):
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                raise ValueError(f"customer {entity_id} has non-numeric position: {pos!r}")
            if not math.isfinite(v):
                raise ValueError(f"customer {entity_id} has non-finite position: {pos!r}")
        if not isinstance(category, str):
            raise ValueError(f"customer {entity_id} has non-string category: {category!r}")

        return cls(id=entity_id, position=(float(x), float(y)), desired_category=category)


@dataclass(frozen=True)
class Snapshot:
    """Immutable full-state update from the simulation server."""

    records: tuple[dict, ...] = ()
    customer_categories: dict[str, int] = field(default_factory=dict)
    average_purchase_count: float = 0.0
    store_load: float = 0.0
    goroutine_count: int = 0
    channel_count: int = 0
    technical_logs: tuple[str, ...] = ()

    @cached_property
    def entities(self) -> tuple[Entity, ...]:
        """Well-formed customers in wire order (malformed records omitted)."""
        parsed = []
        for record in self.records:
            try:
                parsed.append(Entity.from_wire(record))
            except ValueError:
                continue
        return tuple(parsed)

    @property
    def ids(self) -> set[int]:
        return {e.id for e in self.entities}

    @classmethod
    def from_dict(cls, data: dict) -> Snapshot:
        """Build a Snapshot from a decoded ``SimulationStats`` object.

        Raises:
            ValueError / TypeError: If a field has an unusable type.
            OverflowError: If an integer metric is infinite.
        """
        customers = data["customers"]
        if not isinstance(customers, list):
            raise TypeError(f"customers is not a list: {type(customers).__name__}")

        categories = data.get("customer_categories") or {}
        if not isinstance(categories, dict):
            raise TypeError("customer_categories is not an object")

        logs = data.get("technical_logs") or []
        if not isinstance(logs, list):
            raise TypeError("technical_logs is not a list")

        return cls(
            records=tuple(customers),
            customer_categories={str(k): int(v) for k, v in categories.items()},
            average_purchase_count=float(data.get("average_purchase_count") or 0.0),
            store_load=float(data.get("store_load") or 0.0),
            goroutine_count=int(data.get("goroutine_count") or 0),
            channel_count=int(data.get("channel_count") or 0),
            technical_logs=tuple(str(line) for line in logs),
        )

    def log_tail(self, n: int = 10) -> tuple[str, ...]:
        """Last ``n`` technical log lines."""
        if n <= 0:
            return ()
        return self.technical_logs[-n:]


def decode_message(raw: str | bytes) -> Snapshot | None:
    """Decode one inbound payload.

    Returns None for anything that is not a usable state update.  Never
    raises: a broken payload must not take the transport down with it.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
        logger.warning(f"Dropping unparseable message: {e}")
        return None

    if not isinstance(data, dict) or data.get("customers") is None:
        logger.debug("Ignoring non-state message")
        return None

    try:
        return Snapshot.from_dict(data)
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning(f"Dropping malformed state message: {e}")
        return None
