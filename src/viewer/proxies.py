"""Renderable proxies - one on-screen marker per tracked customer.

The proxy layer is the overlay drawn on top of the store surface, the same
way customer icons sit above the canvas in a browser.  Create, move and
remove are the only operations the reconciler and animator use, so the layer
can be swapped for any other rendering target.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass
class MarkerProxy:
    """On-screen marker for a single customer, centred on its position."""

    entity_id: int
    position: tuple[float, float]


class ProxyLayer:
    """Registry of marker proxies keyed by entity id."""

    def __init__(self) -> None:
        self._proxies: dict[int, MarkerProxy] = {}

    def create(self, entity_id: int, position: tuple[float, float]) -> MarkerProxy:
        """Create the proxy for ``entity_id`` (or reposition an existing one)."""
        proxy = self._proxies.get(entity_id)
        if proxy is None:
            proxy = MarkerProxy(entity_id=entity_id, position=position)
            self._proxies[entity_id] = proxy
        else:
            proxy.position = position
        return proxy

    def move(self, entity_id: int, position: tuple[float, float]) -> bool:
        """Reposition a proxy.  Returns False if it no longer exists."""
        proxy = self._proxies.get(entity_id)
        if proxy is None:
            return False
        proxy.position = position
        return True

    def remove(self, entity_id: int) -> bool:
        return self._proxies.pop(entity_id, None) is not None

    def get(self, entity_id: int) -> MarkerProxy | None:
        return self._proxies.get(entity_id)

    def ids(self) -> set[int]:
        return set(self._proxies)

    def clear(self) -> None:
        self._proxies.clear()

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._proxies

    def __iter__(self) -> Iterator[MarkerProxy]:
        return iter(list(self._proxies.values()))

    def __len__(self) -> int:
        return len(self._proxies)
