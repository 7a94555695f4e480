"""Bounded in-memory cache for computed route alternatives."""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Iterable, Optional, Tuple

from .domain import Location, RouteAlternative, Waypoint, sort_waypoints

DEFAULT_MAX_ENTRIES = 100
COORDINATE_PRECISION = 5

logger = logging.getLogger(__name__)

CachedRoutes = Tuple[RouteAlternative, ...]


def _coord_key(location: Location) -> str:
    return f"{location.latitude:.{COORDINATE_PRECISION}f},{location.longitude:.{COORDINATE_PRECISION}f}"


def make_key(
    start: Location,
    end: Location,
    waypoints: Iterable[Waypoint],
    profile: str,
    max_alternatives: int,
) -> str:
    """Build a cache key from rounded coordinates and order-sorted waypoints."""
    stops = ";".join(_coord_key(wp.location) for wp in sort_waypoints(waypoints))
    return "|".join([_coord_key(start), _coord_key(end), stops, profile, str(max_alternatives)])


class RouteCache:
    """Fixed-capacity cache evicting the oldest inserted entry first.

    Entries never expire; identical coordinates and profile are assumed to
    give the same routes for the life of the process.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, CachedRoutes]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CachedRoutes]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, result: Iterable[RouteAlternative]) -> None:
        value = tuple(result)
        with self._lock:
            if key in self._entries:
                # keeps its original insertion slot
                self._entries[key] = value
                return
            while len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted route cache entry %s", evicted)
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
