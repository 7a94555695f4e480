"""Route computation: cache lookup, engine request, normalization and ranking."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from . import ranking
from .cache import RouteCache, make_key
from .domain import InvalidInputError, Location, RouteAlternative, RoutePoint, Waypoint, sort_waypoints
from .geo import distance, estimate_duration
from .normalizer import ARRIVE_INSTRUCTION, START_INSTRUCTION, normalize
from .osrm_client import OSRMClient, RoutingFailure, profile_for_vehicle

logger = logging.getLogger(__name__)

DIRECT_ROUTE_DESCRIPTION = "Direct route (estimated)"


class RoutingService:
    """Computes ranked route alternatives, memoized per stop set and profile."""

    def __init__(self, client: OSRMClient, cache: Optional[RouteCache] = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else RouteCache()

    def calculate_route_alternatives(
        self,
        start: Location,
        end: Location,
        vehicle: str,
        waypoints: Iterable[Waypoint] = (),
        max_alternatives: int = 3,
    ) -> Tuple[RouteAlternative, ...]:
        """Return up to ``max_alternatives`` ranked routes.

        Raises :class:`~routeweather.osrm_client.RoutingFailure` when the
        engine cannot produce a route; failures are never cached.
        """
        if max_alternatives < 1:
            raise InvalidInputError(f"max_alternatives must be >= 1, got {max_alternatives}")
        stops = sort_waypoints(waypoints)
        profile = profile_for_vehicle(vehicle)
        key = make_key(start, end, stops, profile, max_alternatives)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Route cache hit for %s", key)
            return cached

        response = self.client.fetch_alternatives(start, end, profile, stops, max_alternatives)
        result = tuple(ranking.rank(normalize(response)))
        if not result:
            raise RoutingFailure("No usable route in engine response")
        self.cache.put(key, result)
        return result

    def calculate_route(
        self,
        start: Location,
        end: Location,
        vehicle: str,
        waypoints: Iterable[Waypoint] = (),
    ) -> RouteAlternative:
        """Return the engine's primary route only."""
        stops = sort_waypoints(waypoints)
        profile = profile_for_vehicle(vehicle)
        key = make_key(start, end, stops, profile, 1)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Route cache hit for %s", key)
            return cached[0]

        response = self.client.fetch_single(start, end, profile, stops)
        result = tuple(ranking.rank(normalize(response)))
        if not result:
            raise RoutingFailure("No usable route in engine response")
        self.cache.put(key, result)
        return result[0]

    def direct_route(
        self,
        start: Location,
        end: Location,
        vehicle: str,
        waypoints: Iterable[Waypoint] = (),
    ) -> RouteAlternative:
        return direct_route(start, end, vehicle, waypoints)


def direct_route(
    start: Location,
    end: Location,
    vehicle: str,
    waypoints: Iterable[Waypoint] = (),
) -> RouteAlternative:
    """Straight-line stand-in used when the routing engine is unreachable.

    Each leg between consecutive stops becomes one segment with a haversine
    distance and a duration estimated from the vehicle's nominal speed.
    """
    stops: List[Location] = [start, *(wp.location for wp in sort_waypoints(waypoints)), end]
    points: List[RoutePoint] = [RoutePoint(location=start, instructions=START_INSTRUCTION)]
    for index, (previous, current) in enumerate(zip(stops, stops[1:]), start=1):
        if index == len(stops) - 1:
            instruction = ARRIVE_INSTRUCTION
        else:
            instruction = f"Continue from waypoint {index}"
        points.append(
            RoutePoint(
                location=current,
                instructions=instruction,
                distance=distance(previous, current),
                duration=estimate_duration(previous, current, vehicle),
            )
        )

    return RouteAlternative(
        id="route-0",
        route_points=tuple(points),
        total_distance=sum(point.distance for point in points),
        total_duration=sum(point.duration for point in points),
        geometry=tuple(stops),
        description=DIRECT_ROUTE_DESCRIPTION,
        engine_rank=0,
    )
