"""Thin wrapper around the OSRM HTTP route service."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import requests

from .domain import InvalidInputError, Location, Waypoint, sort_waypoints

DEFAULT_BASE_URL = "https://router.project-osrm.org"
REQUEST_TIMEOUT = 10

logger = logging.getLogger(__name__)


class RoutingFailure(RuntimeError):
    """Raised when the routing engine is unreachable or returns no route."""


VEHICLE_PROFILES = {
    "car": "driving",
    "driving": "driving",
    "bicycle": "cycling",
    "bike": "cycling",
    "cycling": "cycling",
    "walking": "foot",
    "foot": "foot",
}

DEFAULT_PROFILE = "driving"


def profile_for_vehicle(vehicle: Optional[str]) -> str:
    if not vehicle:
        return DEFAULT_PROFILE
    return VEHICLE_PROFILES.get(vehicle.strip().lower(), DEFAULT_PROFILE)


def ordered_stops(start: Location, end: Location, waypoints: Iterable[Waypoint] = ()) -> List[Location]:
    """Return ``[start, *waypoints by order, end]``."""
    return [start, *(wp.location for wp in sort_waypoints(waypoints)), end]


def format_coordinates(stops: Sequence[Location]) -> str:
    """Convert locations to OSRM format 'lon,lat;lon,lat;...'"""
    return ";".join(stop.to_lonlat() for stop in stops)


class OSRMClient:
    """OSRM adapter.

    Talks to ``/route/v1`` and returns the decoded JSON response. Parsing into
    domain objects is left to :mod:`routeweather.normalizer`. No retries are
    attempted; every failure surfaces as :class:`RoutingFailure`.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        if not base_url:
            raise ValueError("OSRM base URL is not configured")
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_alternatives(
        self,
        start: Location,
        end: Location,
        profile: str,
        waypoints: Iterable[Waypoint] = (),
        max_alternatives: int = 3,
    ) -> Dict[str, object]:
        if max_alternatives < 1:
            raise InvalidInputError(f"max_alternatives must be >= 1, got {max_alternatives}")
        alternatives = str(max_alternatives) if max_alternatives > 1 else "false"
        data = self._request_route(ordered_stops(start, end, waypoints), profile, alternatives)
        data["routes"] = data["routes"][:max_alternatives]
        return data

    def fetch_single(
        self,
        start: Location,
        end: Location,
        profile: str,
        waypoints: Iterable[Waypoint] = (),
    ) -> Dict[str, object]:
        data = self._request_route(ordered_stops(start, end, waypoints), profile, "false")
        data["routes"] = data["routes"][:1]
        return data

    def _request_route(self, stops: Sequence[Location], profile: str, alternatives: str) -> Dict[str, object]:
        url = f"{self.base_url}/route/v1/{profile}/{format_coordinates(stops)}"
        params = {
            "steps": "true",
            "geometries": "geojson",
            "overview": "full",
            "alternatives": alternatives,
        }
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("OSRM request to %s failed: %s", url, exc)
            raise RoutingFailure(f"Failed to calculate route: {exc}") from exc

        if not isinstance(data, dict):
            raise RoutingFailure("Failed to calculate route: malformed response")
        code = data.get("code", "Ok")
        if code != "Ok":
            raise RoutingFailure(f"OSRM error {code}: {data.get('message', 'Unknown error')}")
        routes = data.get("routes")
        if not isinstance(routes, list) or not routes:
            raise RoutingFailure("No route found")

        logger.debug("OSRM returned %s route(s) for %s stops", len(routes), len(stops))
        return data
