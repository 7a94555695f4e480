"""Plain value types shared by the routing and weather services."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple


class InvalidInputError(ValueError):
    """Raised when caller-supplied data would produce garbage geometry."""


def _check_coordinate(name: str, value: float, limit: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    if abs(number) > limit:
        raise InvalidInputError(f"{name} must be within ±{limit}, got {number}")
    return number


@dataclass(frozen=True)
class Location:
    """A WGS84 point. Equality ignores the display address."""

    latitude: float
    longitude: float
    address: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "latitude", _check_coordinate("latitude", self.latitude, 90.0))
        object.__setattr__(self, "longitude", _check_coordinate("longitude", self.longitude, 180.0))

    def to_lonlat(self) -> str:
        return f"{self.longitude},{self.latitude}"

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {"latitude": self.latitude, "longitude": self.longitude}
        if self.address:
            data["address"] = self.address
        return data


@dataclass(frozen=True)
class Waypoint:
    """User-authored intermediate stop; ``order`` defines traversal sequence."""

    id: str
    location: Location
    order: int

    def __post_init__(self) -> None:
        if self.order is None or isinstance(self.order, bool):
            raise InvalidInputError(f"waypoint {self.id!r} has no order")
        try:
            order = int(self.order)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"waypoint {self.id!r} has invalid order {self.order!r}") from exc
        object.__setattr__(self, "order", order)

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.id, "location": self.location.to_dict(), "order": self.order}


def sort_waypoints(waypoints: Iterable[Waypoint]) -> List[Waypoint]:
    return sorted(waypoints, key=lambda wp: wp.order)


def renumber_waypoints(waypoints: Iterable[Waypoint]) -> List[Waypoint]:
    """Return waypoints sorted by order and renumbered 1..N without gaps."""
    return [
        Waypoint(id=wp.id, location=wp.location, order=position)
        for position, wp in enumerate(sort_waypoints(waypoints), start=1)
    ]


@dataclass(frozen=True)
class RoutePoint:
    """A maneuver point; distance/duration describe the segment leading into it."""

    location: Location
    instructions: Optional[str] = None
    distance: float = 0.0
    duration: float = 0.0

    def __post_init__(self) -> None:
        for name in ("distance", "duration"):
            value = float(getattr(self, name) or 0.0)
            if not math.isfinite(value) or value < 0:
                raise InvalidInputError(f"route point {name} must be a finite number >= 0, got {value}")
            object.__setattr__(self, name, value)

    def to_dict(self) -> Dict[str, object]:
        return {
            "location": self.location.to_dict(),
            "instructions": self.instructions,
            "distance": self.distance,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class RouteAlternative:
    """One ranked path between the same stops.

    ``engine_rank`` is the position the routing engine returned the path at;
    rank 0 is the engine's primary (time-optimal) route.
    """

    id: str
    route_points: Tuple[RoutePoint, ...]
    total_distance: float
    total_duration: float
    geometry: Tuple[Location, ...]
    description: str = ""
    engine_rank: int = 0

    @property
    def is_primary(self) -> bool:
        return self.engine_rank == 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "description": self.description,
            "engine_rank": self.engine_rank,
            "total_distance": self.total_distance,
            "total_duration": self.total_duration,
            "route_points": [point.to_dict() for point in self.route_points],
            "geometry": [loc.to_dict() for loc in self.geometry],
        }


@dataclass(frozen=True)
class WeatherData:
    temperature: float
    description: str
    icon: str
    humidity: float
    wind_speed: float
    precipitation: float

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


# Placeholder used whenever a single weather lookup fails.
FALLBACK_WEATHER = WeatherData(
    temperature=20,
    description="Clear sky",
    icon="01d",
    humidity=50,
    wind_speed=3.5,
    precipitation=0,
)


@dataclass(frozen=True)
class WeatherPoint:
    location: Location
    weather: WeatherData
    distance_from_start: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "location": self.location.to_dict(),
            "weather": self.weather.to_dict(),
            "distance_from_start": self.distance_from_start,
        }
