"""Great-circle distance and simple interpolation helpers."""
from __future__ import annotations

import math
from math import asin, cos, radians, sin, sqrt

from .domain import InvalidInputError, Location

EARTH_RADIUS_M = 6371000.0

# Straight-line speeds used when the routing engine cannot be reached.
SPEED_KMH = {
    "car": 50.0,
    "bicycle": 15.0,
    "walking": 5.0,
}
_VEHICLE_ALIASES = {"driving": "car", "cycling": "bicycle", "bike": "bicycle", "foot": "walking"}


def distance(a: Location, b: Location) -> float:
    """Haversine distance in meters between two locations."""
    if a == b:
        return 0.0
    lat1, lon1 = radians(a.latitude), radians(a.longitude)
    lat2, lon2 = radians(b.latitude), radians(b.longitude)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    hav = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(sqrt(min(1.0, hav)))


def interpolate(a: Location, b: Location, ratio: float) -> Location:
    """Linear interpolation of latitude and longitude independently.

    Not geodesic-accurate; good enough for the short segments between
    maneuver points.
    """
    if not math.isfinite(ratio) or ratio < 0 or ratio > 1:
        raise InvalidInputError(f"ratio must be within [0, 1], got {ratio}")
    if ratio == 0:
        return a
    if ratio == 1:
        return b
    return Location(
        latitude=a.latitude + (b.latitude - a.latitude) * ratio,
        longitude=a.longitude + (b.longitude - a.longitude) * ratio,
    )


def speed_for_vehicle(vehicle: str) -> float:
    key = (vehicle or "").strip().lower()
    key = _VEHICLE_ALIASES.get(key, key)
    return SPEED_KMH.get(key, SPEED_KMH["car"])


def estimate_duration(a: Location, b: Location, vehicle: str) -> float:
    """Seconds needed to cover the straight line a->b at the vehicle's nominal speed."""
    meters = distance(a, b)
    return (meters / 1000.0) / speed_for_vehicle(vehicle) * 3600.0
