"""Resample a route into fixed-distance locations for weather lookups."""
from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .domain import InvalidInputError, Location, RoutePoint
from .geo import interpolate

DEFAULT_INTERVAL_METERS = 1000.0
MIN_INTERVAL_METERS = 10.0
# every sample becomes one outbound weather request
MAX_SAMPLES = 2000


def resample_with_offsets(
    route_points: Sequence[RoutePoint],
    interval_meters: float = DEFAULT_INTERVAL_METERS,
    max_samples: int = MAX_SAMPLES,
) -> List[Tuple[Location, float]]:
    """Return ``(location, distance_from_start)`` pairs along the route.

    Every route point is kept, and one interpolated location is added every
    ``interval_meters`` of cumulative distance; the next mark carries over
    segment boundaries. A segment's length is the ``distance`` of the point
    it leads into. A mark that lands exactly on a route point is covered by
    that point, and a point identical to the previous sample is dropped.

    Raises :class:`InvalidInputError` when the result would hold more than
    ``max_samples`` locations.
    """
    if not isinstance(interval_meters, (int, float)) or not math.isfinite(interval_meters) or interval_meters <= 0:
        raise InvalidInputError(f"interval_meters must be a positive number, got {interval_meters!r}")

    if not route_points:
        return []
    first = route_points[0]
    if len(route_points) == 1:
        return [(first.location, 0.0)]

    total = sum(point.distance or 0.0 for point in route_points[1:])
    expected = len(route_points) + math.floor(total / interval_meters)
    if expected > max_samples:
        raise InvalidInputError(
            f"{total:.0f} m at {interval_meters} m intervals needs ~{expected} samples, limit is {max_samples}"
        )

    samples: List[Tuple[Location, float]] = [(first.location, 0.0)]
    travelled = 0.0
    next_mark = float(interval_meters)

    for previous, current in zip(route_points, route_points[1:]):
        segment = current.distance or 0.0
        if segment > 0:
            segment_end = travelled + segment
            while next_mark < segment_end:
                ratio = (next_mark - travelled) / segment
                samples.append((interpolate(previous.location, current.location, ratio), next_mark))
                next_mark += interval_meters
            travelled = segment_end
            while next_mark <= travelled:
                next_mark += interval_meters
        if samples[-1] != (current.location, travelled):
            samples.append((current.location, travelled))

    return samples


def resample_at_intervals(
    route_points: Sequence[RoutePoint],
    interval_meters: float = DEFAULT_INTERVAL_METERS,
) -> List[Location]:
    return [location for location, _ in resample_with_offsets(route_points, interval_meters)]
