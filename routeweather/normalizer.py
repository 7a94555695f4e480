"""Convert OSRM route responses into ordered, distance-annotated paths."""
from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Tuple

from .domain import InvalidInputError, Location, RouteAlternative, RoutePoint

logger = logging.getLogger(__name__)

START_INSTRUCTION = "Start your journey"
ARRIVE_INSTRUCTION = "Arrive at destination"


def synthesize_instruction(leg_index: int, leg_count: int, step_index: int, step_count: int) -> str:
    """Fallback text for steps the engine did not describe."""
    if leg_index == 0 and step_index == 0:
        return START_INSTRUCTION
    if leg_index == leg_count - 1 and step_index == step_count - 1:
        return ARRIVE_INSTRUCTION
    if step_index == 0:
        return f"Continue from waypoint {leg_index}"
    return f"Step {step_index + 1}"


def normalize(response: Dict[str, object]) -> List[RouteAlternative]:
    """Build one unranked :class:`RouteAlternative` per engine route.

    ``id`` and ``description`` are left for :func:`routeweather.ranking.rank`.
    """
    routes = response.get("routes") if isinstance(response, dict) else None
    if not isinstance(routes, list):
        return []

    alternatives: List[RouteAlternative] = []
    for rank, route_obj in enumerate(routes):
        if not isinstance(route_obj, dict):
            logger.debug("Skipping non-object route at index %s", rank)
            continue
        route_points = _route_points(route_obj)
        geometry = _geometry(route_obj)
        if len(geometry) < len(route_points):
            geometry = tuple(point.location for point in route_points)
        alternatives.append(
            RouteAlternative(
                id=f"route-{rank}",
                route_points=route_points,
                total_distance=_number(route_obj.get("distance")),
                total_duration=_number(route_obj.get("duration")),
                geometry=geometry,
                engine_rank=rank,
            )
        )
    return alternatives


def _route_points(route_obj: Dict[str, object]) -> Tuple[RoutePoint, ...]:
    legs = route_obj.get("legs")
    if not isinstance(legs, list):
        return ()

    points: List[RoutePoint] = []
    for leg_index, leg in enumerate(legs):
        steps = leg.get("steps") if isinstance(leg, dict) else None
        if not isinstance(steps, list):
            continue
        located = []
        for step_index, step in enumerate(steps):
            location = _step_location(step)
            if location is None:
                logger.debug("Skipping step %s of leg %s without a location", step_index, leg_index)
                continue
            located.append((step, location))
        # positions among the located steps drive Start/Arrive labels
        for step_index, (step, location) in enumerate(located):
            instruction = _step_instruction(step) or synthesize_instruction(
                leg_index, len(legs), step_index, len(located)
            )
            points.append(
                RoutePoint(
                    location=location,
                    instructions=instruction,
                    distance=_number(step.get("distance")),
                    duration=_number(step.get("duration")),
                )
            )
    return tuple(points)


def _step_location(step: object) -> Optional[Location]:
    if not isinstance(step, dict):
        return None
    maneuver = step.get("maneuver") or {}
    coords = maneuver.get("location") if isinstance(maneuver, dict) else None
    return _lonlat_to_location(coords)


def _step_instruction(step: Dict[str, object]) -> Optional[str]:
    instruction = step.get("instruction")
    if not instruction:
        maneuver = step.get("maneuver")
        if isinstance(maneuver, dict):
            instruction = maneuver.get("instruction")
    if isinstance(instruction, str) and instruction.strip():
        return instruction.strip()
    return None


def _geometry(route_obj: Dict[str, object]) -> Tuple[Location, ...]:
    geometry = route_obj.get("geometry")
    if isinstance(geometry, dict):
        coordinates = geometry.get("coordinates")
    elif isinstance(geometry, list):
        coordinates = geometry
    else:
        # encoded polylines are not requested, so anything else is ignored
        coordinates = None
    if not isinstance(coordinates, list):
        return ()

    locations: List[Location] = []
    for pair in coordinates:
        location = _lonlat_to_location(pair)
        if location is not None:
            locations.append(location)
    return tuple(locations)


def _lonlat_to_location(pair: object) -> Optional[Location]:
    if not isinstance(pair, (list, tuple)) or len(pair) < 2:
        return None
    try:
        return Location(latitude=pair[1], longitude=pair[0])
    except InvalidInputError:
        return None


def _number(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0.0
    return max(0.0, float(value))
