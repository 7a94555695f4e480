"""Identity and labels for engine-ranked route alternatives."""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional

from .domain import RouteAlternative

# A route counts as "shortest" when it is at least this much shorter than the primary.
SHORTER_DISTANCE_RATIO = 0.95
# An alternative whose duration is within this share of the primary's is "comparable".
SIMILAR_DURATION_RATIO = 0.10


def describe(route: RouteAlternative, rank_index: int, primary: Optional[RouteAlternative] = None) -> str:
    """Return a human-readable label for the route at ``rank_index``.

    The engine's first route is treated as the fastest one. Other routes are
    compared against ``primary``; without it they are compared against
    themselves and end up as "Alternative route".
    """
    if rank_index == 0:
        return "Fastest route"

    reference = primary or route
    if route.total_distance < reference.total_distance * SHORTER_DISTANCE_RATIO:
        return "Shortest route"
    if abs(route.total_duration - reference.total_duration) <= reference.total_duration * SIMILAR_DURATION_RATIO:
        return "Alternative route"
    return f"Route option {rank_index + 1}"


def rank(alternatives: Iterable[RouteAlternative]) -> List[RouteAlternative]:
    """Assign ``route-{n}`` ids and labels in the order the engine returned them."""
    ordered = sorted(alternatives, key=lambda alt: alt.engine_rank)
    if not ordered:
        return []
    primary = ordered[0]
    return [
        replace(alt, id=f"route-{index}", description=describe(alt, index, primary))
        for index, alt in enumerate(ordered)
    ]
