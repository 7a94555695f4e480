import pytest
import requests

from conftest import FakeResponse, FakeSession, berlin_paris_response

from routeweather.cache import RouteCache
from routeweather.domain import Location, Waypoint
from routeweather.geo import distance
from routeweather.osrm_client import OSRMClient, RoutingFailure
from routeweather.routing_service import DIRECT_ROUTE_DESCRIPTION, RoutingService, direct_route


def _service(session: FakeSession, cache_size: int = 100) -> RoutingService:
    return RoutingService(OSRMClient("http://osrm.test", session=session), RouteCache(cache_size))


def test_berlin_to_paris_alternatives(berlin, paris) -> None:
    session = FakeSession([FakeResponse(berlin_paris_response())])
    alternatives = _service(session).calculate_route_alternatives(berlin, paris, "car", [], 3)

    assert len(alternatives) <= 3
    assert [alt.id for alt in alternatives] == ["route-0", "route-1", "route-2"]
    assert alternatives[0].description == "Fastest route"
    assert alternatives[1].description == "Shortest route"
    for alt in alternatives:
        assert alt.total_distance > 0
        assert len(alt.geometry) >= len(alt.route_points)


def test_identical_requests_fetch_once(berlin, paris, cologne_waypoint) -> None:
    session = FakeSession([FakeResponse(berlin_paris_response())])
    service = _service(session)

    first = service.calculate_route_alternatives(berlin, paris, "car", [cologne_waypoint])
    second = service.calculate_route_alternatives(berlin, paris, "car", [cologne_waypoint])

    assert len(session.calls) == 1
    assert first == second


def test_waypoints_listed_out_of_order_hit_the_cache(berlin, paris) -> None:
    session = FakeSession([FakeResponse(berlin_paris_response())])
    service = _service(session)
    w1 = Waypoint("1", Location(50.9375, 6.9603), 1)
    w2 = Waypoint("2", Location(49.6, 6.1), 2)

    service.calculate_route_alternatives(berlin, paris, "car", [w1, w2])
    service.calculate_route_alternatives(berlin, paris, "car", [w2, w1])

    assert len(session.calls) == 1


def test_different_vehicle_is_a_new_request(berlin, paris) -> None:
    session = FakeSession([FakeResponse(berlin_paris_response())])
    service = _service(session)
    service.calculate_route_alternatives(berlin, paris, "car")
    service.calculate_route_alternatives(berlin, paris, "walking")
    assert len(session.calls) == 2


def test_failures_propagate_and_are_not_cached(berlin, paris) -> None:
    session = FakeSession([requests.ConnectionError("down"), FakeResponse(berlin_paris_response())])
    service = _service(session)

    with pytest.raises(RoutingFailure):
        service.calculate_route_alternatives(berlin, paris, "car")
    assert len(service.cache) == 0

    assert service.calculate_route_alternatives(berlin, paris, "car")
    assert len(session.calls) == 2


def test_calculate_route_returns_primary(berlin, paris) -> None:
    session = FakeSession([FakeResponse(berlin_paris_response())])
    service = _service(session)
    route = service.calculate_route(berlin, paris, "car")
    again = service.calculate_route(berlin, paris, "car")

    assert route.id == "route-0"
    assert route.total_distance == 1054000
    assert route == again
    assert len(session.calls) == 1


def test_direct_route_fallback(berlin, paris, cologne_waypoint) -> None:
    route = direct_route(berlin, paris, "bicycle", [cologne_waypoint])

    assert route.description == DIRECT_ROUTE_DESCRIPTION
    assert [p.instructions for p in route.route_points] == [
        "Start your journey",
        "Continue from waypoint 1",
        "Arrive at destination",
    ]
    expected = distance(berlin, cologne_waypoint.location) + distance(cologne_waypoint.location, paris)
    assert route.total_distance == pytest.approx(expected)
    # 15 km/h
    assert route.total_duration == pytest.approx(expected / 1000 / 15 * 3600)
    assert list(route.geometry) == [berlin, cologne_waypoint.location, paris]


def test_direct_route_without_waypoints(berlin, paris) -> None:
    route = _service(FakeSession([FakeResponse({})])).direct_route(berlin, paris, "car")
    assert len(route.route_points) == 2
    assert route.route_points[0].distance == 0
    assert route.route_points[1].instructions == "Arrive at destination"
