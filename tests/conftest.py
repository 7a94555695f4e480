from __future__ import annotations

import copy
import threading
from typing import Dict, List, Optional

import pytest
import requests

from routeweather.domain import Location, RoutePoint, Waypoint

BERLIN = Location(52.5200, 13.4050, address="Berlin, Germany")
PARIS = Location(48.8566, 2.3522, address="Paris, France")
COLOGNE = Location(50.9375, 6.9603, address="Cologne, Germany")


class FakeResponse:
    def __init__(self, payload: object = None, status_code: int = 200, bad_json: bool = False) -> None:
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> object:
        if self.bad_json:
            raise ValueError("not json")
        return copy.deepcopy(self.payload)


class FakeSession:
    """Stand-in for requests.Session; replays canned responses in order, or asks a handler."""

    def __init__(self, responses: Optional[List[object]] = None, handler=None) -> None:
        self.responses = list(responses or [])
        self.handler = handler
        self.calls: List[Dict[str, object]] = []
        self._lock = threading.Lock()

    def get(self, url: str, params: Optional[Dict[str, object]] = None, timeout: Optional[float] = None):
        with self._lock:
            self.calls.append({"url": url, "params": params or {}, "timeout": timeout})
            if self.handler is not None:
                outcome = self.handler(url, params or {})
            else:
                outcome = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_step(lon: float, lat: float, distance: float, duration: float, instruction: Optional[str] = None) -> dict:
    maneuver: Dict[str, object] = {"location": [lon, lat], "type": "turn"}
    step: Dict[str, object] = {"maneuver": maneuver, "distance": distance, "duration": duration}
    if instruction:
        step["instruction"] = instruction
    return step


def make_route(distance: float, duration: float, legs: List[List[dict]], coordinates: Optional[List[List[float]]] = None) -> dict:
    if coordinates is None:
        coordinates = [step["maneuver"]["location"] for leg in legs for step in leg]
    return {
        "distance": distance,
        "duration": duration,
        "geometry": {"type": "LineString", "coordinates": coordinates},
        "legs": [
            {
                "steps": steps,
                "distance": sum(step["distance"] for step in steps),
                "duration": sum(step["duration"] for step in steps),
            }
            for steps in legs
        ],
    }


def berlin_paris_response() -> dict:
    dense = [[13.4050, 52.5200], [11.0, 51.5], [8.6, 50.1], [6.9603, 50.9375], [4.5, 49.6], [2.3522, 48.8566]]
    return {
        "code": "Ok",
        "routes": [
            make_route(
                1054000,
                36000,
                [[
                    make_step(13.4050, 52.5200, 0, 0, "Head west"),
                    make_step(8.6, 50.1, 540000, 18000),
                    make_step(2.3522, 48.8566, 514000, 18000),
                ]],
                dense,
            ),
            make_route(
                980000,
                39000,
                [[make_step(13.4050, 52.5200, 0, 0), make_step(2.3522, 48.8566, 980000, 39000)]],
                dense[:3] + dense[-1:],
            ),
            make_route(
                1200000,
                48000,
                [[make_step(13.4050, 52.5200, 0, 0), make_step(2.3522, 48.8566, 1200000, 48000)]],
            ),
        ],
    }


@pytest.fixture
def berlin() -> Location:
    return BERLIN


@pytest.fixture
def paris() -> Location:
    return PARIS


@pytest.fixture
def cologne_waypoint() -> Waypoint:
    return Waypoint(id="1", location=COLOGNE, order=1)


@pytest.fixture
def two_point_path():
    start = Location(52.0, 13.0)
    end = Location(52.0, 13.1)
    return [RoutePoint(start, "Start your journey"), RoutePoint(end, "Arrive at destination", distance=2000.0, duration=120.0)]
