"""REST API blueprint exposing route alternatives and weather sampling."""
from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from . import weather_api_keys
from .domain import InvalidInputError
from .geo import SPEED_KMH
from .models import RouteRequest, WeatherRequest
from .osrm_client import RoutingFailure, VEHICLE_PROFILES
from .weather_client import available_providers

api_bp = Blueprint("api", __name__)


def _routing_service():
    return current_app.extensions["routing_service"]


def _weather_client():
    return current_app.extensions["weather_client"]


@api_bp.post("/routes")
def route_alternatives():
    payload = request.get_json(silent=True)
    if payload is None:
        return jsonify({"error": "invalid or missing JSON"}), HTTPStatus.BAD_REQUEST
    try:
        route_request = RouteRequest.model_validate(payload)
        start = route_request.start.to_domain()
        end = route_request.end.to_domain()
        waypoints = route_request.domain_waypoints()
    except ValidationError as exc:
        return jsonify({"error": exc.errors(include_url=False, include_context=False)}), HTTPStatus.BAD_REQUEST
    except InvalidInputError as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST

    service = _routing_service()
    try:
        alternatives = service.calculate_route_alternatives(
            start,
            end,
            route_request.vehicle,
            waypoints,
            route_request.max_alternatives,
        )
    except RoutingFailure as exc:
        current_app.logger.warning("Routing failed, returning direct-line fallback: %s", exc)
        fallback = service.direct_route(start, end, route_request.vehicle, waypoints)
        return jsonify(
            {
                "alternatives": [fallback.to_dict()],
                "source": "error-fallback",
                "error": str(exc),
            }
        )

    return jsonify({"alternatives": [alt.to_dict() for alt in alternatives], "source": "osrm"})


@api_bp.post("/weather")
def weather_along_route():
    payload = request.get_json(silent=True)
    if payload is None:
        return jsonify({"error": "invalid or missing JSON"}), HTTPStatus.BAD_REQUEST
    if isinstance(payload, dict) and "interval_meters" not in payload:
        payload = dict(payload, interval_meters=current_app.config["SAMPLE_INTERVAL_METERS"])
    try:
        weather_request = WeatherRequest.model_validate(payload)
        route_points = weather_request.domain_route_points()
        weather_points = _weather_client().weather_along_route(route_points, weather_request.interval_meters)
    except ValidationError as exc:
        return jsonify({"error": exc.errors(include_url=False, include_context=False)}), HTTPStatus.BAD_REQUEST
    except InvalidInputError as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST

    return jsonify({"weather_points": [point.to_dict() for point in weather_points]})


@api_bp.get("/profiles")
def profiles():
    return jsonify(
        {
            "profiles": dict(VEHICLE_PROFILES),
            "speeds_kmh": dict(SPEED_KMH),
            "weather_provider": _weather_client().provider.name,
            "weather_providers": available_providers(weather_api_keys(current_app.config)),
        }
    )
