"""Flask application factory for the route weather service."""
import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

from .cache import RouteCache
from .osrm_client import DEFAULT_BASE_URL, OSRMClient
from .routing_service import RoutingService
from .weather_client import WeatherClient, provider_from_name

load_dotenv(override=True)


def _get_env(name: str, default: str = "") -> str:
    value = os.getenv(name, default)
    if value is None:
        return default
    return value.strip()


def _get_env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return default


def _get_env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Create and configure the Flask application.

    ``overrides`` is applied on top of the environment and may carry
    prebuilt ``ROUTING_SERVICE`` / ``WEATHER_CLIENT`` instances.
    """
    app = Flask(__name__)
    app.config["OSRM_BASE_URL"] = _get_env("OSRM_BASE_URL", DEFAULT_BASE_URL)
    app.config["OSRM_TIMEOUT"] = _get_env_float("OSRM_TIMEOUT", 10.0)
    app.config["ROUTE_CACHE_SIZE"] = _get_env_int("ROUTE_CACHE_SIZE", 100)
    app.config["WEATHER_PROVIDER"] = _get_env("WEATHER_PROVIDER", "weatherapi").lower()
    app.config["OPEN_WEATHER_API_KEY"] = _get_env("OPEN_WEATHER_API_KEY", "")
    app.config["WEATHER_API_KEY"] = _get_env("WEATHER_API_KEY", "")
    app.config["WEATHER_TIMEOUT"] = _get_env_float("WEATHER_TIMEOUT", 10.0)
    app.config["WEATHER_MAX_WORKERS"] = _get_env_int("WEATHER_MAX_WORKERS", 8)
    app.config["SAMPLE_INTERVAL_METERS"] = _get_env_float("SAMPLE_INTERVAL_METERS", 1000.0)
    if overrides:
        app.config.update(overrides)

    routing_service = app.config.get("ROUTING_SERVICE")
    if routing_service is None:
        routing_service = RoutingService(
            OSRMClient(app.config["OSRM_BASE_URL"], timeout=app.config["OSRM_TIMEOUT"]),
            RouteCache(app.config["ROUTE_CACHE_SIZE"]),
        )
    app.extensions["routing_service"] = routing_service

    weather_client = app.config.get("WEATHER_CLIENT")
    if weather_client is None:
        provider_name = app.config["WEATHER_PROVIDER"]
        provider = provider_from_name(provider_name, weather_api_keys(app.config).get(provider_name, ""))
        weather_client = WeatherClient(
            provider,
            timeout=app.config["WEATHER_TIMEOUT"],
            max_workers=app.config["WEATHER_MAX_WORKERS"],
        )
    app.extensions["weather_client"] = weather_client

    from .routes import api_bp  # pylint: disable=import-outside-toplevel

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


def weather_api_keys(config: Mapping[str, Any]) -> dict:
    return {
        "openweather": config.get("OPEN_WEATHER_API_KEY", ""),
        "weatherapi": config.get("WEATHER_API_KEY", ""),
    }
