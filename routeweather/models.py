"""Request models for the route and weather API."""
from __future__ import annotations

import math
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .domain import Location, RoutePoint, Waypoint, renumber_waypoints
from .resampler import DEFAULT_INTERVAL_METERS, MIN_INTERVAL_METERS


class LocationIn(BaseModel):
    """A coordinate pair with an optional display address."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_short_keys(cls, values):
        # the map UI sends {lat, lng}
        if isinstance(values, dict):
            values = dict(values)
            if "latitude" not in values and "lat" in values:
                values["latitude"] = values.pop("lat")
            if "longitude" not in values:
                for key in ("lng", "lon"):
                    if key in values:
                        values["longitude"] = values.pop(key)
                        break
        return values

    @field_validator("latitude", "longitude")
    @classmethod
    def validate_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("coordinate must be finite")
        return value

    def to_domain(self) -> Location:
        return Location(latitude=self.latitude, longitude=self.longitude, address=self.address)


class WaypointIn(BaseModel):
    id: str
    location: LocationIn
    order: int

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        if not value:
            raise ValueError("waypoint id is required")
        return value

    def to_domain(self) -> Waypoint:
        return Waypoint(id=self.id, location=self.location.to_domain(), order=self.order)


class RouteRequest(BaseModel):
    """API payload requesting route alternatives."""

    start: LocationIn
    end: LocationIn
    waypoints: List[WaypointIn] = Field(default_factory=list)
    vehicle: str = Field(default="car")
    max_alternatives: int = Field(default=3, ge=1, le=5)

    @field_validator("vehicle")
    @classmethod
    def normalize_vehicle(cls, value: str) -> str:
        return (value or "car").strip().lower()

    @field_validator("waypoints")
    @classmethod
    def validate_unique_ids(cls, value: List[WaypointIn]) -> List[WaypointIn]:
        ids = [wp.id for wp in value]
        if len(ids) != len(set(ids)):
            raise ValueError("waypoint ids must be unique")
        orders = [wp.order for wp in value]
        if len(orders) != len(set(orders)):
            raise ValueError("waypoint orders must be unique")
        return value

    def domain_waypoints(self) -> List[Waypoint]:
        """Waypoints in traversal order, renumbered 1..N."""
        return renumber_waypoints(wp.to_domain() for wp in self.waypoints)


class RoutePointIn(BaseModel):
    location: LocationIn
    instructions: Optional[str] = None
    distance: float = Field(default=0.0, ge=0)
    duration: float = Field(default=0.0, ge=0)

    def to_domain(self) -> RoutePoint:
        return RoutePoint(
            location=self.location.to_domain(),
            instructions=self.instructions,
            distance=self.distance,
            duration=self.duration,
        )


class WeatherRequest(BaseModel):
    """API payload asking for weather sampled along a route."""

    route_points: List[RoutePointIn]
    interval_meters: float = Field(default=DEFAULT_INTERVAL_METERS, ge=MIN_INTERVAL_METERS)

    @field_validator("interval_meters")
    @classmethod
    def validate_interval(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("interval_meters must be finite")
        return value

    def domain_route_points(self) -> List[RoutePoint]:
        return [point.to_domain() for point in self.route_points]
