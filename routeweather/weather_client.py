"""Weather lookups for locations sampled along a route."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

import requests

from .domain import FALLBACK_WEATHER, Location, RoutePoint, WeatherData, WeatherPoint
from .resampler import DEFAULT_INTERVAL_METERS, resample_with_offsets

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
WEATHERAPI_URL = "https://api.weatherapi.com/v1/current.json"
REQUEST_TIMEOUT = 10
DEFAULT_MAX_WORKERS = 8

logger = logging.getLogger(__name__)


class WeatherLookupError(RuntimeError):
    """Raised when a single weather lookup cannot be completed."""


# WeatherAPI condition code -> OpenWeather icon stem ("d"/"n" appended).
_WEATHERAPI_ICONS: Dict[int, str] = {
    1000: "01", 1003: "02", 1006: "03", 1009: "04",
    1030: "50", 1135: "50", 1147: "50",
    1063: "10", 1180: "10", 1183: "10", 1186: "10", 1189: "10", 1192: "10", 1195: "10",
    1072: "09", 1150: "09", 1153: "09", 1168: "09", 1171: "09", 1198: "09", 1201: "09",
    1240: "09", 1243: "09", 1246: "09",
    1066: "13", 1069: "13", 1114: "13", 1117: "13", 1204: "13", 1207: "13", 1210: "13",
    1213: "13", 1216: "13", 1219: "13", 1222: "13", 1225: "13", 1237: "13", 1249: "13",
    1252: "13", 1255: "13", 1258: "13", 1261: "13", 1264: "13",
    1087: "11", 1273: "11", 1276: "11", 1279: "11", 1282: "11",
}


def weatherapi_icon(condition_code: int, is_day: bool) -> str:
    stem = _WEATHERAPI_ICONS.get(condition_code, "01")
    return f"{stem}{'d' if is_day else 'n'}"


class WeatherProvider:
    """Strategy for one weather API; picked once and handed to WeatherClient."""

    name = "base"
    url = ""

    def __init__(self, api_key: str = "") -> None:
        self.api_key = api_key or ""

    def fetch(self, session: requests.Session, location: Location, timeout: float) -> WeatherData:
        if not self.api_key:
            raise WeatherLookupError(f"{self.name} API key not configured")
        try:
            response = session.get(self.url, params=self.params(location), timeout=timeout)
            response.raise_for_status()
            return self.parse(response.json())
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            raise WeatherLookupError(f"{self.name} lookup failed: {exc}") from exc

    def params(self, location: Location) -> Dict[str, object]:
        raise NotImplementedError

    def parse(self, data: Dict[str, object]) -> WeatherData:
        raise NotImplementedError


class OpenWeatherProvider(WeatherProvider):
    name = "openweather"
    url = OPENWEATHER_URL

    def params(self, location: Location) -> Dict[str, object]:
        return {
            "lat": location.latitude,
            "lon": location.longitude,
            "appid": self.api_key,
            "units": "metric",
        }

    def parse(self, data: Dict[str, object]) -> WeatherData:
        main = data["main"]
        condition = data["weather"][0]
        rain = data.get("rain") or {}
        snow = data.get("snow") or {}
        return WeatherData(
            temperature=round(main["temp"]),
            description=condition["description"],
            icon=condition["icon"],
            humidity=main["humidity"],
            wind_speed=data["wind"]["speed"],
            precipitation=rain.get("1h") or snow.get("1h") or 0,
        )


class WeatherApiProvider(WeatherProvider):
    name = "weatherapi"
    url = WEATHERAPI_URL

    def params(self, location: Location) -> Dict[str, object]:
        return {
            "key": self.api_key,
            "q": f"{location.latitude},{location.longitude}",
            "aqi": "no",
        }

    def parse(self, data: Dict[str, object]) -> WeatherData:
        current = data["current"]
        condition = current["condition"]
        return WeatherData(
            temperature=round(current["temp_c"]),
            description=str(condition["text"]).lower(),
            icon=weatherapi_icon(condition["code"], bool(current.get("is_day", 1))),
            humidity=current["humidity"],
            # km/h -> m/s
            wind_speed=current["wind_kph"] / 3.6,
            precipitation=current.get("precip_mm") or 0,
        )


_PROVIDERS = {
    OpenWeatherProvider.name: OpenWeatherProvider,
    WeatherApiProvider.name: WeatherApiProvider,
}


def provider_from_name(name: Optional[str], api_key: str = "") -> WeatherProvider:
    key = (name or WeatherApiProvider.name).strip().lower()
    try:
        provider_cls = _PROVIDERS[key]
    except KeyError as exc:
        raise ValueError(f"Unsupported weather provider: {name}") from exc
    return provider_cls(api_key)


def available_providers(keys: Dict[str, str]) -> List[str]:
    """Names of the providers that have an API key in ``keys``."""
    return [name for name in _PROVIDERS if keys.get(name)]


class WeatherClient:
    """Fetches current weather, degrading to placeholder data per location.

    Without an injected ``session`` every worker thread gets its own
    ``requests.Session``. An injected session is shared by all workers and
    must tolerate concurrent use.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.provider = provider
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self._shared_session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def get_weather(self, location: Location) -> WeatherData:
        """Raises :class:`WeatherLookupError` on any failure."""
        return self.provider.fetch(self.session, location, self.timeout)

    def get_weather_for_locations(self, locations: Sequence[Location]) -> List[WeatherData]:
        """Look up every location concurrently; failed lookups get FALLBACK_WEATHER."""
        if not locations:
            return []
        if not self.provider.api_key:
            logger.info("%s API key missing, returning placeholder weather", self.provider.name)
            return [FALLBACK_WEATHER for _ in locations]

        workers = min(self.max_workers, len(locations))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.get_weather, location) for location in locations]

        results: List[WeatherData] = []
        for location, future in zip(locations, futures):
            try:
                results.append(future.result())
            except WeatherLookupError as exc:
                logger.warning(
                    "Weather lookup failed for (%s,%s), using placeholder: %s",
                    location.latitude,
                    location.longitude,
                    exc,
                )
                results.append(FALLBACK_WEATHER)
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception(
                    "Unexpected weather lookup error for (%s,%s), using placeholder",
                    location.latitude,
                    location.longitude,
                    exc_info=exc,
                )
                results.append(FALLBACK_WEATHER)
        return results

    def weather_along_route(
        self,
        route_points: Sequence[RoutePoint],
        interval_meters: float = DEFAULT_INTERVAL_METERS,
    ) -> List[WeatherPoint]:
        samples = resample_with_offsets(route_points, interval_meters)
        weather = self.get_weather_for_locations([location for location, _ in samples])
        return [
            WeatherPoint(location=location, weather=data, distance_from_start=offset)
            for (location, offset), data in zip(samples, weather)
        ]
