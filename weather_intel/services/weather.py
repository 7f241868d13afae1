"""Current-conditions lookup by city name."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import asdict, dataclass
from typing import Any, Protocol

import httpx

from weather_intel.core.config import settings
from weather_intel.services.errors import CityNotFoundError, WeatherFetchError

logger = logging.getLogger(__name__)

# WeatherAPI.com error code for "No matching location found."
LOCATION_NOT_FOUND_CODE = 1006

DEMO_CONDITIONS = ("Sunny", "Partly Cloudy", "Cloudy", "Light Rain", "Clear")


@dataclass(frozen=True)
class WeatherSnapshot:
    """One reading for one location. ``aqi`` is PM2.5; ``None`` means unknown."""

    location: str
    temperature_c: float
    condition: str
    wind_kph: float | None = None
    humidity: int | None = None
    aqi: float | None = None
    region: str | None = None
    country: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class WeatherProvider(Protocol):
    def fetch(self, city: str) -> WeatherSnapshot: ...


class WeatherApiClient:
    """Fetch current conditions and air quality from WeatherAPI.com."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = settings.weather_api_key if api_key is None else api_key
        self.base_url = base_url or settings.weather_api_url
        self.timeout = settings.weather_api_timeout if timeout is None else timeout
        self.client = client

    def fetch(self, city: str) -> WeatherSnapshot:
        if not self.api_key:
            logger.error("Weather API key not configured")
            raise WeatherFetchError()

        params = {"key": self.api_key, "q": city, "aqi": "yes"}
        logger.info("Fetching weather data for %s", city, extra={"city": city})
        try:
            response = self._get(params)
        except httpx.HTTPError as exc:
            logger.warning("Weather request failed for %s: %s", city, exc, extra={"city": city})
            raise WeatherFetchError() from exc

        if response.is_success:
            try:
                return self._parse(response.json())
            except (ValueError, KeyError, TypeError, AttributeError) as exc:
                logger.warning("Malformed weather payload for %s: %s", city, exc, extra={"city": city})
                raise WeatherFetchError() from exc

        if self._is_not_found(response):
            logger.info("City not found: %s", city, extra={"city": city})
            raise CityNotFoundError(city)

        logger.warning(
            "Weather API error: %s %s",
            response.status_code,
            response.text[:500],
            extra={"city": city},
        )
        raise WeatherFetchError()

    def _get(self, params: dict[str, str]) -> httpx.Response:
        if self.client is not None:
            return self.client.get(self.base_url, params=params, timeout=self.timeout)
        return httpx.get(self.base_url, params=params, timeout=self.timeout)

    def _is_not_found(self, response: httpx.Response) -> bool:
        if response.status_code == 404:
            return True
        try:
            body = response.json()
        except ValueError:
            return False
        error = body.get("error") if isinstance(body, dict) else None
        return isinstance(error, dict) and error.get("code") == LOCATION_NOT_FOUND_CODE

    def _parse(self, payload: dict[str, Any]) -> WeatherSnapshot:
        if not isinstance(payload, dict):
            raise ValueError("payload is not an object")
        location = _section(payload, "location", required=True)
        current = _section(payload, "current", required=True)
        condition = _section(current, "condition")
        air_quality = _section(current, "air_quality")

        temperature_c = _coerce_float(current.get("temp_c"))
        if temperature_c is None:
            temperature_f = _coerce_float(current.get("temp_f"))
            if temperature_f is None:
                raise ValueError("temperature missing from payload")
            temperature_c = (temperature_f - 32.0) * 5.0 / 9.0

        wind_kph = _coerce_float(current.get("wind_kph"))
        if wind_kph is None:
            wind_mph = _coerce_float(current.get("wind_mph"))
            wind_kph = wind_mph * 1.609344 if wind_mph is not None else None

        humidity = _coerce_float(current.get("humidity"))

        return WeatherSnapshot(
            location=location.get("name") or "",
            region=location.get("region") or None,
            country=location.get("country") or None,
            temperature_c=temperature_c,
            condition=str(condition.get("text") or ""),
            wind_kph=wind_kph,
            humidity=int(round(humidity)) if humidity is not None else None,
            aqi=_coerce_float(air_quality.get("pm2_5")),
        )


class DemoWeatherProvider:
    """Plausible random readings, for running without a weather API key."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def fetch(self, city: str) -> WeatherSnapshot:
        rng = self.rng
        snapshot = WeatherSnapshot(
            location=city,
            region="Demo Region",
            country="Demo Country",
            temperature_c=float(round(rng.random() * 30 + 5)),
            condition=rng.choice(DEMO_CONDITIONS),
            wind_kph=float(round(rng.random() * 24)),
            humidity=round(rng.random() * 100),
            aqi=float(round(rng.random() * 50 + 5)),
        )
        logger.info("Generated demo weather for %s", city, extra={"city": city})
        return snapshot


def get_weather_provider() -> WeatherProvider:
    if settings.weather_demo_mode:
        return DemoWeatherProvider()
    return WeatherApiClient()


def _coerce_float(value: Any) -> float | None:
    try:
        if value is None or isinstance(value, bool):
            return None
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def _section(mapping: dict[str, Any], key: str, required: bool = False) -> dict[str, Any]:
    value = mapping.get(key)
    if value is None and not required:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key!r} is not an object")
    return value


__all__ = [
    "WeatherSnapshot",
    "WeatherProvider",
    "WeatherApiClient",
    "DemoWeatherProvider",
    "get_weather_provider",
]
