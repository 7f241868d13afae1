"""Current weather lookup."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from weather_intel.api.deps import get_weather
from weather_intel.services.errors import CityNotFoundError, WeatherFetchError
from weather_intel.services.weather import WeatherProvider

router = APIRouter(prefix="/weather", tags=["weather"])


@router.get("")
def current_weather(
    city: Optional[str] = Query(None),
    weather: WeatherProvider = Depends(get_weather),
) -> dict[str, Any]:
    if not city or not city.strip():
        raise HTTPException(status_code=400, detail="City parameter is required")
    try:
        snapshot = weather.fetch(city.strip())
    except CityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except WeatherFetchError as exc:
        raise HTTPException(status_code=502, detail=exc.message)
    return snapshot.as_dict()


__all__ = ["router"]
