"""Advisory text for a weather snapshot.

The rule-based synthesizer is a pure function of the snapshot. Each metric
contributes at most one clause, always in the order temperature, condition,
wind, humidity, air quality. A metric that is missing (``None``, NaN or not
numeric) contributes nothing.

The AI synthesizer asks a chat-completions endpoint for the same advice and
falls back to the rule-based text whenever that does not work out.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Protocol

import httpx

from weather_intel.core.config import settings
from weather_intel.services.weather import WeatherSnapshot

logger = logging.getLogger(__name__)

TEMPERATURE_CLAUSES = {
    "freezing": (
        "It's freezing cold! Bundle up with heavy winter clothing, avoid prolonged "
        "outdoor exposure, and watch for icy conditions."
    ),
    "cold": (
        "It's quite cold today. Wear warm layers, a good jacket, and consider gloves "
        "and a hat for comfort."
    ),
    "cool": (
        "Pleasant cool weather! A light jacket or sweater would be perfect. Great for "
        "outdoor activities with proper attire."
    ),
    "mild": "Lovely mild temperature! Perfect weather for outdoor activities, walking, or exercising.",
    "warm": (
        "It's quite warm today. Stay hydrated, wear light clothing, and consider indoor "
        "activities during peak hours."
    ),
    "extreme_heat": (
        "Extremely hot conditions! Stay indoors during peak hours, drink plenty of "
        "water, and avoid strenuous outdoor activities."
    ),
}

# Checked in order; the first keyword group found in the condition text wins.
CONDITION_CLAUSES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("rain", "drizzle"), "Rain is expected, so don't forget your umbrella and waterproof clothing."),
    (("snow",), "Snow conditions present - drive carefully and wear appropriate footwear."),
    (
        ("sun", "clear"),
        "Beautiful sunny weather! Perfect for outdoor activities, but don't forget "
        "sunscreen and sunglasses.",
    ),
    (("cloud",), "Cloudy skies provide natural shade - great for outdoor activities without harsh sun."),
    (
        ("fog", "mist"),
        "Visibility may be reduced due to fog/mist - drive carefully and allow extra travel time.",
    ),
)

STRONG_WIND_CLAUSE = "Strong winds expected - secure loose items and be cautious of flying debris."
MODERATE_WIND_CLAUSE = "Moderate winds - great for flying kites but hold onto your hat!"

HIGH_HUMIDITY_CLAUSE = "High humidity levels - you might feel warmer than the actual temperature suggests."
LOW_HUMIDITY_CLAUSE = "Low humidity - keep hydrated and consider using moisturizer for your skin."

AIR_QUALITY_CLAUSES = {
    "excellent": "Excellent air quality - perfect conditions for outdoor exercise and activities!",
    "good": "Good air quality - safe for all outdoor activities including jogging and cycling.",
    "moderate": (
        "Moderate air quality - generally acceptable, but sensitive individuals should "
        "limit prolonged outdoor exposure."
    ),
    "unhealthy_sensitive": (
        "Unhealthy air quality for sensitive groups - consider limiting time outdoors "
        "and avoiding strenuous activities."
    ),
    "unhealthy": (
        "Poor air quality - stay indoors, avoid outdoor exercise, and consider wearing "
        "a mask if you must go outside."
    ),
}


def _number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def temperature_band(temperature_c: Any) -> str | None:
    temp = _number(temperature_c)
    if temp is None:
        return None
    if temp < 0:
        return "freezing"
    if temp < 10:
        return "cold"
    if temp < 20:
        return "cool"
    if temp < 30:
        return "mild"
    if temp < 35:
        return "warm"
    return "extreme_heat"


def air_quality_band(pm2_5: Any) -> str | None:
    aqi = _number(pm2_5)
    if aqi is None:
        return None
    if aqi <= 12:
        return "excellent"
    if aqi <= 35:
        return "good"
    if aqi <= 55:
        return "moderate"
    if aqi <= 150:
        return "unhealthy_sensitive"
    return "unhealthy"


def condition_clause(condition: str | None) -> str | None:
    text = str(condition or "").lower()
    for keywords, clause in CONDITION_CLAUSES:
        if any(keyword in text for keyword in keywords):
            return clause
    return None


def wind_clause(wind_kph: Any) -> str | None:
    wind = _number(wind_kph)
    if wind is None:
        return None
    if wind > 30:
        return STRONG_WIND_CLAUSE
    if wind > 15:
        return MODERATE_WIND_CLAUSE
    return None


def humidity_clause(humidity: Any) -> str | None:
    value = _number(humidity)
    if value is None:
        return None
    if value > 80:
        return HIGH_HUMIDITY_CLAUSE
    if value < 30:
        return LOW_HUMIDITY_CLAUSE
    return None


def synthesize_advisory(snapshot: WeatherSnapshot) -> str:
    """Build the rule-based advisory paragraph for ``snapshot``."""

    clauses: list[str] = []

    band = temperature_band(snapshot.temperature_c)
    if band:
        clauses.append(TEMPERATURE_CLAUSES[band])

    for clause in (
        condition_clause(snapshot.condition),
        wind_clause(snapshot.wind_kph),
        humidity_clause(snapshot.humidity),
    ):
        if clause:
            clauses.append(clause)

    aq_band = air_quality_band(snapshot.aqi)
    if aq_band:
        clauses.append(AIR_QUALITY_CLAUSES[aq_band])

    lead = f"Based on today's weather analysis for {snapshot.location}:"
    return " ".join([lead, *clauses])


class AdvisorySynthesizer(Protocol):
    def synthesize(self, snapshot: WeatherSnapshot) -> str: ...


class RuleBasedSynthesizer:
    def synthesize(self, snapshot: WeatherSnapshot) -> str:
        return synthesize_advisory(snapshot)


class AiAdvisorySynthesizer:
    """Chat-completions advisory with the rule-based text as a silent fallback."""

    system_prompt = (
        "You are a helpful weather assistant. Provide a brief, friendly commentary about "
        "the weather conditions and air quality. Keep it under 2 sentences and include "
        "practical advice."
    )

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
        fallback: Callable[[WeatherSnapshot], str] = synthesize_advisory,
    ) -> None:
        self.api_key = settings.openai_api_key if api_key is None else api_key
        self.api_url = api_url or settings.openai_api_url
        self.model = model or settings.openai_model
        self.timeout = settings.openai_timeout if timeout is None else timeout
        self.client = client
        self.fallback = fallback

    def synthesize(self, snapshot: WeatherSnapshot) -> str:
        if not self.api_key:
            return self.fallback(snapshot)
        try:
            text = self._complete(self.build_prompt(snapshot))
        except Exception as exc:  # noqa: BLE001
            logger.warning("AI advisory failed, using rule-based text: %s", exc)
            return self.fallback(snapshot)
        if not text:
            logger.info("AI advisory came back empty, using rule-based text")
            return self.fallback(snapshot)
        return text

    def build_prompt(self, snapshot: WeatherSnapshot) -> str:
        parts = [
            f"Location: {snapshot.location}",
            f"Temperature {snapshot.temperature_c}°C",
            f"Condition: {snapshot.condition}",
        ]
        if _number(snapshot.wind_kph) is not None:
            parts.append(f"Wind: {snapshot.wind_kph} km/h")
        if _number(snapshot.humidity) is not None:
            parts.append(f"Humidity: {snapshot.humidity}%")
        aqi = _number(snapshot.aqi)
        parts.append(f"AQI: {aqi if aqi is not None else 'N/A'}")
        return f"Current weather: {', '.join(parts)}. Provide a brief commentary with advice."

    def _complete(self, prompt: str) -> str:
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": settings.openai_max_tokens,
            "temperature": 0.7,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self.client is not None:
            response = self.client.post(self.api_url, json=body, headers=headers, timeout=self.timeout)
        else:
            response = httpx.post(self.api_url, json=body, headers=headers, timeout=self.timeout)
        response.raise_for_status()
        choices = response.json().get("choices") or []
        if not choices:
            return ""
        content = (choices[0].get("message") or {}).get("content") or ""
        return content.strip()


def get_advisory_synthesizer() -> AdvisorySynthesizer:
    if settings.advisory_mode.lower() == "ai":
        return AiAdvisorySynthesizer()
    return RuleBasedSynthesizer()


__all__ = [
    "synthesize_advisory",
    "temperature_band",
    "air_quality_band",
    "AdvisorySynthesizer",
    "RuleBasedSynthesizer",
    "AiAdvisorySynthesizer",
    "get_advisory_synthesizer",
]
