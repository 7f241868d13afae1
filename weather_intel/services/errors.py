"""Exceptions raised by the report flow."""

from __future__ import annotations


class WeatherIntelError(Exception):
    """Base class; ``message`` is safe to show to the person who submitted."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SubmissionValidationError(WeatherIntelError):
    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("Please fix the errors in the form")
        self.errors = errors


class WeatherFetchError(WeatherIntelError):
    def __init__(self, message: str = "Failed to fetch weather data. Please try again later.") -> None:
        super().__init__(message)


class CityNotFoundError(WeatherFetchError):
    def __init__(self, city: str) -> None:
        super().__init__(f"City '{city}' not found. Please check the name and try again.")
        self.city = city


class ReportStorageError(WeatherIntelError):
    def __init__(self, message: str = "Failed to save weather data") -> None:
        super().__init__(message)


class DeliveryError(WeatherIntelError):
    """A single delivery strategy failed; the pipeline moves on to the next one."""


__all__ = [
    "WeatherIntelError",
    "SubmissionValidationError",
    "WeatherFetchError",
    "CityNotFoundError",
    "ReportStorageError",
    "DeliveryError",
]
