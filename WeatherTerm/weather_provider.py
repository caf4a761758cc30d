"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from weather_data import LocationDescriptor


class WeatherProviderError(Exception):
    """Exception raised when fetching or decoding weather data fails."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class LocationNotFound(WeatherProviderError):
    """Geocoding returned no results, or the provider answered 404."""

    def __init__(self, query: str):
        super().__init__(
            f"Location not found: {query!r}",
            hint="Try a nearby major place name, or add the country (e.g. 'Springfield, US').",
        )
        self.query = query


class FetchError(WeatherProviderError):
    """Timeout, connectivity or malformed response after retries were exhausted."""

    def __init__(self, message: str):
        super().__init__(f"Failed to fetch weather data: {message}", hint=message)
        self.reason = message


class NotFound(FetchError):
    """The remote service answered 404 or reported that nothing matched."""


class CacheIOError(WeatherProviderError):
    """The cache directory or a cache entry could not be created or written."""

    def __init__(self, path, reason):
        super().__init__(
            f"Cache error at {path}: {reason}",
            hint="Check permissions, or point WEATHER_CACHE_DIR at a writable directory.",
        )
        self.path = path


class MalformedResponse(WeatherProviderError):
    """The request succeeded but the payload lacks a required sub-record."""

    def __init__(self, missing: str):
        super().__init__(f"Malformed provider response: missing '{missing}'")
        self.missing = missing


class WeatherProviderBase(ABC):
    """
    Abstract base class for weather data providers.

    A provider knows how to fetch its own payload and how to split it into
    flat per-record dicts. Field names inside those dicts stay the
    provider's own; ``schema`` tells a ``units.FieldReader`` where each
    quantity lives.
    """

    name = "base"
    schema: Dict = {}
    supports_air_quality = False
    supports_astronomy = False

    @abstractmethod
    def fetch_weather(self, location: LocationDescriptor, lang: str = "") -> dict:
        """
        Fetch the raw weather payload for a resolved location.

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """

    def fetch_air_quality(self, location: LocationDescriptor) -> dict:
        """Fetch the raw air-quality payload; empty when unsupported."""
        return {}

    @abstractmethod
    def validate(self, payload: dict) -> None:
        """
        Check the top-level shape of a weather payload.

        Raises:
            MalformedResponse: If a required sub-record is absent
        """

    @abstractmethod
    def current(self, payload: dict) -> dict:
        """Current-conditions record."""

    @abstractmethod
    def hourly(self, payload: dict) -> List[dict]:
        """Today's hourly records, each carrying an integer ``hour`` key."""

    @abstractmethod
    def daily(self, payload: dict) -> List[dict]:
        """One record per forecast day, each carrying a ``date`` key."""

    def astronomy(self, payload: dict) -> dict:
        """Astronomy record for today; empty when unsupported."""
        return {}

    def air_quality(self, payload: dict) -> dict:
        """Current air-quality record; empty when unsupported."""
        return {}
