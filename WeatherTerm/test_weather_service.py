"""Tests for weather service."""
import copy

import pytest
from unittest.mock import Mock

import cache_store
from conftest import AIR_QUALITY_PAYLOAD, OPENMETEO_PAYLOAD, WTTR_PAYLOAD
from openmeteo_provider import OpenMeteoProvider
from weather_provider import FetchError, LocationNotFound, MalformedResponse
from weather_service import LOCATION_KEY, WeatherService
from wttr_provider import WttrProvider


class MockProvider(OpenMeteoProvider):
    """Open-Meteo parsing with canned responses instead of HTTP."""

    def __init__(self, return_data=None, raise_error=None, aqi_data=None, aqi_error=None):
        super().__init__()
        self.return_data = return_data if return_data is not None else OPENMETEO_PAYLOAD
        self.raise_error = raise_error
        self.aqi_data = aqi_data if aqi_data is not None else AIR_QUALITY_PAYLOAD
        self.aqi_error = aqi_error
        self.call_count = 0
        self.aqi_call_count = 0

    def fetch_weather(self, location, lang=""):
        self.call_count += 1
        if self.raise_error:
            raise self.raise_error
        return copy.deepcopy(self.return_data)

    def fetch_air_quality(self, location):
        self.aqi_call_count += 1
        if self.aqi_error:
            raise self.aqi_error
        return copy.deepcopy(self.aqi_data)


class MockWttrProvider(WttrProvider):
    def __init__(self):
        super().__init__()
        self.call_count = 0

    def fetch_weather(self, location, lang=""):
        self.call_count += 1
        return copy.deepcopy(WTTR_PAYLOAD)


@pytest.fixture
def resolver(paris):
    resolver = Mock()
    resolver.resolve.return_value = paris
    return resolver


def make_service(provider, resolver, tmp_path, **kwargs):
    return WeatherService(provider, resolver=resolver, cache_root=tmp_path / "cache", **kwargs)


def test_weather_service_caching(resolver, tmp_path):
    """Test that service caches results on disk."""
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path)

    first = service.get_snapshot("Paris", "en")
    assert provider.call_count == 1
    assert first.from_cache is False
    assert first.location.name == "Paris"

    second = service.get_snapshot("Paris", "en")
    assert provider.call_count == 1  # Still 1, not 2
    assert second.from_cache is True
    assert second.location == first.location
    assert second.current()["temperature_2m"] == 20.0
    resolver.resolve.assert_called_once_with("Paris", "en")


def test_weather_service_cache_key_normalized(resolver, tmp_path):
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path)

    service.get_snapshot("Paris", "en")
    service.get_snapshot("  PARIS ", "en")
    assert provider.call_count == 1

    service.get_snapshot("Paris", "fr")
    assert provider.call_count == 2


def test_weather_service_cache_expiry(resolver, tmp_path):
    """Test that an expired entry is refetched."""
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path, weather_ttl=0)

    service.get_snapshot("Paris")
    service.get_snapshot("Paris")
    assert provider.call_count == 2


def test_weather_service_refresh(resolver, tmp_path):
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path)

    service.get_snapshot("Paris")
    snapshot = service.get_snapshot("Paris", refresh=True)
    assert provider.call_count == 2
    assert snapshot.from_cache is False


def test_weather_service_writes_location(resolver, tmp_path):
    service = make_service(MockProvider(), resolver, tmp_path)
    service.get_snapshot("Paris", "en")

    path = service.cache_dir() / cache_store.cache_key("Paris", "en")
    assert path.exists()
    assert b'"_location"' in cache_store.read(path)
    assert service.cache_dir() == tmp_path / "cache" / "weather-term" / "openmeteo"


def test_weather_service_corrupt_entry_is_a_miss(resolver, tmp_path):
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path)
    path = service.cache_dir() / cache_store.cache_key("Paris")
    cache_store.write(path, b"{not json")

    snapshot = service.get_snapshot("Paris")

    assert provider.call_count == 1
    assert snapshot.from_cache is False
    assert b"{not json" != cache_store.read(path)


def test_weather_service_entry_without_location_is_a_miss(resolver, tmp_path):
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path)
    path = service.cache_dir() / cache_store.cache_key("Paris")
    cache_store.write(path, b'{"current": {"temperature_2m": 1}}')

    snapshot = service.get_snapshot("Paris")

    assert provider.call_count == 1
    assert LOCATION_KEY in snapshot.weather


def test_weather_service_location_not_found(resolver, tmp_path):
    provider = MockProvider()
    resolver.resolve.side_effect = LocationNotFound("Atlantis")
    service = make_service(provider, resolver, tmp_path)

    with pytest.raises(LocationNotFound):
        service.get_snapshot("Atlantis")
    assert provider.call_count == 0


def test_weather_service_fetch_error_not_cached(resolver, tmp_path):
    """Test that failures propagate and leave no cache entry."""
    provider = MockProvider(raise_error=FetchError("timed out"))
    service = make_service(provider, resolver, tmp_path)

    with pytest.raises(FetchError):
        service.get_snapshot("Paris")
    assert not (service.cache_dir() / cache_store.cache_key("Paris")).exists()


def test_weather_service_malformed_not_cached(resolver, tmp_path):
    provider = MockProvider(return_data={"hourly": {}})
    service = make_service(provider, resolver, tmp_path)

    with pytest.raises(MalformedResponse):
        service.get_snapshot("Paris")
    assert not (service.cache_dir() / cache_store.cache_key("Paris")).exists()


def test_weather_service_air_quality_cached_separately(resolver, tmp_path):
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path)

    snapshot = service.get_snapshot("Paris", include_air_quality=True)
    assert snapshot.air_quality()["us_aqi"] == 42
    assert (service.cache_dir() / cache_store.cache_key("Paris", "", "aqi")).exists()

    again = service.get_snapshot("Paris", include_air_quality=True)
    assert again.air_quality()["us_aqi"] == 42
    assert provider.aqi_call_count == 1


def test_weather_service_air_quality_not_requested(resolver, tmp_path):
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path)

    snapshot = service.get_snapshot("Paris")
    assert snapshot.air_quality() == {}
    assert provider.aqi_call_count == 0


def test_weather_service_air_quality_failure_degrades(resolver, tmp_path):
    """Test an air-quality failure does not fail the weather request."""
    provider = MockProvider(aqi_error=FetchError("HTTP 503"))
    service = make_service(provider, resolver, tmp_path)

    snapshot = service.get_snapshot("Paris", include_air_quality=True)

    assert snapshot.air_quality_payload == {}
    assert snapshot.current()["temperature_2m"] == 20.0


def test_weather_service_provider_without_air_quality(resolver, tmp_path):
    provider = MockWttrProvider()
    service = make_service(provider, resolver, tmp_path)

    snapshot = service.get_snapshot("Paris", include_air_quality=True)

    assert snapshot.air_quality_payload == {}
    assert service.cache_dir() == tmp_path / "cache" / "weather-term" / "wttr"
    assert snapshot.current()["temp_C"] == "13"


def test_weather_service_failed_refresh_keeps_entry(resolver, tmp_path):
    """Test a refresh that fails to fetch leaves the previous entry usable."""
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path)
    service.get_snapshot("Paris")
    path = service.cache_dir() / cache_store.cache_key("Paris")
    before = cache_store.read(path)

    provider.raise_error = FetchError("Network error: down")
    with pytest.raises(FetchError):
        service.get_snapshot("Paris", refresh=True)

    assert cache_store.read(path) == before
    snapshot = service.get_snapshot("Paris")
    assert snapshot.from_cache is True
    assert provider.call_count == 2


def test_weather_service_failed_air_quality_refresh_keeps_entry(resolver, tmp_path):
    provider = MockProvider()
    service = make_service(provider, resolver, tmp_path)
    service.get_snapshot("Paris", include_air_quality=True)
    aqi_path = service.cache_dir() / cache_store.cache_key("Paris", "", "aqi")

    provider.aqi_error = FetchError("HTTP 503")
    refreshed = service.get_snapshot("Paris", refresh=True, include_air_quality=True)

    assert refreshed.air_quality_payload == {}
    assert aqi_path.exists()
    again = service.get_snapshot("Paris", include_air_quality=True)
    assert again.air_quality()["us_aqi"] == 42
    assert provider.aqi_call_count == 2
