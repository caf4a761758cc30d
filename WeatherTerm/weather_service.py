"""Weather service: disk cache in front of location resolution and provider calls."""
import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import cache_store
from location import LocationResolver
from weather_data import LocationDescriptor, WeatherSnapshot
from weather_provider import WeatherProviderBase, WeatherProviderError

LOCATION_KEY = "_location"


class WeatherService:
    """
    Service that wraps a weather provider with a per-query disk cache.

    Flow for one invocation, strictly sequential: cache check, then on a
    miss location resolution, weather fetch, shape check and write-through;
    optionally a second, independent air-quality fetch with its own entry.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        resolver: Optional[LocationResolver] = None,
        cache_root: Optional[Path] = None,
        weather_ttl: int = cache_store.WEATHER_TTL,
        aqi_ttl: int = cache_store.AIR_QUALITY_TTL,
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            resolver: Location resolver (geocoding / IP detection)
            cache_root: Cache root directory; platform default when None
            weather_ttl: Seconds a weather entry stays fresh
            aqi_ttl: Seconds an air-quality entry stays fresh
        """
        self.provider = provider
        self.resolver = resolver or LocationResolver()
        self.cache_root = cache_root
        self.weather_ttl = weather_ttl
        self.aqi_ttl = aqi_ttl

    def cache_dir(self) -> Path:
        return cache_store.resolve_cache_dir(self.provider.name, root=self.cache_root)

    def get_snapshot(
        self,
        query: str,
        lang: str = "",
        refresh: bool = False,
        include_air_quality: bool = False,
    ) -> WeatherSnapshot:
        """
        Get weather for a query, using the cache while it is fresh.

        Raises:
            LocationNotFound, FetchError, MalformedResponse, CacheIOError
        """
        directory = self.cache_dir()
        path = directory / cache_store.cache_key(query, lang)

        payload, from_cache = self._load_weather(path, query, lang, refresh)
        location = LocationDescriptor.from_dict(payload.get(LOCATION_KEY))

        snapshot = WeatherSnapshot(
            location=location,
            weather=payload,
            provider=self.provider,
            fetched_at=path.stat().st_mtime if path.exists() else 0.0,
            from_cache=from_cache,
        )

        if include_air_quality and self.provider.supports_air_quality:
            aqi_path = directory / cache_store.cache_key(query, lang, "aqi")
            snapshot.air_quality_payload = self._load_air_quality(aqi_path, location, refresh)
        return snapshot

    def _load_weather(self, path: Path, query: str, lang: str, refresh: bool) -> Tuple[dict, bool]:
        # A refresh bypasses the entry; it is only replaced once a fetch succeeds.
        if refresh:
            logging.debug(f"Refresh requested, bypassing {path}")
        elif cache_store.is_valid(path, self.weather_ttl):
            cached = _read_json(path)
            if cached is not None and LOCATION_KEY in cached:
                try:
                    self.provider.validate(cached)
                except WeatherProviderError as e:
                    logging.warning(f"Discarding unusable cache entry {path}: {e}")
                else:
                    logging.info(f"Using cached weather data from {path}")
                    return cached, True

        logging.info(f"Cache miss for {query or 'auto'!r}, fetching from {self.provider.name}")
        location = self.resolver.resolve(query, lang)
        payload = self.provider.fetch_weather(location, lang)
        self.provider.validate(payload)
        payload[LOCATION_KEY] = location.to_dict()

        cache_store.invalidate(path)
        cache_store.write(path, json.dumps(payload, ensure_ascii=False).encode("utf-8"))
        return payload, False

    def _load_air_quality(self, path: Path, location: LocationDescriptor, refresh: bool) -> dict:
        if refresh:
            logging.debug(f"Refresh requested, bypassing {path}")
        elif cache_store.is_valid(path, self.aqi_ttl):
            cached = _read_json(path)
            if cached is not None:
                logging.info(f"Using cached air-quality data from {path}")
                return cached

        try:
            payload = self.provider.fetch_air_quality(location)
        except WeatherProviderError as e:
            # Air quality is secondary: degrade to an empty record.
            logging.warning(f"Air-quality fetch failed, continuing without it: {e}")
            return {}

        cache_store.invalidate(path)
        cache_store.write(path, json.dumps(payload, ensure_ascii=False).encode("utf-8"))
        return payload


def _read_json(path: Path) -> Optional[dict]:
    """Read a cache entry; a corrupt entry is logged and treated as a miss."""
    try:
        data = json.loads(cache_store.read(path).decode("utf-8"))
    except (OSError, ValueError) as e:
        logging.warning(f"Cache entry {path} unreadable, refetching: {e}")
        return None
    return data if isinstance(data, dict) else None
