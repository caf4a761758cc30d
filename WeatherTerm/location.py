"""Turn a free-text query (or nothing) into a LocationDescriptor."""
import logging
import re
from typing import Optional

from fetcher import fetch_json
from weather_data import DEFAULT_COUNTRY_CODE, LocationDescriptor
from weather_provider import FetchError, LocationNotFound, NotFound

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
IP_LOOKUP_URL = "http://ip-api.com/json/"

_COORDINATES = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


def parse_coordinates(query: str) -> Optional[LocationDescriptor]:
    """Accept "lat,lon" queries directly; None for anything else."""
    match = _COORDINATES.match(query or "")
    if not match:
        return None
    lat, lon = float(match.group(1)), float(match.group(2))
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None
    return LocationDescriptor(name=f"{lat:.4f},{lon:.4f}", latitude=lat, longitude=lon)


class LocationResolver:
    """Geocoding and IP auto-detection, both routed through fetch_json."""

    def __init__(self, timeout: float = 10, max_retries: int = 3):
        self.timeout = timeout
        self.max_retries = max_retries

    def resolve(self, query: str, lang: str = "") -> LocationDescriptor:
        if not (query or "").strip():
            return self.detect_from_ip()
        coords = parse_coordinates(query)
        if coords is not None:
            logging.debug(f"Query {query!r} parsed as coordinates")
            return coords
        return self.geocode(query, lang)

    def geocode(self, query: str, lang: str = "") -> LocationDescriptor:
        """
        Resolve free text to the best-matching place.

        Raises:
            LocationNotFound: If the service has no results for the query
            FetchError: On transport failure
        """
        params = {"name": query.strip(), "count": 1, "format": "json"}
        if lang:
            params["language"] = lang

        try:
            data = fetch_json(GEOCODING_URL, params, timeout=self.timeout, max_retries=self.max_retries)
        except NotFound as e:
            raise LocationNotFound(query) from e

        results = data.get("results")
        if not results or not isinstance(results, list) or not isinstance(results[0], dict):
            logging.debug(f"Geocoding returned no results for {query!r}")
            raise LocationNotFound(query)

        top = results[0]
        if top.get("latitude") is None or top.get("longitude") is None:
            raise LocationNotFound(query)

        location = LocationDescriptor(
            name=str(top.get("name") or query),
            admin_region=str(top.get("admin1") or ""),
            country_name=str(top.get("country") or ""),
            country_code=str(top.get("country_code") or DEFAULT_COUNTRY_CODE).upper(),
            latitude=float(top["latitude"]),
            longitude=float(top["longitude"]),
        )
        logging.debug(f"Geocoded {query!r} -> {location}")
        return location

    def detect_from_ip(self) -> LocationDescriptor:
        """
        Locate the caller from their public IP address.

        Raises:
            FetchError: If the lookup fails or the service reports failure
        """
        try:
            data = fetch_json(IP_LOOKUP_URL, timeout=self.timeout, max_retries=self.max_retries)
        except NotFound as e:
            raise FetchError(f"IP geolocation service unavailable: {e.reason}") from e

        if data.get("status") == "fail":
            raise FetchError(f"IP geolocation failed: {data.get('message', 'unknown reason')}")

        try:
            lat = float(data["lat"])
            lon = float(data["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError(f"IP geolocation response lacks coordinates: {e}") from e

        location = LocationDescriptor(
            name=str(data.get("city") or ""),
            admin_region=str(data.get("regionName") or ""),
            country_name=str(data.get("country") or ""),
            country_code=str(data.get("countryCode") or DEFAULT_COUNTRY_CODE).upper(),
            latitude=lat,
            longitude=lon,
        )
        logging.debug(f"IP auto-detected location: {location}")
        return location
