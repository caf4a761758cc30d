"""Open-Meteo forecast and air-quality API provider implementation."""
import logging
from datetime import date
from typing import List, Optional

from conditions import moon_phase_for
from fetcher import fetch_json
from units import Field
from weather_data import LocationDescriptor
from weather_provider import LocationNotFound, MalformedResponse, NotFound, WeatherProviderBase

CURRENT_FIELDS = (
    "temperature_2m", "apparent_temperature", "relative_humidity_2m",
    "precipitation", "weather_code", "cloud_cover", "pressure_msl",
    "wind_speed_10m", "wind_direction_10m", "visibility", "uv_index", "is_day",
)

HOURLY_FIELDS = (
    "temperature_2m", "apparent_temperature", "relative_humidity_2m",
    "precipitation", "precipitation_probability", "weather_code",
    "wind_speed_10m", "wind_direction_10m", "is_day",
)

DAILY_FIELDS = (
    "weather_code", "temperature_2m_max", "temperature_2m_min",
    "precipitation_sum", "precipitation_probability_max", "snowfall_sum",
    "wind_speed_10m_max", "wind_direction_10m_dominant", "uv_index_max",
    "sunrise", "sunset",
)

AIR_QUALITY_FIELDS = (
    "us_aqi", "european_aqi", "pm2_5", "pm10", "ozone", "nitrogen_dioxide",
)

# Open-Meteo always answers in canonical metric units (°C, km/h, mm, cm, m, hPa);
# UnitConfig converts for display.
SCHEMA = {
    "updated": Field("time"),
    "temperature": Field("temperature_2m", quantity="temperature"),
    "feels_like": Field("apparent_temperature", quantity="temperature"),
    "humidity": Field("relative_humidity_2m"),
    "clouds": Field("cloud_cover"),
    "precipitation": Field("precipitation", quantity="precipitation"),
    "precip_probability": Field("precipitation_probability"),
    "wind_speed": Field("wind_speed_10m", quantity="speed"),
    "wind_degrees": Field("wind_direction_10m"),
    "pressure": Field("pressure_msl", quantity="pressure"),
    "visibility": Field("visibility", quantity="distance_m"),
    "uv_index": Field("uv_index"),
    "condition_code": Field("weather_code"),
    "is_day": Field("is_day"),
    # daily
    "temp_max": Field("temperature_2m_max", quantity="temperature"),
    "temp_min": Field("temperature_2m_min", quantity="temperature"),
    "precip_total": Field("precipitation_sum", quantity="precipitation"),
    "precip_chance": Field("precipitation_probability_max"),
    "snow": Field("snowfall_sum", quantity="snow"),
    "wind_max": Field("wind_speed_10m_max", quantity="speed"),
    "wind_max_degrees": Field("wind_direction_10m_dominant"),
    "uv_max": Field("uv_index_max"),
    "sunrise": Field("sunrise"),
    "sunset": Field("sunset"),
    # astronomy
    "moon_phase": Field("moon_phase"),
    "moon_illumination": Field("moon_illumination"),
    # air quality
    "us_aqi": Field("us_aqi"),
    "eu_aqi": Field("european_aqi"),
    "pm2_5": Field("pm2_5"),
    "pm10": Field("pm10"),
    "ozone": Field("ozone"),
    "no2": Field("nitrogen_dioxide"),
}


class OpenMeteoProvider(WeatherProviderBase):
    """
    Weather provider using the free Open-Meteo APIs.

    Forecast: https://open-meteo.com/en/docs
    Air quality: https://open-meteo.com/en/docs/air-quality-api
    No API key is required.
    """

    BASE_URL = "https://api.open-meteo.com/v1/forecast"
    AIR_QUALITY_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"

    name = "openmeteo"
    schema = SCHEMA
    supports_air_quality = True
    supports_astronomy = True

    def __init__(self, forecast_days: int = 3, timeout: float = 10, max_retries: int = 3):
        """
        Initialize Open-Meteo provider.

        Args:
            forecast_days: Days of daily forecast to request (today included)
            timeout: HTTP request timeout in seconds
            max_retries: Attempts per request before giving up
        """
        self.forecast_days = forecast_days
        self.timeout = timeout
        self.max_retries = max_retries

    def fetch_weather(self, location: LocationDescriptor, lang: str = "") -> dict:
        # Descriptions come from the condition table, so lang is not sent.
        params = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "current": ",".join(CURRENT_FIELDS),
            "hourly": ",".join(HOURLY_FIELDS),
            "daily": ",".join(DAILY_FIELDS),
            "forecast_days": self.forecast_days,
            "timezone": "auto",
        }
        logging.info(f"Making Open-Meteo forecast request for {location.display_name()}")
        try:
            data = fetch_json(self.BASE_URL, params, timeout=self.timeout, max_retries=self.max_retries)
        except NotFound as e:
            raise LocationNotFound(location.display_name()) from e
        logging.debug(f"Forecast response keys: {list(data.keys())}")
        return data

    def fetch_air_quality(self, location: LocationDescriptor) -> dict:
        params = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "current": ",".join(AIR_QUALITY_FIELDS),
            "timezone": "auto",
        }
        logging.info("Making Open-Meteo air-quality request")
        return fetch_json(self.AIR_QUALITY_URL, params, timeout=self.timeout, max_retries=self.max_retries)

    def validate(self, payload: dict) -> None:
        current = payload.get("current")
        if not isinstance(current, dict) or not current:
            logging.error("Response missing 'current' block")
            raise MalformedResponse("current")

    def current(self, payload: dict) -> dict:
        current = payload.get("current")
        return dict(current) if isinstance(current, dict) else {}

    def hourly(self, payload: dict) -> List[dict]:
        """Today's hours, in the location's own time zone."""
        records = _zip_series(payload.get("hourly"))
        today = _today(payload)
        result = []
        for record in records:
            stamp = str(record.get("time") or "")
            if today and not stamp.startswith(today):
                continue
            hour = _hour_of(stamp)
            if hour is None:
                continue
            record["hour"] = hour
            result.append(record)
        return result

    def daily(self, payload: dict) -> List[dict]:
        records = _zip_series(payload.get("daily"))
        for record in records:
            record["date"] = str(record.get("time") or "")
        return records

    def astronomy(self, payload: dict) -> dict:
        days = self.daily(payload)
        if not days:
            return {}
        today = days[0]
        record = {
            "sunrise": today.get("sunrise"),
            "sunset": today.get("sunset"),
        }
        day = _parse_date(today.get("date"))
        if day is not None:
            phase, illumination = moon_phase_for(day)
            record["moon_phase"] = phase
            record["moon_illumination"] = illumination
        return record

    def air_quality(self, payload: dict) -> dict:
        current = payload.get("current")
        return dict(current) if isinstance(current, dict) else {}


def _zip_series(block: dict) -> List[dict]:
    """Turn Open-Meteo's parallel arrays into one dict per time step."""
    if not isinstance(block, dict):
        return []
    times = block.get("time")
    if not isinstance(times, list):
        return []
    records = []
    for idx, stamp in enumerate(times):
        record = {"time": stamp}
        for key, values in block.items():
            if key == "time" or not isinstance(values, list):
                continue
            record[key] = values[idx] if idx < len(values) else None
        records.append(record)
    return records


def _today(payload: dict) -> str:
    current = payload.get("current")
    stamp = str(current.get("time") or "") if isinstance(current, dict) else ""
    if len(stamp) >= 10:
        return stamp[:10]
    days = [record["time"] for record in _zip_series(payload.get("daily"))]
    return str(days[0]) if days else ""


def _hour_of(stamp: str) -> Optional[int]:
    # "2024-05-01T03:00"
    try:
        return int(stamp[11:13])
    except (ValueError, IndexError):
        return None


def _parse_date(value) -> Optional[date]:
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None
