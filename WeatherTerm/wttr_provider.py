"""wttr.in JSON (format=j1) provider implementation."""
import logging
from datetime import datetime
from typing import List, Optional

from fetcher import fetch_json
from units import Field, to_float
from weather_data import LocationDescriptor
from weather_provider import LocationNotFound, MalformedResponse, NotFound, WeatherProviderBase

# wttr.in reports every quantity in both unit systems, so most fields are dual.
SCHEMA = {
    "updated": Field("localObsDateTime"),
    "temperature": Field("temp_C", "temp_F"),
    "feels_like": Field("FeelsLikeC", "FeelsLikeF"),
    "humidity": Field("humidity"),
    "clouds": Field("cloudcover"),
    "precipitation": Field("precipMM", "precipInches"),
    "precip_probability": Field("chanceofrain"),
    "wind_speed": Field("windspeedKmph", "windspeedMiles"),
    "wind_dir": Field("winddir16Point"),
    "wind_degrees": Field("winddirDegree"),
    "pressure": Field("pressure", "pressureInches"),
    "visibility": Field("visibility", "visibilityMiles"),
    "uv_index": Field("uvIndex"),
    "condition_code": Field("weatherCode"),
    "condition_text": Field("weatherDesc"),
    "is_day": Field("is_day"),
    # daily
    "temp_max": Field("maxtempC", "maxtempF"),
    "temp_min": Field("mintempC", "mintempF"),
    "precip_total": Field("precipMM", "precipInches"),
    "precip_chance": Field("chanceofrain"),
    "snow": Field("totalSnow_cm", quantity="snow"),
    "wind_max": Field("windspeedKmph", "windspeedMiles"),
    "wind_max_dir": Field("winddir16Point"),
    "uv_max": Field("uvIndex"),
    # astronomy
    "sunrise": Field("sunrise"),
    "sunset": Field("sunset"),
    "moonrise": Field("moonrise"),
    "moonset": Field("moonset"),
    "moon_phase": Field("moon_phase"),
    "moon_illumination": Field("moon_illumination"),
}

MIDDAY_SLOT = 1200


class WttrProvider(WeatherProviderBase):
    """
    Weather provider using wttr.in's JSON output.

    https://github.com/chubin/wttr.in#json-output
    Returns current conditions, three forecast days in 3-hour steps and
    astronomy; there is no air-quality data.
    """

    BASE_URL = "https://wttr.in"

    name = "wttr"
    schema = SCHEMA
    supports_astronomy = True

    def __init__(self, timeout: float = 10, max_retries: int = 3):
        self.timeout = timeout
        self.max_retries = max_retries

    def fetch_weather(self, location: LocationDescriptor, lang: str = "") -> dict:
        url = f"{self.BASE_URL}/{location.latitude:.4f},{location.longitude:.4f}"
        params = {"format": "j1"}
        if lang:
            params["lang"] = lang
        logging.info(f"Making wttr.in request for {location.display_name()}")
        try:
            data = fetch_json(url, params, timeout=self.timeout, max_retries=self.max_retries)
        except NotFound as e:
            raise LocationNotFound(location.display_name()) from e
        logging.debug(f"wttr.in response keys: {list(data.keys())}")
        return data

    def validate(self, payload: dict) -> None:
        current = payload.get("current_condition")
        if not isinstance(current, list) or not current or not isinstance(current[0], dict):
            logging.error("Response missing 'current_condition'")
            raise MalformedResponse("current_condition")

    def current(self, payload: dict) -> dict:
        entries = _records(payload.get("current_condition"))
        record = _flatten(entries[0] if entries else {})
        sun = self._today_astronomy(payload)
        minutes = _clock_minutes(_obs_clock(record.get("localObsDateTime")))
        record["is_day"] = _is_day(minutes, sun)
        return record

    def hourly(self, payload: dict) -> List[dict]:
        days = _records(payload.get("weather"))
        if not days:
            return []
        sun = self._today_astronomy(payload)
        result = []
        for entry in _records(days[0].get("hourly")):
            record = _hourly_record(entry)
            if record is None:
                continue
            record["is_day"] = _is_day(record["hour"] * 60, sun)
            result.append(record)
        return result

    def daily(self, payload: dict) -> List[dict]:
        result = []
        for day in _records(payload.get("weather")):
            hours = [r for r in (_hourly_record(h) for h in _records(day.get("hourly"))) if r]
            astro = next(iter(_records(day.get("astronomy"))), {})
            midday = next((h for h in hours if h["slot"] == MIDDAY_SLOT), hours[len(hours) // 2] if hours else {})
            windiest = max(hours, key=lambda h: to_float(h.get("windspeedKmph")), default={})
            result.append({
                "date": str(day.get("date") or ""),
                "maxtempC": day.get("maxtempC"),
                "maxtempF": day.get("maxtempF"),
                "mintempC": day.get("mintempC"),
                "mintempF": day.get("mintempF"),
                "weatherCode": midday.get("weatherCode"),
                "weatherDesc": midday.get("weatherDesc"),
                "precipMM": sum(to_float(h.get("precipMM")) for h in hours),
                "precipInches": sum(to_float(h.get("precipInches")) for h in hours),
                "chanceofrain": max((to_float(h.get("chanceofrain")) for h in hours), default=0),
                "totalSnow_cm": day.get("totalSnow_cm"),
                "windspeedKmph": windiest.get("windspeedKmph"),
                "windspeedMiles": windiest.get("windspeedMiles"),
                "winddir16Point": windiest.get("winddir16Point"),
                "uvIndex": day.get("uvIndex"),
                "sunrise": astro.get("sunrise"),
                "sunset": astro.get("sunset"),
            })
        return result

    def astronomy(self, payload: dict) -> dict:
        return dict(self._today_astronomy(payload))

    def _today_astronomy(self, payload: dict) -> dict:
        days = _records(payload.get("weather"))
        if not days:
            return {}
        return next(iter(_records(days[0].get("astronomy"))), {})


def _records(value) -> List[dict]:
    """The dict entries of a wttr.in list; nulls and stray scalars are dropped."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _flatten(entry: dict) -> dict:
    """Copy a wttr.in record, unwrapping the [{"value": ...}] description."""
    record = dict(entry or {})
    desc = record.get("weatherDesc")
    if isinstance(desc, list):
        first = desc[0] if desc and isinstance(desc[0], dict) else {}
        record["weatherDesc"] = first.get("value", "")
    return record


def _hourly_record(entry: dict) -> Optional[dict]:
    # Hourly slots are "0", "300", ... "2100"; temperatures use tempC/tempF.
    if not isinstance(entry, dict):
        return None
    try:
        slot = int(str(entry.get("time", "")).strip())
    except ValueError:
        return None
    record = _flatten(entry)
    record["slot"] = slot
    record["hour"] = slot // 100
    record["temp_C"] = entry.get("tempC")
    record["temp_F"] = entry.get("tempF")
    return record


def _obs_clock(value) -> str:
    # "2024-05-01 08:15 AM" -> "08:15 AM"
    text = str(value or "").strip()
    return text[11:] if len(text) > 11 else ""


def _clock_minutes(value) -> Optional[int]:
    text = str(value or "").strip()
    for fmt in ("%I:%M %p", "%H:%M"):
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.hour * 60 + parsed.minute
    return None


def _is_day(minutes: Optional[int], sun: dict) -> int:
    if minutes is None:
        return 1
    sunrise = _clock_minutes(sun.get("sunrise"))
    sunset = _clock_minutes(sun.get("sunset"))
    if sunrise is None or sunset is None:
        return 1 if 6 * 60 <= minutes < 18 * 60 else 0
    return 1 if sunrise <= minutes < sunset else 0
