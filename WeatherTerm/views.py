"""
View builders: provider payload + UnitConfig -> display records.

Pure functions for testability; no network or cache access happens here.
Each builder returns records keyed by column id (see LABELS). With
``raw=True`` values are typed numbers/strings with no icons or ANSI codes;
otherwise they are formatted strings in the requested DisplayMode.
"""
from typing import Dict, List

from conditions import (
    DisplayMode,
    aqi_color,
    beaufort_icon,
    beaufort_name,
    beaufort_scale,
    compass_icon,
    compass_label,
    condition_description,
    is_severe,
    match_moon_phase,
    moon_icon,
    moon_phase_from_illumination,
    severity_marker,
    uv_band,
    weather_icon,
)
from tiers import colorize
from units import FieldReader, UnitConfig, temperature_color, to_float
from weather_data import WeatherSnapshot

LABELS = {
    "location": "Location",
    "condition": "Condition",
    "temperature": "Temperature",
    "feels_like": "Feels Like",
    "clouds": "Clouds",
    "precipitation": "Precipitation",
    "precip_probability": "Rain Chance",
    "humidity": "Humidity",
    "wind": "Wind",
    "pressure": "Pressure",
    "visibility": "Visibility",
    "uv_index": "UV Index",
    "air_quality": "Air Quality",
    "sun": "Sun",
    "updated": "Updated",
    "time": "Time",
    "date": "Date",
    "high": "High",
    "low": "Low",
    "precip_chance": "Rain Chance",
    "snow": "Snow",
    "sunrise": "Sunrise",
    "sunset": "Sunset",
    "moonrise": "Moonrise",
    "moonset": "Moonset",
    "moon_phase": "Moon Phase",
    "illumination": "Illumination",
    "pm2_5": "PM2.5",
    "pm10": "PM10",
    "ozone": "Ozone",
    "no2": "NO2",
    "us_aqi": "US AQI",
    "eu_aqi": "EU AQI",
}

SUN_GLYPHS = {
    DisplayMode.RICH: ("\ue34c", "\ue34d"),
    DisplayMode.EMOJI: ("🌅", "🌇"),
    DisplayMode.TEXT: ("Rise", "Set"),
}

AQI_LABELS = {
    "green": "Good",
    "yellow": "Moderate",
    "orange": "Unhealthy for sensitive groups",
    "red": "Unhealthy",
    "purple": "Very unhealthy",
}

POLLUTANT_UNIT = "µg/m³"


def format_clock(value) -> str:
    """HH:MM from an ISO timestamp; provider clock strings pass through."""
    text = str(value or "").strip()
    if not text:
        return "--"
    if "T" in text:
        return text.split("T", 1)[1][:5]
    return text


def _condition(reader: FieldReader, record: dict):
    code = reader.text(record, "condition_code")
    description = condition_description(code)
    if description == "Unknown":
        description = reader.text(record, "condition_text") or description
    return code, description


def _icon_prefix(icon: str) -> str:
    return f"{icon} " if icon else ""


def _wind_direction(reader: FieldReader, record: dict, label_name: str, degrees_name: str) -> str:
    label = reader.text(record, label_name)
    if label:
        return label
    if reader.has(degrees_name) and reader.text(record, degrees_name):
        return compass_label(reader.value(record, degrees_name))
    return ""


def _temp(value: float, units: UnitConfig, color: bool) -> str:
    return colorize(f"{value:.0f}{units.temp_label}", temperature_color(value, units), color)


def _precip(value: float, units: UnitConfig) -> str:
    digits = 2 if units.is_imperial else 1
    return f"{value:.{digits}f} {units.precip_label}"


def _wind(speed: float, kmh: float, direction: str, units: UnitConfig, mode: DisplayMode) -> str:
    parts = []
    if direction:
        parts.append(compass_icon(direction, mode))
    parts.append(f"{speed:.0f} {units.speed_label}")
    parts.append(beaufort_icon(beaufort_scale(kmh), mode))
    return " ".join(parts)


def build_current(
    snapshot: WeatherSnapshot,
    units: UnitConfig,
    mode: DisplayMode = DisplayMode.RICH,
    raw: bool = False,
    color: bool = False,
) -> Dict:
    reader = FieldReader(units, snapshot.schema)
    record = snapshot.current()
    code, description = _condition(reader, record)
    severe = is_severe(code)
    is_day = reader.value(record, "is_day", 1) >= 1

    temp = reader.value(record, "temperature")
    feels = reader.value(record, "feels_like", temp)
    wind_speed = reader.value(record, "wind_speed")
    wind_kmh = reader.metric(record, "wind_speed")
    direction = _wind_direction(reader, record, "wind_dir", "wind_degrees")
    uv = reader.value(record, "uv_index")

    astro = snapshot.astronomy()
    sunrise = format_clock(reader.text(astro, "sunrise"))
    sunset = format_clock(reader.text(astro, "sunset"))

    aqi_record = snapshot.air_quality()
    aqi = reader.value(aqi_record, "us_aqi", -1) if aqi_record else -1

    if raw:
        result = {
            "location": snapshot.location.display_name(),
            "condition_code": int(to_float(code, -1)),
            "condition": description,
            "severe": severe,
            "temperature": round(temp, 1),
            "feels_like": round(feels, 1),
            "clouds": round(reader.value(record, "clouds")),
            "precipitation": round(reader.value(record, "precipitation"), 2),
            "humidity": round(reader.value(record, "humidity")),
            "wind_speed": round(wind_speed, 1),
            "wind_direction": direction,
            "beaufort": beaufort_scale(wind_kmh),
            "beaufort_name": beaufort_name(beaufort_scale(wind_kmh)),
            "pressure": round(reader.value(record, "pressure"), 2),
            "visibility": round(reader.value(record, "visibility"), 1),
            "uv_index": round(uv, 1),
            "uv_band": uv_band(uv),
            "sunrise": sunrise,
            "sunset": sunset,
            "updated": reader.text(record, "updated"),
            "units": units.name,
        }
        if aqi >= 0:
            result["air_quality"] = round(aqi)
        return result

    condition = _icon_prefix(weather_icon(code, is_day, mode)) + description
    if severe:
        condition += colorize(severity_marker(mode), "red", color)

    rise_glyph, set_glyph = SUN_GLYPHS[mode]
    pressure = reader.value(record, "pressure")
    result = {
        "location": snapshot.location.display_name(),
        "condition": condition,
        "temperature": _temp(temp, units, color),
        "feels_like": _temp(feels, units, color),
        "clouds": f"{reader.value(record, 'clouds'):.0f}%",
        "precipitation": _precip(reader.value(record, "precipitation"), units),
        "humidity": f"{reader.value(record, 'humidity'):.0f}%",
        "wind": _wind(wind_speed, wind_kmh, direction, units, mode),
        "pressure": f"{pressure:.2f} {units.press_label}" if units.is_imperial else f"{pressure:.0f} {units.press_label}",
        "visibility": f"{reader.value(record, 'visibility'):.0f} {units.vis_label}",
        "uv_index": f"{uv:.0f} ({uv_band(uv)})",
    }
    if aqi >= 0:
        band = aqi_color(aqi)
        result["air_quality"] = colorize(f"{aqi:.0f} ({AQI_LABELS[band]})", band, color)
    result["sun"] = f"{rise_glyph} {sunrise}  {set_glyph} {sunset}"
    result["updated"] = reader.text(record, "updated", "--")
    return result


def build_hourly(
    snapshot: WeatherSnapshot,
    units: UnitConfig,
    mode: DisplayMode = DisplayMode.RICH,
    raw: bool = False,
    color: bool = False,
) -> List[Dict]:
    """One record per 3-hour boundary of today."""
    reader = FieldReader(units, snapshot.schema)
    rows = []
    for record in snapshot.hourly():
        hour = int(to_float(record.get("hour"), -1))
        if hour < 0 or hour % 3 != 0:
            continue
        code, description = _condition(reader, record)
        temp = reader.value(record, "temperature")
        feels = reader.value(record, "feels_like", temp)
        wind_speed = reader.value(record, "wind_speed")
        wind_kmh = reader.metric(record, "wind_speed")
        direction = _wind_direction(reader, record, "wind_dir", "wind_degrees")
        chance = reader.value(record, "precip_probability")

        if raw:
            rows.append({
                "time": f"{hour:02d}:00",
                "condition_code": int(to_float(code, -1)),
                "condition": description,
                "temperature": round(temp, 1),
                "feels_like": round(feels, 1),
                "precip_probability": round(chance),
                "precipitation": round(reader.value(record, "precipitation"), 2),
                "wind_speed": round(wind_speed, 1),
                "wind_direction": direction,
                "beaufort": beaufort_scale(wind_kmh),
                "humidity": round(reader.value(record, "humidity")),
            })
            continue

        is_day = reader.value(record, "is_day", 1) >= 1
        rows.append({
            "time": f"{hour:02d}:00",
            "condition": _icon_prefix(weather_icon(code, is_day, mode)) + description,
            "temperature": _temp(temp, units, color),
            "feels_like": _temp(feels, units, color),
            "precip_probability": f"{chance:.0f}%",
            "precipitation": _precip(reader.value(record, "precipitation"), units),
            "wind": _wind(wind_speed, wind_kmh, direction, units, mode),
            "humidity": f"{reader.value(record, 'humidity'):.0f}%",
        })
    return rows


def build_forecast(
    snapshot: WeatherSnapshot,
    units: UnitConfig,
    mode: DisplayMode = DisplayMode.RICH,
    raw: bool = False,
    color: bool = False,
) -> List[Dict]:
    """
    One record per forecast day. The snow column is present on every row
    when any day has snowfall, and on none otherwise.
    """
    reader = FieldReader(units, snapshot.schema)
    days = snapshot.daily()
    show_snow = any(reader.metric(day, "snow") > 0 for day in days)

    rows = []
    for day in days:
        code, description = _condition(reader, day)
        high = reader.value(day, "temp_max")
        low = reader.value(day, "temp_min")
        wind_speed = reader.value(day, "wind_max")
        wind_kmh = reader.metric(day, "wind_max")
        direction = _wind_direction(reader, day, "wind_max_dir", "wind_max_degrees")
        uv = reader.value(day, "uv_max")
        precip_total = reader.value(day, "precip_total")
        chance = reader.value(day, "precip_chance")
        snow = reader.value(day, "snow")
        sunrise = format_clock(reader.text(day, "sunrise"))
        sunset = format_clock(reader.text(day, "sunset"))

        if raw:
            row = {
                "date": str(day.get("date") or ""),
                "condition_code": int(to_float(code, -1)),
                "condition": description,
                "high": round(high, 1),
                "low": round(low, 1),
                "precipitation": round(precip_total, 2),
                "precip_chance": round(chance),
                "wind_speed": round(wind_speed, 1),
                "wind_direction": direction,
                "beaufort": beaufort_scale(wind_kmh),
                "uv_index": round(uv, 1),
                "sunrise": sunrise,
                "sunset": sunset,
            }
            if show_snow:
                row["snow"] = round(snow, 1)
            rows.append(row)
            continue

        row = {
            "date": str(day.get("date") or ""),
            "condition": _icon_prefix(weather_icon(code, True, mode)) + description,
            "high": _temp(high, units, color),
            "low": _temp(low, units, color),
            "precipitation": _precip(precip_total, units),
            "precip_chance": f"{chance:.0f}%",
            "wind": _wind(wind_speed, wind_kmh, direction, units, mode),
            "uv_index": f"{uv:.0f} ({uv_band(uv)})",
            "sunrise": sunrise,
            "sunset": sunset,
        }
        if show_snow:
            row["snow"] = f"{snow:.1f} {units.snow_label}"
        rows.append(row)
    return rows


def build_astronomy(
    snapshot: WeatherSnapshot,
    units: UnitConfig,
    mode: DisplayMode = DisplayMode.RICH,
    raw: bool = False,
    color: bool = False,
) -> Dict:
    """Sun and moon for today; empty when the provider has no astronomy."""
    reader = FieldReader(units, snapshot.schema)
    astro = snapshot.astronomy()
    if not astro:
        return {}

    illumination = reader.value(astro, "moon_illumination")
    phase_text = reader.text(astro, "moon_phase")
    phase = match_moon_phase(phase_text) or phase_text or moon_phase_from_illumination(illumination)

    result = {
        "sunrise": format_clock(reader.text(astro, "sunrise")),
        "sunset": format_clock(reader.text(astro, "sunset")),
    }
    for key in ("moonrise", "moonset"):
        value = reader.text(astro, key)
        if value:
            result[key] = format_clock(value)

    if raw:
        result["moon_phase"] = phase
        result["illumination"] = round(illumination)
        return result

    result["moon_phase"] = _icon_prefix(moon_icon(phase_text, illumination, mode)) + phase
    result["illumination"] = f"{illumination:.0f}%"
    return result


def build_air_quality(
    snapshot: WeatherSnapshot,
    units: UnitConfig,
    mode: DisplayMode = DisplayMode.RICH,
    raw: bool = False,
    color: bool = False,
) -> Dict:
    """Pollutants and both AQI scales; empty when no air-quality data."""
    reader = FieldReader(units, snapshot.schema)
    record = snapshot.air_quality()
    if not record:
        return {}

    pollutants = ("pm2_5", "pm10", "ozone", "no2")
    us_aqi = reader.value(record, "us_aqi")
    eu_aqi = reader.value(record, "eu_aqi")

    if raw:
        result = {key: round(reader.value(record, key), 1) for key in pollutants}
        result["us_aqi"] = round(us_aqi)
        result["eu_aqi"] = round(eu_aqi)
        return result

    result = {key: f"{reader.value(record, key):.1f} {POLLUTANT_UNIT}" for key in pollutants}
    for key, value in (("us_aqi", us_aqi), ("eu_aqi", eu_aqi)):
        band = aqi_color(value)
        result[key] = colorize(f"{value:.0f} ({AQI_LABELS[band]})", band, color)
    return result


def build_oneline(
    snapshot: WeatherSnapshot,
    units: UnitConfig,
    mode: DisplayMode = DisplayMode.RICH,
    raw: bool = False,
    color: bool = False,
) -> str:
    """Single status-bar line: location, icon, temperature and condition."""
    reader = FieldReader(units, snapshot.schema)
    record = snapshot.current()
    code, description = _condition(reader, record)
    temp = reader.value(record, "temperature")
    name = snapshot.location.name or snapshot.location.display_name()
    if raw:
        return f"{name}: {temp:.0f}{units.temp_label} - {description}"
    is_day = reader.value(record, "is_day", 1) >= 1
    icon = _icon_prefix(weather_icon(code, is_day, mode))
    return f"{name}: {icon}{_temp(temp, units, color)} - {description}"
