"""
Condition, icon, wind and moon lookup tables - pure functions for testability.

Every function here is total: unmapped codes, labels and values fall back
to a defined output instead of raising. Glyphs are chosen per DisplayMode:
RICH uses Nerd Font weather glyphs, EMOJI uses emoji, TEXT uses none.

Condition codes come from two families that do not overlap: WMO codes
(0-99, used by Open-Meteo) and WWO codes (113-395, used by wttr.in).
"""
import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Tuple, Union


class DisplayMode(Enum):
    RICH = "rich"
    EMOJI = "emoji"
    TEXT = "text"


# code -> (category, description)
CONDITIONS = {
    # WMO
    0: ("clear", "Clear sky"),
    1: ("clear", "Mainly clear"),
    2: ("cloudy", "Partly cloudy"),
    3: ("cloudy", "Overcast"),
    45: ("fog", "Fog"),
    48: ("fog", "Depositing rime fog"),
    51: ("drizzle", "Light drizzle"),
    53: ("drizzle", "Moderate drizzle"),
    55: ("drizzle", "Dense drizzle"),
    56: ("sleet", "Light freezing drizzle"),
    57: ("sleet", "Dense freezing drizzle"),
    61: ("rain", "Slight rain"),
    63: ("rain", "Moderate rain"),
    65: ("rain", "Heavy rain"),
    66: ("sleet", "Light freezing rain"),
    67: ("sleet", "Heavy freezing rain"),
    71: ("snow", "Slight snowfall"),
    73: ("snow", "Moderate snowfall"),
    75: ("snow", "Heavy snowfall"),
    77: ("snow", "Snow grains"),
    80: ("rain", "Slight rain showers"),
    81: ("rain", "Moderate rain showers"),
    82: ("rain", "Violent rain showers"),
    85: ("snow", "Slight snow showers"),
    86: ("snow", "Heavy snow showers"),
    95: ("thunderstorm", "Thunderstorm"),
    96: ("thunderstorm", "Thunderstorm with hail"),
    99: ("thunderstorm", "Thunderstorm with heavy hail"),
    # WWO
    113: ("clear", "Clear"),
    116: ("cloudy", "Partly cloudy"),
    119: ("cloudy", "Cloudy"),
    122: ("cloudy", "Overcast"),
    143: ("fog", "Mist"),
    176: ("rain", "Patchy rain possible"),
    179: ("snow", "Patchy snow possible"),
    182: ("sleet", "Patchy sleet possible"),
    185: ("sleet", "Patchy freezing drizzle possible"),
    200: ("thunderstorm", "Thundery outbreaks possible"),
    227: ("snow", "Blowing snow"),
    230: ("snow", "Blizzard"),
    248: ("fog", "Fog"),
    260: ("fog", "Freezing fog"),
    263: ("drizzle", "Patchy light drizzle"),
    266: ("drizzle", "Light drizzle"),
    281: ("sleet", "Freezing drizzle"),
    284: ("sleet", "Heavy freezing drizzle"),
    293: ("rain", "Patchy light rain"),
    296: ("rain", "Light rain"),
    299: ("rain", "Moderate rain at times"),
    302: ("rain", "Moderate rain"),
    305: ("rain", "Heavy rain at times"),
    308: ("rain", "Heavy rain"),
    311: ("sleet", "Light freezing rain"),
    314: ("sleet", "Moderate or heavy freezing rain"),
    317: ("sleet", "Light sleet"),
    320: ("sleet", "Moderate or heavy sleet"),
    323: ("snow", "Patchy light snow"),
    326: ("snow", "Light snow"),
    329: ("snow", "Patchy moderate snow"),
    332: ("snow", "Moderate snow"),
    335: ("snow", "Patchy heavy snow"),
    338: ("snow", "Heavy snow"),
    350: ("hail", "Ice pellets"),
    353: ("rain", "Light rain shower"),
    356: ("rain", "Moderate or heavy rain shower"),
    359: ("rain", "Torrential rain shower"),
    362: ("sleet", "Light sleet showers"),
    365: ("sleet", "Moderate or heavy sleet showers"),
    368: ("snow", "Light snow showers"),
    371: ("snow", "Moderate or heavy snow showers"),
    374: ("hail", "Light showers of ice pellets"),
    377: ("hail", "Moderate or heavy showers of ice pellets"),
    386: ("thunderstorm", "Patchy light rain with thunder"),
    389: ("thunderstorm", "Moderate or heavy rain with thunder"),
    392: ("thunderstorm", "Patchy light snow with thunder"),
    395: ("thunderstorm", "Moderate or heavy snow with thunder"),
}

SEVERE_CODES = frozenset({
    67, 75, 82, 86, 95, 96, 99,
    200, 227, 230, 308, 314, 338, 359, 371, 377, 386, 389, 392, 395,
})

# category -> (day, night)
RICH_WEATHER = {
    "clear": ("\ue30d", "\ue32b"),
    "cloudy": ("\ue302", "\ue37e"),
    "fog": ("\ue313", "\ue313"),
    "drizzle": ("\ue31c", "\ue31c"),
    "rain": ("\ue318", "\ue318"),
    "snow": ("\ue31a", "\ue31a"),
    "sleet": ("\ue3ad", "\ue3ad"),
    "hail": ("\ue314", "\ue314"),
    "thunderstorm": ("\ue31d", "\ue31d"),
    "unknown": ("\ue350", "\ue350"),
}

EMOJI_WEATHER = {
    "clear": ("☀️", "🌙"),
    "cloudy": ("⛅", "☁️"),
    "fog": ("🌫️", "🌫️"),
    "drizzle": ("🌦️", "🌧️"),
    "rain": ("🌧️", "🌧️"),
    "snow": ("❄️", "❄️"),
    "sleet": ("🌨️", "🌨️"),
    "hail": ("🧊", "🧊"),
    "thunderstorm": ("⛈️", "⛈️"),
    "unknown": ("🌡️", "🌡️"),
}

SEVERE_MARKERS = {
    DisplayMode.RICH: " \uf071",
    DisplayMode.EMOJI: " ⚠️",
    DisplayMode.TEXT: " [SEVERE]",
}

BEAUFORT_LIMITS = (1, 5, 11, 19, 28, 38, 49, 61, 74, 88, 102, 117)

BEAUFORT_NAMES = (
    "Calm", "Light air", "Light breeze", "Gentle breeze", "Moderate breeze",
    "Fresh breeze", "Strong breeze", "Near gale", "Gale", "Strong gale",
    "Storm", "Violent storm", "Hurricane force",
)

# wind_beaufort_0 .. wind_beaufort_12
RICH_BEAUFORT = tuple(chr(0xE3AF + n) for n in range(13))

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)

# Arrows show where the wind blows to; two compass points per octant.
WIND_ARROWS = {
    "N": "↓", "NNE": "↓", "NE": "↙", "ENE": "↙",
    "E": "←", "ESE": "←", "SE": "↖", "SSE": "↖",
    "S": "↑", "SSW": "↑", "SW": "↗", "WSW": "↗",
    "W": "→", "WNW": "→", "NW": "↘", "NNW": "↘",
}

MOON_PHASES = (
    "New Moon", "Waxing Crescent", "First Quarter", "Waxing Gibbous",
    "Full Moon", "Waning Gibbous", "Last Quarter", "Waning Crescent",
)

MOON_ALIASES = {"third quarter": "Last Quarter"}

EMOJI_MOON = dict(zip(MOON_PHASES, ("🌑", "🌒", "🌓", "🌔", "🌕", "🌖", "🌗", "🌘")))
RICH_MOON = dict(zip(MOON_PHASES, (
    "\ue38d", "\ue390", "\ue394", "\ue397", "\ue39b", "\ue39e", "\ue3a2", "\ue3a5",
)))

SYNODIC_MONTH = 29.530588853
REFERENCE_NEW_MOON = datetime(2000, 1, 6, 18, 14, tzinfo=timezone.utc)

UV_BANDS = ((3, "Low"), (6, "Moderate"), (8, "High"), (11, "Very High"))

AQI_BANDS = ((50, "green"), (100, "yellow"), (150, "orange"), (200, "red"))


def _as_code(code) -> int:
    try:
        return int(float(code))
    except (TypeError, ValueError, OverflowError):
        return -1


def _as_number(value, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def weather_category(code) -> str:
    return CONDITIONS.get(_as_code(code), ("unknown", ""))[0]


def weather_icon(code, is_daytime: bool = True, mode: DisplayMode = DisplayMode.RICH) -> str:
    """Glyph for a condition code; unknown codes get the thermometer glyph."""
    if mode is DisplayMode.TEXT:
        return ""
    table = RICH_WEATHER if mode is DisplayMode.RICH else EMOJI_WEATHER
    day, night = table[weather_category(code)]
    return day if is_daytime else night


def condition_description(code) -> str:
    """Fixed-language label for a condition code."""
    return CONDITIONS.get(_as_code(code), ("unknown", "Unknown"))[1]


def is_severe(code) -> bool:
    return _as_code(code) in SEVERE_CODES


def severity_marker(mode: DisplayMode) -> str:
    return SEVERE_MARKERS[mode]


def beaufort_scale(wind_kmh: float) -> int:
    """Beaufort force for a wind speed in km/h; unreadable speeds are calm."""
    wind_kmh = _as_number(wind_kmh)
    for scale, limit in enumerate(BEAUFORT_LIMITS):
        if wind_kmh <= limit:
            return scale
    return 12


def beaufort_name(scale: int) -> str:
    return BEAUFORT_NAMES[min(max(_as_code(scale), 0), 12)]


def beaufort_icon(scale: int, mode: DisplayMode = DisplayMode.RICH) -> str:
    scale = min(max(_as_code(scale), 0), 12)
    if mode is DisplayMode.RICH:
        return RICH_BEAUFORT[scale]
    return f"[Bft {scale}]"


def compass_label(degrees: float) -> str:
    """
    One of 16 compass points for a bearing in degrees, or "" when the
    bearing is not a finite number.

    Sectors are 22.5 degrees wide and centred on each point, so the index is
    floor((degrees + 11.25) / 22.5) mod 16 rather than a rounded quotient:
    rounding would shift every boundary by half a sector (11.24 degrees
    would read NNE).
    """
    try:
        degrees = float(degrees)
    except (TypeError, ValueError):
        return ""
    if not math.isfinite(degrees):
        return ""
    index = int(((degrees % 360) + 11.25) / 22.5) % 16
    return COMPASS_POINTS[index]


def compass_icon(direction: Union[str, float, int], mode: DisplayMode = DisplayMode.RICH) -> str:
    """
    Arrow glyph (RICH) or compass label (other modes) for a wind direction.

    Accepts a 16-point label or raw degrees. Unrecognized labels come back
    unchanged in every mode.
    """
    if isinstance(direction, (int, float)) and not isinstance(direction, bool):
        label = compass_label(direction)
        if not label:
            return str(direction)
    else:
        label = str(direction).strip()
        if label.upper() in WIND_ARROWS:
            label = label.upper()
        else:
            return str(direction)
    if mode is DisplayMode.RICH:
        return WIND_ARROWS[label]
    return label


def match_moon_phase(phase_name: str) -> str:
    """Canonical phase for a provider phase name, or "" when none matches."""
    name = (phase_name or "").lower()
    if not name:
        return ""
    for alias, canonical in MOON_ALIASES.items():
        if alias in name:
            return canonical
    for canonical in MOON_PHASES:
        if canonical.lower() in name:
            return canonical
    # Providers sometimes drop the "Moon" suffix ("Full", "New")
    for canonical in MOON_PHASES:
        if canonical.split()[0].lower() == name.strip():
            return canonical
    return ""


def moon_phase_from_illumination(illumination_percent: float) -> str:
    if illumination_percent < 5:
        return "New Moon"
    if illumination_percent < 45:
        return "Waxing Crescent"
    if illumination_percent < 55:
        return "First Quarter"
    if illumination_percent < 95:
        return "Waxing Gibbous"
    return "Full Moon"


def moon_icon(phase_name: str, illumination_percent: float = 0.0,
              mode: DisplayMode = DisplayMode.RICH) -> str:
    """Moon glyph by phase name, falling back to illumination banding."""
    if mode is DisplayMode.TEXT:
        return ""
    phase = match_moon_phase(phase_name)
    if not phase:
        try:
            illumination = float(illumination_percent)
        except (TypeError, ValueError):
            illumination = 0.0
        if not math.isfinite(illumination):
            illumination = 0.0
        phase = moon_phase_from_illumination(illumination)
    table = RICH_MOON if mode is DisplayMode.RICH else EMOJI_MOON
    return table[phase]


def moon_phase_for(day: date) -> Tuple[str, int]:
    """Approximate (phase name, illumination %) at noon UTC on a date."""
    noon = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc)
    age = ((noon - REFERENCE_NEW_MOON).total_seconds() / 86400) % SYNODIC_MONTH
    fraction = age / SYNODIC_MONTH
    illumination = round((1 - math.cos(2 * math.pi * fraction)) / 2 * 100)
    index = int(fraction * 8 + 0.5) % 8
    return MOON_PHASES[index], illumination


def uv_band(uv_index: float) -> str:
    uv_index = _as_number(uv_index)
    for limit, label in UV_BANDS:
        if uv_index < limit:
            return label
    return "Extreme"


def aqi_color(aqi: float) -> str:
    aqi = _as_number(aqi)
    for limit, color in AQI_BANDS:
        if aqi <= limit:
            return color
    return "purple"
