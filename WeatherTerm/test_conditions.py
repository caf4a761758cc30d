"""Tests for condition, wind and moon lookup tables."""
from datetime import date

import pytest

from conditions import (
    COMPASS_POINTS,
    CONDITIONS,
    DisplayMode,
    RICH_WEATHER,
    aqi_color,
    beaufort_icon,
    beaufort_name,
    beaufort_scale,
    compass_icon,
    compass_label,
    condition_description,
    is_severe,
    moon_icon,
    moon_phase_for,
    severity_marker,
    uv_band,
    weather_category,
    weather_icon,
)


def test_beaufort_scale_endpoints():
    """Calm at zero, hurricane force above 117 km/h."""
    assert beaufort_scale(0) == 0
    assert beaufort_scale(118) == 12
    assert beaufort_scale(500) == 12


@pytest.mark.parametrize("kmh,expected", [
    (1, 0), (1.5, 1), (5, 1), (11, 2), (19, 3), (20, 4), (28, 4),
    (38, 5), (49, 6), (61, 7), (74, 8), (88, 9), (102, 10), (117, 11),
])
def test_beaufort_scale_thresholds(kmh, expected):
    assert beaufort_scale(kmh) == expected


def test_beaufort_scale_monotonic_and_bounded():
    """Scale never decreases as wind speed rises and stays in 0..12."""
    previous = 0
    for tenths in range(0, 1500):
        scale = beaufort_scale(tenths / 10)
        assert 0 <= scale <= 12
        assert scale >= previous
        previous = scale


def test_beaufort_icon_modes():
    rich = {beaufort_icon(n, DisplayMode.RICH) for n in range(13)}
    assert len(rich) == 13
    assert beaufort_icon(4, DisplayMode.EMOJI) == "[Bft 4]"
    assert beaufort_icon(12, DisplayMode.TEXT) == "[Bft 12]"


def test_compass_icon_all_labels():
    """Every compass label has a rich glyph and passes through in text mode."""
    for label in COMPASS_POINTS:
        assert compass_icon(label, DisplayMode.RICH)
        assert compass_icon(label, DisplayMode.TEXT) == label
        assert compass_icon(label, DisplayMode.EMOJI) == label


def test_compass_icon_unknown_label_unchanged():
    for mode in DisplayMode:
        assert compass_icon("VAR", mode) == "VAR"


def test_compass_icon_from_degrees():
    assert compass_icon(0, DisplayMode.TEXT) == "N"
    assert compass_icon(90, DisplayMode.TEXT) == "E"
    assert compass_icon(225.0, DisplayMode.TEXT) == "SW"
    assert compass_icon(180, DisplayMode.RICH) == compass_icon("S", DisplayMode.RICH)


@pytest.mark.parametrize("degrees,label", [
    (0, "N"), (11, "N"), (12, "NNE"), (45, "NE"), (90, "E"),
    (180, "S"), (270, "W"), (348.75, "N"), (360, "N"), (-90, "W"),
])
def test_compass_label(degrees, label):
    assert compass_label(degrees) == label


def test_weather_icon_defined_for_every_code_and_mode():
    for code in CONDITIONS:
        assert weather_icon(code, True, DisplayMode.RICH)
        assert weather_icon(code, False, DisplayMode.EMOJI)
        assert weather_icon(code, True, DisplayMode.TEXT) == ""


def test_weather_icon_unknown_code_fallback():
    """Unmapped codes get the thermometer glyph, never an error."""
    assert weather_category(12345) == "unknown"
    assert weather_icon(12345, True, DisplayMode.RICH) == RICH_WEATHER["unknown"][0]
    assert weather_icon("garbage", True, DisplayMode.EMOJI) == "🌡️"
    assert weather_icon(None, True, DisplayMode.TEXT) == ""


def test_weather_icon_day_and_night():
    assert weather_icon(0, True, DisplayMode.EMOJI) == "☀️"
    assert weather_icon(0, False, DisplayMode.EMOJI) == "🌙"
    assert weather_icon("113", False, DisplayMode.EMOJI) == "🌙"


def test_condition_description():
    assert condition_description(0) == "Clear sky"
    assert condition_description("230") == "Blizzard"
    assert condition_description(95) == "Thunderstorm"
    assert condition_description(-7) == "Unknown"


def test_severe_codes():
    assert is_severe(95)
    assert is_severe("389")
    assert is_severe(230)
    assert not is_severe(0)
    assert not is_severe("116")
    assert not is_severe(None)


def test_severity_marker_per_mode():
    assert severity_marker(DisplayMode.TEXT) == " [SEVERE]"
    assert "⚠" in severity_marker(DisplayMode.EMOJI)
    assert severity_marker(DisplayMode.RICH).strip()


def test_moon_icon_phase_name_wins():
    """Phase names match case-insensitively and take priority over illumination."""
    assert moon_icon("Full Moon", 3, DisplayMode.EMOJI) == "🌕"
    assert moon_icon("waning crescent", 99, DisplayMode.EMOJI) == "🌘"
    assert moon_icon("Third Quarter", 50, DisplayMode.EMOJI) == "🌗"


@pytest.mark.parametrize("illumination,emoji", [
    (0, "🌑"), (4.9, "🌑"), (5, "🌒"), (44, "🌒"), (45, "🌓"),
    (54, "🌓"), (55, "🌔"), (94, "🌔"), (95, "🌕"), (100, "🌕"),
])
def test_moon_icon_illumination_fallback(illumination, emoji):
    assert moon_icon("", illumination, DisplayMode.EMOJI) == emoji
    assert moon_icon("Blue-ish", illumination, DisplayMode.RICH)


def test_moon_icon_text_mode_empty():
    assert moon_icon("Full Moon", 100, DisplayMode.TEXT) == ""


def test_moon_phase_for_known_dates():
    phase, illumination = moon_phase_for(date(2000, 1, 21))
    assert phase == "Full Moon"
    assert illumination >= 95
    phase, illumination = moon_phase_for(date(2000, 1, 7))
    assert phase == "New Moon"
    assert illumination <= 5


@pytest.mark.parametrize("uv,band", [
    (0, "Low"), (2.9, "Low"), (3, "Moderate"), (6, "High"),
    (8, "Very High"), (10.9, "Very High"), (11, "Extreme"),
])
def test_uv_band(uv, band):
    assert uv_band(uv) == band


@pytest.mark.parametrize("aqi,color", [
    (0, "green"), (50, "green"), (51, "yellow"), (100, "yellow"),
    (150, "orange"), (200, "red"), (201, "purple"),
])
def test_aqi_color(aqi, color):
    assert aqi_color(aqi) == color


def test_beaufort_name():
    assert beaufort_name(0) == "Calm"
    assert beaufort_name(3) == "Gentle breeze"
    assert beaufort_name(12) == "Hurricane force"
    assert beaufort_name(40) == "Hurricane force"


NOT_NUMBERS = [float("nan"), float("inf"), float("-inf"), None, "", "calm"]


@pytest.mark.parametrize("value", NOT_NUMBERS)
def test_wind_functions_total_on_bad_input(value):
    """Unreadable speeds and scales fall back to calm instead of raising."""
    assert beaufort_scale(value) == 0
    assert beaufort_name(value) == "Calm"
    assert beaufort_icon(value, DisplayMode.TEXT) == "[Bft 0]"
    assert beaufort_icon(value, DisplayMode.RICH) == beaufort_icon(0, DisplayMode.RICH)


@pytest.mark.parametrize("degrees", [float("nan"), float("inf"), float("-inf")])
def test_compass_non_finite_degrees(degrees):
    """Non-finite bearings have no label and pass through compass_icon unchanged."""
    assert compass_label(degrees) == ""
    for mode in DisplayMode:
        assert compass_icon(degrees, mode) == str(degrees)


def test_compass_label_unreadable_input():
    assert compass_label(None) == ""
    assert compass_label("north-ish") == ""
    assert compass_label("225") == "SW"


def test_compass_label_sector_boundary():
    """Sectors are floored: the boundary belongs to the next point."""
    assert compass_label(11.24) == "N"
    assert compass_label(11.25) == "NNE"


@pytest.mark.parametrize("value", NOT_NUMBERS)
def test_bands_total_on_bad_input(value):
    assert uv_band(value) == "Low"
    assert aqi_color(value) == "green"
    assert moon_icon("", value, DisplayMode.EMOJI) == "🌑"
