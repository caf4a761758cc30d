"""Shared fixtures: sample provider payloads and locations."""
import copy

import pytest

from openmeteo_provider import OpenMeteoProvider
from weather_data import LocationDescriptor, WeatherSnapshot
from wttr_provider import WttrProvider


def _openmeteo_hourly():
    times = [f"2024-05-01T{h:02d}:00" for h in range(24)] + [f"2024-05-02T{h:02d}:00" for h in range(3)]
    n = len(times)
    return {
        "time": times,
        "temperature_2m": [10.0 + i * 0.5 for i in range(n)],
        "apparent_temperature": [9.0 + i * 0.5 for i in range(n)],
        "relative_humidity_2m": [70] * n,
        "precipitation": [0.0] * n,
        "precipitation_probability": [20] * n,
        "weather_code": [3] * n,
        "wind_speed_10m": [10.0] * n,
        "wind_direction_10m": [180] * n,
        "is_day": [1 if 6 <= i % 24 < 21 else 0 for i in range(n)],
    }


OPENMETEO_PAYLOAD = {
    "latitude": 48.86,
    "longitude": 2.34,
    "timezone": "Europe/Paris",
    "current": {
        "time": "2024-05-01T14:00",
        "temperature_2m": 20.0,
        "apparent_temperature": 19.0,
        "relative_humidity_2m": 60,
        "precipitation": 0.0,
        "weather_code": 2,
        "cloud_cover": 40,
        "pressure_msl": 1015.0,
        "wind_speed_10m": 15.0,
        "wind_direction_10m": 225,
        "visibility": 24000.0,
        "uv_index": 5.0,
        "is_day": 1,
    },
    "hourly": _openmeteo_hourly(),
    "daily": {
        "time": ["2024-05-01", "2024-05-02", "2024-05-03"],
        "weather_code": [2, 61, 95],
        "temperature_2m_max": [22.0, 18.0, 16.0],
        "temperature_2m_min": [10.0, 9.0, 8.0],
        "precipitation_sum": [0.0, 5.5, 12.0],
        "precipitation_probability_max": [10, 80, 90],
        "snowfall_sum": [0.0, 0.0, 0.0],
        "wind_speed_10m_max": [20.0, 30.0, 45.0],
        "wind_direction_10m_dominant": [225, 270, 0],
        "uv_index_max": [6.5, 3.0, 2.0],
        "sunrise": ["2024-05-01T06:12", "2024-05-02T06:10", "2024-05-03T06:08"],
        "sunset": ["2024-05-01T20:45", "2024-05-02T20:47", "2024-05-03T20:48"],
    },
}

AIR_QUALITY_PAYLOAD = {
    "current": {
        "time": "2024-05-01T14:00",
        "us_aqi": 42,
        "european_aqi": 55,
        "pm2_5": 8.2,
        "pm10": 15.1,
        "ozone": 60.3,
        "nitrogen_dioxide": 12.4,
    }
}


def _wttr_hour(slot, temp_c, code="116", desc="Partly cloudy", wind_kmph="10", chance="20", precip="0.5"):
    return {
        "time": str(slot),
        "tempC": str(temp_c),
        "tempF": str(round(temp_c * 9 / 5 + 32)),
        "FeelsLikeC": str(temp_c - 1),
        "FeelsLikeF": str(round((temp_c - 1) * 9 / 5 + 32)),
        "chanceofrain": chance,
        "precipMM": precip,
        "precipInches": "0.02",
        "weatherCode": code,
        "weatherDesc": [{"value": desc}],
        "windspeedKmph": wind_kmph,
        "windspeedMiles": str(round(int(wind_kmph) / 1.609)),
        "winddir16Point": "W",
        "winddirDegree": "270",
        "humidity": "70",
        "cloudcover": "50",
        "uvIndex": "2",
        "pressure": "1014",
        "visibility": "10",
    }


def _wttr_day(date, snow="0.0"):
    hours = [_wttr_hour(slot, 8 + i) for i, slot in enumerate(range(0, 2400, 300))]
    hours[4] = _wttr_hour(1200, 14, code="296", desc="Light rain", wind_kmph="25", chance="85")
    return {
        "date": date,
        "maxtempC": "16",
        "maxtempF": "61",
        "mintempC": "8",
        "mintempF": "46",
        "totalSnow_cm": snow,
        "uvIndex": "4",
        "astronomy": [{
            "moon_illumination": "45",
            "moon_phase": "Waxing Crescent",
            "moonrise": "10:04 AM",
            "moonset": "12:30 AM",
            "sunrise": "05:55 AM",
            "sunset": "08:12 PM",
        }],
        "hourly": hours,
    }


WTTR_PAYLOAD = {
    "current_condition": [{
        "FeelsLikeC": "12",
        "FeelsLikeF": "54",
        "cloudcover": "75",
        "humidity": "82",
        "localObsDateTime": "2024-05-01 02:15 PM",
        "observation_time": "12:15 PM",
        "precipInches": "0.0",
        "precipMM": "0.1",
        "pressure": "1015",
        "pressureInches": "30",
        "temp_C": "13",
        "temp_F": "55",
        "uvIndex": "3",
        "visibility": "10",
        "visibilityMiles": "6",
        "weatherCode": "389",
        "weatherDesc": [{"value": "Moderate or heavy rain with thunder"}],
        "winddir16Point": "SW",
        "winddirDegree": "220",
        "windspeedKmph": "15",
        "windspeedMiles": "9",
    }],
    "weather": [
        _wttr_day("2024-05-01"),
        _wttr_day("2024-05-02"),
        _wttr_day("2024-05-03", snow="1.2"),
    ],
}


@pytest.fixture
def paris():
    return LocationDescriptor(
        name="Paris",
        admin_region="Île-de-France",
        country_name="France",
        country_code="FR",
        latitude=48.8534,
        longitude=2.3488,
    )


@pytest.fixture
def denver():
    return LocationDescriptor(
        name="Denver",
        admin_region="Colorado",
        country_name="United States",
        country_code="US",
        latitude=39.7392,
        longitude=-104.9847,
    )


@pytest.fixture
def openmeteo_payload():
    """Sample Open-Meteo forecast response."""
    return copy.deepcopy(OPENMETEO_PAYLOAD)


@pytest.fixture
def air_quality_payload():
    """Sample Open-Meteo air-quality response."""
    return copy.deepcopy(AIR_QUALITY_PAYLOAD)


@pytest.fixture
def wttr_payload():
    """Sample wttr.in format=j1 response."""
    return copy.deepcopy(WTTR_PAYLOAD)


@pytest.fixture
def openmeteo_snapshot(paris, openmeteo_payload, air_quality_payload):
    return WeatherSnapshot(
        location=paris,
        weather=openmeteo_payload,
        provider=OpenMeteoProvider(),
        air_quality_payload=air_quality_payload,
    )


@pytest.fixture
def wttr_snapshot(paris, wttr_payload):
    return WeatherSnapshot(location=paris, weather=wttr_payload, provider=WttrProvider())
