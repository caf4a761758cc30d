"""Environment / .env configuration."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

import cache_store

PROVIDERS = ("openmeteo", "wttr")
ICON_MODES = ("rich", "emoji", "text")


@dataclass(frozen=True)
class Config:
    location: str = ""
    lang: str = "en"
    provider: str = "openmeteo"
    units: str = ""
    icons: str = "rich"
    cache_dir: Optional[Path] = None
    timeout: float = 10.0
    max_retries: int = 3
    cache_ttl: int = cache_store.WEATHER_TTL
    aqi_cache_ttl: int = cache_store.AIR_QUALITY_TTL


def _number(name: str, default, cast):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return cast(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid {name}: {value!r} ({exc})") from exc


def _choice(name: str, default: str, choices) -> str:
    value = (os.getenv(name) or default).strip().lower()
    if value and value not in choices:
        raise SystemExit(f"Invalid {name}: {value!r} (expected one of {', '.join(choices)})")
    return value


def load_config(env_file: Optional[str] = None) -> Config:
    load_dotenv(env_file)

    cache_dir = os.getenv("WEATHER_CACHE_DIR")
    config = Config(
        location=os.getenv("WEATHER_LOCATION", ""),
        lang=os.getenv("WEATHER_LANG", "en"),
        provider=_choice("WEATHER_PROVIDER", "openmeteo", PROVIDERS),
        units=_choice("WEATHER_UNITS", "", ("imperial", "metric")),
        icons=_choice("WEATHER_ICONS", "rich", ICON_MODES),
        cache_dir=Path(cache_dir).expanduser() if cache_dir else None,
        timeout=_number("WEATHER_TIMEOUT", 10.0, float),
        max_retries=_number("WEATHER_MAX_RETRIES", 3, int),
        cache_ttl=_number("WEATHER_CACHE_TTL", cache_store.WEATHER_TTL, int),
        aqi_cache_ttl=_number("WEATHER_AQI_CACHE_TTL", cache_store.AIR_QUALITY_TTL, int),
    )
    logging.debug("Configuration loaded: %s", config)
    return config
