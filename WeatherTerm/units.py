"""
Unit selection and provider field mapping.

Exactly one of two UnitConfig values (IMPERIAL or METRIC) is chosen per
invocation. Providers describe where each quantity lives with a table of
``Field`` entries: a dual field names a metric and an imperial key (the
provider reports both), a canonical field names one metric key plus the
quantity it measures (converted here). ``FieldReader`` hides the
difference from the view builders.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional

# Countries (and US territories / associated states) that use imperial units.
IMPERIAL_COUNTRIES = frozenset({
    "US", "LR", "MM",
    "PR", "GU", "VI", "AS", "MP",
    "PW", "FM", "MH",
})

IMPERIAL_COUNTRY_NAMES = (
    "united states",
    "liberia",
    "myanmar",
    "puerto rico",
    "guam",
)


def _identity(value: float) -> float:
    return value


@dataclass(frozen=True)
class UnitConfig:
    """Display labels, thresholds and conversions for one unit system."""
    is_imperial: bool
    temp_label: str
    speed_label: str
    precip_label: str
    snow_label: str
    vis_label: str
    press_label: str
    hot_limit: float
    cold_limit: float
    # quantity -> conversion from the canonical metric unit
    converters: Mapping[str, Callable[[float], float]] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return "imperial" if self.is_imperial else "metric"

    def convert(self, quantity: Optional[str], value: float) -> float:
        if quantity is None:
            return value
        return self.converters.get(quantity, _identity)(value)


IMPERIAL = UnitConfig(
    is_imperial=True,
    temp_label="°F",
    speed_label="mph",
    precip_label="in",
    snow_label="in",
    vis_label="mi",
    press_label="inHg",
    hot_limit=80,
    cold_limit=40,
    converters={
        "temperature": lambda c: c * 9 / 5 + 32,
        "speed": lambda kmh: kmh / 1.609344,
        "precipitation": lambda mm: mm / 25.4,
        "snow": lambda cm: cm / 2.54,
        "distance": lambda km: km / 1.609344,
        "distance_m": lambda m: m / 1609.344,
        "pressure": lambda hpa: hpa * 0.02953,
    },
)

METRIC = UnitConfig(
    is_imperial=False,
    temp_label="°C",
    speed_label="km/h",
    precip_label="mm",
    snow_label="cm",
    vis_label="km",
    press_label="hPa",
    hot_limit=27,
    cold_limit=4,
    converters={
        "distance_m": lambda m: m / 1000,
    },
)


def is_imperial_country(country_code: str, country_name: str = "") -> bool:
    """Membership test on the country code, falling back to the country name."""
    if (country_code or "").strip().upper() in IMPERIAL_COUNTRIES:
        return True
    name = (country_name or "").lower()
    return any(candidate in name for candidate in IMPERIAL_COUNTRY_NAMES)


def select_units(
    explicit_imperial: bool,
    explicit_metric: bool,
    country_code: str,
    country_name: str = "",
) -> UnitConfig:
    """
    Pick the unit system; the first matching rule wins:
    imperial flag, metric flag, imperial country, metric.
    """
    if explicit_imperial:
        reason, units = "--imperial flag", IMPERIAL
    elif explicit_metric:
        reason, units = "--metric flag", METRIC
    elif is_imperial_country(country_code, country_name):
        reason, units = f"country {country_code or country_name}", IMPERIAL
    else:
        reason, units = "default", METRIC
    logging.debug(f"Units: {units.name} ({reason})")
    return units


@dataclass(frozen=True)
class Field:
    """Where a quantity lives in a provider record."""
    metric: str
    imperial: Optional[str] = None
    quantity: Optional[str] = None

    @property
    def is_dual(self) -> bool:
        return self.imperial is not None


def to_float(value, default: float = 0.0) -> float:
    """Coerce a provider value to float; None, blanks, junk, NaN and inf become default."""
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


class FieldReader:
    """Reads quantities out of provider records in the selected units."""

    def __init__(self, units: UnitConfig, schema: Dict[str, Field]):
        self.units = units
        self.schema = schema

    def has(self, name: str) -> bool:
        return name in self.schema

    def value(self, record: dict, name: str, default: float = 0.0) -> float:
        """Quantity in display units, or default if absent."""
        entry = self.schema.get(name)
        if entry is None:
            return default
        if entry.is_dual:
            key = entry.imperial if self.units.is_imperial else entry.metric
            return to_float(record.get(key), default)
        raw = to_float(record.get(entry.metric), None)
        if raw is None:
            return default
        return self.units.convert(entry.quantity, raw)

    def metric(self, record: dict, name: str, default: float = 0.0) -> float:
        """Quantity in its canonical metric unit, for thresholds like Beaufort."""
        entry = self.schema.get(name)
        if entry is None:
            return default
        raw = to_float(record.get(entry.metric), default)
        if not entry.is_dual and entry.quantity and entry.quantity in METRIC.converters:
            return METRIC.convert(entry.quantity, raw)
        return raw

    def text(self, record: dict, name: str, default: str = "") -> str:
        entry = self.schema.get(name)
        if entry is None:
            return default
        raw = record.get(entry.metric)
        if raw is None:
            return default
        return str(raw).strip() or default


def temperature_color(value: float, units: UnitConfig) -> str:
    """Gradient colour name for a temperature in the config's own unit."""
    if value >= units.hot_limit:
        return "red"
    if value <= units.cold_limit:
        return "blue"
    midpoint = (units.hot_limit + units.cold_limit) / 2
    return "yellow" if value >= midpoint else "green"
