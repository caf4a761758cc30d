"""Weather domain model - pure data structures independent of any API."""
import time
from dataclasses import dataclass, field, asdict
from typing import Optional


DEFAULT_COUNTRY_CODE = "XX"


@dataclass(frozen=True)
class LocationDescriptor:
    """A resolved place: produced by geocoding or IP detection, never mutated."""
    name: str
    admin_region: str = ""
    country_name: str = ""
    country_code: str = DEFAULT_COUNTRY_CODE
    latitude: float = 0.0
    longitude: float = 0.0

    def display_name(self) -> str:
        """Join name, region and country, skipping blanks and repeats."""
        parts = []
        for part in (self.name, self.admin_region, self.country_name):
            part = (part or "").strip()
            if part and part not in parts:
                parts.append(part)
        return ", ".join(parts) or f"{self.latitude:.2f},{self.longitude:.2f}"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "LocationDescriptor":
        data = data or {}
        return cls(
            name=str(data.get("name") or ""),
            admin_region=str(data.get("admin_region") or ""),
            country_name=str(data.get("country_name") or ""),
            country_code=str(data.get("country_code") or DEFAULT_COUNTRY_CODE),
            latitude=_as_float(data.get("latitude")),
            longitude=_as_float(data.get("longitude")),
        )


@dataclass
class WeatherSnapshot:
    """
    The raw provider payload for one query plus what is needed to read it.

    ``weather`` and ``air_quality_payload`` are verbatim provider JSON and are
    treated as read-only. ``provider`` turns them into flat records.
    """
    location: LocationDescriptor
    weather: dict
    provider: object
    air_quality_payload: dict = field(default_factory=dict)
    fetched_at: float = field(default_factory=time.time)
    from_cache: bool = False

    @property
    def schema(self) -> dict:
        return self.provider.schema

    def current(self) -> dict:
        return self.provider.current(self.weather)

    def hourly(self) -> list:
        return self.provider.hourly(self.weather)

    def daily(self) -> list:
        return self.provider.daily(self.weather)

    def astronomy(self) -> dict:
        return self.provider.astronomy(self.weather)

    def air_quality(self) -> dict:
        if not self.air_quality_payload:
            return {}
        return self.provider.air_quality(self.air_quality_payload)

    def is_stale(self, max_age_seconds: int = 900) -> bool:
        """Check if this data is older than max_age_seconds."""
        return time.time() - self.fetched_at > max_age_seconds


def _as_float(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
