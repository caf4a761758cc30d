"""Command-line weather client."""
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

import cache_store
from conditions import DisplayMode
from location import LocationResolver
from openmeteo_provider import OpenMeteoProvider
from tiers import Tier, project, render_oneline, render_record, render_table, select_tier
from units import UnitConfig, select_units
from views import (
    LABELS,
    build_air_quality,
    build_astronomy,
    build_current,
    build_forecast,
    build_hourly,
    build_oneline,
)
from weather_config import PROVIDERS, Config, load_config
from weather_data import WeatherSnapshot
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_service import WeatherService
from wttr_provider import WttrProvider

VIEWS = ("current", "forecast", "hourly", "astronomy", "air_quality", "oneline")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        "weather-term",
        description="Current conditions, forecasts, astronomy and air quality in the terminal.",
    )
    parser.add_argument("location", nargs="?", default=None,
                        help="Place name or 'lat,lon'; empty to auto-detect from IP. "
                             "Coordinates carry no country, so they use metric unless -i is given")

    views = parser.add_mutually_exclusive_group()
    views.add_argument("--current", dest="view", action="store_const", const="current",
                       help="Current conditions (default)")
    views.add_argument("-f", "--forecast", dest="view", action="store_const", const="forecast")
    views.add_argument("-H", "--hourly", dest="view", action="store_const", const="hourly")
    views.add_argument("-a", "--astronomy", dest="view", action="store_const", const="astronomy")
    views.add_argument("-q", "--air-quality", dest="view", action="store_const", const="air_quality")
    views.add_argument("-1", "--oneline", dest="view", action="store_const", const="oneline")

    tiers = parser.add_mutually_exclusive_group()
    tiers.add_argument("--full", dest="tier", action="store_const", const=Tier.FULL)
    tiers.add_argument("--compact", dest="tier", action="store_const", const=Tier.COMPACT)
    tiers.add_argument("--minimal", dest="tier", action="store_const", const=Tier.MINIMAL)

    parser.add_argument("-i", "--imperial", action="store_true", help="Imperial units (wins over --metric; needed for US 'lat,lon' queries)")
    parser.add_argument("-m", "--metric", action="store_true", help="Metric units")

    icons = parser.add_mutually_exclusive_group()
    icons.add_argument("--emoji", dest="icons", action="store_const", const="emoji")
    icons.add_argument("--text", dest="icons", action="store_const", const="text")
    parser.add_argument("--no-color", action="store_true")

    parser.add_argument("--raw", action="store_true", help="Print the typed record as JSON")
    parser.add_argument("--json", action="store_true", help="Print the full provider payload")

    parser.add_argument("-r", "--refresh", action="store_true", help="Ignore and replace cached data")
    parser.add_argument("--clear-cache", action="store_true", help="Delete all cached data and exit")

    parser.add_argument("-l", "--lang", default=None, help="Language code for geocoding")
    parser.add_argument("--provider", choices=PROVIDERS, default=None)
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds")
    parser.add_argument("--max-retries", type=int, default=None)
    parser.add_argument("-d", "--debug", action="store_true")
    parser.add_argument("--log-file", default=None)
    args = parser.parse_args(argv)
    args.view = args.view or "current"
    return args


def setup_logging(debug: bool, log_file: Optional[str] = None) -> None:
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def build_provider(name: str, timeout: float, max_retries: int) -> WeatherProviderBase:
    if name == "wttr":
        return WttrProvider(timeout=timeout, max_retries=max_retries)
    return OpenMeteoProvider(timeout=timeout, max_retries=max_retries)


def build_weather_service(args: argparse.Namespace, config: Config) -> WeatherService:
    timeout = args.timeout if args.timeout is not None else config.timeout
    max_retries = args.max_retries if args.max_retries is not None else config.max_retries
    provider = build_provider(args.provider or config.provider, timeout, max_retries)
    service = WeatherService(
        provider=provider,
        resolver=LocationResolver(timeout=timeout, max_retries=max_retries),
        cache_root=config.cache_dir,
        weather_ttl=config.cache_ttl,
        aqi_ttl=config.aqi_cache_ttl,
    )
    logging.info("Weather service ready (provider=%s, cache ttl=%ss)", provider.name, config.cache_ttl)
    return service


def resolve_units(args: argparse.Namespace, config: Config, snapshot: WeatherSnapshot) -> UnitConfig:
    imperial = args.imperial or (not args.metric and config.units == "imperial")
    metric = args.metric or config.units == "metric"
    location = snapshot.location
    return select_units(imperial, metric, location.country_code, location.country_name)


def use_color(args: argparse.Namespace) -> bool:
    if args.no_color or args.raw or os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def render_view(
    view: str,
    snapshot: WeatherSnapshot,
    units: UnitConfig,
    mode: DisplayMode,
    raw: bool = False,
    color: bool = False,
    tier: Optional[Tier] = None,
) -> str:
    if view == "oneline" or tier is Tier.ONELINE:
        return render_oneline(build_oneline(snapshot, units, mode, raw=raw, color=color))

    if view == "current":
        record = build_current(snapshot, units, mode, raw=raw, color=color)
        if raw:
            return json.dumps(record, indent=2, ensure_ascii=False)
        return render_record(project(record, select_tier(tier)), LABELS)

    if view in ("hourly", "forecast"):
        builder = build_hourly if view == "hourly" else build_forecast
        rows = builder(snapshot, units, mode, raw=raw, color=color)
        if raw:
            return json.dumps(rows, indent=2, ensure_ascii=False)
        if not rows:
            return f"No {view} data available."
        title = snapshot.location.display_name()
        return render_table(rows, LABELS, title=title)

    builder = build_astronomy if view == "astronomy" else build_air_quality
    record = builder(snapshot, units, mode, raw=raw, color=color)
    if raw:
        return json.dumps(record, indent=2, ensure_ascii=False)
    if not record:
        what = "Astronomy" if view == "astronomy" else "Air-quality"
        return f"{what} data not available for {snapshot.location.display_name()} from {snapshot.provider.name}."
    return render_record(record, LABELS, title=snapshot.location.display_name())


def run(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug, args.log_file)
    config = load_config()

    if args.clear_cache:
        print(cache_store.clear(config.cache_dir))
        return 0

    query = args.location if args.location is not None else config.location
    lang = args.lang if args.lang is not None else config.lang
    mode = DisplayMode(args.icons or config.icons)
    wants_aqi = args.view in ("current", "air_quality") or args.json

    try:
        service = build_weather_service(args, config)
        snapshot = service.get_snapshot(query, lang, refresh=args.refresh, include_air_quality=wants_aqi)
    except WeatherProviderError as err:
        logging.debug("Fetch failed: %r", err)
        print(f"Error: {err}", file=sys.stderr)
        if err.hint:
            print(f"Hint: {err.hint}", file=sys.stderr)
        return 1

    if args.json:
        payload = dict(snapshot.weather)
        if snapshot.air_quality_payload:
            payload["_air_quality"] = snapshot.air_quality_payload
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    units = resolve_units(args, config, snapshot)
    print(render_view(args.view, snapshot, units, mode, raw=args.raw, color=use_color(args), tier=args.tier))
    return 0


def main() -> None:
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        logging.info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
