"""Running index command line - KMA weather scored for outdoor running."""
import argparse
import json
import logging
import os
import sys
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from kma_grid import GridProjectionError, project
from kma_provider import KMA_BASE_URL, KmaProvider
from report import (
    current_payload,
    forecast_payload,
    format_index_lines,
    grid_payload,
    hourly_index_payload,
    index_payload,
    result_payload,
)
from running_index import compute_running_index
from running_service import RunningService
from weather_data import ObservationDefaults
from weather_provider import WeatherProviderError
from weather_service import WeatherService

# Seoul City Hall
DEFAULT_LAT = 37.5665
DEFAULT_LON = 126.978


def _add_location_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--lat", type=float, default=None, help=f"Latitude (default {DEFAULT_LAT})")
    parser.add_argument("--lon", type=float, default=None, help=f"Longitude (default {DEFAULT_LON})")


def _add_network_args(parser: argparse.ArgumentParser) -> None:
    _add_location_args(parser)
    parser.add_argument("--timeout", type=float, default=8, help="HTTP timeout in seconds")
    parser.add_argument("--cache-ttl", type=int, default=600)
    parser.add_argument("--max-retries", type=int, default=3)
    parser.add_argument("--retry-delay", type=float, default=1.0)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("running-index", description="Running suitability from KMA weather")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    sub = parser.add_subparsers(dest="command", required=True)

    grid = sub.add_parser("grid", help="Convert lat/lon to the KMA grid")
    _add_location_args(grid)

    score = sub.add_parser("score", help="Score explicit weather values (no network)")
    score.add_argument("--temp", type=float, required=True, help="Temperature (°C)")
    score.add_argument("--humidity", type=float, required=True, help="Relative humidity (%%)")
    score.add_argument("--wind", type=float, required=True, help="Wind speed (m/s)")
    score.add_argument("--precip", type=float, default=0.0, help="Precipitation (mm)")
    score.add_argument("--pm25", type=float, default=None, help="PM2.5 (µg/m³)")

    now = sub.add_parser("now", help="Ultra short-term nowcast")
    _add_network_args(now)

    forecast = sub.add_parser("forecast", help="Ultra short-term hourly forecast")
    _add_network_args(forecast)

    index = sub.add_parser("index", help="Running index from live KMA data")
    _add_network_args(index)
    index.add_argument("--pm25", type=float, default=None, help="PM2.5 (µg/m³), if known")
    index.add_argument("--hourly", action="store_true", help="Score every forecast hour")
    index.add_argument("--location", default=None, help="Display name for the location")

    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def resolve_location(args: argparse.Namespace) -> None:
    """Fill lat/lon from RUNNING_LAT/RUNNING_LON, then the Seoul default."""
    try:
        if args.lat is None:
            args.lat = float(os.getenv("RUNNING_LAT", DEFAULT_LAT))
        if args.lon is None:
            args.lon = float(os.getenv("RUNNING_LON", DEFAULT_LON))
    except ValueError as exc:
        raise SystemExit(f"Invalid coordinates: {exc}") from exc


def load_config() -> str:
    api_key = os.getenv("KMA_SERVICE_KEY")
    if not api_key:
        raise SystemExit("KMA_SERVICE_KEY missing")
    return api_key


def build_weather_service(api_key: str, args: argparse.Namespace) -> WeatherService:
    provider = KmaProvider(
        service_key=api_key,
        lat=args.lat,
        lon=args.lon,
        timeout=args.timeout,
        base_url=os.getenv("KMA_BASE_URL", KMA_BASE_URL),
    )
    service = WeatherService(
        provider=provider,
        cache_ttl_seconds=args.cache_ttl,
        max_retries=args.max_retries,
        retry_delay_seconds=args.retry_delay,
    )
    logging.info("Weather service ready (cache ttl=%ss)", args.cache_ttl)
    return service


def emit(payload, lines: List[str], as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print("\n".join(lines))


def run(args: argparse.Namespace) -> None:
    if args.command == "score":
        observation, _ = ObservationDefaults().resolve(args.temp, args.humidity, args.wind, args.precip, pm25=args.pm25)
        result = compute_running_index(observation)
        emit(result_payload(result), format_index_lines(result), args.json)
        return

    resolve_location(args)

    if args.command == "grid":
        cell = project(args.lat, args.lon)
        emit(grid_payload(args.lat, args.lon, cell), [f"nx={cell.nx} ny={cell.ny}"], args.json)
        return

    api_key = load_config()
    service = build_weather_service(api_key, args)

    if args.command == "now":
        conditions = service.get_current()
        payload = current_payload(args.lat, args.lon, conditions)
        lines = [f"{k}: {v}" for k, v in payload["parsed"].items()]
        emit(payload, lines, args.json)
    elif args.command == "forecast":
        forecast = service.get_forecast()
        lines = [
            f"{h.fcst_date} {h.fcst_time}  temp={h.temp_c} hum={h.humidity_pct} "
            f"wind={h.wind_ms} pop={h.pop_pct} precip={h.precip_mm}"
            for h in forecast.hours
        ]
        emit(forecast_payload(forecast), lines, args.json)
    elif args.command == "index":
        running = RunningService(service, pm25=args.pm25)
        if args.hourly:
            forecast_index = running.hourly_index()
            lines = []
            for item in forecast_index.hours:
                lines.extend(format_index_lines(item.result, label=f"{item.hour.fcst_date} {item.hour.fcst_time}"))
            emit(hourly_index_payload(args.lat, args.lon, forecast_index), lines, args.json)
        else:
            current = running.current_index()
            emit(
                index_payload(args.lat, args.lon, current, location=args.location),
                format_index_lines(current.result, label=args.location),
                args.json,
            )


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        run(args)
    except GridProjectionError as err:
        logging.error("Invalid location: %s", err)
        return 1
    except WeatherProviderError as err:
        logging.error("Weather fetch failed: %s", err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
