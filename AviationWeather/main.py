"""Command-line METAR viewer with an offline cache."""
import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from aviationweather_provider import AviationWeatherProvider
from layout import render_state
from metar_service import MetarService
from metar_store import MetarStore

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_DB_URL = "sqlite:///" + os.path.join(BASE_DIR, "metar-cache.sqlite")
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "aviation-weather.log")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("METAR viewer with offline cache")
    parser.add_argument("station", nargs="?", help="ICAO code, e.g. LSZH; omit to show the cache")
    parser.add_argument("--db-url", default=None, help="SQLAlchemy URL of the cache database")
    parser.add_argument("--api-url", default=None, help="METAR endpoint")
    parser.add_argument("--timeout", default=None, help="HTTP timeout in seconds")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--cached", action="store_true", help="Only show cached reports")
    parser.add_argument("--dedupe", action="store_true", help="Skip fetches already in flight")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def load_config(args: argparse.Namespace) -> Tuple[str, str, float]:
    load_dotenv()
    api_url = args.api_url or os.getenv("METAR_API_URL", AviationWeatherProvider.BASE_URL)
    db_url = args.db_url or os.getenv("METAR_DB_URL", DEFAULT_DB_URL)
    timeout = args.timeout or os.getenv("METAR_TIMEOUT", "10")

    try:
        timeout_val = float(timeout)
    except ValueError as exc:
        raise SystemExit(f"Invalid timeout: {exc}") from exc
    if timeout_val <= 0:
        raise SystemExit(f"Invalid timeout: {timeout_val}")

    logging.info("Configuration loaded: api=%s db=%s timeout=%s", api_url, db_url, timeout_val)
    return api_url, db_url, timeout_val


def open_store(db_url: str) -> MetarStore:
    store = MetarStore(db_url)
    try:
        store.connect()
    except SQLAlchemyError as exc:
        logging.critical("Cannot open METAR store %s: %s", db_url, exc)
        raise SystemExit(f"Cannot open METAR store: {exc}") from exc
    return store


def print_state(service: MetarService) -> None:
    lines = render_state(service.current_results, service.is_loading, service.error_message)
    print("\n".join(lines))
    print()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    api_url, db_url, timeout = load_config(args)

    store = open_store(db_url)
    provider = AviationWeatherProvider(base_url=api_url, timeout=timeout)
    service = MetarService(provider, store, dedupe_in_flight=args.dedupe)
    service.subscribe(print_state)

    try:
        service.load_cached()
        if args.station is not None and not args.cached:
            service.fetch_report(args.station)
    finally:
        store.close()

    return 1 if service.last_error is not None else 0


if __name__ == "__main__":
    sys.exit(main())
