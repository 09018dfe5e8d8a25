"""METAR fetch pipeline: fetch, validate, cache locally and publish state."""
import logging
import threading
from collections import Counter
from typing import Callable, List, Optional

from metar_errors import InvalidInputError, MetarError, NoDataError
from metar_provider import MetarProviderBase
from metar_report import WeatherReport
from metar_store import MetarStore


class MetarService:
    """
    Service that fetches METARs from a provider and caches them in a store.

    The observable state is three fields: current_results, is_loading and
    last_error. Errors never escape fetch_report/load_cached; they are
    recorded in last_error and previous results are left untouched.

    Concurrent fetches are not serialized: whichever response completes last
    overwrites current_results. Pass dedupe_in_flight=True to skip a fetch
    for a station that already has one running.
    """

    def __init__(
        self,
        provider: MetarProviderBase,
        store: MetarStore,
        dedupe_in_flight: bool = False
    ):
        """
        Initialize METAR service.

        Args:
            provider: Source of METAR reports
            store: Connected local store used as the offline cache
            dedupe_in_flight: Skip fetches for stations already being fetched
        """
        self.provider = provider
        self.store = store
        self.dedupe_in_flight = dedupe_in_flight

        self._lock = threading.Lock()
        self._results: List[WeatherReport] = []
        self._last_error: Optional[MetarError] = None
        self._in_flight: Counter = Counter()
        self._subscribers: List[Callable[["MetarService"], None]] = []

    @property
    def current_results(self) -> List[WeatherReport]:
        with self._lock:
            return list(self._results)

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return sum(self._in_flight.values()) > 0

    @property
    def last_error(self) -> Optional[MetarError]:
        with self._lock:
            return self._last_error

    @property
    def error_message(self) -> Optional[str]:
        error = self.last_error
        return str(error) if error is not None else None

    def subscribe(self, callback: Callable[["MetarService"], None]) -> None:
        """Register a callable invoked with the service after every state change."""
        self._subscribers.append(callback)

    def _publish(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    def _fail(self, error: MetarError) -> None:
        with self._lock:
            self._last_error = error
        self._publish()

    def fetch_report(self, station_code: str) -> Optional[List[WeatherReport]]:
        """
        Fetch the latest METARs for a station, cache them, and publish them.

        Args:
            station_code: ICAO code; surrounding whitespace and case are ignored

        Returns:
            The decoded reports in API order, or None if the fetch failed or
            was skipped. On failure last_error holds the reason.
        """
        code = (station_code or "").strip().upper()
        if not code:
            logging.warning("Rejected empty station code")
            self._fail(InvalidInputError())
            return None

        with self._lock:
            if self.dedupe_in_flight and self._in_flight[code]:
                logging.info(f"Fetch for {code} already in flight, skipping")
                return None
            self._in_flight[code] += 1
            self._last_error = None
        self._publish()

        reports: Optional[List[WeatherReport]] = None
        error: Optional[MetarError] = None
        succeeded = False
        try:
            reports = self.provider.get_metars(code)
            if not reports:
                raise NoDataError(code)
            # Not atomic across reports: a failure leaves earlier ones saved
            for report in reports:
                self.store.upsert(report)
            succeeded = True
        except MetarError as e:
            error = e
            reports = None
        finally:
            with self._lock:
                self._in_flight[code] -= 1
                if self._in_flight[code] <= 0:
                    del self._in_flight[code]
                if error is not None:
                    self._last_error = error
                elif succeeded:
                    self._results = list(reports)
                    self._last_error = None

        if error is not None:
            if isinstance(error, NoDataError):
                logging.warning(str(error))
            else:
                logging.error(f"METAR fetch for {code} failed: {error}")
        else:
            logging.info(f"Fetched and cached {len(reports)} METAR report(s) for {code}")
        self._publish()
        return reports

    def load_cached(self) -> Optional[List[WeatherReport]]:
        """
        Replace current results with every cached report, most recent first.

        Returns:
            The cached reports, or None if the store could not be read.
        """
        try:
            reports = self.store.query_all()
        except MetarError as e:
            logging.error(f"Loading cached METARs failed: {e}")
            self._fail(e)
            return None

        with self._lock:
            self._results = list(reports)
            self._last_error = None
        logging.info(f"Loaded {len(reports)} cached METAR report(s)")
        self._publish()
        return reports
