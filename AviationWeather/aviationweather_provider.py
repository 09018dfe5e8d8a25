"""aviationweather.gov METAR API provider implementation."""
import logging
import requests
from typing import List
from metar_provider import MetarProviderBase
from metar_report import WeatherReport
from metar_errors import (
    DecodeError,
    EmptyResponseError,
    InvalidRequestError,
    MetarError,
    NetworkError,
    ServerError,
)


class AviationWeatherProvider(MetarProviderBase):
    """
    METAR provider using the NOAA Aviation Weather Center data API.

    Docs: https://aviationweather.gov/data/api/
    One GET per call, no retries. The response is a JSON array of report
    objects; fields other than the ones on WeatherReport are ignored.
    """

    BASE_URL = "https://aviationweather.gov/api/data/metar"

    def __init__(self, base_url: str = BASE_URL, timeout: float = 10):
        """
        Initialize the provider.

        Args:
            base_url: METAR endpoint, queried with ids=<ICAO>&format=json
            timeout: HTTP request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout

    def build_url(self, station_code: str) -> str:
        """Resolve the endpoint and query parameters to a full request URL."""
        params = {"ids": station_code, "format": "json"}
        try:
            prepared = requests.Request("GET", self.base_url, params=params).prepare()
        except (requests.exceptions.RequestException, ValueError) as e:
            logging.error(f"Cannot build request for {self.base_url!r}: {e}")
            raise InvalidRequestError(self.base_url) from e
        return prepared.url

    def get_metars(self, station_code: str) -> List[WeatherReport]:
        """
        Fetch METAR reports for a station from aviationweather.gov.

        Returns:
            List[WeatherReport]: Decoded reports in API order (may be empty)

        Raises:
            InvalidRequestError: If the endpoint is not a usable URL
            NetworkError: If the request fails at the transport level
            ServerError: If the HTTP status is outside 200-299
            EmptyResponseError: If the body is empty
            DecodeError: If the body is not an array of valid reports
        """
        url = self.build_url(station_code)

        try:
            logging.info(f"Making METAR API request: {url}")
            response = requests.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during METAR request: {e}")
            raise NetworkError(e) from e

        logging.info(f"API response status: {response.status_code}")

        if not 200 <= response.status_code <= 299:
            logging.error(f"METAR request failed with status {response.status_code}")
            raise ServerError(response.status_code)

        body = response.content or b""
        if not body:
            logging.error("METAR response had an empty body")
            raise EmptyResponseError()

        logging.debug(f"API response (truncated): {body[:500]!r}")

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Failed to parse METAR response: {e}")
            raise DecodeError(e) from e

        if not isinstance(data, list):
            logging.error(f"Expected a JSON array, got {type(data).__name__}")
            raise DecodeError(f"expected a JSON array, got {type(data).__name__}")

        try:
            reports = [WeatherReport.from_api(item) for item in data]
        except MetarError as e:
            logging.error(f"Failed to decode METAR report: {e}")
            raise

        logging.info(f"Decoded {len(reports)} METAR report(s) for {station_code}")
        return reports
