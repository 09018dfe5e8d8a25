"""Errors raised while fetching, decoding and caching METAR reports.

Every error renders a message suitable for showing to the user via str().
"""
from typing import Optional


class MetarError(Exception):
    """Base class for all METAR pipeline errors."""
    pass


class InvalidInputError(MetarError):
    """Station code was empty after trimming."""

    def __init__(self):
        super().__init__("Please enter a valid ICAO code")


class InvalidRequestError(MetarError):
    """The endpoint could not be turned into a well-formed request."""

    def __init__(self, url: str = ""):
        self.url = url
        super().__init__("Invalid URL")


class NetworkError(MetarError):
    """Transport failure before any HTTP response arrived."""

    def __init__(self, cause: object):
        self.cause = cause
        super().__init__(f"Network error: {cause}")


class ServerError(MetarError):
    """HTTP status outside 200-299."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Server error: {status_code}")


class EmptyResponseError(MetarError):
    """Success status but no body."""

    def __init__(self):
        super().__init__("No data received")


class DecodeError(MetarError):
    """Body was not a valid array of reports."""

    def __init__(self, cause: object):
        self.cause = cause
        super().__init__(f"Failed to decode data: {cause}")


class NoDataError(MetarError):
    """Valid response with zero reports."""

    def __init__(self, station_code: str):
        self.station_code = station_code
        super().__init__(f"No METAR data found for {station_code}")


class StoreReadError(MetarError):
    def __init__(self, cause: object):
        self.cause = cause
        super().__init__(f"Failed to load saved data: {cause}")


class StoreWriteError(MetarError):
    def __init__(self, cause: object, station_id: Optional[str] = None):
        self.cause = cause
        self.station_id = station_id
        super().__init__(f"Error saving report: {cause}")
