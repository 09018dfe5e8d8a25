"""METAR provider abstraction - allows swapping different report sources."""
from abc import ABC, abstractmethod
from typing import List

from metar_report import WeatherReport


class MetarProviderBase(ABC):
    """Abstract base class for METAR data providers."""

    @abstractmethod
    def get_metars(self, station_code: str) -> List[WeatherReport]:
        """
        Fetch the current METAR reports for a station.

        Args:
            station_code: Normalized (trimmed, upper-case) ICAO code

        Returns:
            List[WeatherReport]: Reports in the order the source returned
                them; may be empty

        Raises:
            MetarError: If the provider fails to fetch or decode data
        """
        pass
