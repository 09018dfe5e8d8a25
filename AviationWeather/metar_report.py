"""METAR domain model - pure data structures independent of any API or store."""
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from metar_errors import DecodeError


OPTIONAL_FIELDS = ("observation_time", "wind", "visibility", "raw_text")


@dataclass(frozen=True)
class WeatherReport:
    """A single METAR observation, with wind and visibility kept verbatim."""
    station_id: str
    observation_time: Optional[str] = None  # ISO-8601, e.g. "2025-09-30T12:00:00Z"
    wind: Optional[str] = None  # raw wind group, e.g. "27015KT"
    visibility: Optional[str] = None  # raw visibility group, e.g. "10SM"
    raw_text: Optional[str] = None

    @property
    def identity(self) -> Tuple[str, str]:
        """Cache key: (station_id, observation_time), missing time as ""."""
        return (self.station_id, self.observation_time or "")

    @classmethod
    def from_api(cls, item: Any) -> "WeatherReport":
        """
        Decode one element of the API response array.

        Args:
            item: Parsed JSON object for a single report

        Returns:
            WeatherReport: Decoded report

        Raises:
            DecodeError: If the item is not an object, station_id is missing
                or empty, or a field has the wrong type
        """
        if not isinstance(item, dict):
            raise DecodeError(f"expected report object, got {type(item).__name__}")

        station_id = item.get("station_id")
        if station_id is None:
            raise DecodeError("missing required field 'station_id'")
        if not isinstance(station_id, str):
            raise DecodeError(f"field 'station_id' must be a string, got {type(station_id).__name__}")
        if not station_id.strip():
            raise DecodeError("field 'station_id' is empty")

        values = {}
        for name in OPTIONAL_FIELDS:
            value = item.get(name)
            if value is not None and not isinstance(value, str):
                raise DecodeError(f"field '{name}' must be a string, got {type(value).__name__}")
            values[name] = value

        return cls(station_id=station_id, **values)
