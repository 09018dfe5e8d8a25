"""Text layout for METAR reports - pure functions for testability."""
from typing import List, Optional, Sequence

from metar_report import WeatherReport


EMPTY_TITLE = "No Weather Data"
EMPTY_HINT = "Enter an ICAO code and fetch to see METAR data"
LOADING_TEXT = "Fetching METAR..."


def format_time(timestamp: str) -> str:
    """
    Shorten an ISO-8601 timestamp to its HH:MM part.

    Args:
        timestamp: e.g. "2025-09-30T12:00:00Z"

    Returns:
        "12:00" for a date-time string, otherwise the input unchanged
    """
    parts = timestamp.split("T")
    if len(parts) == 2:
        return parts[1][:5]
    return timestamp


def format_report_lines(report: WeatherReport) -> List[str]:
    """
    Lay out one report as a short block of lines.

    Args:
        report: Report to display

    Returns:
        Header line, an optional wind/visibility line, and the raw text
        when present
    """
    header = report.station_id
    if report.observation_time:
        header = f"{header}  {format_time(report.observation_time)}"
    lines = [header]

    data = []
    if report.wind:
        data.append(f"Wind {report.wind} kt")
    if report.visibility:
        data.append(f"Vis {report.visibility}")
    if data:
        lines.append("  ".join(data))

    if report.raw_text:
        lines.append(report.raw_text)
    return lines


def render_state(
    results: Sequence[WeatherReport],
    is_loading: bool = False,
    error_message: Optional[str] = None
) -> List[str]:
    """Render the whole service state as display lines."""
    lines: List[str] = []
    if is_loading:
        lines.append(LOADING_TEXT)

    if not results and not is_loading:
        lines.extend([EMPTY_TITLE, EMPTY_HINT])
    else:
        for index, report in enumerate(results):
            if index:
                lines.append("")
            lines.extend(format_report_lines(report))

    if error_message:
        lines.append(f"! {error_message}")
    return lines
