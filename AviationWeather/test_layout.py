"""Tests for text layout of METAR reports."""
import pytest
from metar_report import WeatherReport
from layout import (
    EMPTY_HINT,
    EMPTY_TITLE,
    LOADING_TEXT,
    format_report_lines,
    format_time,
    render_state,
)


@pytest.fixture
def sample_report():
    """Sample METAR report."""
    return WeatherReport(
        station_id="LSZH",
        observation_time="2025-09-30T12:00:00Z",
        wind="27015KT",
        visibility="10SM",
        raw_text="LSZH 301200Z 27015KT 9999 FEW040 18/12 Q1013",
    )


@pytest.mark.parametrize("timestamp, expected", [
    ("2025-09-30T12:00:00Z", "12:00"),
    ("2025-09-30T07:45", "07:45"),
    ("2025-09-30", "2025-09-30"),
    ("301200Z", "301200Z"),
    ("aTbTc", "aTbTc"),
])
def test_format_time(timestamp, expected):
    assert format_time(timestamp) == expected


def test_format_report_lines_full(sample_report):
    lines = format_report_lines(sample_report)

    assert lines == [
        "LSZH  12:00",
        "Wind 27015KT kt  Vis 10SM",
        "LSZH 301200Z 27015KT 9999 FEW040 18/12 Q1013",
    ]


def test_format_report_lines_minimal():
    """Only the station is shown when every optional field is absent."""
    assert format_report_lines(WeatherReport("KJFK")) == ["KJFK"]


def test_format_report_lines_visibility_only():
    report = WeatherReport("EGLL", visibility="CAVOK")

    assert format_report_lines(report) == ["EGLL", "Vis CAVOK"]


def test_render_empty_state():
    assert render_state([]) == [EMPTY_TITLE, EMPTY_HINT]


def test_render_loading_hides_empty_state():
    assert render_state([], is_loading=True) == [LOADING_TEXT]


def test_render_results_with_error(sample_report):
    second = WeatherReport("EDDF", "2025-09-30T11:50:00Z")

    lines = render_state([sample_report, second], error_message="Server error: 503")

    assert lines[0] == "LSZH  12:00"
    assert "" in lines
    assert "EDDF  11:50" in lines
    assert lines[-1] == "! Server error: 503"


def test_render_error_on_empty_state():
    lines = render_state([], error_message="No METAR data found for ZZZZ")

    assert lines == [EMPTY_TITLE, EMPTY_HINT, "! No METAR data found for ZZZZ"]
