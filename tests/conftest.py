"""
Shared pytest fixtures for the snow day predictor tests.

Provides:
  - ``clean_env``: strips ``SNOWDAY_*`` overrides so tests see the bundled config.
  - ``fake_response``: a minimal stand-in for ``requests.Response``.
  - ``zippopotam_payload`` / ``open_meteo_payload``: realistic API bodies.
  - ``profiles_file``: a small ``school_trends.json`` in a temp dir.
"""

import json
from typing import Any, Optional

import pytest


SNOWDAY_ENV_VARS = ("SNOWDAY_LOG_LEVEL", "SNOWDAY_PROFILES_SOURCE", "SNOWDAY_TIMEOUT_SECONDS")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in SNOWDAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def json(self) -> Any:
        if self._text is not None:
            return json.loads(self._text)
        return self._payload


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def zippopotam_payload() -> dict:
    return {
        "post code": "22153",
        "country": "United States",
        "country abbreviation": "US",
        "places": [
            {
                "place name": "Springfield",
                "longitude": "-77.2352",
                "state": "Virginia",
                "state abbreviation": "VA",
                "latitude": "38.7449",
            }
        ],
    }


@pytest.fixture
def open_meteo_payload() -> dict:
    return {
        "latitude": 38.74,
        "longitude": -77.23,
        "current_weather": {"temperature": 28.4, "windspeed": 14.2, "weathercode": 73},
        "daily_units": {"snowfall_sum": "cm", "precipitation_sum": "mm", "temperature_2m_min": "°F"},
        "daily": {
            "time": ["2026-01-14", "2026-01-15", "2026-01-16"],
            "snowfall_sum": [0.0, 12.6, 1.0],
            "precipitation_sum": [0.0, 11.2, 1.5],
            "temperature_2m_max": [33.0, 27.5, 35.1],
            "temperature_2m_min": [20.1, 14.0, 24.9],
        },
    }


@pytest.fixture
def profile_records() -> dict:
    return {
        "22153": {
            "closure_inch_threshold": 2,
            "historical_closure_weight": 4,
            "bias_when_snow_overnight": 1,
            "closure_temp_threshold_f": 10,
        },
        "55401": {
            "closure_inch_threshold": 8,
            "historical_closure_weight": 2,
        },
    }


@pytest.fixture
def profiles_file(tmp_path, profile_records):
    path = tmp_path / "school_trends.json"
    path.write_text(json.dumps(profile_records), encoding="utf-8")
    return path
