import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from errors import ResolutionError, RetrievalError
from settings import ServicesConfig
from signals import SnowfallUnit

logger = logging.getLogger(__name__)

# 0 = today, 1 = tomorrow
TOMORROW_INDEX = 1

DAILY_FIELDS = ['snowfall_sum', 'temperature_2m_max', 'temperature_2m_min', 'precipitation_sum']


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    place_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.place_name or f"{self.latitude}, {self.longitude}"


@dataclass
class Forecast:
    """Tomorrow's daily aggregates plus whatever current conditions Open-Meteo reported."""
    current: Optional[Dict[str, Any]]
    tomorrow: Dict[str, Any]
    snowfall_unit: SnowfallUnit = SnowfallUnit.CENTIMETER


# -------------------------
# ZIP -> coordinates
# -------------------------

class ZipLookupClient:
    """Resolve a US ZIP code through zippopotam.us."""

    def __init__(self, services: Optional[ServicesConfig] = None):
        self.services = services or ServicesConfig()

    def lookup(self, zipcode: str) -> Location:
        url = f"{self.services.zippopotam_url}/{quote(zipcode, safe='')}"
        try:
            response = requests.get(url, timeout=self.services.timeout_seconds)
        except requests.RequestException as e:
            raise RetrievalError(f"Failed to geocode ZIP code: {e}") from e

        if response.status_code != 200:
            raise ResolutionError(f"Unable to find coordinates for ZIP {zipcode}.")

        try:
            data = response.json()
            place = data['places'][0]
            location = Location(
                latitude=float(place['latitude']),
                longitude=float(place['longitude']),
                place_name=f"{place['place name']}, {place['state abbreviation']}",
            )
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ResolutionError(f"Unable to find coordinates for ZIP {zipcode}.") from e

        logger.debug("Resolved ZIP %s to %s (%.4f, %.4f)", zipcode, location.place_name,
                     location.latitude, location.longitude)
        return location


# -------------------------
# Forecast
# -------------------------

class OpenMeteoClient:
    """
    Current conditions and tomorrow's daily forecast from Open-Meteo.

    Temperatures are requested in Fahrenheit. Snowfall comes back in
    centimetres and precipitation in millimetres, so the forecast is tagged
    with its snowfall unit rather than guessed later.
    """

    def __init__(self, services: Optional[ServicesConfig] = None):
        self.services = services or ServicesConfig()

    def _params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        return {
            'latitude': latitude,
            'longitude': longitude,
            'timezone': 'auto',
            'daily': ','.join(DAILY_FIELDS),
            'current_weather': 'true',
            'temperature_unit': 'fahrenheit',
        }

    def fetch(self, latitude: float, longitude: float) -> Forecast:
        headers = {'User-Agent': self.services.user_agent, 'Accept': 'application/json'}
        try:
            response = requests.get(
                self.services.open_meteo_url,
                params=self._params(latitude, longitude),
                headers=headers,
                timeout=self.services.timeout_seconds,
            )
        except requests.RequestException as e:
            raise RetrievalError(f"Weather fetch failed: {e}") from e

        if response.status_code != 200:
            raise RetrievalError(f"Open-Meteo returned error (HTTP {response.status_code})")

        try:
            data = response.json()
        except ValueError as e:
            raise RetrievalError("Open-Meteo returned malformed JSON") from e

        if not isinstance(data, dict) or not isinstance(data.get('daily'), dict):
            raise RetrievalError("Open-Meteo response has no daily forecast")

        return Forecast(
            current=data.get('current_weather') or None,
            tomorrow=self._tomorrow(data['daily']),
            snowfall_unit=SnowfallUnit.CENTIMETER,
        )

    def _tomorrow(self, daily: Dict[str, Any]) -> Dict[str, Any]:
        def pick(key: str) -> Any:
            values = daily.get(key)
            if isinstance(values, list) and len(values) > TOMORROW_INDEX:
                return values[TOMORROW_INDEX]
            return None

        return {
            'date': pick('time'),
            'snowfall_sum': pick('snowfall_sum'),
            'precipitation_sum': pick('precipitation_sum'),
            'temp_max': pick('temperature_2m_max'),
            'temp_min': pick('temperature_2m_min'),
        }
