import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from clients import Forecast, Location, OpenMeteoClient, ZipLookupClient
from errors import InputError, PredictionError
from profiles import ProfileStore
from scoring import Verdict, classify_verdict, score_bundle
from settings import AppConfig, load_config
from signals import SignalBundle, aggregate_signals

logger = logging.getLogger(__name__)

DISCLAIMER = 'Estimates only. School closure decisions made by district superintendents. Always check official announcements.'


@dataclass
class Prediction:
    """Everything the presentation layer needs for one ZIP code."""
    zipcode: str
    location: Location
    forecast: Forecast
    profile: Optional[Dict[str, Any]]
    signals: SignalBundle
    score: int
    reasons: List[str]
    verdict: Verdict
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict:
        return {
            'success': True,
            'zipcode': self.zipcode,
            'location': self.location.label,
            'latitude': self.location.latitude,
            'longitude': self.location.longitude,
            'score': self.score,
            'verdict': self.verdict.value,
            'headline': self.verdict.headline,
            'reasons': list(self.reasons),
            'signals': {
                'snowfall_amount': self.signals.snowfall_amount,
                'snowfall_unit': self.signals.snowfall_unit.value,
                'snowfall_inches': round(self.signals.snowfall_inches, 2),
                'current_condition_code': self.signals.current_condition_code,
                'min_temperature': self.signals.min_temperature,
                'precipitation_volume': self.signals.precipitation_volume,
                'has_profile': self.signals.local_profile is not None,
            },
            'current': self.forecast.current,
            'tomorrow': self.forecast.tomorrow,
            'profile': self.profile,
            'timestamp': self.timestamp.strftime('%Y-%m-%d %I:%M %p'),
            'disclaimer': DISCLAIMER,
        }


class SnowDayPredictor:
    """
    Snow day likelihood for tomorrow from a ZIP code.

    Steps, each of which must succeed before scoring starts:
    - ZIP -> coordinates (zippopotam.us)
    - local school closure profile (static table, may be missing)
    - tomorrow's forecast (Open-Meteo)

    Scoring itself is pure and never fails; anything that goes wrong earlier
    raises a PredictionError and ends the attempt. No retries.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        zip_client: Optional[ZipLookupClient] = None,
        forecast_client: Optional[OpenMeteoClient] = None,
        profile_store: Optional[ProfileStore] = None,
    ):
        self.config = config or load_config()
        self.zip_client = zip_client or ZipLookupClient(self.config.services)
        self.forecast_client = forecast_client or OpenMeteoClient(self.config.services)
        self.profile_store = profile_store or ProfileStore(self.config.profiles, self.config.services)

    def predict(self, zipcode: Optional[str]) -> Prediction:
        zipcode = (zipcode or '').strip()
        if not zipcode:
            logger.warning("Prediction requested without a ZIP code")
            raise InputError('Please enter a ZIP code.')

        try:
            location = self.zip_client.lookup(zipcode)
            profile = self.profile_store.lookup(zipcode)
            forecast = self.forecast_client.fetch(location.latitude, location.longitude)
        except PredictionError as e:
            logger.warning("Prediction for ZIP %s failed (%s): %s", zipcode, e.kind, e)
            raise

        signals = aggregate_signals(forecast.current, forecast.tomorrow, profile, forecast.snowfall_unit)
        score, reasons = score_bundle(signals, self.config.scoring)
        verdict = classify_verdict(score, self.config.scoring)

        logger.info("ZIP %s (%s): score %d, %s", zipcode, location.label, score, verdict.value)

        return Prediction(
            zipcode=zipcode,
            location=location,
            forecast=forecast,
            profile=profile,
            signals=signals,
            score=score,
            reasons=reasons,
            verdict=verdict,
        )


def get_snow_day_prediction(zipcode: str, config: Optional[AppConfig] = None) -> Dict:
    """
    Get tomorrow's snow day prediction as a plain dict.

    Args:
        zipcode: US ZIP code

    Returns:
        Dict with 'success' True and the prediction, or 'success' False with
        'error' and 'error_kind' ('input', 'resolution' or 'retrieval')
    """
    try:
        return SnowDayPredictor(config).predict(zipcode).to_dict()
    except PredictionError as e:
        return {
            'success': False,
            'error': str(e),
            'error_kind': e.kind,
        }
