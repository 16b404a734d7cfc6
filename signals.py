import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class SnowfallUnit(str, Enum):
    """Unit a snowfall amount was reported in. Providers differ, so it is always explicit."""

    INCH = "in"
    CENTIMETER = "cm"
    MILLIMETER = "mm"

    def to_inches(self, amount: float) -> float:
        if self is SnowfallUnit.CENTIMETER:
            return amount / 2.54
        if self is SnowfallUnit.MILLIMETER:
            return amount / 25.4
        return amount


# Sentinel used when a profile has no snow threshold; no forecast reaches it
NO_SNOW_THRESHOLD = 999.0


@dataclass(frozen=True)
class Profile:
    """
    Hand-curated closure history for one ZIP code.

    closure_snow_threshold is in inches, closure_cold_threshold in F.
    historical_closure_weight is on a 0-5 scale and is clamped on construction.
    """
    closure_snow_threshold: float = NO_SNOW_THRESHOLD
    historical_closure_weight: float = 0.0
    overnight_snow_bias: Optional[float] = None
    closure_cold_threshold: Optional[float] = None

    def __post_init__(self):
        clamped = min(5.0, max(0.0, self.historical_closure_weight))
        object.__setattr__(self, 'historical_closure_weight', clamped)


@dataclass(frozen=True)
class SignalBundle:
    """Everything the scoring engine looks at for one prediction."""
    snowfall_amount: float = 0.0
    snowfall_unit: SnowfallUnit = SnowfallUnit.INCH
    current_condition_code: Optional[int] = None
    min_temperature: Optional[float] = None
    precipitation_volume: float = 0.0
    local_profile: Optional[Profile] = None

    @property
    def snowfall_inches(self) -> float:
        return self.snowfall_unit.to_inches(self.snowfall_amount)


# -------------------------
# Normalization helpers
# -------------------------

def _to_float(value: Any) -> Optional[float]:
    """Finite float or None. Booleans are not numbers here."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _non_negative(value: Any) -> float:
    number = _to_float(value)
    if number is None or number < 0:
        return 0.0
    return number


def _condition_code(value: Any) -> Optional[int]:
    number = _to_float(value)
    if number is None:
        return None
    return int(number)


def parse_profile(record: Optional[Mapping[str, Any]]) -> Optional[Profile]:
    """
    Build a Profile from a raw ``school_trends.json`` record.

    Raw field names: closure_inch_threshold, historical_closure_weight,
    bias_when_snow_overnight, closure_temp_threshold_f.
    """
    if not isinstance(record, Mapping):
        return None

    threshold = _to_float(record.get('closure_inch_threshold'))
    weight = _to_float(record.get('historical_closure_weight'))
    bias = _to_float(record.get('bias_when_snow_overnight'))

    return Profile(
        closure_snow_threshold=threshold if threshold is not None else NO_SNOW_THRESHOLD,
        historical_closure_weight=weight if weight is not None else 0.0,
        # a zero bias never nudges anything
        overnight_snow_bias=bias if bias else None,
        closure_cold_threshold=_to_float(record.get('closure_temp_threshold_f')),
    )


def aggregate_signals(
    current: Optional[Mapping[str, Any]],
    tomorrow: Optional[Mapping[str, Any]],
    raw_profile: Optional[Mapping[str, Any]] = None,
    snowfall_unit: SnowfallUnit = SnowfallUnit.INCH,
) -> SignalBundle:
    """
    Normalize tomorrow's forecast, current conditions and an optional profile.

    Missing snowfall/precipitation become 0; missing temperature and
    condition code stay None so the scoring rules can skip them.
    """
    current = current or {}
    tomorrow = tomorrow or {}

    return SignalBundle(
        snowfall_amount=_non_negative(tomorrow.get('snowfall_sum')),
        snowfall_unit=SnowfallUnit(snowfall_unit),
        current_condition_code=_condition_code(current.get('weathercode')),
        min_temperature=_to_float(tomorrow.get('temp_min')),
        precipitation_volume=_non_negative(tomorrow.get('precipitation_sum')),
        local_profile=parse_profile(raw_profile),
    )
