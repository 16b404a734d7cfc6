import math
from enum import Enum
from typing import List, Optional, Tuple

from settings import ScoringThresholds
from signals import SignalBundle, SnowfallUnit

DEFAULT_THRESHOLDS = ScoringThresholds()


class Verdict(str, Enum):
    VERY_LIKELY = "very likely"
    POSSIBLE = "possible"
    UNLIKELY = "unlikely"

    @property
    def headline(self) -> str:
        return {
            Verdict.VERY_LIKELY: "Very likely: Snow day expected",
            Verdict.POSSIBLE: "Possible: Snow day 50/50",
            Verdict.UNLIKELY: "Unlikely: School likely open",
        }[self]


def round_half_up(value: float) -> int:
    """Round halves upward; the builtin round() rounds them to even."""
    return int(math.floor(value + 0.5))


def _fmt(value: float) -> str:
    return f"{round(value, 2):g}"


# -------------------------
# Rules
# -------------------------

def snowfall_points(snow_inches: float, thresholds: ScoringThresholds = DEFAULT_THRESHOLDS) -> int:
    for minimum, points in thresholds.snowfall_tiers:
        if snow_inches >= minimum:
            return points
    return 0


def temperature_points(min_temp: float, thresholds: ScoringThresholds = DEFAULT_THRESHOLDS) -> int:
    for maximum, points in thresholds.temperature_tiers:
        if min_temp <= maximum:
            return points
    return 0


def precipitation_points(precip_mm: float, thresholds: ScoringThresholds = DEFAULT_THRESHOLDS) -> int:
    for minimum, points in thresholds.precipitation_tiers:
        if precip_mm >= minimum:
            return points
    return 0


def _snow_label(bundle: SignalBundle) -> str:
    label = f"{_fmt(bundle.snowfall_inches)} in"
    if bundle.snowfall_unit is not SnowfallUnit.INCH:
        label += f" ({_fmt(bundle.snowfall_amount)} {bundle.snowfall_unit.value})"
    return label


def score_bundle(
    bundle: SignalBundle,
    thresholds: Optional[ScoringThresholds] = None,
) -> Tuple[int, List[str]]:
    """
    Score one prediction.

    Rules run in a fixed order and each one that is evaluated adds exactly
    one reason, including zero contributions. Only the active-snow and
    temperature rules stay silent, and only when their input is missing.
    Never raises.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    score = 0
    reasons: List[str] = []

    # 1) Forecasted snow amount
    snow = bundle.snowfall_inches
    points = snowfall_points(snow, t)
    score += points
    reasons.append(f"Forecasted snow: {_snow_label(bundle)} → +{points}")

    # 2) Snow falling right now
    code = bundle.current_condition_code
    if code is not None:
        low, high = t.active_snow_codes
        if low <= code <= high:
            score += t.active_snow_bonus
            reasons.append(f"Active snow now (weather code {code}) → +{t.active_snow_bonus}")
        else:
            reasons.append(f"No active snow now (weather code {code}) → +0")

    # 3) Tomorrow's low
    min_temp = bundle.min_temperature
    if min_temp is not None:
        points = temperature_points(min_temp, t)
        score += points
        reasons.append(f"Tomorrow low {_fmt(min_temp)}°F → +{points}")

    # 4) Precipitation volume
    precip = bundle.precipitation_volume
    points = precipitation_points(precip, t)
    score += points
    if points and precip >= t.precipitation_tiers[0][0]:
        reasons.append(f"High precip volume {_fmt(precip)} mm → +{points}")
    elif points > 0:
        reasons.append(f"Moderate precip {_fmt(precip)} mm → +{points}")
    else:
        reasons.append(f"Precip {_fmt(precip)} mm → +0")

    # 5) Local school profile
    profile = bundle.local_profile
    if profile is None:
        reasons.append("No local profile found for this ZIP (add it to school_trends.json).")
    elif snow >= profile.closure_snow_threshold:
        boost = min(t.profile_bonus_max, max(t.profile_bonus_min, round_half_up(profile.historical_closure_weight)))
        score += boost
        reasons.append(
            f"Local rule: forecast >= {_fmt(profile.closure_snow_threshold)} in and "
            f"historical weight {_fmt(profile.historical_closure_weight)} → +{boost}"
        )
    elif profile.overnight_snow_bias is not None and snow > 0:
        nudge = min(t.overnight_bias_cap, round_half_up(profile.overnight_snow_bias))
        score += nudge
        reasons.append(f"Local overnight bias {_fmt(profile.overnight_snow_bias)} → {nudge:+d}")
    else:
        reasons.append("Local profile present but no threshold met → +0")

    # 6) Local extreme cold threshold
    if profile is not None and profile.closure_cold_threshold is not None and min_temp is not None:
        cold = profile.closure_cold_threshold
        if min_temp <= cold:
            score += t.cold_threshold_bonus
            reasons.append(
                f"Local cold threshold {_fmt(cold)}°F triggered "
                f"(tomorrow min {_fmt(min_temp)}°F) → +{t.cold_threshold_bonus}"
            )
        else:
            reasons.append(
                f"Local cold threshold {_fmt(cold)}°F not reached (tomorrow min {_fmt(min_temp)}°F) → +0"
            )

    return max(0, round_half_up(score)), reasons


def classify_verdict(score: float, thresholds: Optional[ScoringThresholds] = None) -> Verdict:
    t = thresholds or DEFAULT_THRESHOLDS
    if score >= t.very_likely_score:
        return Verdict.VERY_LIKELY
    if score >= t.possible_score:
        return Verdict.POSSIBLE
    return Verdict.UNLIKELY
