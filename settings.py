"""
Configuration for the snow day predictor.

Load order (each layer overrides the previous):
  1. ``config/default.toml``   - committed defaults
  2. ``config/local.toml``     - optional local overrides
  3. ``SNOWDAY_*`` environment variables

Every threshold the scoring engine uses lives in ``ScoringThresholds`` so a
district can be tuned without touching code.
"""

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_PROFILES_PATH = PROJECT_ROOT / "school_trends.json"


class ScoringThresholds(BaseModel):
    """Tier boundaries and bonuses for each scoring rule."""

    model_config = ConfigDict(frozen=True)

    # Snowfall (inches): (minimum, points), highest tier first
    snowfall_tiers: Tuple[Tuple[float, int], ...] = ((6.0, 5), (3.0, 3), (1.0, 1))

    # Open-Meteo WMO codes 71-77 snow, 85-86 snow showers
    active_snow_codes: Tuple[int, int] = (71, 86)
    active_snow_bonus: int = 2

    # Tomorrow's low (F): (maximum, points), coldest tier first
    temperature_tiers: Tuple[Tuple[float, int], ...] = ((15.0, 2), (25.0, 1))

    # Precipitation (mm): (minimum, points), highest tier first
    precipitation_tiers: Tuple[Tuple[float, int], ...] = ((10.0, 2), (3.0, 1))

    profile_bonus_min: int = 1
    profile_bonus_max: int = 4
    overnight_bias_cap: int = 2
    cold_threshold_bonus: int = 1

    very_likely_score: int = 8
    possible_score: int = 5

    # Score at which the score bar is drawn full
    score_bar_max: int = 12

    @field_validator("snowfall_tiers", "precipitation_tiers")
    @classmethod
    def validate_descending(cls, v: Tuple[Tuple[float, int], ...]) -> Tuple[Tuple[float, int], ...]:
        bounds = [bound for bound, _ in v]
        if bounds != sorted(bounds, reverse=True):
            raise ValueError(f"Tiers must be ordered highest first, got {bounds}.")
        return v

    @field_validator("temperature_tiers")
    @classmethod
    def validate_ascending(cls, v: Tuple[Tuple[float, int], ...]) -> Tuple[Tuple[float, int], ...]:
        bounds = [bound for bound, _ in v]
        if bounds != sorted(bounds):
            raise ValueError(f"Temperature tiers must be ordered coldest first, got {bounds}.")
        return v

    @field_validator("active_snow_codes")
    @classmethod
    def validate_code_range(cls, v: Tuple[int, int]) -> Tuple[int, int]:
        if v[0] > v[1]:
            raise ValueError(f"active_snow_codes must be (low, high), got {v}.")
        return v

    @field_validator("score_bar_max")
    @classmethod
    def validate_bar_max(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"score_bar_max must be positive, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_bands(self) -> "ScoringThresholds":
        if self.possible_score > self.very_likely_score:
            raise ValueError("possible_score must not exceed very_likely_score.")
        if self.profile_bonus_min > self.profile_bonus_max:
            raise ValueError("profile_bonus_min must not exceed profile_bonus_max.")
        return self


class ServicesConfig(BaseModel):
    """Third-party endpoints used to resolve a ZIP and fetch the forecast."""

    model_config = ConfigDict(frozen=True)

    zippopotam_url: str = "https://api.zippopotam.us/us"
    open_meteo_url: str = "https://api.open-meteo.com/v1/forecast"
    timeout_seconds: float = 10.0
    user_agent: str = "(SnowDayPredictor, github.com)"

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v


class ProfilesConfig(BaseModel):
    """Where the per-ZIP school closure profiles are read from."""

    model_config = ConfigDict(frozen=True)

    source: str = str(DEFAULT_PROFILES_PATH)


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    scoring: ScoringThresholds = ScoringThresholds()
    services: ServicesConfig = ServicesConfig()
    profiles: ProfilesConfig = ProfilesConfig()
    logging: LoggingConfig = LoggingConfig()


# -------------------------
# Loader
# -------------------------

def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load and merge configuration.

    With no ``config_path`` the bundled ``config/default.toml`` is used when it
    exists, otherwise the built-in defaults. An explicit path must exist.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist.
        pydantic.ValidationError: If merged values fail validation.
    """
    raw: Dict[str, Any] = {}

    if config_path is None:
        config_path = PROJECT_ROOT / "config" / "default.toml"
        if config_path.exists():
            raw = _read_toml(config_path)
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        raw = _read_toml(config_path)

    local_path = config_path.parent / "local.toml"
    if local_path.exists():
        raw = _deep_merge(raw, _read_toml(local_path))

    raw = _apply_env_overrides(raw)
    return AppConfig.model_validate(raw)


def _read_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Supported overrides:
      SNOWDAY_LOG_LEVEL        -> raw["logging"]["level"]
      SNOWDAY_PROFILES_SOURCE  -> raw["profiles"]["source"]
      SNOWDAY_TIMEOUT_SECONDS  -> raw["services"]["timeout_seconds"]
    """
    if log_level := os.environ.get("SNOWDAY_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if source := os.environ.get("SNOWDAY_PROFILES_SOURCE"):
        raw.setdefault("profiles", {})["source"] = source

    if timeout := os.environ.get("SNOWDAY_TIMEOUT_SECONDS"):
        raw.setdefault("services", {})["timeout_seconds"] = timeout

    return raw
