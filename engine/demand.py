"""
Cold Water Demand Model

Turns a building profile and an hour into the building's "true"
consumption for that hour. The true value is what every meter channel
is derived from.

Daily profile (UTC hour of day):
- Night (00-05): quiet, 0.7 and the profile's night factor
- Morning peak (06-09): 1.25
- Evening peak (18-22): 1.3
- Everything else: plateau at 1.0

The diurnal curve picks the regime; inside a peak window the profile's
peak_factor (when set) replaces the raw multiplier.

All random draws come from the random source passed in.
"""

import random
from datetime import datetime, timezone

from .profiles import BuildingProfile

MORNING_PEAK = (6, 9)
EVENING_PEAK = (18, 22)
NIGHT = (0, 5)

MORNING_PEAK_MULTIPLIER = 1.25
EVENING_PEAK_MULTIPLIER = 1.3
NIGHT_MULTIPLIER = 0.7
PLATEAU_MULTIPLIER = 1.0


def utc_hour(timestamp: datetime) -> int:
    """Hour of day in UTC. Naive timestamps are taken to be UTC already."""
    if timestamp.tzinfo is None:
        return timestamp.hour
    return timestamp.astimezone(timezone.utc).hour


def _in_window(hour: int, window: tuple) -> bool:
    return window[0] <= hour <= window[1]


def diurnal_multiplier(hour: int) -> float:
    """
    Demand multiplier for an hour of the day.

    Args:
        hour: Hour of day (0-23)

    Returns:
        1.25 (morning peak), 1.3 (evening peak), 0.7 (night) or 1.0
    """
    if _in_window(hour, MORNING_PEAK):
        return MORNING_PEAK_MULTIPLIER
    if _in_window(hour, EVENING_PEAK):
        return EVENING_PEAK_MULTIPLIER
    if _in_window(hour, NIGHT):
        return NIGHT_MULTIPLIER
    return PLATEAU_MULTIPLIER


def is_night(hour: int) -> bool:
    """True for 00:00-05:59."""
    return _in_window(hour, NIGHT)


def jitter(value: float, pct: float, rng: random.Random) -> float:
    """
    Apply one multiplicative uniform perturbation.

    Args:
        value: Value to perturb
        pct: Relative amplitude (0.08 = ±8%)
        rng: Random source (one draw per call)

    Returns:
        value * (1 + U(-1, 1) * pct), clamped at 0
    """
    k = 1.0 + rng.uniform(-1.0, 1.0) * pct
    return max(0.0, value * k)


def base_intensity(profile: BuildingProfile, timestamp: datetime) -> float:
    """
    Deterministic part of the demand model (no jitter).

    Args:
        profile: Building profile
        timestamp: Hour being generated

    Returns:
        Expected hourly volume (m³)
    """
    hour = utc_hour(timestamp)
    multiplier = diurnal_multiplier(hour)

    night = profile.night_factor if is_night(hour) else 1.0
    if multiplier > 1.0:
        regime = profile.peak_factor if profile.peak_factor is not None else multiplier
    else:
        regime = multiplier

    return max(0.0, profile.base_volume_per_hour * night * regime)


def intensity(
    profile: BuildingProfile,
    timestamp: datetime,
    rng: random.Random
) -> float:
    """
    True consumption for one hour: base intensity with profile noise.

    Args:
        profile: Building profile
        timestamp: Hour being generated
        rng: Random source

    Returns:
        True hourly consumption (m³), >= 0
    """
    return jitter(base_intensity(profile, timestamp), profile.noise_fraction, rng)
