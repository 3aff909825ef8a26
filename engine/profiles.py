"""
Building Profiles

A building profile describes how a building's cold water demand looks
before any time-of-day or random variation: its metering topology, the
baseline hourly volume and the factors the demand model applies.

Season adjustment scales the baseline once per generation request,
giving a new immutable profile.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class Topology(str, Enum):
    """Building plumbing layout, which decides the ODPU channels."""
    CIRCULATION = "circulation"   # supply + return loop, two ODPU channels
    DEAD_END = "dead_end"         # single ODPU consumption channel


class Season(str, Enum):
    """Seasons the simulator knows how to scale demand for."""
    WINTER = "WINTER"
    SUMMER = "SUMMER"


# Seasonal multipliers for base volume
WINTER_COEFFICIENT = 1.25
SUMMER_COEFFICIENT = 0.85

# Season-adjusted base volume never drops below this (m³/h)
MIN_BASE_VOLUME = 0.2

DEFAULT_BASE_VOLUME = 8.0
DEFAULT_NOISE_FRACTION = 0.08
DEFAULT_NIGHT_FACTOR = 0.8
DEFAULT_SEASON_PEAK_FACTOR = 1.3


@dataclass(frozen=True)
class BuildingProfile:
    """
    Baseline demand parameters for one building.

    Attributes:
        building_id: Opaque building identifier
        topology: Metering topology (circulation or dead_end)
        base_volume_per_hour: Baseline hourly volume (m³/h), >= 0
        noise_fraction: Relative random perturbation (0.08 = ±8%)
        night_factor: Extra multiplier for night hours (00:00-05:59)
        peak_factor: Multiplier used in peak windows; None uses the
            raw diurnal peak multiplier
    """
    building_id: str
    topology: Topology
    base_volume_per_hour: float
    noise_fraction: float = DEFAULT_NOISE_FRACTION
    night_factor: float = DEFAULT_NIGHT_FACTOR
    peak_factor: Optional[float] = None


def season_coefficient(season: Union[Season, str]) -> float:
    """Base volume multiplier for a season (anything but winter is summer-like)."""
    if season == Season.WINTER or season == Season.WINTER.value:
        return WINTER_COEFFICIENT
    return SUMMER_COEFFICIENT


def make_season_profile(
    base: Mapping[str, Any],
    season: Union[Season, str]
) -> BuildingProfile:
    """
    Derive a season-adjusted building profile.

    Args:
        base: Profile fields; needs building_id and topology, the rest
            fall back to simulator defaults
        season: Season to scale the base volume for

    Returns:
        New BuildingProfile with the seasonal base volume

    Example:
        profile = make_season_profile(
            {"building_id": "B-1", "topology": "dead_end", "base_volume_per_hour": 8},
            Season.WINTER
        )
        profile.base_volume_per_hour  # 10.0
    """
    base_volume = _value_or(base, "base_volume_per_hour", DEFAULT_BASE_VOLUME)

    return BuildingProfile(
        building_id=base["building_id"],
        topology=Topology(base["topology"]),
        base_volume_per_hour=max(MIN_BASE_VOLUME, base_volume * season_coefficient(season)),
        noise_fraction=_value_or(base, "noise_fraction", DEFAULT_NOISE_FRACTION),
        night_factor=_value_or(base, "night_factor", DEFAULT_NIGHT_FACTOR),
        peak_factor=_value_or(base, "peak_factor", DEFAULT_SEASON_PEAK_FACTOR),
    )


def profile_to_dict(profile: BuildingProfile) -> Dict[str, Any]:
    """Convert a profile to a JSON-friendly dictionary."""
    return {
        "building_id": profile.building_id,
        "topology": profile.topology.value,
        "base_volume_per_hour": profile.base_volume_per_hour,
        "noise_fraction": profile.noise_fraction,
        "night_factor": profile.night_factor,
        "peak_factor": profile.peak_factor,
    }


def _value_or(fields: Mapping[str, Any], key: str, default: float) -> float:
    value = fields.get(key)
    return default if value is None else float(value)
