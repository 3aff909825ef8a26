"""
Channel Synthesizer

Derives per-channel meter readings for one hour from the building's
true consumption.

- ITP_CW tracks true consumption closely (60% of the profile noise)
- Circulation: supply carries 15% more than is consumed, return is
  supply minus consumption (mass balance), floored at zero
- Dead-end: one consumption channel with its own noise draw
"""

import random
from datetime import datetime
from typing import List

from .demand import jitter
from .profiles import BuildingProfile, Topology
from .readings import Channel, Reading, round_volume

ITP_NOISE_SHARE = 0.6
SUPPLY_OVERFLOW = 1.15
RETURN_NOISE = 0.02


def synthesize_channels(
    profile: BuildingProfile,
    true_consumption: float,
    timestamp: datetime,
    rng: random.Random
) -> List[Reading]:
    """
    Build the readings of one hour.

    Args:
        profile: Building profile (topology and noise)
        true_consumption: Hour's true consumption from the demand model
        timestamp: Hour the readings belong to
        rng: Random source

    Returns:
        [ITP_CW, ODPU_SUPPLY, ODPU_RETURN] for circulation buildings,
        [ITP_CW, ODPU_CONSUMPTION] for dead-end buildings
    """
    noise = profile.noise_fraction
    itp = jitter(true_consumption, noise * ITP_NOISE_SHARE, rng)

    def reading(channel: Channel, volume: float) -> Reading:
        return Reading(
            timestamp=timestamp,
            building_id=profile.building_id,
            channel=channel,
            volume_m3=round_volume(volume),
        )

    if profile.topology == Topology.CIRCULATION:
        supply = jitter(true_consumption * SUPPLY_OVERFLOW, noise, rng)
        ret = max(0.0, supply - true_consumption + jitter(0.0, RETURN_NOISE, rng))
        return [
            reading(Channel.ITP_CW, itp),
            reading(Channel.ODPU_SUPPLY, supply),
            reading(Channel.ODPU_RETURN, ret),
        ]

    consumption = jitter(true_consumption, noise, rng)
    return [
        reading(Channel.ITP_CW, itp),
        reading(Channel.ODPU_CONSUMPTION, consumption),
    ]
