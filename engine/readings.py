"""
Meter Reading Value Objects

A reading is one hourly volume measurement on one metering channel of
one building. Readings are immutable: drift and other adjustments
produce new readings instead of mutating existing ones.

Channels:
- ITP_CW: apartment-level cold water meter
- ODPU_SUPPLY / ODPU_RETURN: building meter, circulation topology
- ODPU_CONSUMPTION: building meter, dead-end topology
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class Channel(str, Enum):
    """Metering channels a reading can come from."""
    ITP_CW = "ITP_CW"
    ODPU_SUPPLY = "ODPU_SUPPLY"
    ODPU_RETURN = "ODPU_RETURN"
    ODPU_CONSUMPTION = "ODPU_CONSUMPTION"


VOLUME_DECIMALS = 3


def round_volume(value: float) -> float:
    """Round a volume to the stored precision (m³, 3 decimals)."""
    return round(value, VOLUME_DECIMALS)


@dataclass(frozen=True)
class Reading:
    """
    One hourly meter measurement.

    Attributes:
        timestamp: Hour-aligned UTC instant the volume belongs to
        building_id: Building the meter is installed in
        channel: Metering channel
        volume_m3: Volume for the hour (m³), non-negative
        t_celsius: Optional water temperature, not modelled by the generator
    """
    timestamp: datetime
    building_id: str
    channel: Channel
    volume_m3: float
    t_celsius: Optional[float] = None

    def with_volume(self, volume_m3: float) -> "Reading":
        """Return a copy of this reading with a different (rounded) volume."""
        return replace(self, volume_m3=round_volume(volume_m3))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the row shape used for storage and JSON output."""
        return {
            "ts": self.timestamp,
            "building_id": self.building_id,
            "channel": self.channel.value,
            "volume_m3": self.volume_m3,
            "t_celsius": self.t_celsius,
        }
