"""
Drift Scenario Definitions for Synthetic Meter Data

A drift scenario simulates a calibration fault on the apartment meter
(ITP_CW): for parts of the generated range the ITP reading is scaled up
while the building meters keep reporting true values. That discrepancy
between ITP and ODPU is exactly what the downstream anomaly detector is
supposed to catch.

A scenario is turned into a drift plan: a list of time segments, each
with a drift percentage. Hours outside every segment get no drift.

Scenarios:
- SEASON_BASE: no drift at all
- MINOR_DRIFT: intermittent +10% with quiet gaps in between
- PERSISTENT_DRIFT: +30% over the whole range
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional, Union

from .readings import Channel, Reading

logger = logging.getLogger(__name__)


class ScenarioType(str, Enum):
    """Drift scenarios that can be simulated."""
    SEASON_BASE = "SEASON_BASE"
    MINOR_DRIFT = "MINOR_DRIFT"
    PERSISTENT_DRIFT = "PERSISTENT_DRIFT"


MINOR_DRIFT_PERCENT = 10.0
PERSISTENT_DRIFT_PERCENT = 30.0
MIN_CHUNK_HOURS = 6


@dataclass(frozen=True)
class DriftSegment:
    """
    A stretch of time with a constant ITP drift.

    Attributes:
        start: First instant of the segment (inclusive)
        end: End of the segment (exclusive)
        drift_percent: ITP scaling in percent (10 = reads 10% high)
    """
    start: datetime
    end: datetime
    drift_percent: float

    def contains(self, timestamp: datetime) -> bool:
        return self.start <= timestamp < self.end


Planner = Callable[[datetime, int], List[DriftSegment]]


def _whole_range(drift_percent: float) -> Planner:
    def plan(start: datetime, hours: int) -> List[DriftSegment]:
        return [DriftSegment(start, start + timedelta(hours=hours), drift_percent)]
    return plan


def _intermittent(drift_percent: float) -> Planner:
    def plan(start: datetime, hours: int) -> List[DriftSegment]:
        chunk = max(MIN_CHUNK_HOURS, hours // 6)
        gap = chunk // 2
        end = start + timedelta(hours=hours)

        segments = []
        cursor = start
        while cursor < end:
            segment_end = cursor + timedelta(hours=chunk)
            segments.append(DriftSegment(cursor, segment_end, drift_percent))
            cursor = segment_end + timedelta(hours=gap)
        return segments
    return plan


@dataclass
class DriftScenario:
    """
    Definition of a drift scenario.

    Attributes:
        name: Human-readable scenario name
        scenario_type: Scenario identifier
        description: Short technical description
        story: Narrative for demos and documentation
        drift_percent: ITP drift applied inside drift segments
        planner: Builds the segment plan for (start, hours)
    """
    name: str
    scenario_type: ScenarioType
    description: str
    story: str
    drift_percent: float = 0.0
    planner: Planner = field(default_factory=lambda: _whole_range(0.0))

    def plan(self, start: datetime, hours: int) -> List[DriftSegment]:
        """Build the drift plan for a range of `hours` hours from `start`."""
        segments = self.planner(start, hours)
        logger.debug(
            f"{self.scenario_type.value}: {len(segments)} segment(s) for {hours}h from {start.isoformat()}"
        )
        return segments

    def get_affected_channels(self) -> List[str]:
        """Channels whose values this scenario changes."""
        return [Channel.ITP_CW.value] if self.drift_percent else []


class ScenarioLibrary:
    """
    Library of pre-defined drift scenarios.

    Usage:
        scenario = ScenarioLibrary.minor_drift()
        plan = scenario.plan(start, 48)

        scenario = ScenarioLibrary.get_scenario_by_type("PERSISTENT_DRIFT")
    """

    @staticmethod
    def season_base() -> DriftScenario:
        """Plain seasonal consumption, all meters agree."""
        return DriftScenario(
            name="Season Baseline",
            scenario_type=ScenarioType.SEASON_BASE,
            description="Seasonal consumption with no meter drift",
            story="""
            Apartment and building meters track the same consumption.
            ITP_CW stays within noise of the ODPU balance for the whole
            range. The anomaly detector should stay quiet.
            """,
            drift_percent=0.0,
            planner=_whole_range(0.0),
        )

    @staticmethod
    def minor_drift() -> DriftScenario:
        """Intermittent +10% ITP drift, e.g. a sticky meter register."""
        return DriftScenario(
            name="Minor Intermittent Drift",
            scenario_type=ScenarioType.MINOR_DRIFT,
            description="ITP meter reads 10% high in recurring windows",
            story="""
            The range is cut into chunks of max(6, hours / 6) hours.
            Each chunk reads 10% high on ITP_CW and is followed by a
            quiet gap of half a chunk. Short-lived discrepancies test
            whether the detector needs persistence before alerting.
            """,
            drift_percent=MINOR_DRIFT_PERCENT,
            planner=_intermittent(MINOR_DRIFT_PERCENT),
        )

    @staticmethod
    def persistent_drift() -> DriftScenario:
        """Sustained +30% ITP drift, e.g. a miscalibrated replacement meter."""
        return DriftScenario(
            name="Persistent Drift",
            scenario_type=ScenarioType.PERSISTENT_DRIFT,
            description="ITP meter reads 30% high for the whole range",
            story="""
            ITP_CW reads 30% above true consumption from the first hour
            to the last while ODPU channels stay correct. A clear,
            sustained imbalance the detector must flag.
            """,
            drift_percent=PERSISTENT_DRIFT_PERCENT,
            planner=_whole_range(PERSISTENT_DRIFT_PERCENT),
        )

    @classmethod
    def get_all_scenarios(cls) -> List[DriftScenario]:
        """Return all available scenarios."""
        return [
            cls.season_base(),
            cls.minor_drift(),
            cls.persistent_drift(),
        ]

    @classmethod
    def get_scenario_by_type(
        cls,
        scenario_type: Union[ScenarioType, str, None]
    ) -> DriftScenario:
        """
        Get a scenario by type.

        Unknown values fall back to the season baseline.

        Args:
            scenario_type: ScenarioType or its string value

        Returns:
            DriftScenario
        """
        scenario_map = {
            ScenarioType.SEASON_BASE: cls.season_base,
            ScenarioType.MINOR_DRIFT: cls.minor_drift,
            ScenarioType.PERSISTENT_DRIFT: cls.persistent_drift,
        }

        try:
            resolved = ScenarioType(scenario_type)
        except ValueError:
            logger.warning(f"Unknown scenario {scenario_type!r}, using SEASON_BASE")
            resolved = ScenarioType.SEASON_BASE

        return scenario_map[resolved]()


# =========================================
# Plan Helpers
# =========================================

def plan_drift(
    scenario: Union[ScenarioType, str, None],
    start: datetime,
    hours: int
) -> List[DriftSegment]:
    """
    Build the drift plan for a scenario over a range.

    Args:
        scenario: Scenario type (unknown values mean SEASON_BASE)
        start: Range start
        hours: Range length in hours

    Returns:
        Drift segments, in chronological order
    """
    return ScenarioLibrary.get_scenario_by_type(scenario).plan(start, hours)


def drift_for(plan: List[DriftSegment], timestamp: datetime) -> float:
    """Drift percent of the first segment containing `timestamp`, 0 if none."""
    for segment in plan:
        if segment.contains(timestamp):
            return segment.drift_percent
    return 0.0


def apply_drift_to_itp(readings: List[Reading], drift_percent: Optional[float]) -> List[Reading]:
    """
    Scale the ITP_CW reading of an hour by the drift percentage.

    Args:
        readings: Readings of one hour
        drift_percent: Drift in percent; 0/None leaves readings untouched

    Returns:
        Readings with ITP_CW scaled, other channels unchanged
    """
    if not drift_percent:
        return readings

    k = 1.0 + drift_percent / 100.0
    return [
        r.with_volume(r.volume_m3 * k) if r.channel == Channel.ITP_CW else r
        for r in readings
    ]
