"""
Simulation Runner

Drives the generation engine for the simulate endpoint and hands every
generated reading to an ingest callable.

Modes:
- BATCH_DAY / BATCH_WEEK: generate the hours that ended at the current
  wall-clock hour in one go, ingest once
- REALTIME: one hour per tick at the current wall-clock hour, with a
  pause between ticks

The runner owns pacing only. Generation stays in the engine and
storage stays behind the ingest callable.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from engine.generator import generate_range_with_scenario
from engine.profiles import BuildingProfile

from api.models import SimulationMode, SimulationRequest, SimulationResponse

logger = logging.getLogger(__name__)

MODE_HOURS = {
    SimulationMode.BATCH_DAY: 24,
    SimulationMode.BATCH_WEEK: 24 * 7,
    SimulationMode.REALTIME: 1,
}

Ingest = Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def floor_hour(ts: datetime) -> datetime:
    """Truncate a timestamp to the start of its hour."""
    return ts.replace(minute=0, second=0, microsecond=0)


def hours_for_mode(mode: SimulationMode) -> int:
    """Default number of hours generated per run (per tick for REALTIME)."""
    return MODE_HOURS.get(mode, 1)


@dataclass
class SimulationRunner:
    """
    Runs the simulator for one building profile.

    Attributes:
        ingest: Stores reading rows and returns the stored rows
        sleep: Awaitable pause between realtime ticks
        clock: Returns the current time (UTC)
        rng: Random source shared by all ticks of a run
    """
    ingest: Ingest
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    clock: Callable[[], datetime] = now_utc
    rng: Optional[random.Random] = None

    async def run(self, profile: BuildingProfile, request: SimulationRequest) -> SimulationResponse:
        """
        Run the simulator.

        Args:
            profile: Season-adjusted building profile
            request: Simulation parameters

        Returns:
            SimulationResponse with the number of stored rows
        """
        if request.mode == SimulationMode.REALTIME:
            return await self._run_realtime(profile, request)
        return self._run_batch(profile, request)

    def _run_batch(self, profile: BuildingProfile, request: SimulationRequest) -> SimulationResponse:
        started_at = self.clock()
        total_hours = request.hours if request.hours is not None else hours_for_mode(request.mode)
        end = floor_hour(started_at)
        start = end - timedelta(hours=total_hours)

        readings = generate_range_with_scenario(
            profile, start, total_hours, request.scenario, rng=self.rng
        )
        inserted = self.ingest([r.to_dict() for r in readings])

        logger.info(
            f"Simulated {total_hours}h for {profile.building_id} "
            f"({request.scenario.value}): {len(inserted)} rows stored"
        )

        return SimulationResponse(
            ok=True,
            mode=request.mode,
            season=request.season,
            scenario=request.scenario,
            inserted=len(inserted),
            started_at=started_at,
            start=start,
            end=end,
        )

    async def _run_realtime(self, profile: BuildingProfile, request: SimulationRequest) -> SimulationResponse:
        started_at = self.clock()
        inserted_total = 0

        for i in range(request.iterations):
            tick_hour = floor_hour(self.clock())
            readings = generate_range_with_scenario(
                profile, tick_hour, 1, request.scenario, rng=self.rng
            )
            inserted_total += len(self.ingest([r.to_dict() for r in readings]))
            logger.debug(f"Tick {i + 1}/{request.iterations} for {profile.building_id} @ {tick_hour.isoformat()}")

            if i < request.iterations - 1:
                await self.sleep(request.step_sec)

        logger.info(
            f"Realtime run for {profile.building_id} finished: "
            f"{request.iterations} tick(s), {inserted_total} rows stored"
        )

        return SimulationResponse(
            ok=True,
            mode=request.mode,
            season=request.season,
            scenario=request.scenario,
            inserted=inserted_total,
            started_at=started_at,
            iterations=request.iterations,
            step_sec=request.step_sec,
        )
