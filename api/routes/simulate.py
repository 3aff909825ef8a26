"""
Simulator Endpoints

Run the synthetic meter generator for a registered building and store
the result through the same idempotent upsert used for real readings.

Flow:
1. Look up the building and its topology
2. Build the season-adjusted profile
3. Generate (batch or paced realtime) with the selected drift scenario
4. Upsert the readings
"""

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, status

from api.database import get_db_manager, DatabaseManager
from api.models import SimulationRequest, SimulationResponse
from api.simulation import SimulationRunner
from engine.profiles import DEFAULT_BASE_VOLUME, Topology, make_season_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/simulate", tags=["Simulator"])


@router.post(
    "/run",
    response_model=SimulationResponse,
    summary="Run the simulator",
    description="""
    Generate and store synthetic readings for one building.

    **Modes:**
    - `BATCH_DAY`: the 24 hours up to the current hour (default)
    - `BATCH_WEEK`: the 168 hours up to the current hour
    - `REALTIME`: `iterations` ticks, one hour each, `step_sec` apart

    **Scenarios:**
    - `SEASON_BASE`: no drift
    - `MINOR_DRIFT`: intermittent +10% on ITP_CW
    - `PERSISTENT_DRIFT`: +30% on ITP_CW for the whole range
    """
)
async def run_simulation(
    request: SimulationRequest,
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Run the simulator for a building."""
    building = db_manager.get_building(request.building_id)
    if building is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Building not found: {request.building_id}"
        )

    profile = make_season_profile(
        {
            "building_id": request.building_id,
            "topology": building.get("scheme_type") or Topology.CIRCULATION.value,
            "base_volume_per_hour": float(os.getenv("SIMULATOR_BASE_VOLUME", DEFAULT_BASE_VOLUME)),
        },
        request.season
    )

    logger.info(
        f"Simulating {request.building_id}: {request.mode.value}, "
        f"{request.season.value}, {request.scenario.value}"
    )

    runner = SimulationRunner(ingest=db_manager.upsert_readings)
    return await runner.run(profile, request)
