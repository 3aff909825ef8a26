"""
Building Registry Endpoints

Readings are only accepted for registered buildings, and the simulator
reads a building's topology from here.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, status

from api.database import get_db_manager, DatabaseManager
from api.models import BuildingInput, BuildingResponse
from engine.profiles import Topology

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/buildings", tags=["Buildings"])


def row_to_building(row: dict) -> BuildingResponse:
    return BuildingResponse(
        building_id=row["id"],
        address=row.get("address"),
        topology=Topology(row.get("scheme_type") or Topology.CIRCULATION.value)
    )


@router.put(
    "/{building_id}",
    response_model=BuildingResponse,
    summary="Register or update a building"
)
async def put_building(
    building: BuildingInput,
    building_id: str = Path(..., min_length=1, max_length=64),
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Create the building, or update its address and topology."""
    row = db_manager.upsert_building({
        "id": building_id,
        "address": building.address,
        "scheme_type": building.topology.value,
    })
    logger.info(f"Building {building_id} registered ({building.topology.value})")
    return row_to_building(row)


@router.get(
    "/{building_id}",
    response_model=BuildingResponse,
    summary="Get a building"
)
async def get_building(
    building_id: str,
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Get a registered building."""
    row = db_manager.get_building(building_id)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Building not found: {building_id}"
        )
    return row_to_building(row)


@router.delete(
    "/{building_id}/readings",
    summary="Delete a building's readings"
)
async def delete_readings(
    building_id: str,
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Remove every stored reading of a building, e.g. before re-simulating."""
    if db_manager.get_building(building_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Building not found: {building_id}"
        )

    deleted = db_manager.delete_building_readings(building_id)
    logger.info(f"Deleted {deleted} readings for {building_id}")
    return {"building_id": building_id, "deleted": deleted}
