"""
Scenario Endpoints

This module exposes the drift scenarios the simulator can inject:
- List available scenarios
- Scenario details with the narrative
- Preview generated data and the drift plan without storing anything
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Query

from api.models import (
    DriftSegmentOut,
    ScenarioInfo,
    ScenarioListResponse,
)
from engine.drift_scenarios import DriftScenario, ScenarioLibrary, ScenarioType
from engine.generator import MeterDataGenerator
from engine.profiles import Season, Topology, make_season_profile, profile_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scenarios", tags=["Drift Scenarios"])


def to_scenario_info(scenario: DriftScenario, with_story: bool = False) -> ScenarioInfo:
    return ScenarioInfo(
        name=scenario.name,
        type=scenario.scenario_type.value,
        description=scenario.description,
        drift_percent=scenario.drift_percent,
        affected_channels=scenario.get_affected_channels(),
        story=scenario.story.strip() if with_story else None
    )


@router.get(
    "",
    response_model=ScenarioListResponse,
    summary="List available scenarios"
)
async def list_scenarios():
    """List all available drift scenarios."""
    return ScenarioListResponse(
        scenarios=[to_scenario_info(s) for s in ScenarioLibrary.get_all_scenarios()]
    )


@router.get(
    "/{scenario_type}",
    response_model=ScenarioInfo,
    summary="Get scenario details"
)
async def get_scenario_details(scenario_type: ScenarioType):
    """Get details for a specific scenario, including its story."""
    return to_scenario_info(ScenarioLibrary.get_scenario_by_type(scenario_type), with_story=True)


@router.get(
    "/{scenario_type}/preview",
    summary="Preview scenario data",
    description="""
    Generate readings for a throwaway building without storing them.

    Returns the drift plan and an even sample of the readings.
    """
)
async def preview_scenario(
    scenario_type: ScenarioType,
    topology: Topology = Query(default=Topology.CIRCULATION, description="Metering topology"),
    season: Season = Query(default=Season.WINTER, description="Season"),
    hours: int = Query(default=48, ge=1, le=24 * 31, description="Range length in hours"),
    samples: int = Query(default=12, ge=1, le=200, description="Number of hours to show"),
    seed: Optional[int] = Query(default=None, description="Random seed for a reproducible preview")
):
    """Preview scenario data without ingesting."""
    profile = make_season_profile(
        {"building_id": "PREVIEW", "topology": topology.value},
        season
    )
    scenario = ScenarioLibrary.get_scenario_by_type(scenario_type)

    end_time = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    start_time = end_time - timedelta(hours=hours)

    generator = MeterDataGenerator(profile, random_seed=seed)
    generator.set_scenario(scenario)
    readings = generator.generate_to_list(start_time, hours)

    # Sample whole hours evenly across the range
    per_hour = len(readings) // hours
    step = max(1, hours // samples)
    sampled = []
    for hour_index in range(0, hours, step)[:samples]:
        offset = hour_index * per_hour
        sampled.extend(r.to_dict() for r in readings[offset:offset + per_hour])

    return {
        "scenario": to_scenario_info(scenario),
        "profile": profile_to_dict(profile),
        "plan": [
            DriftSegmentOut(start=s.start, end=s.end, drift_percent=s.drift_percent)
            for s in scenario.plan(start_time, hours)
        ],
        "preview": {
            "total_readings": len(readings),
            "hours_shown": len(sampled) // per_hour if per_hour else 0,
            "time_range": {
                "start": start_time.isoformat(),
                "end": end_time.isoformat()
            }
        },
        "sample_readings": sampled
    }
