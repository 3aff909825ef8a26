"""
Engine Module - Synthetic Meter Data Generation

This module generates hourly cold water meter readings for testing
and demonstration of meter analytics and anomaly detection.

Key Components:
- BuildingProfile / make_season_profile: building demand parameters
- demand: diurnal demand model with jitter
- channels: topology-aware ITP / ODPU channel synthesis
- MeterDataGenerator: hour-by-hour range generation
- ScenarioLibrary: drift scenarios for the apartment meter

Usage:
    from engine import make_season_profile, generate_range_with_scenario

    profile = make_season_profile(
        {"building_id": "B-1", "topology": "circulation"},
        "WINTER"
    )
    readings = generate_range_with_scenario(
        profile,
        start=datetime(2024, 1, 1, tzinfo=timezone.utc),
        hours=48,
        scenario="MINOR_DRIFT"
    )
"""

from .channels import synthesize_channels
from .demand import base_intensity, diurnal_multiplier, intensity, is_night, jitter
from .drift_scenarios import (
    DriftScenario,
    DriftSegment,
    ScenarioLibrary,
    ScenarioType,
    apply_drift_to_itp,
    drift_for,
    plan_drift,
)
from .generator import (
    MeterDataGenerator,
    generate_range,
    generate_range_with_scenario,
    get_available_scenarios,
)
from .profiles import BuildingProfile, Season, Topology, make_season_profile
from .readings import Channel, Reading

__all__ = [
    # Data model
    "BuildingProfile",
    "Season",
    "Topology",
    "make_season_profile",
    "Channel",
    "Reading",

    # Demand model
    "base_intensity",
    "diurnal_multiplier",
    "intensity",
    "is_night",
    "jitter",

    # Channels
    "synthesize_channels",

    # Drift Scenarios
    "DriftScenario",
    "DriftSegment",
    "ScenarioLibrary",
    "ScenarioType",
    "apply_drift_to_itp",
    "drift_for",
    "plan_drift",

    # Data Generator
    "MeterDataGenerator",
    "generate_range",
    "generate_range_with_scenario",
    "get_available_scenarios",
]

__version__ = "0.1.0"
