"""
Pydantic Models for API Request/Response Validation

This module defines all the data models used by the API for:
- Request body validation
- Response serialization
- Documentation generation (OpenAPI/Swagger)

All models use Pydantic v2 syntax for validation and serialization.
"""

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from engine.drift_scenarios import ScenarioType
from engine.profiles import Season, Topology
from engine.readings import Channel


# =========================================
# Enums
# =========================================

class ValidationStatus(str, Enum):
    """Data validation status."""
    ACCEPTED = "accepted"
    ACCEPTED_WITH_WARNINGS = "accepted_with_warnings"
    REJECTED = "rejected"


class SimulationMode(str, Enum):
    """How the simulator produces its hours."""
    REALTIME = "REALTIME"        # one hour per tick, paced
    BATCH_DAY = "BATCH_DAY"      # last 24 hours at once
    BATCH_WEEK = "BATCH_WEEK"    # last 168 hours at once


# =========================================
# Reading Models
# =========================================

class ReadingInput(BaseModel):
    """Input model for a single meter reading."""
    building_id: str = Field(
        ...,
        description="Building identifier",
        min_length=1,
        max_length=64
    )
    ts: datetime = Field(
        ...,
        description="Hour the volume belongs to (ISO 8601, top of the hour)"
    )
    channel: Channel = Field(..., description="Metering channel")
    volume_m3: float = Field(
        ...,
        description="Volume for the hour (m³)",
        ge=0, le=100000
    )
    t_celsius: Optional[float] = Field(
        default=None,
        description="Water temperature (°C), optional",
        ge=-50, le=150
    )

    @field_validator("ts")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Timestamps without an offset are UTC; others are converted to UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def to_row(self) -> Dict[str, Any]:
        row = self.model_dump()
        row["channel"] = self.channel.value
        return row

    class Config:
        json_schema_extra = {
            "example": {
                "building_id": "B-0001",
                "ts": "2024-01-15T07:00:00Z",
                "channel": "ITP_CW",
                "volume_m3": 9.874
            }
        }


class ReadingBatch(BaseModel):
    """Batch of meter readings for bulk ingestion."""
    items: List[ReadingInput] = Field(
        ...,
        description="List of meter readings",
        min_length=1,
        max_length=1000
    )


# =========================================
# Validation Response Models
# =========================================

class ValidationIssue(BaseModel):
    """A single validation issue."""
    severity: str = Field(..., description="error or warning")
    rule_name: str = Field(..., description="Name of the violated rule")
    message: str = Field(..., description="Human-readable description")
    index: Optional[int] = Field(None, description="Position in the submitted batch")
    channel: Optional[str] = Field(None, description="Affected channel")
    actual_value: Optional[float] = Field(None, description="The problematic value")
    recommendation: Optional[str] = Field(None, description="How to fix")


class ValidationResponse(BaseModel):
    """Response from reading validation."""
    is_valid: bool = Field(..., description="Whether data was accepted")
    status: ValidationStatus = Field(..., description="Validation status")
    error_count: int = Field(default=0, description="Number of errors")
    warning_count: int = Field(default=0, description="Number of warnings")
    issues: List[ValidationIssue] = Field(
        default_factory=list,
        description="List of validation issues"
    )


# =========================================
# Ingestion Response Models
# =========================================

class UpsertResponse(BaseModel):
    """Response from single reading ingestion."""
    status: str = Field(default="upserted", description="Always 'upserted'")
    upserted: int = Field(..., description="Rows written (insert and update are not distinguished)")
    conflict_key: List[str] = Field(..., description="(ts, building_id, channel) of the row")
    validation: ValidationResponse


class BatchUpsertResponse(BaseModel):
    """Response from batch ingestion."""
    ok: bool
    received: int
    upserted: int
    warnings: int = 0
    issues: List[ValidationIssue] = Field(default_factory=list)


# =========================================
# Building Models
# =========================================

class BuildingInput(BaseModel):
    """Building registration payload."""
    address: Optional[str] = Field(None, description="Postal address", max_length=255)
    topology: Topology = Field(
        default=Topology.CIRCULATION,
        description="Metering topology"
    )


class BuildingResponse(BaseModel):
    """A registered building."""
    building_id: str
    address: Optional[str] = None
    topology: Topology


# =========================================
# Scenario / Simulation Models
# =========================================

class ScenarioInfo(BaseModel):
    """Information about a drift scenario."""
    name: str
    type: str
    description: str
    drift_percent: float
    affected_channels: List[str]
    story: Optional[str] = None


class ScenarioListResponse(BaseModel):
    """Response listing available scenarios."""
    scenarios: List[ScenarioInfo]


class DriftSegmentOut(BaseModel):
    """One drift segment of a plan."""
    start: datetime
    end: datetime
    drift_percent: float


class SimulationRequest(BaseModel):
    """Request to run the simulator for one building."""
    building_id: str = Field(..., min_length=1, max_length=64)
    season: Season = Field(default=Season.WINTER, description="Season to scale demand for")
    scenario: ScenarioType = Field(default=ScenarioType.SEASON_BASE, description="Drift scenario")
    mode: SimulationMode = Field(default=SimulationMode.BATCH_DAY, description="Simulation mode")
    hours: Optional[int] = Field(
        default=None,
        description="Batch length in hours (overrides the mode default)",
        ge=0, le=24 * 366
    )
    step_sec: float = Field(
        default=5,
        description="Realtime: seconds between ticks",
        ge=0, le=3600
    )
    iterations: int = Field(
        default=10,
        description="Realtime: number of ticks",
        ge=1, le=10000
    )

    class Config:
        json_schema_extra = {
            "example": {
                "building_id": "B-0001",
                "season": "WINTER",
                "scenario": "MINOR_DRIFT",
                "mode": "BATCH_WEEK"
            }
        }


class SimulationResponse(BaseModel):
    """Response from a simulator run."""
    ok: bool
    mode: SimulationMode
    season: Season
    scenario: ScenarioType
    inserted: int
    started_at: datetime
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    iterations: Optional[int] = None
    step_sec: Optional[float] = None


# =========================================
# System Status Models
# =========================================

class SystemHealth(BaseModel):
    """System health check response."""
    status: str = Field(..., description="ok, degraded, or error")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(..., description="Current server time")
    database: str = Field(..., description="Database connection status")
    components: Dict[str, str] = Field(
        default_factory=dict,
        description="Status of system components"
    )
