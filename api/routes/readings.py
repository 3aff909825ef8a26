"""
Reading Ingestion Endpoints

This module handles meter reading ingestion. It's the entry point for
getting readings into the store, both from real meters and from the
simulator.

Flow:
1. Receive readings (single or batch)
2. Validate with the Reading-Guard (hour boundary, volume bounds,
   hourly supply/return consistency)
3. Check that every building is registered
4. Upsert keyed by (ts, building_id, channel)
5. Return the stored count and any warnings

Ingestion is idempotent: replaying the same readings updates rows in
place instead of duplicating them.
"""

import logging
import os
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from api.database import get_db_manager, DatabaseManager
from api.models import (
    ReadingInput,
    ReadingBatch,
    UpsertResponse,
    BatchUpsertResponse,
    ValidationResponse,
    ValidationIssue,
    ValidationStatus,
)
from core.validators import ReadingGuard, ValidationResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/readings", tags=["Reading Ingestion"])

reading_guard = ReadingGuard(
    strict_mode=os.getenv("READING_GUARD_STRICT", "false").lower() == "true"
)


def to_validation_response(result: ValidationResult) -> ValidationResponse:
    """Convert a guard result to its response model."""
    return ValidationResponse(
        is_valid=result.is_valid,
        status=ValidationStatus(result.status),
        error_count=len(result.errors),
        warning_count=len(result.warnings),
        issues=[ValidationIssue(**issue.to_dict()) for issue in result.issues]
    )


def check_readings(rows: List[Dict[str, Any]], db_manager: DatabaseManager) -> ValidationResult:
    """
    Run the guard and the building registry check.

    Raises:
        HTTPException(422): If any reading is rejected
    """
    result = reading_guard.validate(rows)
    known = db_manager.get_known_building_ids(r["building_id"] for r in rows)
    result = reading_guard.merge(result, reading_guard.validate_known_buildings(rows, known))

    if not result.is_valid:
        response = to_validation_response(result)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "code": "VALIDATION_ERROR",
                "message": result.errors[0].message,
                "details": [issue.model_dump() for issue in response.issues],
            }
        )

    return result


# =========================================
# API Endpoints
# =========================================

@router.post(
    "",
    response_model=UpsertResponse,
    summary="Ingest single meter reading",
    description="""
    Upsert one meter reading keyed by (ts, building_id, channel).

    **Rules:**
    - `ts` must be at the top of the hour
    - `volume_m3` between 0 and 100000
    - `building_id` must be registered

    **Example:**
    ```json
    {
        "building_id": "B-0001",
        "ts": "2024-01-15T07:00:00Z",
        "channel": "ITP_CW",
        "volume_m3": 9.874
    }
    ```
    """
)
async def ingest_single(
    reading: ReadingInput,
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Ingest a single meter reading."""
    row = reading.to_row()
    result = check_readings([row], db_manager)

    stored = db_manager.upsert_readings([row])

    return UpsertResponse(
        upserted=len(stored),
        conflict_key=[reading.ts.isoformat(), reading.building_id, reading.channel.value],
        validation=to_validation_response(result)
    )


@router.post(
    "/batch",
    response_model=BatchUpsertResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Ingest multiple meter readings",
    description="""
    Upsert up to 1000 readings in one request.

    Validation is all-or-nothing: if any reading is rejected, or any
    building is unknown, nothing is stored and the response lists the
    issues.
    """
)
async def ingest_batch(
    batch: ReadingBatch,
    db_manager: DatabaseManager = Depends(get_db_manager)
):
    """Ingest a batch of meter readings."""
    rows = [item.to_row() for item in batch.items]
    result = check_readings(rows, db_manager)

    stored = db_manager.upsert_readings(rows)
    logger.info(f"Batch ingest: received {len(rows)}, upserted {len(stored)}")

    response = to_validation_response(result)
    return BatchUpsertResponse(
        ok=True,
        received=len(rows),
        upserted=len(stored),
        warnings=response.warning_count,
        issues=response.issues
    )


@router.post(
    "/validate",
    response_model=ValidationResponse,
    summary="Validate readings without storing",
    description="""
    Run the Reading-Guard over a batch without touching the store.

    Building registration is not checked here.
    """
)
async def validate_only(batch: ReadingBatch):
    """Validate readings without storing."""
    result = reading_guard.validate(item.to_row() for item in batch.items)
    return to_validation_response(result)
