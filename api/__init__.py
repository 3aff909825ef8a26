"""
API Module - FastAPI Backend

This module provides the REST API for the Meter Telemetry Simulator.
It handles reading ingestion, validation, storage and simulator runs.

Key Components:
- main.py: FastAPI application and root endpoints
- models.py: Pydantic schemas for request/response validation
- database.py: PostgreSQL connection management and upserts
- simulation.py: Batch / realtime simulator runner
- routes/: API endpoint implementations

Endpoints:
- POST /api/v1/readings: Ingest one reading
- POST /api/v1/readings/batch: Ingest up to 1000 readings
- PUT /api/v1/buildings/{building_id}: Register a building
- GET /api/v1/scenarios: List drift scenarios
- POST /api/v1/simulate/run: Generate and store synthetic data
"""

__version__ = "0.1.0"
