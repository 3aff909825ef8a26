"""
Core Module - Meter Telemetry Simulator

Framework-agnostic checks applied to meter readings before storage:
- Reading-Guard validation (hour boundaries, volume bounds, hourly
  supply/return consistency)

Used by the API for both ingestion and validation-only requests.
"""

from .validators import (
    ReadingGuard,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
    validate_readings,
)

__all__ = [
    "ReadingGuard",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSeverity",
    "validate_readings",
]

__version__ = "0.1.0"
