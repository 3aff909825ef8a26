"""
Reading-Guard Validation Layer

Checks meter readings before they are stored. Readings are keyed by
(hour, building, channel), so a reading that is not on an hour
boundary or carries an impossible volume is rejected outright.

Philosophy:
- Hard failures: impossible or unkeyable data -> reject
- Soft warnings: suspicious but possible -> accept with warnings
- Drift and other consumption anomalies are NOT judged here; that is
  the anomaly detector's job downstream
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple
import logging

logger = logging.getLogger(__name__)

MAX_VOLUME_M3 = 100000.0

CIRCULATION_CHANNELS = {"ODPU_SUPPLY", "ODPU_RETURN"}
DEAD_END_CHANNELS = {"ODPU_CONSUMPTION"}


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"        # Cannot be stored - must reject
    WARNING = "warning"    # Suspicious - accept with warning


@dataclass
class ValidationIssue:
    """
    A single validation issue found in the data.

    Attributes:
        severity: How serious is this issue
        rule_name: Identifier for the rule that was violated
        message: Human-readable description
        index: Position of the reading in the submitted batch
        channel: Channel of the affected reading
        actual_value: The problematic value
        recommendation: How to fix the issue
    """
    severity: ValidationSeverity
    rule_name: str
    message: str
    index: Optional[int] = None
    channel: Optional[str] = None
    actual_value: Optional[float] = None
    recommendation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "severity": self.severity.value,
            "rule_name": self.rule_name,
            "message": self.message,
            "index": self.index,
            "channel": self.channel,
            "actual_value": self.actual_value,
            "recommendation": self.recommendation,
        }


@dataclass
class ValidationResult:
    """
    Result of validating meter readings.

    Attributes:
        is_valid: True if data can be accepted (possibly with warnings)
        status: "accepted", "accepted_with_warnings", or "rejected"
        issues: List of all validation issues found
    """
    is_valid: bool
    status: str
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "is_valid": self.is_valid,
            "status": self.status,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "issues": [issue.to_dict() for issue in self.issues],
        }


def to_utc(timestamp: datetime) -> datetime:
    """Convert to UTC; naive timestamps are taken as UTC already."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def is_hour_aligned(timestamp: datetime) -> bool:
    """True when the UTC minutes, seconds and microseconds are all zero."""
    utc = to_utc(timestamp)
    return utc.minute == 0 and utc.second == 0 and utc.microsecond == 0


class ReadingGuard:
    """
    Validation guard for meter readings.

    Each reading is a dictionary with ts, building_id, channel and
    volume_m3 (the row shape of engine.Reading.to_dict()).

    Per-reading rules:
    - ts must be at the top of the hour
    - volume must be within [0, 100000] m³

    Per-hour rules (readings of the same building and hour):
    - ODPU_RETURN should not exceed ODPU_SUPPLY
    - a building should not report circulation and dead-end channels
      in the same hour

    Example:
        guard = ReadingGuard()
        result = guard.validate([
            {"ts": ts, "building_id": "B-1", "channel": "ODPU_SUPPLY", "volume_m3": 9.2},
            {"ts": ts, "building_id": "B-1", "channel": "ODPU_RETURN", "volume_m3": 1.3},
        ])
        print(result.status)  # "accepted"
    """

    def __init__(self, strict_mode: bool = False):
        """
        Initialize the guard.

        Args:
            strict_mode: If True, treat warnings as errors (reject more)
        """
        self.strict_mode = strict_mode

    def validate(self, readings: Iterable[Dict[str, Any]]) -> ValidationResult:
        """
        Validate a batch of readings.

        Args:
            readings: Reading dictionaries

        Returns:
            ValidationResult with status and any issues found
        """
        readings = list(readings)
        issues: List[ValidationIssue] = []

        for index, reading in enumerate(readings):
            issues.extend(self._validate_hour_boundary(index, reading))
            issues.extend(self._validate_volume_bounds(index, reading))

        issues.extend(self._validate_hourly_consistency(readings))

        return self._build_result(issues)

    def validate_known_buildings(
        self,
        readings: Iterable[Dict[str, Any]],
        known_ids: Set[str]
    ) -> List[ValidationIssue]:
        """
        Report readings whose building is not registered.

        Args:
            readings: Reading dictionaries
            known_ids: Building ids present in the store

        Returns:
            One error per unknown building id
        """
        unknown = sorted({str(r["building_id"]) for r in readings} - set(known_ids))
        return [
            ValidationIssue(
                severity=ValidationSeverity.ERROR,
                rule_name="unknown_building",
                message=f"Unknown building_id: {building_id}",
                recommendation="Register the building before sending readings"
            )
            for building_id in unknown
        ]

    def merge(self, result: ValidationResult, extra: List[ValidationIssue]) -> ValidationResult:
        """Combine an existing result with additional issues."""
        if not extra:
            return result
        return self._build_result(result.issues + extra)

    def _build_result(self, issues: List[ValidationIssue]) -> ValidationResult:
        errors = [i for i in issues if i.severity == ValidationSeverity.ERROR]
        warnings = [i for i in issues if i.severity == ValidationSeverity.WARNING]

        if errors:
            return ValidationResult(is_valid=False, status="rejected", issues=issues)
        elif warnings:
            if self.strict_mode:
                # In strict mode, warnings become errors
                for w in warnings:
                    w.severity = ValidationSeverity.ERROR
                return ValidationResult(is_valid=False, status="rejected", issues=issues)
            return ValidationResult(is_valid=True, status="accepted_with_warnings", issues=issues)
        else:
            return ValidationResult(is_valid=True, status="accepted", issues=[])

    # =========================================
    # Rule: Hour Boundary
    # =========================================

    def _validate_hour_boundary(self, index: int, reading: Dict[str, Any]) -> List[ValidationIssue]:
        ts = reading.get("ts")
        if isinstance(ts, datetime) and is_hour_aligned(ts):
            return []

        return [ValidationIssue(
            severity=ValidationSeverity.ERROR,
            rule_name="hour_boundary",
            message=f"items[{index}].ts must be at the top of the hour (mm:ss.ffffff = 00:00.000000)",
            index=index,
            channel=reading.get("channel"),
            recommendation="Truncate the timestamp to the hour the volume belongs to"
        )]

    # =========================================
    # Rule: Volume Bounds
    # =========================================

    def _validate_volume_bounds(self, index: int, reading: Dict[str, Any]) -> List[ValidationIssue]:
        volume = reading.get("volume_m3")
        if volume is None:
            return [ValidationIssue(
                severity=ValidationSeverity.ERROR,
                rule_name="volume_missing",
                message=f"items[{index}].volume_m3 is required",
                index=index,
                channel=reading.get("channel"),
            )]

        if volume < 0:
            return [ValidationIssue(
                severity=ValidationSeverity.ERROR,
                rule_name="volume_negative",
                message=f"items[{index}].volume_m3 is negative ({volume:.3f} m³)",
                index=index,
                channel=reading.get("channel"),
                actual_value=volume,
                recommendation="Meters count up; check register rollover or sign handling"
            )]

        if volume > MAX_VOLUME_M3:
            return [ValidationIssue(
                severity=ValidationSeverity.ERROR,
                rule_name="volume_too_high",
                message=f"items[{index}].volume_m3 exceeds {MAX_VOLUME_M3:.0f} m³",
                index=index,
                channel=reading.get("channel"),
                actual_value=volume,
                recommendation="Check the unit (litres vs m³) and pulse weight"
            )]

        return []

    # =========================================
    # Rule: Hourly Consistency
    # =========================================

    def _validate_hourly_consistency(self, readings: List[Dict[str, Any]]) -> List[ValidationIssue]:
        issues = []

        hours: Dict[Tuple[str, Any], Dict[str, float]] = defaultdict(dict)
        for reading in readings:
            ts = reading.get("ts")
            key = (str(reading.get("building_id")), to_utc(ts) if isinstance(ts, datetime) else ts)
            channel = reading.get("channel")
            if channel is not None and reading.get("volume_m3") is not None:
                hours[key][str(channel)] = reading["volume_m3"]

        for (building_id, ts), channels in hours.items():
            supply = channels.get("ODPU_SUPPLY")
            ret = channels.get("ODPU_RETURN")
            if supply is not None and ret is not None and ret > supply:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    rule_name="return_exceeds_supply",
                    message=(
                        f"{building_id} @ {ts}: return ({ret:.3f} m³) "
                        f"exceeds supply ({supply:.3f} m³)"
                    ),
                    channel="ODPU_RETURN",
                    actual_value=ret,
                    recommendation="Check for swapped supply/return meters"
                ))

            present = set(channels)
            if present & CIRCULATION_CHANNELS and present & DEAD_END_CHANNELS:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    rule_name="mixed_topology",
                    message=f"{building_id} @ {ts}: both circulation and dead-end channels reported",
                    recommendation="Check the building's topology configuration"
                ))

        return issues


def validate_readings(readings: Iterable[Dict[str, Any]], strict: bool = False) -> ValidationResult:
    """
    Convenience function to validate meter readings.

    Args:
        readings: Reading dictionaries
        strict: If True, treat warnings as errors

    Returns:
        ValidationResult
    """
    return ReadingGuard(strict_mode=strict).validate(readings)
