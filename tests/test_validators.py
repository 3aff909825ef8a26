"""
Tests for Reading-Guard Validation

These tests verify that the guard rejects readings that cannot be
stored and warns about suspicious hourly combinations.

Run with: pytest tests/test_validators.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest
from core.validators import (
    ReadingGuard,
    ValidationResult,
    ValidationIssue,
    ValidationSeverity,
    is_hour_aligned,
    validate_readings
)

TS = datetime(2024, 1, 15, 7, tzinfo=timezone.utc)


def reading(channel="ITP_CW", volume=5.0, ts=TS, building_id="B-1"):
    return {"ts": ts, "building_id": building_id, "channel": channel, "volume_m3": volume}


class TestValidationSeverity:
    """Test validation severity enum."""

    def test_severity_values(self):
        """Test all severity values exist."""
        assert ValidationSeverity.ERROR.value == "error"
        assert ValidationSeverity.WARNING.value == "warning"

    def test_only_errors_and_warnings(self):
        assert [s.value for s in ValidationSeverity] == ["error", "warning"]


class TestValidationResult:
    """Test ValidationResult dataclass."""

    def test_valid_result(self):
        """Test creating a valid result."""
        result = ValidationResult(
            is_valid=True,
            status="accepted",
            issues=[]
        )

        assert result.is_valid
        assert result.status == "accepted"
        assert len(result.issues) == 0

    def test_to_dict(self):
        """Test conversion to dictionary."""
        result = ValidationResult(
            is_valid=False,
            status="rejected",
            issues=[
                ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    rule_name="test_rule",
                    message="Test message"
                )
            ]
        )

        d = result.to_dict()

        assert d["is_valid"] == False
        assert d["status"] == "rejected"
        assert d["error_count"] == 1
        assert d["warning_count"] == 0
        assert "info_count" not in d
        assert len(d["issues"]) == 1
        assert d["issues"][0]["rule_name"] == "test_rule"


class TestHourBoundary:
    """Test the top-of-the-hour rule."""

    def setup_method(self):
        """Set up test fixtures."""
        self.guard = ReadingGuard()

    def test_aligned_timestamp_accepted(self):
        result = self.guard.validate([reading()])

        assert result.is_valid
        assert result.status == "accepted"

    @pytest.mark.parametrize("ts", [
        TS.replace(minute=30),
        TS.replace(second=1),
        TS.replace(microsecond=1000),
    ])
    def test_unaligned_timestamp_rejected(self, ts):
        result = self.guard.validate([reading(ts=ts)])

        assert not result.is_valid
        assert result.errors[0].rule_name == "hour_boundary"
        assert result.errors[0].index == 0

    def test_missing_timestamp_rejected(self):
        result = self.guard.validate([reading(ts=None)])

        assert not result.is_valid

    def test_index_points_at_bad_item(self):
        result = self.guard.validate([reading(), reading(ts=TS.replace(minute=5), channel="ODPU_CONSUMPTION")])

        assert [i.index for i in result.errors] == [1]
        assert "items[1]" in result.errors[0].message

    def test_is_hour_aligned(self):
        assert is_hour_aligned(TS)
        assert not is_hour_aligned(TS.replace(minute=1))

    def test_alignment_checked_in_utc(self):
        """12:00+05:30 is 06:30Z, 12:30+05:30 is 07:00Z."""
        ist = timezone(timedelta(hours=5, minutes=30))

        assert not is_hour_aligned(datetime(2024, 1, 15, 12, 0, tzinfo=ist))
        assert is_hour_aligned(datetime(2024, 1, 15, 12, 30, tzinfo=ist))

    def test_half_hour_offset_timestamps(self):
        ist = timezone(timedelta(hours=5, minutes=30))

        off_hour = self.guard.validate([reading(ts=datetime(2024, 1, 15, 12, 0, tzinfo=ist))])
        on_hour = self.guard.validate([reading(ts=datetime(2024, 1, 15, 12, 30, tzinfo=ist))])

        assert off_hour.status == "rejected"
        assert on_hour.status == "accepted"

    def test_naive_timestamp_taken_as_utc(self):
        assert is_hour_aligned(datetime(2024, 1, 15, 7))


class TestVolumeBounds:
    """Test volume range validation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.guard = ReadingGuard()

    def test_zero_volume_accepted(self):
        assert self.guard.validate([reading(volume=0.0)]).is_valid

    def test_negative_volume_rejected(self):
        result = self.guard.validate([reading(volume=-0.001)])

        assert not result.is_valid
        assert result.errors[0].rule_name == "volume_negative"
        assert result.errors[0].actual_value == -0.001

    def test_huge_volume_rejected(self):
        result = self.guard.validate([reading(volume=100000.5)])

        assert result.errors[0].rule_name == "volume_too_high"

    def test_missing_volume_rejected(self):
        result = self.guard.validate([reading(volume=None)])

        assert result.errors[0].rule_name == "volume_missing"


class TestHourlyConsistency:
    """Test per-hour cross-channel warnings."""

    def setup_method(self):
        """Set up test fixtures."""
        self.guard = ReadingGuard()

    def test_balanced_circulation_accepted(self):
        result = self.guard.validate([
            reading("ITP_CW", 8.0),
            reading("ODPU_SUPPLY", 9.2),
            reading("ODPU_RETURN", 1.2),
        ])

        assert result.status == "accepted"

    def test_return_above_supply_warns(self):
        result = self.guard.validate([
            reading("ODPU_SUPPLY", 1.2),
            reading("ODPU_RETURN", 9.2),
        ])

        assert result.is_valid
        assert result.status == "accepted_with_warnings"
        assert result.warnings[0].rule_name == "return_exceeds_supply"

    def test_different_hours_not_compared(self):
        result = self.guard.validate([
            reading("ODPU_SUPPLY", 1.2),
            reading("ODPU_RETURN", 9.2, ts=TS.replace(hour=8)),
        ])

        assert result.status == "accepted"

    def test_same_instant_in_other_offset_compared(self):
        other = TS.astimezone(timezone(timedelta(hours=3)))
        result = self.guard.validate([
            reading("ODPU_SUPPLY", 1.2),
            reading("ODPU_RETURN", 9.2, ts=other),
        ])

        assert result.warnings[0].rule_name == "return_exceeds_supply"

    def test_different_buildings_not_compared(self):
        result = self.guard.validate([
            reading("ODPU_SUPPLY", 1.2, building_id="B-1"),
            reading("ODPU_RETURN", 9.2, building_id="B-2"),
        ])

        assert result.status == "accepted"

    def test_mixed_topology_warns(self):
        result = self.guard.validate([
            reading("ODPU_SUPPLY", 9.2),
            reading("ODPU_CONSUMPTION", 8.0),
        ])

        assert [w.rule_name for w in result.warnings] == ["mixed_topology"]

    def test_strict_mode_rejects_warnings(self):
        guard = ReadingGuard(strict_mode=True)
        result = guard.validate([
            reading("ODPU_SUPPLY", 1.2),
            reading("ODPU_RETURN", 9.2),
        ])

        assert not result.is_valid
        assert result.status == "rejected"
        assert result.issues[0].severity == ValidationSeverity.ERROR


class TestKnownBuildings:
    """Test the building registry check."""

    def setup_method(self):
        """Set up test fixtures."""
        self.guard = ReadingGuard()

    def test_all_known(self):
        rows = [reading(building_id="B-1"), reading(building_id="B-2")]

        assert self.guard.validate_known_buildings(rows, {"B-1", "B-2"}) == []

    def test_unknown_reported_once_each(self):
        rows = [reading(building_id="B-9"), reading(building_id="B-9", channel="ODPU_CONSUMPTION"), reading()]

        issues = self.guard.validate_known_buildings(rows, {"B-1"})

        assert [i.message for i in issues] == ["Unknown building_id: B-9"]

    def test_merge_rejects(self):
        rows = [reading(building_id="B-9")]
        result = self.guard.validate(rows)

        merged = self.guard.merge(result, self.guard.validate_known_buildings(rows, set()))

        assert merged.status == "rejected"

    def test_merge_without_issues_keeps_result(self):
        result = self.guard.validate([reading()])

        assert self.guard.merge(result, []) is result


class TestConvenienceFunction:
    """Test validate_readings helper."""

    def test_validate_readings(self):
        assert validate_readings([reading()]).status == "accepted"

    def test_validate_readings_strict(self):
        rows = [reading("ODPU_SUPPLY", 1.0), reading("ODPU_RETURN", 2.0)]

        assert validate_readings(rows).status == "accepted_with_warnings"
        assert validate_readings(rows, strict=True).status == "rejected"
