"""
Tests for Drift Scenarios and Season Profiles

These tests verify drift plans, segment lookup, ITP-only drift
application and season adjustment of building profiles.

Run with: pytest tests/test_drift_scenarios.py -v
"""

import random
from datetime import datetime, timedelta, timezone

import pytest

from engine.drift_scenarios import (
    DriftSegment,
    ScenarioLibrary,
    ScenarioType,
    apply_drift_to_itp,
    drift_for,
    plan_drift,
)
from engine.generator import generate_range, generate_range_with_scenario
from engine.profiles import (
    BuildingProfile,
    Season,
    Topology,
    make_season_profile,
)
from engine.readings import Channel, Reading

START = datetime(2024, 1, 15, 0, tzinfo=timezone.utc)


def hours(n: int) -> timedelta:
    return timedelta(hours=n)


class TestDriftPlans:
    """Tests for plan construction per scenario."""

    def test_season_base_single_zero_segment(self):
        plan = plan_drift(ScenarioType.SEASON_BASE, START, 24)

        assert plan == [DriftSegment(START, START + hours(24), 0.0)]

    def test_persistent_drift_single_segment(self):
        plan = plan_drift(ScenarioType.PERSISTENT_DRIFT, START, 72)

        assert plan == [DriftSegment(START, START + hours(72), 30.0)]

    def test_minor_drift_48_hours(self):
        """chunk = max(6, 48 // 6) = 8, gap = 4."""
        plan = plan_drift(ScenarioType.MINOR_DRIFT, START, 48)

        assert [(s.start, s.end) for s in plan] == [
            (START, START + hours(8)),
            (START + hours(12), START + hours(20)),
            (START + hours(24), START + hours(32)),
            (START + hours(36), START + hours(44)),
        ]
        assert all(s.drift_percent == 10.0 for s in plan)

    def test_minor_drift_short_range_uses_min_chunk(self):
        """chunk = 6, gap = 3; last segment may overrun the range."""
        plan = plan_drift(ScenarioType.MINOR_DRIFT, START, 10)

        assert [(s.start, s.end) for s in plan] == [
            (START, START + hours(6)),
            (START + hours(9), START + hours(15)),
        ]

    def test_minor_drift_large_range(self):
        plan = plan_drift(ScenarioType.MINOR_DRIFT, START, 168)

        # chunk 28, gap 14, cursor steps of 42 hours
        assert [s.start for s in plan] == [START + hours(h) for h in (0, 42, 84, 126)]
        assert all(s.end - s.start == hours(28) for s in plan)

    def test_minor_drift_zero_hours(self):
        assert plan_drift(ScenarioType.MINOR_DRIFT, START, 0) == []

    def test_accepts_string_values(self):
        assert plan_drift("PERSISTENT_DRIFT", START, 5)[0].drift_percent == 30.0

    @pytest.mark.parametrize("value", ["PEAK", "SENSOR_DRIFT", "", None])
    def test_unknown_scenario_falls_back_to_season_base(self, value):
        plan = plan_drift(value, START, 12)

        assert plan == [DriftSegment(START, START + hours(12), 0.0)]


class TestDriftLookup:
    """Tests for segment lookup."""

    def setup_method(self):
        self.plan = [
            DriftSegment(START, START + hours(4), 10.0),
            DriftSegment(START + hours(6), START + hours(8), 30.0),
        ]

    def test_start_inclusive(self):
        assert drift_for(self.plan, START) == 10.0

    def test_end_exclusive(self):
        assert drift_for(self.plan, START + hours(4)) == 0.0

    def test_gap_is_zero(self):
        assert drift_for(self.plan, START + hours(5)) == 0.0

    def test_second_segment(self):
        assert drift_for(self.plan, START + hours(7)) == 30.0

    def test_first_match_wins(self):
        overlapping = [
            DriftSegment(START, START + hours(4), 10.0),
            DriftSegment(START, START + hours(4), 30.0),
        ]

        assert drift_for(overlapping, START + hours(1)) == 10.0

    def test_empty_plan(self):
        assert drift_for([], START) == 0.0


class TestApplyDrift:
    """Tests for ITP-only drift application."""

    def setup_method(self):
        self.readings = [
            Reading(START, "B-1", Channel.ITP_CW, 10.0),
            Reading(START, "B-1", Channel.ODPU_SUPPLY, 11.5),
            Reading(START, "B-1", Channel.ODPU_RETURN, 1.5),
        ]

    def test_only_itp_scaled(self):
        drifted = apply_drift_to_itp(self.readings, 30)

        assert drifted[0].volume_m3 == pytest.approx(13.0)
        assert drifted[1:] == self.readings[1:]

    def test_zero_drift_is_identity(self):
        assert apply_drift_to_itp(self.readings, 0) is self.readings

    def test_original_readings_untouched(self):
        apply_drift_to_itp(self.readings, 10)

        assert self.readings[0].volume_m3 == 10.0


class TestScenarioGeneration:
    """Drifted runs compared against drift-free runs with the same seed."""

    def setup_method(self):
        self.profile = BuildingProfile("B-1", Topology.CIRCULATION, 8.0)

    def baseline(self, n: int, seed: int = 21):
        return generate_range(self.profile, START, n, rng=random.Random(seed))

    def with_scenario(self, n: int, scenario, seed: int = 21):
        return generate_range_with_scenario(self.profile, START, n, scenario, rng=random.Random(seed))

    def test_season_base_matches_plain_generation(self):
        assert self.with_scenario(48, ScenarioType.SEASON_BASE) == self.baseline(48)

    def test_persistent_drift_scales_itp_by_130_percent(self):
        base = self.baseline(48)
        drifted = self.with_scenario(48, ScenarioType.PERSISTENT_DRIFT)

        assert len(base) == len(drifted)
        for plain, shifted in zip(base, drifted):
            if plain.channel == Channel.ITP_CW:
                assert shifted.volume_m3 == pytest.approx(plain.volume_m3 * 1.3, abs=0.001)
            else:
                assert shifted == plain

    def test_minor_drift_segments_over_48_hours(self):
        base = self.baseline(48)
        drifted = self.with_scenario(48, ScenarioType.MINOR_DRIFT)

        drifted_hours = []
        for hour in range(48):
            plain_itp = base[hour * 3]
            shifted_itp = drifted[hour * 3]
            assert plain_itp.channel == Channel.ITP_CW
            if shifted_itp.volume_m3 != plain_itp.volume_m3:
                assert shifted_itp.volume_m3 == pytest.approx(plain_itp.volume_m3 * 1.1, abs=0.001)
                drifted_hours.append(hour)

        expected = [h for h in range(48) if h % 12 < 8]
        assert drifted_hours == expected

    def test_unknown_scenario_is_plain_generation(self):
        assert self.with_scenario(24, "NOT_A_SCENARIO") == self.baseline(24)


class TestScenarioLibrary:
    """Tests for scenario definitions."""

    def test_all_scenarios(self):
        types = [s.scenario_type for s in ScenarioLibrary.get_all_scenarios()]

        assert types == [
            ScenarioType.SEASON_BASE,
            ScenarioType.MINOR_DRIFT,
            ScenarioType.PERSISTENT_DRIFT,
        ]

    def test_scenarios_have_stories(self):
        for scenario in ScenarioLibrary.get_all_scenarios():
            assert scenario.name
            assert scenario.description
            assert scenario.story.strip()


class TestSeasonProfile:
    """Tests for season adjustment."""

    def base(self, **overrides):
        fields = {"building_id": "B-1", "topology": "circulation", "base_volume_per_hour": 8.0}
        fields.update(overrides)
        return fields

    def test_winter(self):
        profile = make_season_profile(self.base(), Season.WINTER)

        assert profile.base_volume_per_hour == pytest.approx(10.0)

    def test_summer(self):
        profile = make_season_profile(self.base(), Season.SUMMER)

        assert profile.base_volume_per_hour == pytest.approx(6.8)

    def test_string_season(self):
        assert make_season_profile(self.base(), "WINTER").base_volume_per_hour == pytest.approx(10.0)

    def test_floor_clamp(self):
        profile = make_season_profile(self.base(base_volume_per_hour=0.0), Season.WINTER)

        assert profile.base_volume_per_hour == 0.2

    def test_small_volume_clamped(self):
        profile = make_season_profile(self.base(base_volume_per_hour=0.1), Season.SUMMER)

        assert profile.base_volume_per_hour == 0.2

    def test_defaults(self):
        profile = make_season_profile({"building_id": "B-1", "topology": "dead_end"}, Season.WINTER)

        assert profile.topology == Topology.DEAD_END
        assert profile.base_volume_per_hour == pytest.approx(10.0)
        assert profile.noise_fraction == 0.08
        assert profile.night_factor == 0.8
        assert profile.peak_factor == 1.3

    def test_explicit_fields_kept(self):
        profile = make_season_profile(
            self.base(noise_fraction=0.02, night_factor=0.5, peak_factor=1.1),
            Season.SUMMER
        )

        assert (profile.noise_fraction, profile.night_factor, profile.peak_factor) == (0.02, 0.5, 1.1)

    def test_profile_is_immutable(self):
        profile = make_season_profile(self.base(), Season.WINTER)

        with pytest.raises(AttributeError):
            profile.base_volume_per_hour = 1.0
