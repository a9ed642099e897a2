"""
Unit tests for the telemetry adapter.

Missing or malformed telemetry must never raise; every field resolves to a
documented default.
"""

import math

import pytest

from src.forecast.models import PerformanceMetrics, TelemetrySnapshot, TrendAnalysis
from src.forecast.telemetry import (
    DEFAULT_AVG_ENERGY,
    DEFAULT_AVG_STRESS,
    DEFAULT_CONSISTENCY_FACTOR,
    NO_PATTERN,
    TelemetryView,
    adapt_telemetry,
)


class TestDefaults:
    def test_none_gives_neutral_view(self):
        view = adapt_telemetry(None)
        assert view == TelemetryView()
        assert view.present is False
        assert view.avg_stress == DEFAULT_AVG_STRESS
        assert view.avg_energy == DEFAULT_AVG_ENERGY
        assert view.avg_test_score == 0
        assert view.most_frequent_mistake == NO_PATTERN
        assert view.risk_factors == ()

    def test_unmeasured_consistency_uses_default_factor(self):
        assert adapt_telemetry(None).consistency_factor == DEFAULT_CONSISTENCY_FACTOR

    def test_empty_mapping_is_present_but_defaulted(self):
        view = adapt_telemetry({})
        assert view.present is True
        assert not view.has_performance_metrics
        assert not view.has_mistake_analysis
        assert not view.has_trend_analysis
        assert view.avg_stress == DEFAULT_AVG_STRESS

    def test_partial_section_keeps_other_defaults(self):
        view = adapt_telemetry({"performance_metrics": {"avg_stress": 3}})
        assert view.has_performance_metrics
        assert view.avg_stress == 3
        assert view.avg_energy == DEFAULT_AVG_ENERGY
        assert view.critical_mistakes == 0

    def test_unsupported_type_degrades(self):
        assert adapt_telemetry(42) == TelemetryView()


class TestShapes:
    def test_flat_camel_case_snapshot(self, sample_telemetry):
        view = adapt_telemetry(sample_telemetry)
        assert view.has_performance_metrics
        assert view.has_mistake_analysis
        assert view.has_trend_analysis
        assert view.avg_test_score == 610
        assert view.consistency_score == 90
        assert view.consistency_factor == pytest.approx(0.9)
        assert view.avg_stress == 4
        assert view.avg_energy == 8
        assert view.has_test_scores

    def test_sectioned_snapshot(self, full_telemetry):
        view = adapt_telemetry(full_telemetry)
        assert view.total_time_wasted == 420
        assert view.most_frequent_mistake == "panic_response"
        assert view.improvement_trend == 8
        assert view.risk_factors == ("irregular sleep",)

    def test_flat_keys_beside_sections(self):
        view = adapt_telemetry({"performanceMetrics": {"avgStress": 3}, "criticalMistakes": 3, "avgEnergy": 8})
        assert view.critical_mistakes == 3
        assert view.has_mistake_analysis
        assert view.avg_stress == 3
        assert view.avg_energy == 8

    def test_section_value_wins_over_flat_duplicate(self):
        view = adapt_telemetry({"performance_metrics": {"avg_stress": 3}, "avg_stress": 9})
        assert view.avg_stress == 3

    def test_typed_snapshot(self):
        snapshot = TelemetrySnapshot(
            performance_metrics=PerformanceMetrics(avg_energy=9),
            trend_analysis=TrendAnalysis(consistency_score=55),
        )
        view = adapt_telemetry(snapshot)
        assert view.avg_energy == 9
        assert view.consistency_score == 55
        assert not view.has_mistake_analysis


class TestClamping:
    def test_out_of_range_values_clamped(self):
        view = adapt_telemetry(
            {
                "performance_metrics": {
                    "avg_stress": 14,
                    "avg_energy": -3,
                    "avg_test_score": 800,
                    "avg_daily_questions": -10,
                },
                "mistake_analysis": {"critical_mistakes": -2},
                "trend_analysis": {"consistency_score": 130},
            }
        )
        assert view.avg_stress == 10
        assert view.avg_energy == 0
        assert view.avg_test_score == 720
        assert view.avg_daily_questions == 0
        assert view.critical_mistakes == 0
        assert view.consistency_score == 100

    def test_malformed_section_is_defaulted(self):
        view = adapt_telemetry(
            {
                "performance_metrics": {"avg_stress": "very high"},
                "mistake_analysis": {"critical_mistakes": 2},
            }
        )
        assert not view.has_performance_metrics
        assert view.avg_stress == DEFAULT_AVG_STRESS
        assert view.critical_mistakes == 2

    @pytest.mark.parametrize("junk", [math.nan, math.inf, -math.inf])
    def test_non_finite_values_use_defaults(self, junk):
        view = adapt_telemetry(
            {
                "avg_test_score": junk,
                "avg_stress": junk,
                "avg_energy": junk,
                "consistency_score": junk,
                "improvement_trend": junk,
            }
        )
        assert view.avg_test_score == 0
        assert not view.has_test_scores
        assert view.avg_stress == DEFAULT_AVG_STRESS
        assert view.avg_energy == DEFAULT_AVG_ENERGY
        assert view.consistency_factor == DEFAULT_CONSISTENCY_FACTOR
        assert view.improvement_trend == 0

    def test_negative_trend_kept(self):
        view = adapt_telemetry({"trend_analysis": {"improvement_trend": -12}})
        assert view.improvement_trend == -12
