"""
Unit tests for the risk assessor and overall risk level.
"""

import pytest

from src.forecast.models import ConfidenceRange, RankEstimate, RiskLevel, ScoreEstimate
from src.forecast.profile import normalize_profile
from src.forecast.risk import Mitigation, RiskFactor, assess_risks, overall_risk_level
from src.forecast.telemetry import TelemetryView, adapt_telemetry

SCORE = ScoreEstimate(
    most_likely=641, best_case=671, worst_case=611,
    confidence_range=ConfidenceRange(min=616, max=666),
)


def make_rank(most_likely):
    return RankEstimate(
        most_likely=most_likely, best_case=most_likely, worst_case=most_likely,
        confidence_range=ConfidenceRange(min=most_likely, max=most_likely),
    )


class TestAssessRisks:
    def test_minimal_profile(self, sample_profile):
        risks = assess_risks(normalize_profile(sample_profile), SCORE, TelemetryView())
        assert risks.high_risk == [RiskFactor.SLEEP_DISRUPTION.value]
        assert risks.medium_risk == []
        assert risks.low_risk == []
        assert risks.mitigation_strategies == [
            Mitigation.SLEEP_HYGIENE.value,
            Mitigation.EXAM_TIMED_MOCKS.value,
        ]

    def test_rich_profile(self, rich_profile):
        risks = assess_risks(normalize_profile(rich_profile), SCORE, TelemetryView())
        assert risks.high_risk == [
            RiskFactor.AFTERNOON_DROP.value,
            RiskFactor.PRESSURE_PANIC.value,
            RiskFactor.SLEEP_DISRUPTION.value,
        ]
        assert risks.medium_risk == [
            RiskFactor.LOW_ENERGY_OVERLAP.value,
            RiskFactor.OVER_ANALYSIS.value,
            RiskFactor.ATTEMPT_PRESSURE.value,
        ]
        assert risks.low_risk == [
            RiskFactor.COACHING_MISMATCH.value,
            RiskFactor.SUBJECT_PREFERENCE_BIAS.value,
        ]

    def test_mitigations_deduplicated(self, rich_profile):
        risks = assess_risks(normalize_profile(rich_profile), SCORE, TelemetryView())
        assert risks.mitigation_strategies == [
            Mitigation.AFTERNOON_CONDITIONING.value,
            Mitigation.FAMILY_BOUNDARIES.value,
            Mitigation.SLEEP_HYGIENE.value,
            Mitigation.LOAD_PACING.value,
            Mitigation.TIMED_DECISIONS.value,
            Mitigation.STRESS_REGULATION.value,
            Mitigation.EXAM_TIMED_MOCKS.value,
        ]

    def test_telemetry_driven_risks(self, sample_profile, full_telemetry):
        risks = assess_risks(normalize_profile(sample_profile), SCORE, adapt_telemetry(full_telemetry))
        assert risks.high_risk == [
            RiskFactor.PRESSURE_PANIC.value,
            RiskFactor.SLEEP_DISRUPTION.value,
            RiskFactor.CRITICAL_BACKLOG.value,
        ]
        assert risks.medium_risk == [RiskFactor.REPORTED_RISK_FACTORS.value]
        assert risks.mitigation_strategies == [
            Mitigation.FAMILY_BOUNDARIES.value,
            Mitigation.SLEEP_HYGIENE.value,
            Mitigation.MISTAKE_DRILLS.value,
            Mitigation.EXAM_TIMED_MOCKS.value,
        ]

    def test_declining_trend_and_stress(self, sample_profile):
        view = adapt_telemetry({"improvement_trend": -6, "avg_stress": 8, "avg_energy": 7})
        risks = assess_risks(normalize_profile(sample_profile), SCORE, view)
        assert risks.high_risk == [RiskFactor.DECLINING_TREND.value]
        assert risks.medium_risk == [RiskFactor.ELEVATED_STRESS.value]

    def test_every_code_has_label(self):
        assert all(factor.label for factor in RiskFactor)
        assert all(mitigation.label for mitigation in Mitigation)


class TestOverallRiskLevel:
    @pytest.mark.parametrize(
        "rank, confidence, level",
        [
            (15_000, 81, RiskLevel.LOW),
            (15_000, 80, RiskLevel.MEDIUM),
            (15_001, 97, RiskLevel.MEDIUM),
            (50_000, 61, RiskLevel.MEDIUM),
            (50_000, 60, RiskLevel.HIGH),
            (50_001, 97, RiskLevel.HIGH),
        ],
    )
    def test_thresholds(self, rank, confidence, level):
        assert overall_risk_level(make_rank(rank), confidence) is level
