"""
Risk Assessor.

Buckets risk factors into high / medium / low tiers and collects the
mitigations for every factor that fired. Also derives the single overall
risk level shown next to the rank estimate.
"""

from __future__ import annotations

from enum import Enum

from src.forecast.models import (
    LearnerProfile,
    RankEstimate,
    RiskAssessment,
    RiskLevel,
    ScoreEstimate,
)
from src.forecast.subscores import PANIC_TAG
from src.forecast.telemetry import TelemetryView

SLEEP_DISRUPTION_ENERGY = 6
CRITICAL_BACKLOG = 2
DECLINING_TREND = -5
ELEVATED_STRESS = 7
PRESSURE_ATTEMPT = 3

# (max rank, min confidence) per level, checked in order
LOW_RISK_MAX_RANK = 15_000
LOW_RISK_MIN_CONFIDENCE = 80
MEDIUM_RISK_MAX_RANK = 50_000
MEDIUM_RISK_MIN_CONFIDENCE = 60


class Mitigation(str, Enum):
    AFTERNOON_CONDITIONING = "afternoon_conditioning"
    FAMILY_BOUNDARIES = "family_boundaries"
    SLEEP_HYGIENE = "sleep_hygiene"
    STRESS_REGULATION = "stress_regulation"
    MISTAKE_DRILLS = "mistake_drills"
    LOAD_PACING = "load_pacing"
    TIMED_DECISIONS = "timed_decisions"
    EXAM_TIMED_MOCKS = "exam_timed_mocks"

    @property
    def label(self) -> str:
        return {
            Mitigation.AFTERNOON_CONDITIONING: "Afternoon conditioning with timed mock exposure and pacing strategy",
            Mitigation.FAMILY_BOUNDARIES: "Communication boundaries + structured family updates",
            Mitigation.SLEEP_HYGIENE: "Sleep hygiene protocol + consistent wake-time",
            Mitigation.STRESS_REGULATION: "Stress regulation practice integrated into mock workflow",
            Mitigation.MISTAKE_DRILLS: "Weekly drills on the top recurring mistake patterns",
            Mitigation.LOAD_PACING: "Lighter load on flagged low-energy days",
            Mitigation.TIMED_DECISIONS: "Per-question time limits during practice",
            Mitigation.EXAM_TIMED_MOCKS: "Mock tests aligned with actual exam timing",
        }[self]


class RiskFactor(str, Enum):
    # High
    AFTERNOON_DROP = "afternoon_drop"
    PRESSURE_PANIC = "pressure_panic"
    SLEEP_DISRUPTION = "sleep_disruption"
    CRITICAL_BACKLOG = "critical_backlog"
    DECLINING_TREND = "declining_trend"
    # Medium
    LOW_ENERGY_OVERLAP = "low_energy_overlap"
    OVER_ANALYSIS = "over_analysis"
    ATTEMPT_PRESSURE = "attempt_pressure"
    ELEVATED_STRESS = "elevated_stress"
    REPORTED_RISK_FACTORS = "reported_risk_factors"
    # Low
    COACHING_MISMATCH = "coaching_mismatch"
    SUBJECT_PREFERENCE_BIAS = "subject_preference_bias"

    @property
    def label(self) -> str:
        return {
            RiskFactor.AFTERNOON_DROP: "Afternoon exam-time performance drop",
            RiskFactor.PRESSURE_PANIC: "External pressure triggering panic response",
            RiskFactor.SLEEP_DISRUPTION: "Sleep disruption impairing recall and attention",
            RiskFactor.CRITICAL_BACKLOG: "Backlog of unresolved critical mistakes",
            RiskFactor.DECLINING_TREND: "Declining score trend",
            RiskFactor.LOW_ENERGY_OVERLAP: "Low-energy days overlapping with high-load phases",
            RiskFactor.OVER_ANALYSIS: "Over-analysis leading to time inefficiency",
            RiskFactor.ATTEMPT_PRESSURE: "Attempt pressure affecting confidence stability",
            RiskFactor.ELEVATED_STRESS: "Persistently elevated stress",
            RiskFactor.REPORTED_RISK_FACTORS: "Risk factors flagged by study tracking",
            RiskFactor.COACHING_MISMATCH: "Coaching content mismatch",
            RiskFactor.SUBJECT_PREFERENCE_BIAS: "Subject preference bias",
        }[self]

    @property
    def mitigation(self) -> Mitigation | None:
        return _MITIGATIONS.get(self)


_MITIGATIONS: dict[RiskFactor, Mitigation] = {
    RiskFactor.AFTERNOON_DROP: Mitigation.AFTERNOON_CONDITIONING,
    RiskFactor.PRESSURE_PANIC: Mitigation.FAMILY_BOUNDARIES,
    RiskFactor.SLEEP_DISRUPTION: Mitigation.SLEEP_HYGIENE,
    RiskFactor.CRITICAL_BACKLOG: Mitigation.MISTAKE_DRILLS,
    RiskFactor.DECLINING_TREND: Mitigation.MISTAKE_DRILLS,
    RiskFactor.LOW_ENERGY_OVERLAP: Mitigation.LOAD_PACING,
    RiskFactor.OVER_ANALYSIS: Mitigation.TIMED_DECISIONS,
    RiskFactor.ATTEMPT_PRESSURE: Mitigation.STRESS_REGULATION,
    RiskFactor.ELEVATED_STRESS: Mitigation.STRESS_REGULATION,
}


def assess_risks(
    profile: LearnerProfile,
    score: ScoreEstimate,
    telemetry: TelemetryView,
) -> RiskAssessment:
    """
    Select risk factors by tier.

    Mitigations follow the order in which their risks fired, without
    duplicates, and always end with exam-timed mocks. ``score`` is taken for
    parity with the other selectors; no current risk reads it.
    """
    high: list[RiskFactor] = []
    if "afternoon" in profile.problematic_slots:
        high.append(RiskFactor.AFTERNOON_DROP)
    if (
        profile.family_pressure == "High"
        or PANIC_TAG in profile.error_types
        or telemetry.most_frequent_mistake == PANIC_TAG
    ):
        high.append(RiskFactor.PRESSURE_PANIC)
    if telemetry.avg_energy < SLEEP_DISRUPTION_ENERGY:
        high.append(RiskFactor.SLEEP_DISRUPTION)
    if telemetry.critical_mistakes >= CRITICAL_BACKLOG:
        high.append(RiskFactor.CRITICAL_BACKLOG)
    if telemetry.improvement_trend < DECLINING_TREND:
        high.append(RiskFactor.DECLINING_TREND)

    medium: list[RiskFactor] = []
    if profile.bio_rhythm is not None and profile.bio_rhythm.low_energy_days:
        medium.append(RiskFactor.LOW_ENERGY_OVERLAP)
    if "overthinking" in profile.error_types:
        medium.append(RiskFactor.OVER_ANALYSIS)
    if (
        profile.attempt_number >= PRESSURE_ATTEMPT
        or "multiple_attempts" in profile.stress_triggers
    ):
        medium.append(RiskFactor.ATTEMPT_PRESSURE)
    if telemetry.avg_stress > ELEVATED_STRESS:
        medium.append(RiskFactor.ELEVATED_STRESS)
    if telemetry.risk_factors:
        medium.append(RiskFactor.REPORTED_RISK_FACTORS)

    low: list[RiskFactor] = []
    if profile.coaching_institute:
        low.append(RiskFactor.COACHING_MISMATCH)
    if profile.subject_preference:
        low.append(RiskFactor.SUBJECT_PREFERENCE_BIAS)

    mitigations: list[Mitigation] = []
    for factor in [*high, *medium, *low]:
        if factor.mitigation is not None and factor.mitigation not in mitigations:
            mitigations.append(factor.mitigation)
    mitigations.append(Mitigation.EXAM_TIMED_MOCKS)

    return RiskAssessment(
        high_risk=[f.value for f in high],
        medium_risk=[f.value for f in medium],
        low_risk=[f.value for f in low],
        mitigation_strategies=[m.value for m in mitigations],
    )


def overall_risk_level(rank: RankEstimate, confidence: int) -> RiskLevel:
    """Overall level from the most-likely rank and the confidence percentage."""
    if rank.most_likely <= LOW_RISK_MAX_RANK and confidence > LOW_RISK_MIN_CONFIDENCE:
        return RiskLevel.LOW
    if rank.most_likely <= MEDIUM_RISK_MAX_RANK and confidence > MEDIUM_RISK_MIN_CONFIDENCE:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH
