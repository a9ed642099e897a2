"""
Analysis Narrator.

Selects which strength / weakness / gap / action categories fire for a
learner. The engine returns category codes; wording belongs to the
presentation layer (``.label`` gives a plain default).
"""

from __future__ import annotations

from enum import Enum

from src.forecast.calibration import Calibration, default_calibration
from src.forecast.models import DetailedAnalysis, LearnerProfile, ScoreEstimate
from src.forecast.subscores import PANIC_TAG, source_test_score
from src.forecast.telemetry import NO_PATTERN, TelemetryView

LOW_ENERGY_THRESHOLD = 5
SLEEP_RECOVERY_ENERGY = 7
STRESS_PROTOCOL_THRESHOLD = 6
LOW_STRESS_THRESHOLD = 5
CONSISTENT_ROUTINE_THRESHOLD = 80
TIME_WASTED_THRESHOLD = 300  # minutes over the telemetry window
CONSISTENCY_BAND = 600
# 180 questions in 200 minutes
EXAM_SECONDS_PER_QUESTION = 200 * 60 / 180


class Strength(str, Enum):
    UPWARD_MOCK_TRAJECTORY = "upward_mock_trajectory"
    ADAPTIVE_PATTERN_CORRECTION = "adaptive_pattern_correction"
    COACHING_ALIGNMENT = "coaching_alignment"
    ATTEMPT_EXPERIENCE = "attempt_experience"
    CONSISTENT_ROUTINE = "consistent_routine"
    LOW_STRESS = "low_stress"
    TOP_COLLEGE_TRACK = "top_college_track"

    @property
    def label(self) -> str:
        return {
            Strength.UPWARD_MOCK_TRAJECTORY: "Upward trajectory in mock performance relative to prior baseline",
            Strength.ADAPTIVE_PATTERN_CORRECTION: "Evidence of adaptive learning and pattern correction over time",
            Strength.COACHING_ALIGNMENT: "Coaching alignment appears effective",
            Strength.ATTEMPT_EXPERIENCE: "Attempt experience provides exam familiarity",
            Strength.CONSISTENT_ROUTINE: "Consistent daily routine",
            Strength.LOW_STRESS: "Stress is well regulated",
            Strength.TOP_COLLEGE_TRACK: "On track for top-college cutoffs",
        }[self]


class Weakness(str, Enum):
    EXAM_TIME_ALIGNMENT = "exam_time_alignment"
    EXTERNAL_PRESSURE = "external_pressure"
    SLEEP_RECOVERY = "sleep_recovery"
    CRITICAL_MISTAKE_PATTERNS = "critical_mistake_patterns"
    LOW_ENERGY = "low_energy"

    @property
    def label(self) -> str:
        return {
            Weakness.EXAM_TIME_ALIGNMENT: "Afternoon (exam-time) performance needs structured conditioning",
            Weakness.EXTERNAL_PRESSURE: "High external pressure may elevate exam-day stress",
            Weakness.SLEEP_RECOVERY: "Sleep and recovery need optimizing to stabilize recall",
            Weakness.CRITICAL_MISTAKE_PATTERNS: "Critical mistake patterns detected",
            Weakness.LOW_ENERGY: "Low energy trend may reduce learning efficiency",
        }[self]


class Gap(str, Enum):
    PHYSICS_NUMERICAL_SPEED = "physics_numerical_speed"
    PATTERN_RECOGNITION = "pattern_recognition"
    TIME_ALLOCATION = "time_allocation"
    CONSISTENCY_600_BAND = "consistency_600_band"
    FREQUENT_MISTAKE = "frequent_mistake"
    TIME_WASTAGE = "time_wastage"

    @property
    def label(self) -> str:
        return {
            Gap.PHYSICS_NUMERICAL_SPEED: "Improve speed/accuracy trade-off in Physics numericals",
            Gap.PATTERN_RECOGNITION: "Strengthen pattern recognition for high-variance questions",
            Gap.TIME_ALLOCATION: "Optimize time allocation across 180 questions",
            Gap.CONSISTENCY_600_BAND: "Improve consistency in the 600+ range",
            Gap.FREQUENT_MISTAKE: "A frequent mistake type keeps recurring",
            Gap.TIME_WASTAGE: "Significant time wastage in study sessions",
        }[self]


class Action(str, Enum):
    DAILY_VOLUME_TRACKING = "daily_volume_tracking"
    MISTAKE_ANALYSIS_ROUTINE = "mistake_analysis_routine"
    STRESS_REGULATION = "stress_regulation"
    AFTERNOON_MOCKS = "afternoon_mocks"
    BIO_RHYTHM_TRACKING = "bio_rhythm_tracking"
    TARGETED_MISTAKE_DRILLS = "targeted_mistake_drills"
    SLEEP_NUTRITION = "sleep_nutrition"
    TIME_BOXING = "time_boxing"

    @property
    def label(self) -> str:
        return {
            Action.DAILY_VOLUME_TRACKING: "Track daily question volume with quality controls",
            Action.MISTAKE_ANALYSIS_ROUTINE: "Analyse mistakes after each session",
            Action.STRESS_REGULATION: "Apply a stress regulation protocol",
            Action.AFTERNOON_MOCKS: "Schedule afternoon mocks to condition exam-time performance",
            Action.BIO_RHYTHM_TRACKING: "Track bio-rhythm data to plan intensity and recovery",
            Action.TARGETED_MISTAKE_DRILLS: "Run targeted drills for repetitive mistake patterns",
            Action.SLEEP_NUTRITION: "Prioritize sleep and nutrition interventions",
            Action.TIME_BOXING: "Apply strict time-boxing and distraction controls",
        }[self]


def analyze(
    profile: LearnerProfile,
    score: ScoreEstimate,
    telemetry: TelemetryView,
    calibration: Calibration | None = None,
) -> DetailedAnalysis:
    """
    Select analysis categories.

    Args:
        profile: Validated learner profile
        score: Synthesized score estimate
        telemetry: Adapted telemetry view
        calibration: Cohort tables (prior-score default, topper cutoffs)

    Returns:
        DetailedAnalysis with category codes in firing order
    """
    cal = calibration or default_calibration()
    prior = profile.prior_official_score
    if prior is None:
        prior = cal.default_prior_score

    strengths: list[Strength] = []
    if source_test_score(profile, telemetry) > prior:
        strengths.append(Strength.UPWARD_MOCK_TRAJECTORY)
    if telemetry.improvement_trend > 0 or (
        telemetry.has_mistake_analysis and telemetry.critical_mistakes == 0
    ):
        strengths.append(Strength.ADAPTIVE_PATTERN_CORRECTION)
    if profile.coaching_institute:
        strengths.append(Strength.COACHING_ALIGNMENT)
    if profile.attempt_number >= 2:
        strengths.append(Strength.ATTEMPT_EXPERIENCE)
    if telemetry.consistency_score > CONSISTENT_ROUTINE_THRESHOLD:
        strengths.append(Strength.CONSISTENT_ROUTINE)
    if telemetry.has_performance_metrics and telemetry.avg_stress < LOW_STRESS_THRESHOLD:
        strengths.append(Strength.LOW_STRESS)
    cutoff = cal.latest_top_college_cutoff
    if cutoff is not None and score.most_likely >= cutoff:
        strengths.append(Strength.TOP_COLLEGE_TRACK)

    weaknesses: list[Weakness] = []
    afternoon_problem = "afternoon" in profile.problematic_slots
    if afternoon_problem:
        weaknesses.append(Weakness.EXAM_TIME_ALIGNMENT)
    if profile.family_pressure == "High" or "family_pressure" in profile.stress_triggers:
        weaknesses.append(Weakness.EXTERNAL_PRESSURE)
    if telemetry.avg_energy < SLEEP_RECOVERY_ENERGY:
        weaknesses.append(Weakness.SLEEP_RECOVERY)
    if telemetry.critical_mistakes > 0:
        weaknesses.append(Weakness.CRITICAL_MISTAKE_PATTERNS)
    low_energy = telemetry.has_performance_metrics and telemetry.avg_energy < LOW_ENERGY_THRESHOLD
    if low_energy:
        weaknesses.append(Weakness.LOW_ENERGY)

    gaps: list[Gap] = []
    if profile.subject_preference and profile.subject_preference[-1] == "Physics":
        gaps.append(Gap.PHYSICS_NUMERICAL_SPEED)
    if telemetry.total_patterns > 0 or {"silly_mistakes", "overthinking"} & set(profile.error_types):
        gaps.append(Gap.PATTERN_RECOGNITION)
    if (
        profile.question_speed.max > EXAM_SECONDS_PER_QUESTION
        or "time_management" in profile.error_types
    ):
        gaps.append(Gap.TIME_ALLOCATION)
    if score.worst_case < CONSISTENCY_BAND <= score.best_case:
        gaps.append(Gap.CONSISTENCY_600_BAND)
    frequent = telemetry.most_frequent_mistake
    if frequent != NO_PATTERN:
        gaps.append(Gap.FREQUENT_MISTAKE)
    time_wasted = telemetry.total_time_wasted > TIME_WASTED_THRESHOLD
    if time_wasted:
        gaps.append(Gap.TIME_WASTAGE)

    actions: list[Action] = [Action.DAILY_VOLUME_TRACKING, Action.MISTAKE_ANALYSIS_ROUTINE]
    if (
        telemetry.avg_stress >= STRESS_PROTOCOL_THRESHOLD
        or profile.stress_triggers
        or frequent == PANIC_TAG
    ):
        actions.append(Action.STRESS_REGULATION)
    if afternoon_problem:
        actions.append(Action.AFTERNOON_MOCKS)
    if profile.bio_rhythm is not None:
        actions.append(Action.BIO_RHYTHM_TRACKING)
    if telemetry.critical_mistakes > 0:
        actions.append(Action.TARGETED_MISTAKE_DRILLS)
    if low_energy:
        actions.append(Action.SLEEP_NUTRITION)
    if time_wasted:
        actions.append(Action.TIME_BOXING)

    return DetailedAnalysis(
        strengths=[s.value for s in strengths],
        critical_weaknesses=[w.value for w in weaknesses],
        mid_level_gaps=[g.value for g in gaps],
        immediate_actions=[a.value for a in actions],
        frequent_mistake=frequent if frequent != NO_PATTERN else None,
    )
