"""
Roadmap Generator.

Three fixed horizons (30 / 90 / 180 days). Daily question targets start from
the standard subject split and ramp toward the learner's planned capacity;
score targets step from the current mock best to the learner's own target.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum

from src.forecast.models import (
    ImprovementRoadmap,
    LearnerProfile,
    RoadmapPhase,
    ScoreEstimate,
)
from src.forecast.telemetry import TelemetryView

HORIZONS = (30, 90, 180)
REVISION_CYCLES = {30: 3, 90: 5, 180: 7}

# Daily questions per subject for the first horizon
BASE_DAILY_TARGETS: dict[str, int] = {"physics": 350, "chemistry": 400, "biology": 550}

MID_HORIZON_SCORE_CAP = 680
DEFAULT_TARGET_SCORE = 700


class FocusArea(str, Enum):
    ERROR_PROFILING = "error_profiling"
    AFTERNOON_CONDITIONING = "afternoon_conditioning"
    BIO_RHYTHM_PACING = "bio_rhythm_pacing"
    NUMERICAL_SPEED = "numerical_speed"
    REPETITIVE_MISTAKES = "repetitive_mistakes"
    TIME_MANAGEMENT = "time_management"
    STRESS_TRIGGERS = "stress_triggers"
    PEAK_PERFORMANCE_WEEKS = "peak_performance_weeks"
    EXAM_SIMULATION = "exam_simulation"
    FAMILY_SUPPORT = "family_support"

    @property
    def label(self) -> str:
        return {
            FocusArea.ERROR_PROFILING: "Daily error profiling + remediation",
            FocusArea.AFTERNOON_CONDITIONING: "Afternoon mock conditioning",
            FocusArea.BIO_RHYTHM_PACING: "Bio-rhythm tracking for workload pacing",
            FocusArea.NUMERICAL_SPEED: "Speed/accuracy optimization for numericals",
            FocusArea.REPETITIVE_MISTAKES: "Eliminate repetitive mistake patterns",
            FocusArea.TIME_MANAGEMENT: "Clear time management bottlenecks",
            FocusArea.STRESS_TRIGGERS: "Defuse stress-response triggers",
            FocusArea.PEAK_PERFORMANCE_WEEKS: "Final 6 weeks with daily exam-simulation blocks",
            FocusArea.EXAM_SIMULATION: "Afternoon mocks aligned with exam timing + recovery pacing",
            FocusArea.FAMILY_SUPPORT: "Boundary setting + expectation management plan",
        }[self]


def _daily_targets(profile: LearnerProfile, horizon: int) -> dict[str, int]:
    """Scale the base split so the total ramps linearly toward planned capacity."""
    base_total = sum(BASE_DAILY_TARGETS.values())
    final_total = max(base_total, profile.question_capacity.upcoming)
    progress = (horizon - HORIZONS[0]) / (HORIZONS[-1] - HORIZONS[0])
    total = base_total + (final_total - base_total) * progress
    return {
        subject: int(round(total * count / base_total))
        for subject, count in BASE_DAILY_TARGETS.items()
    }


def _focus_areas(profile: LearnerProfile, telemetry: TelemetryView, horizon: int) -> list[str]:
    if horizon == 30:
        areas = [FocusArea.ERROR_PROFILING, FocusArea.AFTERNOON_CONDITIONING]
        if profile.bio_rhythm is not None:
            areas.append(FocusArea.BIO_RHYTHM_PACING)
        areas.append(FocusArea.NUMERICAL_SPEED)
    elif horizon == 90:
        areas = [FocusArea.REPETITIVE_MISTAKES, FocusArea.TIME_MANAGEMENT]
        if profile.stress_triggers or telemetry.avg_stress >= 6:
            areas.append(FocusArea.STRESS_TRIGGERS)
    else:
        areas = [FocusArea.PEAK_PERFORMANCE_WEEKS, FocusArea.EXAM_SIMULATION]
        if profile.family_pressure is not None or "family_pressure" in profile.stress_triggers:
            areas.append(FocusArea.FAMILY_SUPPORT)
    return [area.value for area in areas]


def _score_targets(profile: LearnerProfile) -> dict[int, int]:
    mock = profile.mock_score_range
    target = mock.target or DEFAULT_TARGET_SCORE
    near = int(round(mock.max))
    mid = int(round(max(mock.max, min(MID_HORIZON_SCORE_CAP, mock.target))))
    return {30: near, 90: mid, 180: int(round(max(mid, target)))}


def build_roadmap(
    profile: LearnerProfile,
    score: ScoreEstimate,
    telemetry: TelemetryView,
    as_of: date | None = None,
) -> ImprovementRoadmap:
    """
    Build the three-horizon roadmap.

    Args:
        profile: Validated learner profile
        score: Synthesized score estimate. Targets are anchored on the
            learner's own mock range, not on the forecast.
        telemetry: Adapted telemetry view
        as_of: Start date; when given, each phase carries its end date

    Returns:
        ImprovementRoadmap with 30, 90 and 180 day phases
    """
    targets = _score_targets(profile)

    phases = [
        RoadmapPhase(
            horizon_days=horizon,
            daily_targets=_daily_targets(profile, horizon),
            focus_areas=_focus_areas(profile, telemetry, horizon),
            score_target=targets[horizon],
            revision_cycles=REVISION_CYCLES[horizon],
            ends_on=as_of + timedelta(days=horizon) if as_of is not None else None,
        )
        for horizon in HORIZONS
    ]
    return ImprovementRoadmap(*phases)
