"""
Score Synthesizer.

Combines the five sub-scores into a clamped three-point ScoreEstimate and
derives the forecast confidence level.
"""

from __future__ import annotations

from src.forecast.calibration import Calibration, default_calibration
from src.forecast.models import MAX_SCORE, ConfidenceRange, ScoreEstimate
from src.forecast.telemetry import TelemetryView

IMPROVEMENT_CEILING = 120
PLATFORM_BONUS = 50
TELEMETRY_BONUS = 30

# Confidence level
BASE_CONFIDENCE = 85
METRICS_CONFIDENCE_BONUS = 5
CONSISTENCY_CONFIDENCE_BONUS = 5
CONSISTENCY_CONFIDENCE_THRESHOLD = 70
TEST_SCORE_CONFIDENCE_BONUS = 3
MIN_CONFIDENCE = 50
MAX_CONFIDENCE = 97


def _clamp(value: float, low: float, high: float) -> int:
    return int(round(max(low, min(high, value))))


def synthesize_score(
    baseline: float,
    improvement: float,
    bio: float,
    stress: float,
    mistake: float,
    telemetry_present: bool,
    calibration: Calibration | None = None,
) -> ScoreEstimate:
    """
    Sum the sub-scores into a three-point estimate.

    The improvement contribution is capped again here (second clamp layer)
    before summing. Every point is clamped to [score floor, 720]; since
    clamping is monotone, worst <= most likely <= best always holds.
    """
    cal = calibration or default_calibration()
    floor = cal.score_floor

    total = (
        baseline
        + min(improvement, IMPROVEMENT_CEILING)
        + bio
        + stress
        + mistake
        + PLATFORM_BONUS
        + (TELEMETRY_BONUS if telemetry_present else 0)
    )
    most_likely = _clamp(total, floor, MAX_SCORE)

    return ScoreEstimate(
        most_likely=most_likely,
        best_case=_clamp(most_likely + cal.scenario_delta, floor, MAX_SCORE),
        worst_case=_clamp(most_likely - cal.scenario_delta, floor, MAX_SCORE),
        confidence_range=ConfidenceRange(
            min=_clamp(most_likely - cal.confidence_width, floor, MAX_SCORE),
            max=_clamp(most_likely + cal.confidence_width, floor, MAX_SCORE),
        ),
    )


def confidence_level(telemetry: TelemetryView) -> int:
    """
    Forecast confidence in [50, 97].

    Only ever rises when telemetry is supplied: performance metrics add 5,
    then strong consistency and measured test scores add more.
    """
    confidence = BASE_CONFIDENCE

    if telemetry.has_performance_metrics:
        confidence += METRICS_CONFIDENCE_BONUS
        if telemetry.consistency_score > CONSISTENCY_CONFIDENCE_THRESHOLD:
            confidence += CONSISTENCY_CONFIDENCE_BONUS
        if telemetry.has_test_scores:
            confidence += TEST_SCORE_CONFIDENCE_BONUS

    return max(MIN_CONFIDENCE, min(confidence, MAX_CONFIDENCE))
