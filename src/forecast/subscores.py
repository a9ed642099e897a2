"""
Sub-score Calculators.

Five independent, pure functions of ``(profile, telemetry)``. None reads
another's output, so each can be tested in isolation.

1. baseline_performance   - scaled current mock level (marks)
2. improvement_potential  - bounded headroom toward the target (marks)
3. bio_rhythm_adjustment  - energy / lifestyle adjustment (signed marks)
4. stress_adjustment      - stress / resilience adjustment (signed marks)
5. mistake_adjustment     - mistake-pattern adjustment (marks)

The numeric constants below are opaque calibration values kept for parity
with earlier releases; they have no documented derivation and are due for
recalibration against real outcome data.
"""

from __future__ import annotations

from src.forecast.calibration import Calibration, default_calibration
from src.forecast.models import LearnerProfile
from src.forecast.telemetry import TelemetryView

# Baseline
COACHING_QUALITY_FACTOR = 0.95

# Improvement potential: boosts (marks) and amplifiers (multipliers)
QUESTION_VOLUME_BOOST = 60
MISTAKE_ELIMINATION_BOOST = 40
MISTAKE_ELIMINATION_PER_CRITICAL = 25
CONSISTENCY_BOOST = 20
CONSISTENCY_BOOST_HIGH = 30
SPEED_OPTIMIZATION_BOOST = 25
COACHING_BOOST = 35
BIO_OPTIMIZATION_BOOST = 20
PSYCHOLOGICAL_SUPPORT_BOOST = 25
METHODOLOGY_MULTIPLIER = 1.5

HIGH_VOLUME_DAILY_QUESTIONS = 800
HIGH_VOLUME_AMPLIFIER = 1.3
MISTAKE_TRACKING_AMPLIFIER = 1.25
TEST_FREQUENCY_AMPLIFIER = 1.2
STRONG_TREND_THRESHOLD = 5
STRONG_TREND_AMPLIFIER = 1.4
BASE_TREND_AMPLIFIER = 1.1
HIGH_CONSISTENCY_THRESHOLD = 80

DEFAULT_TARGET_SCORE = 700
TARGET_MARGIN = 60
IMPROVEMENT_HARD_CAP = 200

# Bio-rhythm: (energy strictly above, adjustment), first match wins
ENERGY_BANDS: list[tuple[float, int]] = [(8, 15), (7, 10), (6, 0)]
LOW_ENERGY_ADJUSTMENT = -10
BIO_RHYTHM_TRACKING_BONUS = 10
EXAM_TIME_ALIGNMENT_BONUS = 15
NUTRITION_BONUS = 10
FITNESS_BONUS = 5

# Stress: (stress strictly below, adjustment), first match wins
STRESS_BANDS: list[tuple[float, int]] = [(5, 20), (6, 10), (7, 0)]
HIGH_STRESS_ADJUSTMENT = -10
EXPERIENCED_ATTEMPT = 3
EXPERIENCE_BONUS = 10
FIRST_ATTEMPTS_BONUS = 5
PANIC_TAG = "panic_response"
PANIC_PATTERN_BONUS = 15
NO_PANIC_PATTERN_BONUS = 20
HIGH_FAMILY_PRESSURE_BONUS = 5
FAMILY_SUPPORT_BONUS = 10
POSITIVE_TREND_CONFIDENCE_BONUS = 15
FLAT_TREND_CONFIDENCE_BONUS = 5

# Mistake patterns
NO_MISTAKE_DATA_BONUS = 20
PATTERN_RECOGNITION_BONUS = 25
ADAPTIVE_LEARNING_BONUS = 15


def source_test_score(profile: LearnerProfile, telemetry: TelemetryView) -> float:
    """Measured average test score when tracked, else the mock-range midpoint."""
    if telemetry.has_test_scores:
        return telemetry.avg_test_score
    return profile.mock_score_range.midpoint


def baseline_performance(
    profile: LearnerProfile,
    telemetry: TelemetryView,
    calibration: Calibration | None = None,
) -> float:
    """
    Baseline level in marks.

    Formula:
        source score × consistency × coaching quality × foundation × trend

    Non-decreasing in foundation tier and in measured consistency.
    """
    cal = calibration or default_calibration()
    foundation_factor = cal.foundation_factors[profile.foundation_strength]
    trend_factor = 1 + telemetry.improvement_trend / 100 if telemetry.improvement_trend > 0 else 1.0

    return (
        source_test_score(profile, telemetry)
        * telemetry.consistency_factor
        * COACHING_QUALITY_FACTOR
        * foundation_factor
        * trend_factor
    )


def improvement_potential(profile: LearnerProfile, telemetry: TelemetryView) -> float:
    """
    Bounded headroom toward the target score.

    Stacked boosts × amplifiers, then clamped to
    ``min(raw, remaining gap + margin, hard cap)`` so many amplifiers firing
    together cannot run away.
    """
    current_best = telemetry.best_test_score or profile.mock_score_range.max
    target = profile.mock_score_range.target or DEFAULT_TARGET_SCORE
    remaining_gap = max(0.0, target - current_best)

    if telemetry.critical_mistakes > 0:
        mistake_boost = telemetry.critical_mistakes * MISTAKE_ELIMINATION_PER_CRITICAL
    else:
        mistake_boost = MISTAKE_ELIMINATION_BOOST
    consistency_boost = (
        CONSISTENCY_BOOST_HIGH
        if telemetry.consistency_score > HIGH_CONSISTENCY_THRESHOLD
        else CONSISTENCY_BOOST
    )
    boosts = (
        QUESTION_VOLUME_BOOST
        + mistake_boost
        + consistency_boost
        + SPEED_OPTIMIZATION_BOOST
        + COACHING_BOOST
        + BIO_OPTIMIZATION_BOOST
        + PSYCHOLOGICAL_SUPPORT_BOOST
    )

    amplifier = METHODOLOGY_MULTIPLIER
    if telemetry.avg_daily_questions > HIGH_VOLUME_DAILY_QUESTIONS:
        amplifier *= HIGH_VOLUME_AMPLIFIER
    if telemetry.total_patterns > 0:
        amplifier *= MISTAKE_TRACKING_AMPLIFIER
    if telemetry.has_test_scores:
        amplifier *= TEST_FREQUENCY_AMPLIFIER
    if telemetry.improvement_trend > STRONG_TREND_THRESHOLD:
        amplifier *= STRONG_TREND_AMPLIFIER
    else:
        amplifier *= BASE_TREND_AMPLIFIER

    raw = boosts * amplifier
    return min(raw, remaining_gap + TARGET_MARGIN, IMPROVEMENT_HARD_CAP)


def bio_rhythm_adjustment(profile: LearnerProfile, telemetry: TelemetryView) -> float:
    """Signed adjustment from energy band, bio-rhythm tracking and lifestyle."""
    energy = next(
        (adj for threshold, adj in ENERGY_BANDS if telemetry.avg_energy > threshold),
        LOW_ENERGY_ADJUSTMENT,
    )
    tracking = BIO_RHYTHM_TRACKING_BONUS if profile.bio_rhythm is not None else 0
    nutrition = NUTRITION_BONUS if profile.diet_type else 0
    fitness = FITNESS_BONUS if profile.fitness_level in ("good", "excellent") else 0

    return energy + tracking + EXAM_TIME_ALIGNMENT_BONUS + nutrition + fitness


def stress_adjustment(profile: LearnerProfile, telemetry: TelemetryView) -> float:
    """
    Signed stress / resilience adjustment.

    Non-increasing in average stress: every band above is at least the
    band below it.
    """
    stress = next(
        (adj for threshold, adj in STRESS_BANDS if telemetry.avg_stress < threshold),
        HIGH_STRESS_ADJUSTMENT,
    )
    experience = (
        EXPERIENCE_BONUS if profile.attempt_number >= EXPERIENCED_ATTEMPT else FIRST_ATTEMPTS_BONUS
    )
    panic = (
        PANIC_PATTERN_BONUS
        if telemetry.most_frequent_mistake == PANIC_TAG
        else NO_PANIC_PATTERN_BONUS
    )
    family = HIGH_FAMILY_PRESSURE_BONUS if profile.family_pressure == "High" else FAMILY_SUPPORT_BONUS
    confidence = (
        POSITIVE_TREND_CONFIDENCE_BONUS
        if telemetry.improvement_trend > 0
        else FLAT_TREND_CONFIDENCE_BONUS
    )

    return stress + experience + panic + family + confidence


def mistake_adjustment(profile: LearnerProfile, telemetry: TelemetryView) -> float:
    """Reward zero/low critical and moderate pattern counts."""
    if not telemetry.has_mistake_analysis:
        return NO_MISTAKE_DATA_BONUS

    critical = telemetry.critical_mistakes
    moderate = telemetry.moderate_mistakes

    if critical == 0:
        critical_resolution = 40
    elif critical < 2:
        critical_resolution = 20
    else:
        critical_resolution = 0

    if moderate == 0:
        moderate_resolution = 20
    elif moderate < 3:
        moderate_resolution = 10
    else:
        moderate_resolution = 0

    return critical_resolution + moderate_resolution + PATTERN_RECOGNITION_BONUS + ADAPTIVE_LEARNING_BONUS
