"""
Forecast Orchestrator.

The single public entry point of the engine. Runs the pipeline one way:

    profile + telemetry
        -> normalizer / adapter
        -> five sub-score calculators (independent)
        -> synthesizer
        -> rank mapper, probability calculator
        -> narrator, roadmap, risk assessor
        -> ForecastResult

Pure and synchronous: no I/O beyond logging, no clock reads, no randomness.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from loguru import logger

from src.forecast.analysis import analyze
from src.forecast.calibration import Calibration, default_calibration
from src.forecast.models import ForecastResult, LearnerProfile, TelemetrySnapshot
from src.forecast.probability import estimate_probabilities
from src.forecast.profile import normalize_profile
from src.forecast.ranking import estimate_rank
from src.forecast.risk import assess_risks, overall_risk_level
from src.forecast.roadmap import build_roadmap
from src.forecast.subscores import (
    baseline_performance,
    bio_rhythm_adjustment,
    improvement_potential,
    mistake_adjustment,
    stress_adjustment,
)
from src.forecast.synthesis import confidence_level, synthesize_score
from src.forecast.telemetry import adapt_telemetry


def forecast(
    profile: LearnerProfile | Mapping[str, Any],
    telemetry: TelemetrySnapshot | Mapping[str, Any] | None = None,
    *,
    as_of: date | None = None,
    calibration: Calibration | None = None,
) -> ForecastResult:
    """
    Produce a full forecast for one learner.

    Args:
        profile: LearnerProfile or raw mapping (snake_case or camelCase)
        telemetry: Optional rolling performance snapshot
        as_of: Start date for roadmap end dates; never read from the clock
        calibration: Cohort tables; defaults to the cached calibration

    Returns:
        ForecastResult with every field populated

    Raises:
        ValidationError: if the profile is malformed (no partial result)
    """
    learner = normalize_profile(profile)
    view = adapt_telemetry(telemetry)
    cal = calibration or default_calibration()

    baseline = baseline_performance(learner, view, cal)
    improvement = improvement_potential(learner, view)
    bio = bio_rhythm_adjustment(learner, view)
    stress = stress_adjustment(learner, view)
    mistake = mistake_adjustment(learner, view)
    logger.debug(
        f"Sub-scores: baseline={baseline:.1f} improvement={improvement:.1f} "
        f"bio={bio:+.0f} stress={stress:+.0f} mistake={mistake:+.0f}"
    )

    score = synthesize_score(baseline, improvement, bio, stress, mistake, view.present, cal)
    confidence = confidence_level(view)
    rank = estimate_rank(score, cal)
    logger.debug(
        f"Score {score.worst_case}/{score.most_likely}/{score.best_case}, "
        f"rank {rank.most_likely}, confidence {confidence}"
    )

    result = ForecastResult(
        score=score,
        rank=rank,
        confidence_level=confidence,
        probabilities=estimate_probabilities(score.most_likely, cal),
        analysis=analyze(learner, score, view, cal),
        roadmap=build_roadmap(learner, score, view, as_of),
        risks=assess_risks(learner, score, view),
        overall_risk=overall_risk_level(rank, confidence),
    )

    logger.info(
        f"Forecast: {score.most_likely} marks, AIR ~{rank.most_likely:,}, "
        f"confidence {confidence}%, risk {result.overall_risk.value}"
        + ("" if view.present else " (no telemetry)")
    )
    return result
