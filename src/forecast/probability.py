"""
Probability Calculator.

Each admission bracket is an independent step function of the most-likely
score against calibrated thresholds. Outputs are clamped to [0, 100].
"""

from __future__ import annotations

from src.forecast.calibration import BracketTable, Calibration, default_calibration
from src.forecast.models import ProbabilityBrackets


def bracket_probability(score: float, table: BracketTable) -> float:
    """First step whose threshold the score meets, else the table floor."""
    for step in table.steps:
        if score >= step.min_score:
            return max(0.0, min(100.0, step.probability))
    return max(0.0, min(100.0, table.floor))


def estimate_probabilities(
    most_likely: float,
    calibration: Calibration | None = None,
) -> ProbabilityBrackets:
    """
    Compute every admission bracket for a score.

    Args:
        most_likely: Most-likely score in marks
        calibration: Cohort tables; defaults to the cached calibration

    Returns:
        ProbabilityBrackets with each value in [0, 100]
    """
    tables = (calibration or default_calibration()).brackets
    return ProbabilityBrackets(
        air_1_to_1000=bracket_probability(most_likely, tables.air_1_to_1000),
        air_1000_to_5000=bracket_probability(most_likely, tables.air_1000_to_5000),
        air_5000_to_15000=bracket_probability(most_likely, tables.air_5000_to_15000),
        air_15000_to_50000=bracket_probability(most_likely, tables.air_15000_to_50000),
        government_seat=bracket_probability(most_likely, tables.government_seat),
        private_seat=bracket_probability(most_likely, tables.private_seat),
        region_quota=bracket_probability(most_likely, tables.region_quota),
    )
