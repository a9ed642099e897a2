"""
Rank Mapper.

Score → historical All-India Rank via a monotonic step function over the
calibration's anchor list. Anchors are sorted by score descending when the
calibration is built, so the first anchor the score meets is the answer;
below every anchor the fallback rank ("beyond tracked range") applies.
No interpolation: monotonicity holds by construction.
"""

from __future__ import annotations

from src.forecast.calibration import Calibration, default_calibration
from src.forecast.models import ConfidenceRange, RankEstimate, ScoreEstimate


def rank_for_score(score: float, calibration: Calibration | None = None) -> int:
    """
    Map a score to a rank.

    Args:
        score: Marks (any real number; values outside [0, 720] are fine)
        calibration: Cohort tables; defaults to the cached calibration

    Returns:
        Historical rank for the highest anchor the score meets
    """
    cal = calibration or default_calibration()
    for anchor in cal.rank_anchors:
        if score >= anchor.score:
            return anchor.rank
    return cal.fallback_rank


def estimate_rank(score: ScoreEstimate, calibration: Calibration | None = None) -> RankEstimate:
    """Map every point of a ScoreEstimate to rank units.

    Higher score means better (lower) rank, so the rank confidence range
    takes its min from the score range's max and vice versa.
    """
    cal = calibration or default_calibration()
    return RankEstimate(
        most_likely=rank_for_score(score.most_likely, cal),
        best_case=rank_for_score(score.best_case, cal),
        worst_case=rank_for_score(score.worst_case, cal),
        confidence_range=ConfidenceRange(
            min=rank_for_score(score.confidence_range.max, cal),
            max=rank_for_score(score.confidence_range.min, cal),
        ),
    )
