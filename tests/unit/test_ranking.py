"""
Unit tests for the score → rank step function.
"""

import pytest

from src.forecast.calibration import DEFAULT_FALLBACK_RANK, build_calibration
from src.forecast.models import ConfidenceRange, ScoreEstimate
from src.forecast.ranking import estimate_rank, rank_for_score


class TestRankForScore:
    @pytest.mark.parametrize(
        "score, rank",
        [(720, 1), (715, 50), (712, 150), (700, 500), (650, 20000), (641, 35000), (350, 3400000)],
    )
    def test_anchor_lookup(self, score, rank):
        assert rank_for_score(score) == rank

    def test_below_curve_uses_fallback(self):
        assert rank_for_score(349.9) == DEFAULT_FALLBACK_RANK
        assert rank_for_score(0) == DEFAULT_FALLBACK_RANK
        assert rank_for_score(-40) == DEFAULT_FALLBACK_RANK

    def test_above_720(self):
        assert rank_for_score(800) == 1

    def test_monotone_non_increasing(self):
        ranks = [rank_for_score(s / 2) for s in range(-20, 1460)]
        assert all(a >= b for a, b in zip(ranks, ranks[1:]))

    def test_custom_curve(self):
        cal = build_calibration(
            {
                "rank_anchors": [{"score": 500, "rank": 10}, {"score": 600, "rank": 1}],
                "fallback_rank": 99,
            }
        )
        assert rank_for_score(650, cal) == 1
        assert rank_for_score(550, cal) == 10
        assert rank_for_score(100, cal) == 99


class TestEstimateRank:
    def test_maps_every_point(self):
        score = ScoreEstimate(
            most_likely=641,
            best_case=671,
            worst_case=611,
            confidence_range=ConfidenceRange(min=616, max=666),
        )
        rank = estimate_rank(score)
        assert rank.most_likely == 35000
        assert rank.best_case == 6000
        assert rank.worst_case == 110000
        # Higher score means better rank: the range is inverted
        assert rank.confidence_range.min == 12000
        assert rank.confidence_range.max == 110000

    def test_rank_ordering(self):
        score = ScoreEstimate(
            most_likely=500, best_case=530, worst_case=470,
            confidence_range=ConfidenceRange(min=475, max=525),
        )
        rank = estimate_rank(score)
        assert rank.best_case <= rank.most_likely <= rank.worst_case
        assert rank.confidence_range.min <= rank.confidence_range.max
