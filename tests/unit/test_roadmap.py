"""
Unit tests for the three-horizon roadmap.
"""

from datetime import date

from src.forecast.models import ConfidenceRange, ScoreEstimate
from src.forecast.profile import normalize_profile
from src.forecast.roadmap import BASE_DAILY_TARGETS, FocusArea, build_roadmap
from src.forecast.telemetry import TelemetryView, adapt_telemetry

SCORE = ScoreEstimate(
    most_likely=641, best_case=671, worst_case=611,
    confidence_range=ConfidenceRange(min=616, max=666),
)


class TestHorizons:
    def test_fixed_structure(self, sample_profile):
        roadmap = build_roadmap(normalize_profile(sample_profile), SCORE, TelemetryView())
        assert [p.horizon_days for p in roadmap.phases] == [30, 90, 180]
        assert [p.revision_cycles for p in roadmap.phases] == [3, 5, 7]
        assert all(p.ends_on is None for p in roadmap.phases)

    def test_daily_targets_ramp_to_capacity(self, sample_profile):
        roadmap = build_roadmap(normalize_profile(sample_profile), SCORE, TelemetryView())
        assert roadmap.next_30_days.daily_targets == BASE_DAILY_TARGETS
        assert roadmap.next_90_days.daily_targets == {"physics": 372, "chemistry": 425, "biology": 584}
        assert roadmap.final_180_days.daily_targets == {"physics": 404, "chemistry": 462, "biology": 635}

    def test_low_capacity_keeps_base_split(self, sample_profile):
        sample_profile["question_capacity"] = {"current": 300, "upcoming": 500}
        roadmap = build_roadmap(normalize_profile(sample_profile), SCORE, TelemetryView())
        for phase in roadmap.phases:
            assert phase.daily_targets == BASE_DAILY_TARGETS

    def test_score_targets(self, sample_profile):
        roadmap = build_roadmap(normalize_profile(sample_profile), SCORE, TelemetryView())
        assert [p.score_target for p in roadmap.phases] == [620, 680, 700]

    def test_score_targets_follow_learner_target(self, sample_profile):
        sample_profile["mock_score_range"] = {"min": 400, "max": 450, "target": 600}
        roadmap = build_roadmap(normalize_profile(sample_profile), SCORE, TelemetryView())
        assert [p.score_target for p in roadmap.phases] == [450, 600, 600]

    def test_zero_target_uses_default(self, sample_profile):
        sample_profile["mock_score_range"] = {"min": 0, "max": 0, "target": 0}
        roadmap = build_roadmap(normalize_profile(sample_profile), SCORE, TelemetryView())
        assert roadmap.final_180_days.score_target == 700

    def test_as_of_stamps_end_dates(self, sample_profile):
        roadmap = build_roadmap(
            normalize_profile(sample_profile), SCORE, TelemetryView(), as_of=date(2025, 1, 6)
        )
        assert [p.ends_on for p in roadmap.phases] == [
            date(2025, 2, 5),
            date(2025, 4, 6),
            date(2025, 7, 5),
        ]


class TestFocusAreas:
    def test_minimal_profile(self, sample_profile):
        roadmap = build_roadmap(normalize_profile(sample_profile), SCORE, TelemetryView())
        assert roadmap.next_30_days.focus_areas == [
            FocusArea.ERROR_PROFILING.value,
            FocusArea.AFTERNOON_CONDITIONING.value,
            FocusArea.NUMERICAL_SPEED.value,
        ]
        assert FocusArea.STRESS_TRIGGERS.value in roadmap.next_90_days.focus_areas
        assert FocusArea.FAMILY_SUPPORT.value not in roadmap.final_180_days.focus_areas

    def test_calm_learner_skips_stress_focus(self, sample_profile):
        view = adapt_telemetry({"avg_stress": 3})
        roadmap = build_roadmap(normalize_profile(sample_profile), SCORE, view)
        assert FocusArea.STRESS_TRIGGERS.value not in roadmap.next_90_days.focus_areas

    def test_rich_profile(self, rich_profile):
        roadmap = build_roadmap(normalize_profile(rich_profile), SCORE, TelemetryView())
        assert FocusArea.BIO_RHYTHM_PACING.value in roadmap.next_30_days.focus_areas
        assert FocusArea.FAMILY_SUPPORT.value in roadmap.final_180_days.focus_areas

    def test_every_code_has_label(self):
        assert all(area.label for area in FocusArea)
