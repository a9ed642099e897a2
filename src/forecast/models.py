"""
Forecast Data Contracts.

Input side (pydantic, validated):
- LearnerProfile: static learner profile supplied by the caller
- TelemetrySnapshot: optional rolling aggregate, every field optional

Output side (dataclasses, built fresh per forecast):
- ScoreEstimate / RankEstimate: three-point estimates with a confidence range
- ProbabilityBrackets: admission-probability buckets (percent)
- DetailedAnalysis, RoadmapPhase, ImprovementRoadmap, RiskAssessment
- ForecastResult: the engine's sole output
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

MAX_SCORE = 720


# =============================================================================
# Enums
# =============================================================================


class Category(str, Enum):
    """Reservation category."""

    GENERAL = "General"
    OBC = "OBC"
    SC = "SC"
    ST = "ST"
    EWS = "EWS"


class FoundationStrength(str, Enum):
    """
    Self-reported foundation tier.

    Ordered Weak < Average < Mid-tier < Strong < Exceptional. ``Mid-Great``
    and ``Significantly Improved`` are accepted for older profiles.
    """

    WEAK = "Weak"
    AVERAGE = "Average"
    MID_TIER = "Mid-tier"
    STRONG = "Strong"
    EXCEPTIONAL = "Exceptional"
    # Compatibility aliases
    MID_GREAT = "Mid-Great"
    SIGNIFICANTLY_IMPROVED = "Significantly Improved"

    @property
    def order(self) -> float:
        """Position on the ordered scale (aliases sit on or between tiers)."""
        return {
            FoundationStrength.WEAK: 0,
            FoundationStrength.AVERAGE: 1,
            FoundationStrength.MID_TIER: 2,
            FoundationStrength.MID_GREAT: 2,
            FoundationStrength.STRONG: 3,
            FoundationStrength.SIGNIFICANTLY_IMPROVED: 3.5,
            FoundationStrength.EXCEPTIONAL: 4,
        }[self]


class RiskLevel(str, Enum):
    """Overall risk level for a forecast."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


TimeSlot = Literal["morning", "afternoon", "evening", "night"]
Subject = Literal["Biology", "Chemistry", "Physics"]
StressTrigger = Literal["family_pressure", "target_completion", "time_pressure", "multiple_attempts"]
ErrorType = Literal[
    "silly_mistakes",
    "overthinking",
    "panic_response",
    "conceptual_gaps",
    "time_management",
    "calculation_errors",
]


# =============================================================================
# Learner Profile
# =============================================================================


class MockScoreRange(BaseModel):
    """Recent mock-test marks: min <= max <= target, all within [0, 720]."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(..., ge=0, le=MAX_SCORE)
    max: float = Field(..., ge=0, le=MAX_SCORE)
    target: float = Field(..., ge=0, le=MAX_SCORE)

    @field_validator("max")
    @classmethod
    def _max_not_below_min(cls, value: float, info: ValidationInfo) -> float:
        low = info.data.get("min")
        if low is not None and value < low:
            raise ValueError(f"must be >= min ({low:g})")
        return value

    @field_validator("target")
    @classmethod
    def _target_not_below_max(cls, value: float, info: ValidationInfo) -> float:
        high = info.data.get("max")
        if high is not None and value < high:
            raise ValueError(f"must be >= max ({high:g})")
        return value

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


class CurrentUpcoming(BaseModel):
    """A current value and the planned value for the coming phase."""

    model_config = ConfigDict(frozen=True)

    current: float = Field(..., ge=0)
    upcoming: float = Field(..., ge=0)


class SpeedRange(BaseModel):
    """Question-solving speed in seconds per question."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(..., gt=0)
    max: float = Field(..., gt=0)

    @field_validator("max")
    @classmethod
    def _max_not_below_min(cls, value: float, info: ValidationInfo) -> float:
        low = info.data.get("min")
        if low is not None and value < low:
            raise ValueError(f"must be >= min ({low:g})")
        return value


class BioRhythm(BaseModel):
    """Cyclical bio-rhythm descriptor with flagged low-capacity days."""

    model_config = ConfigDict(frozen=True)

    cycle_length_days: float = Field(..., gt=0)
    heavy_flow_days: tuple[int, ...] = ()
    pain_days: tuple[int, ...] = ()
    low_energy_days: tuple[int, ...] = ()
    symptoms: tuple[str, ...] = ()


class LearnerProfile(BaseModel):
    """Static learner profile, immutable for one forecast call."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Personal
    category: Category
    home_state: str = Field(..., min_length=1)
    coaching_institute: str | None = None
    preparation_years: float = Field(..., ge=0)
    attempt_number: int = Field(..., ge=1, le=5)

    # Academic
    class12_percentage: float | None = Field(None, ge=0, le=100)
    board: str | None = None
    school_rank: str | None = None
    foundation_strength: FoundationStrength

    # Current performance
    mock_score_range: MockScoreRange
    study_hours: CurrentUpcoming
    question_capacity: CurrentUpcoming
    question_speed: SpeedRange

    # Optional signals
    bio_rhythm: BioRhythm | None = None
    stress_triggers: tuple[StressTrigger, ...] = ()
    family_pressure: Literal["High", "Medium", "Low"] | None = None
    best_performing_slots: tuple[TimeSlot, ...] = ()
    problematic_slots: tuple[TimeSlot, ...] = ()
    subject_preference: tuple[Subject, ...] = ()
    weakness_type: str | None = None
    error_types: tuple[ErrorType, ...] = ()
    revision_frequency: Literal["below_average", "average", "above_average"] | None = None

    # Lifestyle
    diet_type: str | None = None
    fitness_level: Literal["poor", "average", "good", "excellent"] | None = None

    # Baseline anchor; None resolves to the calibrated conservative default
    prior_official_score: float | None = Field(None, ge=0, le=MAX_SCORE)

    @field_validator("study_hours")
    @classmethod
    def _hours_within_day(cls, value: CurrentUpcoming) -> CurrentUpcoming:
        if value.current > 24 or value.upcoming > 24:
            raise ValueError("hours per day must be <= 24")
        return value


# =============================================================================
# Telemetry Snapshot
# =============================================================================


class PerformanceMetrics(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    avg_stress: float | None = None
    avg_energy: float | None = None
    avg_focus: float | None = None
    avg_daily_questions: float | None = None
    avg_test_score: float | None = None
    best_test_score: float | None = None
    worst_test_score: float | None = None
    total_time_wasted: float | None = None


class MistakeAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    critical_mistakes: int | None = None
    moderate_mistakes: int | None = None
    total_patterns: int | None = None
    most_frequent_mistake: str | None = None


class TrendAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    consistency_score: float | None = None
    improvement_trend: float | None = None
    risk_factors: tuple[str, ...] = ()


class TelemetrySnapshot(BaseModel):
    """Externally computed rolling aggregate of recent study behaviour."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    performance_metrics: PerformanceMetrics | None = None
    mistake_analysis: MistakeAnalysis | None = None
    trend_analysis: TrendAnalysis | None = None


# =============================================================================
# Outputs
# =============================================================================


@dataclass(frozen=True)
class ConfidenceRange:
    min: int
    max: int


@dataclass(frozen=True)
class ScoreEstimate:
    """Three-point score estimate in marks (worst <= most likely <= best)."""

    most_likely: int
    best_case: int
    worst_case: int
    confidence_range: ConfidenceRange


@dataclass(frozen=True)
class RankEstimate:
    """Three-point rank estimate (lower is better)."""

    most_likely: int
    best_case: int
    worst_case: int
    confidence_range: ConfidenceRange


@dataclass(frozen=True)
class ProbabilityBrackets:
    """Admission-probability buckets, each a percentage in [0, 100]."""

    air_1_to_1000: float
    air_1000_to_5000: float
    air_5000_to_15000: float
    air_15000_to_50000: float
    government_seat: float
    private_seat: float
    region_quota: float


@dataclass
class DetailedAnalysis:
    """Category codes selected by the analysis narrator."""

    strengths: list[str] = field(default_factory=list)
    critical_weaknesses: list[str] = field(default_factory=list)
    mid_level_gaps: list[str] = field(default_factory=list)
    immediate_actions: list[str] = field(default_factory=list)
    frequent_mistake: str | None = None


@dataclass
class RoadmapPhase:
    """One fixed roadmap horizon."""

    horizon_days: int
    daily_targets: dict[str, int]
    focus_areas: list[str]
    score_target: int
    revision_cycles: int
    ends_on: date | None = None


@dataclass
class ImprovementRoadmap:
    next_30_days: RoadmapPhase
    next_90_days: RoadmapPhase
    final_180_days: RoadmapPhase

    @property
    def phases(self) -> list[RoadmapPhase]:
        return [self.next_30_days, self.next_90_days, self.final_180_days]


@dataclass
class RiskAssessment:
    high_risk: list[str] = field(default_factory=list)
    medium_risk: list[str] = field(default_factory=list)
    low_risk: list[str] = field(default_factory=list)
    mitigation_strategies: list[str] = field(default_factory=list)


@dataclass
class ForecastResult:
    """Everything a single forecast produces."""

    score: ScoreEstimate
    rank: RankEstimate
    confidence_level: int
    probabilities: ProbabilityBrackets
    analysis: DetailedAnalysis
    roadmap: ImprovementRoadmap
    risks: RiskAssessment
    overall_risk: RiskLevel

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready payload with camelCase keys for presentation layers."""
        return _camelize(
            {
                "predicted_score": asdict(self.score),
                "predicted_rank": asdict(self.rank),
                "confidence_level": self.confidence_level,
                "probabilities": asdict(self.probabilities),
                "detailed_analysis": asdict(self.analysis),
                "improvement_roadmap": {
                    "next_30_days": asdict(self.roadmap.next_30_days),
                    "next_90_days": asdict(self.roadmap.next_90_days),
                    "final_180_days": asdict(self.roadmap.final_180_days),
                },
                "risk_assessment": asdict(self.risks),
                "overall_risk": self.overall_risk.value,
            }
        )


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel(str(k)): _camelize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_camelize(v) for v in value]
    if isinstance(value, date):
        return value.isoformat()
    return value
