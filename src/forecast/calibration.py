"""
Cohort Calibration Tables.

The score→rank anchor curve, the probability-bracket thresholds and the
scenario/clamp widths are yearly configuration, not algorithm. They live
here as one immutable ``Calibration`` value that callers can swap out
(e.g. from a JSON file per exam cohort) without touching the calculators.

Validation guarantees the lookups stay monotonic:
- rank anchors are sorted by score descending, ranks non-decreasing
- bracket steps are sorted by threshold descending, probabilities non-increasing
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from src.forecast.errors import CalibrationError
from src.forecast.models import MAX_SCORE, FoundationStrength


# =============================================================================
# Default cohort data
# =============================================================================

# (score, historical AIR) anchors, marks descending
DEFAULT_RANK_ANCHORS: list[tuple[int, int]] = [
    (720, 1), (715, 50), (710, 150), (700, 500), (690, 1500), (680, 3000),
    (670, 6000), (660, 12000), (650, 20000), (640, 35000), (630, 55000),
    (620, 80000), (610, 110000), (600, 150000), (590, 200000), (580, 260000),
    (570, 330000), (560, 410000), (550, 500000), (540, 600000), (530, 720000),
    (520, 850000), (510, 1000000), (500, 1150000), (490, 1300000), (480, 1450000),
    (470, 1600000), (460, 1750000), (450, 1900000), (440, 2050000), (430, 2200000),
    (420, 2350000), (410, 2500000), (400, 2650000), (390, 2800000), (380, 2950000),
    (370, 3100000), (360, 3250000), (350, 3400000),
]
DEFAULT_FALLBACK_RANK = 3_500_000

# bracket -> ([(min score, probability %)], floor %)
DEFAULT_BRACKETS: dict[str, tuple[list[tuple[int, float]], float]] = {
    "air_1_to_1000": ([(710, 45), (700, 25), (690, 12), (680, 5)], 0),
    "air_1000_to_5000": ([(700, 60), (690, 40), (680, 25), (670, 15)], 5),
    "air_5000_to_15000": ([(680, 70), (670, 50), (660, 35), (650, 25)], 10),
    "air_15000_to_50000": ([(660, 80), (650, 65), (640, 50), (630, 35)], 20),
    "government_seat": ([(680, 75), (670, 60), (660, 45), (650, 30)], 15),
    "private_seat": ([(650, 95), (630, 90), (600, 85), (580, 75)], 60),
    "region_quota": ([(670, 85), (650, 70), (630, 55), (610, 40)], 25),
}

# Foundation tier -> baseline factor (closer to 1 for stronger tiers)
DEFAULT_FOUNDATION_FACTORS: dict[FoundationStrength, float] = {
    FoundationStrength.WEAK: 0.72,
    FoundationStrength.AVERAGE: 0.78,
    FoundationStrength.MID_TIER: 0.82,
    FoundationStrength.MID_GREAT: 0.82,
    FoundationStrength.STRONG: 0.88,
    FoundationStrength.SIGNIFICANTLY_IMPROVED: 0.90,
    FoundationStrength.EXCEPTIONAL: 0.92,
}

# year -> (AIR-1 score, top-college cutoff)
DEFAULT_HISTORICAL_TOPPERS: dict[int, tuple[int, int]] = {
    2024: (720, 715),
    2023: (720, 710),
    2022: (715, 705),
    2021: (720, 700),
    2020: (720, 690),
}


# =============================================================================
# Models
# =============================================================================


class RankAnchor(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=MAX_SCORE)
    rank: int = Field(..., ge=1)


class BracketStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_score: float = Field(..., ge=0, le=MAX_SCORE)
    probability: float = Field(..., ge=0, le=100)


class BracketTable(BaseModel):
    """Step function: first step whose threshold the score meets, else floor."""

    model_config = ConfigDict(frozen=True)

    steps: tuple[BracketStep, ...]
    floor: float = Field(0, ge=0, le=100)

    @field_validator("steps")
    @classmethod
    def _sorted_steps(cls, steps: tuple[BracketStep, ...]) -> tuple[BracketStep, ...]:
        ordered = tuple(sorted(steps, key=lambda s: s.min_score, reverse=True))
        if len({s.min_score for s in ordered}) != len(ordered):
            raise ValueError("duplicate bracket thresholds")
        return ordered

    @model_validator(mode="after")
    def _monotone(self) -> BracketTable:
        probabilities = [s.probability for s in self.steps] + [self.floor]
        if any(a < b for a, b in zip(probabilities, probabilities[1:])):
            raise ValueError("bracket probabilities must not increase as the threshold drops")
        return self


class BracketTables(BaseModel):
    model_config = ConfigDict(frozen=True)

    air_1_to_1000: BracketTable
    air_1000_to_5000: BracketTable
    air_5000_to_15000: BracketTable
    air_15000_to_50000: BracketTable
    government_seat: BracketTable
    private_seat: BracketTable
    region_quota: BracketTable


class TopperRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    air1_score: int
    top_college_cutoff: int


class Calibration(BaseModel):
    """Swappable cohort configuration for one forecast."""

    model_config = ConfigDict(frozen=True)

    rank_anchors: tuple[RankAnchor, ...]
    fallback_rank: int = Field(DEFAULT_FALLBACK_RANK, ge=1)
    brackets: BracketTables
    foundation_factors: Mapping[FoundationStrength, float]
    historical_toppers: Mapping[int, TopperRecord] = Field(default_factory=dict, validate_default=True)

    score_floor: float = Field(0, ge=0, lt=MAX_SCORE)
    scenario_delta: float = Field(30, ge=0)
    confidence_width: float = Field(25, ge=0)
    default_prior_score: float = Field(320, ge=0, le=MAX_SCORE)

    @field_validator("rank_anchors")
    @classmethod
    def _anchors_monotone(cls, anchors: tuple[RankAnchor, ...]) -> tuple[RankAnchor, ...]:
        if not anchors:
            raise ValueError("at least one rank anchor is required")
        ordered = tuple(sorted(anchors, key=lambda a: a.score, reverse=True))
        for higher, lower in zip(ordered, ordered[1:]):
            if higher.score == lower.score:
                raise ValueError(f"duplicate anchor score {higher.score:g}")
            if higher.rank > lower.rank:
                raise ValueError(
                    f"rank must not improve as score drops ({higher.score:g}->{higher.rank}, "
                    f"{lower.score:g}->{lower.rank})"
                )
        return ordered

    @field_validator("foundation_factors")
    @classmethod
    def _factors_follow_tiers(
        cls, factors: Mapping[FoundationStrength, float]
    ) -> Mapping[FoundationStrength, float]:
        missing = [tier.value for tier in FoundationStrength if tier not in factors]
        if missing:
            raise ValueError(f"missing foundation factors for {', '.join(missing)}")
        ordered = sorted(FoundationStrength, key=lambda t: t.order)
        for weaker, stronger in zip(ordered, ordered[1:]):
            if factors[weaker] > factors[stronger]:
                raise ValueError(f"{stronger.value} factor must be >= {weaker.value} factor")
        return MappingProxyType(dict(factors))

    @field_validator("historical_toppers")
    @classmethod
    def _freeze_toppers(cls, toppers: Mapping[int, TopperRecord]) -> Mapping[int, TopperRecord]:
        return MappingProxyType(dict(toppers))

    @model_validator(mode="after")
    def _fallback_beyond_curve(self) -> Calibration:
        if self.fallback_rank < self.rank_anchors[-1].rank:
            raise ValueError("fallback_rank must be >= the lowest anchor's rank")
        return self

    @property
    def latest_top_college_cutoff(self) -> int | None:
        if not self.historical_toppers:
            return None
        return self.historical_toppers[max(self.historical_toppers)].top_college_cutoff


# =============================================================================
# Loading
# =============================================================================


def _default_payload() -> dict[str, Any]:
    return {
        "rank_anchors": [{"score": s, "rank": r} for s, r in DEFAULT_RANK_ANCHORS],
        "fallback_rank": DEFAULT_FALLBACK_RANK,
        "brackets": {
            name: {
                "steps": [{"min_score": s, "probability": p} for s, p in steps],
                "floor": floor,
            }
            for name, (steps, floor) in DEFAULT_BRACKETS.items()
        },
        "foundation_factors": dict(DEFAULT_FOUNDATION_FACTORS),
        "historical_toppers": {
            year: {"air1_score": air1, "top_college_cutoff": cutoff}
            for year, (air1, cutoff) in DEFAULT_HISTORICAL_TOPPERS.items()
        },
    }


def build_calibration(overrides: dict[str, Any] | None = None) -> Calibration:
    """
    Build a Calibration from the defaults plus shallow overrides.

    Args:
        overrides: Top-level keys replacing the defaults (e.g. a new
            ``rank_anchors`` list for a later cohort)

    Raises:
        CalibrationError: if the merged tables fail validation
    """
    payload = _default_payload()
    payload.update(overrides or {})
    try:
        return Calibration.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(part) for part in first["loc"]) or "calibration"
        raise CalibrationError(f"{where}: {first['msg']}") from e


def load_calibration(path: str | Path | None = None) -> Calibration:
    """
    Load calibration using settings and an optional JSON override file.

    Settings supply the scalar widths (score floor, scenario delta,
    confidence width, default prior score); the file, when given, replaces
    whole tables.
    """
    from config import get_settings

    settings = get_settings()
    overrides: dict[str, Any] = {
        "score_floor": settings.forecast_score_floor,
        "scenario_delta": settings.forecast_scenario_delta,
        "confidence_width": settings.forecast_confidence_width,
        "default_prior_score": settings.forecast_default_prior_score,
    }

    source = path or settings.forecast_calibration_path
    if source:
        try:
            with open(source, encoding="utf-8") as f:
                overrides.update(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            raise CalibrationError(f"cannot read calibration file {source}: {e}") from e
        logger.info(f"Loaded forecast calibration from {source}")
    else:
        logger.debug("Using built-in forecast calibration")

    return build_calibration(overrides)


@lru_cache(maxsize=1)
def default_calibration() -> Calibration:
    """Get cached calibration built from settings."""
    return load_calibration()
