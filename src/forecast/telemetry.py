"""
Telemetry Adapter.

Turns an optional, loosely-structured rolling-performance snapshot into a
fully populated ``TelemetryView``. This is the only place that knows about
missing data; calculators downstream read concrete values and presence flags.

Defaults (neutral, used when a field or whole section is absent):
- avg stress 7, avg energy 5.5 (0-10 scales)
- avg daily questions 0, avg/best test score 0, time wasted 0
- consistency 0 = unmeasured (baseline uses the 0.85 no-boost factor)
- improvement trend 0, mistake counts 0, most frequent pattern "none"

Out-of-range values are clamped into their documented range, and NaN or
infinite values count as missing. A malformed section is logged and replaced
by its defaults.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.forecast.models import (
    MAX_SCORE,
    MistakeAnalysis,
    PerformanceMetrics,
    TelemetrySnapshot,
    TrendAnalysis,
)
from src.forecast.profile import snake_keys

DEFAULT_AVG_STRESS = 7.0
DEFAULT_AVG_ENERGY = 5.5
DEFAULT_CONSISTENCY_FACTOR = 0.85
NO_PATTERN = "none"


@dataclass(frozen=True)
class TelemetryView:
    """Fully populated telemetry accessor."""

    # Performance metrics
    avg_stress: float = DEFAULT_AVG_STRESS
    avg_energy: float = DEFAULT_AVG_ENERGY
    avg_daily_questions: float = 0.0
    avg_test_score: float = 0.0
    best_test_score: float = 0.0
    total_time_wasted: float = 0.0

    # Mistake analysis
    critical_mistakes: int = 0
    moderate_mistakes: int = 0
    total_patterns: int = 0
    most_frequent_mistake: str = NO_PATTERN

    # Trend analysis
    consistency_score: float = 0.0
    improvement_trend: float = 0.0
    risk_factors: tuple[str, ...] = ()

    # Presence
    present: bool = False
    has_performance_metrics: bool = False
    has_mistake_analysis: bool = False
    has_trend_analysis: bool = False

    @property
    def consistency_factor(self) -> float:
        """Consistency as a 0-1 multiplier; unmeasured resolves to 0.85."""
        if self.consistency_score > 0:
            return self.consistency_score / 100
        return DEFAULT_CONSISTENCY_FACTOR

    @property
    def has_test_scores(self) -> bool:
        return self.avg_test_score > 0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _section(raw: Any, model: type[BaseModel], name: str) -> BaseModel | None:
    if raw is None:
        return None
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        logger.warning(f"Ignoring malformed telemetry section '{name}': {e.error_count()} error(s)")
        return None


_SECTIONS: dict[str, type[BaseModel]] = {
    "performance_metrics": PerformanceMetrics,
    "mistake_analysis": MistakeAnalysis,
    "trend_analysis": TrendAnalysis,
}


def _sectioned(raw: dict[str, Any]) -> dict[str, Any]:
    """Route flat keys ({avg_stress: 4, ...}) into their sections."""
    routed = {name: raw[name] for name in _SECTIONS if name in raw}
    flat = {k: v for k, v in raw.items() if k not in _SECTIONS}
    for name, model in _SECTIONS.items():
        picked = {k: v for k, v in flat.items() if k in model.model_fields}
        if not picked:
            continue
        section = routed.get(name)
        if section is None:
            routed[name] = picked
        elif isinstance(section, Mapping):
            # explicit section values win over flat duplicates
            routed[name] = {**picked, **section}
        else:
            logger.warning(f"Ignoring flat telemetry keys {sorted(picked)}: '{name}' is not a mapping")
    return routed


def _pick(value: float | None, default: float, low: float, high: float, name: str) -> float:
    if value is None or not math.isfinite(value):
        if value is not None:
            logger.warning(f"Ignoring non-finite telemetry {name}: {value}")
        return default
    clamped = _clamp(float(value), low, high)
    if clamped != value:
        logger.debug(f"Clamped telemetry {name} {value} -> {clamped}")
    return clamped


def adapt_telemetry(snapshot: TelemetrySnapshot | Mapping[str, Any] | None) -> TelemetryView:
    """
    Resolve a telemetry snapshot into a TelemetryView.

    Args:
        snapshot: TelemetrySnapshot, raw mapping (snake_case or camelCase),
            or None when the learner has no tracked data yet

    Returns:
        TelemetryView with every field populated
    """
    if snapshot is None:
        logger.debug("No telemetry supplied; using neutral defaults")
        return TelemetryView()

    if isinstance(snapshot, TelemetrySnapshot):
        perf, mistakes, trend = (
            snapshot.performance_metrics,
            snapshot.mistake_analysis,
            snapshot.trend_analysis,
        )
    elif isinstance(snapshot, Mapping):
        raw = _sectioned(snake_keys(snapshot))
        perf = _section(raw.get("performance_metrics"), PerformanceMetrics, "performance_metrics")
        mistakes = _section(raw.get("mistake_analysis"), MistakeAnalysis, "mistake_analysis")
        trend = _section(raw.get("trend_analysis"), TrendAnalysis, "trend_analysis")
    else:
        logger.warning(f"Ignoring telemetry of unsupported type {type(snapshot).__name__}")
        return TelemetryView()

    defaulted = [
        name
        for name, section in (("performance", perf), ("mistakes", mistakes), ("trend", trend))
        if section is None
    ]
    if defaulted:
        logger.debug(f"Telemetry sections defaulted: {', '.join(defaulted)}")

    fields: dict[str, Any] = {
        "present": True,
        "has_performance_metrics": perf is not None,
        "has_mistake_analysis": mistakes is not None,
        "has_trend_analysis": trend is not None,
    }

    if perf is not None:
        fields.update(
            avg_stress=_pick(perf.avg_stress, DEFAULT_AVG_STRESS, 0, 10, "avg_stress"),
            avg_energy=_pick(perf.avg_energy, DEFAULT_AVG_ENERGY, 0, 10, "avg_energy"),
            avg_daily_questions=_pick(perf.avg_daily_questions, 0, 0, float("inf"), "avg_daily_questions"),
            avg_test_score=_pick(perf.avg_test_score, 0, 0, MAX_SCORE, "avg_test_score"),
            best_test_score=_pick(perf.best_test_score, 0, 0, MAX_SCORE, "best_test_score"),
            total_time_wasted=_pick(perf.total_time_wasted, 0, 0, float("inf"), "total_time_wasted"),
        )

    if mistakes is not None:
        fields.update(
            critical_mistakes=max(0, mistakes.critical_mistakes or 0),
            moderate_mistakes=max(0, mistakes.moderate_mistakes or 0),
            total_patterns=max(0, mistakes.total_patterns or 0),
            most_frequent_mistake=mistakes.most_frequent_mistake or NO_PATTERN,
        )

    if trend is not None:
        fields.update(
            consistency_score=_pick(trend.consistency_score, 0, 0, 100, "consistency_score"),
            improvement_trend=_pick(
                trend.improvement_trend, 0, float("-inf"), float("inf"), "improvement_trend"
            ),
            risk_factors=tuple(trend.risk_factors),
        )

    return TelemetryView(**fields)
