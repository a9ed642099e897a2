"""
Exam Outcome Forecasting Engine.

Turns a static learner profile plus optional rolling telemetry into:
- a three-point score estimate and the matching rank estimate
- admission-probability brackets
- strengths / weaknesses / gaps / actions, a 30-90-180 day roadmap, and risks
"""

from src.forecast.calibration import Calibration, build_calibration, default_calibration, load_calibration
from src.forecast.engine import forecast
from src.forecast.errors import CalibrationError, ForecastError, ValidationError
from src.forecast.models import (
    ForecastResult,
    LearnerProfile,
    RankEstimate,
    RiskLevel,
    ScoreEstimate,
    TelemetrySnapshot,
)
from src.forecast.profile import normalize_profile
from src.forecast.ranking import rank_for_score
from src.forecast.telemetry import TelemetryView, adapt_telemetry

__all__ = [
    "forecast",
    "normalize_profile",
    "adapt_telemetry",
    "rank_for_score",
    "load_calibration",
    "build_calibration",
    "default_calibration",
    "Calibration",
    "ForecastResult",
    "LearnerProfile",
    "TelemetrySnapshot",
    "TelemetryView",
    "ScoreEstimate",
    "RankEstimate",
    "RiskLevel",
    "ForecastError",
    "ValidationError",
    "CalibrationError",
]
