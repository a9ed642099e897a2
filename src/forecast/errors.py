"""
Forecast error taxonomy.

Only two things can stop a forecast:
- ValidationError: the learner profile is malformed (fatal, no partial result)
- CalibrationError: the cohort tables loaded for this run are malformed

Missing or partial telemetry is never an error; the telemetry adapter
resolves it to documented defaults.
"""

from __future__ import annotations


class ForecastError(Exception):
    """Base class for all forecast engine errors."""

    pass


class ValidationError(ForecastError):
    """Raised when a learner profile fails validation.

    Attributes:
        field: Dotted path of the offending field (e.g. ``mock_score_range.max``)
        message: What was wrong with it
        errors: Every problem found, as (field, message) pairs
    """

    def __init__(self, field: str, message: str, errors: list[tuple[str, str]] | None = None):
        self.field = field
        self.message = message
        self.errors = errors or [(field, message)]
        super().__init__(f"{field}: {message}")


class CalibrationError(ForecastError):
    """Raised when rank anchors or bracket tables are malformed or unreadable."""

    pass
