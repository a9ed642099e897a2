"""
Profile Normalizer.

Validates a raw learner profile and returns an immutable ``LearnerProfile``.
Payloads from the storage layer arrive with camelCase keys
(``mockScoreRange``); both spellings are accepted.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from src.forecast.errors import ValidationError
from src.forecast.models import LearnerProfile

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")

# Storage-layer field names that differ from ours beyond casing
_FIELD_RENAMES = {
    "bio_rhythm_sync": "bio_rhythm",
    "current_study_hours": "study_hours",
    "question_solving_capacity": "question_capacity",
    "question_solving_speed": "question_speed",
}


def _snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def snake_keys(value: Any, top_level: bool = False) -> Any:
    if isinstance(value, Mapping):
        converted = {}
        for key, item in value.items():
            name = _snake(str(key))
            if top_level:
                name = _FIELD_RENAMES.get(name, name)
            converted[name] = snake_keys(item)
        return converted
    if isinstance(value, list):
        return [snake_keys(item) for item in value]
    return value


def normalize_profile(raw: LearnerProfile | Mapping[str, Any]) -> LearnerProfile:
    """
    Validate a learner profile.

    Args:
        raw: A LearnerProfile (returned as-is, it is already validated and
            frozen) or a mapping with snake_case or camelCase keys

    Returns:
        Validated, immutable LearnerProfile

    Raises:
        ValidationError: naming the first offending field
    """
    if isinstance(raw, LearnerProfile):
        return raw
    if not isinstance(raw, Mapping):
        raise ValidationError("profile", f"expected a mapping, got {type(raw).__name__}")

    try:
        return LearnerProfile.model_validate(snake_keys(raw, top_level=True))
    except PydanticValidationError as e:
        problems = [
            (".".join(str(part) for part in err["loc"]) or "profile", err["msg"])
            for err in e.errors()
        ]
        field, message = problems[0]
        logger.warning(f"Rejected learner profile: {field}: {message} ({len(problems)} problem(s))")
        raise ValidationError(field, message, problems) from e
