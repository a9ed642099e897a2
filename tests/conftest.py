"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import get_settings  # noqa: E402
from src.forecast.calibration import default_calibration  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings/calibration so env changes in one test don't leak."""
    get_settings.cache_clear()
    default_calibration.cache_clear()
    yield
    get_settings.cache_clear()
    default_calibration.cache_clear()


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_profile():
    """Second-attempt learner with a Strong foundation and no optional signals."""
    return {
        "category": "General",
        "home_state": "Bihar",
        "preparation_years": 2,
        "attempt_number": 2,
        "foundation_strength": "Strong",
        "mock_score_range": {"min": 550, "max": 620, "target": 700},
        "study_hours": {"current": 10, "upcoming": 12},
        "question_capacity": {"current": 1000, "upcoming": 1500},
        "question_speed": {"min": 40, "max": 60},
    }


@pytest.fixture
def rich_profile(sample_profile):
    """Profile with every optional signal filled in."""
    return {
        **sample_profile,
        "coaching_institute": "Allen",
        "class12_percentage": 91.2,
        "board": "CBSE",
        "bio_rhythm": {
            "cycle_length_days": 28,
            "heavy_flow_days": [1, 2],
            "pain_days": [1],
            "low_energy_days": [1, 2, 3],
            "symptoms": ["fatigue"],
        },
        "stress_triggers": ["family_pressure", "multiple_attempts"],
        "family_pressure": "High",
        "best_performing_slots": ["morning"],
        "problematic_slots": ["afternoon"],
        "subject_preference": ["Biology", "Chemistry", "Physics"],
        "error_types": ["overthinking", "panic_response"],
        "revision_frequency": "average",
        "diet_type": "vegetarian",
        "fitness_level": "good",
        "prior_official_score": 480,
    }


@pytest.fixture
def sample_telemetry():
    """Flat camelCase snapshot as produced by the analytics aggregator."""
    return {
        "avgTestScore": 610,
        "consistencyScore": 90,
        "criticalMistakes": 0,
        "avgStress": 4,
        "avgEnergy": 8,
    }


@pytest.fixture
def full_telemetry():
    """Sectioned snapshot with every field populated."""
    return {
        "performance_metrics": {
            "avg_stress": 6.5,
            "avg_energy": 4.5,
            "avg_focus": 6,
            "avg_daily_questions": 900,
            "avg_test_score": 560,
            "best_test_score": 600,
            "worst_test_score": 520,
            "total_time_wasted": 420,
        },
        "mistake_analysis": {
            "critical_mistakes": 3,
            "moderate_mistakes": 2,
            "total_patterns": 7,
            "most_frequent_mistake": "panic_response",
        },
        "trend_analysis": {
            "consistency_score": 72,
            "improvement_trend": 8,
            "risk_factors": ["irregular sleep"],
        },
    }
