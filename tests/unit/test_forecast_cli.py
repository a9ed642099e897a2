"""
Unit tests for the prep-forecast CLI.
"""

import json

import pytest
from typer.testing import CliRunner

from src.cli.forecast_cli import app

runner = CliRunner()


@pytest.fixture
def profile_file(tmp_path, sample_profile):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps(sample_profile), encoding="utf-8")
    return path


@pytest.fixture
def telemetry_file(tmp_path, sample_telemetry):
    path = tmp_path / "telemetry.json"
    path.write_text(json.dumps(sample_telemetry), encoding="utf-8")
    return path


class TestRunCommand:
    def test_summary(self, profile_file):
        result = runner.invoke(app, ["run", str(profile_file)])
        assert result.exit_code == 0, result.output
        assert "641" in result.output
        assert "35,000" in result.output
        assert "Admission Probability" in result.output
        assert "Roadmap" in result.output

    def test_json_payload(self, profile_file):
        result = runner.invoke(app, ["run", str(profile_file), "--json", "--as-of", "2025-01-06"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["predictedScore"]["mostLikely"] == 641
        assert payload["confidenceLevel"] == 85
        assert payload["improvementRoadmap"]["next90Days"]["endsOn"] == "2025-04-06"

    def test_with_telemetry(self, profile_file, telemetry_file):
        result = runner.invoke(app, ["run", str(profile_file), "-t", str(telemetry_file), "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["predictedScore"]["mostLikely"] == 720
        assert payload["confidenceLevel"] == 97

    def test_invalid_profile_exits_1(self, tmp_path, sample_profile):
        sample_profile["mock_score_range"] = {"min": 650, "max": 600, "target": 700}
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(sample_profile), encoding="utf-8")
        result = runner.invoke(app, ["run", str(path)])
        assert result.exit_code == 1
        assert "mock_score_range.max" in result.output

    def test_missing_profile_file(self, tmp_path):
        result = runner.invoke(app, ["run", str(tmp_path / "absent.json")])
        assert result.exit_code == 1
        assert "Cannot read profile" in result.output

    def test_bad_calibration_file(self, tmp_path, profile_file):
        path = tmp_path / "cohort.json"
        path.write_text(json.dumps({"rank_anchors": []}), encoding="utf-8")
        result = runner.invoke(app, ["run", str(profile_file), "--calibration", str(path)])
        assert result.exit_code == 1
        assert "Invalid calibration" in result.output


class TestRankCommand:
    def test_maps_score(self):
        result = runner.invoke(app, ["rank", "650"])
        assert result.exit_code == 0
        assert "20,000" in result.output

    def test_below_curve(self):
        result = runner.invoke(app, ["rank", "100"])
        assert result.exit_code == 0
        assert "3,500,000" in result.output


class TestCalibrationCommand:
    def test_shows_tables(self):
        result = runner.invoke(app, ["calibration"])
        assert result.exit_code == 0, result.output
        assert "Rank Curve" in result.output
        assert "Probability Brackets" in result.output
        assert "region_quota" in result.output
        assert "scenario_delta" in result.output
