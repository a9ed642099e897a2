"""
prep-forecast: terminal front end for the forecasting engine.

Commands:
    prep-forecast run PROFILE.json             - Full forecast summary
    prep-forecast run PROFILE.json --json      - JSON payload (camelCase)
    prep-forecast rank SCORE                   - Map a score to a rank
    prep-forecast calibration                  - Show the active cohort tables

Usage:
    prep-forecast run profile.json --telemetry telemetry.json --as-of 2025-01-06
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from src.forecast import (
    Calibration,
    CalibrationError,
    ForecastResult,
    ValidationError,
    default_calibration,
    forecast,
    load_calibration,
    rank_for_score,
)
from src.forecast.analysis import Action, Gap, Strength, Weakness
from src.forecast.risk import Mitigation, RiskFactor

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="prep-forecast",
    help="Exam outcome forecasting: score, rank, admission odds and a roadmap",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

RISK_STYLES = {"low": "green", "medium": "yellow", "high": "red"}


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {what} {path}: {e}[/red]")
        raise typer.Exit(1)


def _calibration(path: Path | None) -> Calibration:
    try:
        return load_calibration(path) if path else default_calibration()
    except CalibrationError as e:
        console.print(f"[red]Invalid calibration: {e}[/red]")
        raise typer.Exit(1)


def _labels(codes: list[str], enum_type: type) -> list[str]:
    return [enum_type(code).label for code in codes]


# =============================================================================
# Rendering
# =============================================================================


def _render(result: ForecastResult) -> None:
    score, rank = result.score, result.rank
    risk_style = RISK_STYLES[result.overall_risk.value]

    header = Panel(
        f"[bold]{score.most_likely}[/bold] marks "
        f"(range {score.worst_case}-{score.best_case})\n"
        f"AIR ~[bold]{rank.most_likely:,}[/bold] "
        f"(range {rank.best_case:,}-{rank.worst_case:,})\n"
        f"Confidence {result.confidence_level}%  |  "
        f"Risk [{risk_style}]{result.overall_risk.value.upper()}[/{risk_style}]",
        title="Forecast",
        border_style="cyan",
    )
    console.print(header)

    odds = Table(title="Admission Probability", show_header=True)
    odds.add_column("Bracket", style="cyan")
    odds.add_column("Chance", justify="right")
    for name, value in asdict(result.probabilities).items():
        odds.add_row(name.replace("_", " "), f"{value:.0f}%")
    console.print(odds)

    analysis = result.analysis
    for title, codes, enum_type, style in (
        ("Strengths", analysis.strengths, Strength, "green"),
        ("Critical weaknesses", analysis.critical_weaknesses, Weakness, "red"),
        ("Gaps", analysis.mid_level_gaps, Gap, "yellow"),
        ("Immediate actions", analysis.immediate_actions, Action, "cyan"),
    ):
        if codes:
            console.print(f"\n[bold {style}]{title}[/bold {style}]")
            for label in _labels(codes, enum_type):
                console.print(f"  - {label}")

    plan = Table(title="Roadmap", show_header=True)
    plan.add_column("Horizon", style="cyan")
    plan.add_column("Daily P/C/B", justify="right")
    plan.add_column("Target", justify="right")
    plan.add_column("Revisions", justify="right")
    plan.add_column("Ends", justify="right")
    for phase in result.roadmap.phases:
        targets = phase.daily_targets
        plan.add_row(
            f"{phase.horizon_days} days",
            f"{targets['physics']}/{targets['chemistry']}/{targets['biology']}",
            str(phase.score_target),
            str(phase.revision_cycles),
            phase.ends_on.isoformat() if phase.ends_on else "-",
        )
    console.print(plan)

    risks = result.risks
    for title, codes, style in (
        ("High risk", risks.high_risk, "red"),
        ("Medium risk", risks.medium_risk, "yellow"),
        ("Low risk", risks.low_risk, "green"),
    ):
        if codes:
            console.print(f"\n[bold {style}]{title}[/bold {style}]")
            for label in _labels(codes, RiskFactor):
                console.print(f"  - {label}")
    console.print("\n[bold]Mitigations[/bold]")
    for label in _labels(risks.mitigation_strategies, Mitigation):
        console.print(f"  - {label}")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def run(
    profile: Annotated[Path, typer.Argument(help="Learner profile JSON file")],
    telemetry: Annotated[
        Path | None, typer.Option("--telemetry", "-t", help="Telemetry snapshot JSON file")
    ] = None,
    as_of: Annotated[
        datetime | None,
        typer.Option("--as-of", formats=["%Y-%m-%d"], help="Roadmap start date"),
    ] = None,
    calibration: Annotated[
        Path | None, typer.Option("--calibration", "-c", help="Cohort calibration JSON file")
    ] = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the JSON payload instead of a summary")
    ] = False,
) -> None:
    """
    Forecast score, rank and admission odds for a learner.

    Examples:
        prep-forecast run profile.json
        prep-forecast run profile.json -t telemetry.json --as-of 2025-01-06
        prep-forecast run profile.json --json
    """
    raw_profile = _read_json(profile, "profile")
    raw_telemetry = _read_json(telemetry, "telemetry") if telemetry else None
    cal = _calibration(calibration)

    try:
        result = forecast(
            raw_profile,
            raw_telemetry,
            as_of=as_of.date() if as_of else None,
            calibration=cal,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid profile field '{e.field}': {e.message}[/red]")
        for field, message in e.errors[1:]:
            console.print(f"[dim]  also {field}: {message}[/dim]")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return
    _render(result)


@app.command()
def rank(
    score: Annotated[float, typer.Argument(help="Score in marks (0-720)")],
    calibration: Annotated[
        Path | None, typer.Option("--calibration", "-c", help="Cohort calibration JSON file")
    ] = None,
) -> None:
    """Map a score to its historical All-India Rank."""
    air = rank_for_score(score, _calibration(calibration))
    console.print(f"Score [bold]{score:g}[/bold] -> AIR ~[bold]{air:,}[/bold]")


@app.command("calibration")
def show_calibration(
    calibration: Annotated[
        Path | None, typer.Option("--calibration", "-c", help="Cohort calibration JSON file")
    ] = None,
) -> None:
    """Show the active rank curve and bracket thresholds."""
    cal = _calibration(calibration)
    settings = get_settings()

    config_table = Table(title="Forecast Settings", show_header=False)
    config_table.add_column("Setting", style="cyan")
    config_table.add_column("Value")
    for key, value in settings.get_forecast_config().items():
        config_table.add_row(key, "-" if value is None else str(value))
    console.print(config_table)

    curve = Table(title="Rank Curve", show_header=True)
    curve.add_column("Score >=", justify="right", style="cyan")
    curve.add_column("AIR", justify="right")
    for anchor in cal.rank_anchors:
        curve.add_row(f"{anchor.score:g}", f"{anchor.rank:,}")
    curve.add_row("below", f"{cal.fallback_rank:,}")
    console.print(curve)

    brackets = Table(title="Probability Brackets", show_header=True)
    brackets.add_column("Bracket", style="cyan")
    brackets.add_column("Steps (score: %)")
    brackets.add_column("Floor", justify="right")
    for name, table in cal.brackets:
        steps = ", ".join(f"{s.min_score:g}: {s.probability:g}" for s in table.steps)
        brackets.add_row(name, steps, f"{table.floor:g}")
    console.print(brackets)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level, format="<level>{message}</level>")

    app()


if __name__ == "__main__":
    main()
