"""Command-line interface for the volunteer application lifecycle engine."""

import typer
from rich.console import Console
from rich.table import Table
from typing import Optional

from volunteer_lifecycle.config import settings
from volunteer_lifecycle.core.models import (
    AvailabilityFactor,
    ExperienceFactor,
    InterestFactor,
    LocationFactor,
    MatchingFactors,
    SkillsFactor,
)
from volunteer_lifecycle.matching.engine import MatchingEngine, recommendation_level, score_factors
from volunteer_lifecycle.utils.logging import configure_logging

app = typer.Typer(
    name="vle",
    help="Volunteer application lifecycle engine",
    add_completion=False,
)
console = Console()


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="Volunteer Lifecycle Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Default Interview Duration", f"{settings.default_interview_duration_minutes} min")
    table.add_row("Reschedule Reason Limit", str(settings.reschedule_reason_max_length))
    table.add_row("Strong Match Threshold", f"{settings.strong_match_threshold:g}")

    console.print(table)


@app.command()
def score(
    skills: Optional[float] = typer.Option(None, min=0, max=100, help="Skills factor score"),
    location: Optional[float] = typer.Option(None, min=0, max=100, help="Location factor score"),
    availability: Optional[float] = typer.Option(None, min=0, max=100, help="Availability factor score"),
    experience: Optional[float] = typer.Option(None, min=0, max=100, help="Experience factor score"),
    interest: Optional[float] = typer.Option(None, min=0, max=100, help="Interest factor score"),
) -> None:
    """Compute a matching score from individual factor scores."""
    factors = MatchingFactors(
        skills=SkillsFactor(score=skills) if skills is not None else None,
        location=LocationFactor(score=location) if location is not None else None,
        availability=AvailabilityFactor(score=availability) if availability is not None else None,
        experience=ExperienceFactor(score=experience) if experience is not None else None,
        interest=InterestFactor(score=interest) if interest is not None else None,
    )
    breakdown = score_factors(factors)

    table = Table(title="Matching Breakdown")
    table.add_column("Factor", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Weighted", justify="right", style="green")
    for contribution in breakdown.contributions:
        table.add_row(
            contribution.factor,
            f"{contribution.weight:.2f}",
            "-" if contribution.score is None else f"{contribution.score:g}",
            f"{contribution.weighted_score:.2f}" if contribution.used else "-",
        )
    console.print(table)

    console.print(f"AI score: [bold]{breakdown.ai_score}[/bold]")
    console.print(f"Recommendation: {recommendation_level(breakdown.ai_score).value}")
    reason = MatchingEngine().recommendation_reason(factors)
    if reason:
        console.print(reason)


@app.command()
def version() -> None:
    """Show version information."""
    from volunteer_lifecycle import __version__
    console.print(f"Volunteer Lifecycle Engine v{__version__}")


def main() -> None:
    """Main entry point."""
    configure_logging(settings)
    app()


if __name__ == "__main__":
    main()
