"""Typer CLI entry point for MLB game previews.

Provides:
- mlb-preview preview --date 2025-07-04
- mlb-preview momentum / head-to-head / pitcher / injuries / staff / outlook
- mlb-preview health
- mlb-preview version
"""

import asyncio
import os
from enum import Enum
from typing import Awaitable, Callable, Optional

from dotenv import load_dotenv

# Load .env file before anything else
load_dotenv()

import typer
from rich.console import Console

from mlb_preview_agent import __version__
from mlb_preview_agent.agents.analysis_agent.models import PreviewOptions
from mlb_preview_agent.agents.preview_agent import GamePreviewAgent, build_agent
from mlb_preview_agent.cli.formatters import (
    format_focused_analysis,
    format_game_header,
    format_health,
    format_player_spotlight,
    format_predictions,
    format_preview_metadata,
    format_preview_sections,
)
from mlb_preview_agent.config import get_settings
from mlb_preview_agent.errors import ProviderConfigurationError
from mlb_preview_agent.monitoring import configure_logging

cli = typer.Typer(
    name="mlb-preview",
    help="""MLB Game Preview - LLM-written previews from live MLB Stats API data.

WHAT IT DOES:
  Pulls the schedule, team stats, recent form, probable pitchers, weather and
  injured lists for your team's game, condenses them into a structured
  payload and asks an LLM for a sectioned preview with a prediction.

QUICK START:
  mlb-preview preview
  mlb-preview preview --date 2025-07-04 --depth comprehensive
  mlb-preview head-to-head 119

CONFIGURATION:
  • TEAM_ID / TEAM_NAME select the team (default: San Francisco Giants)
  • LLM_PROVIDER plus ANTHROPIC_API_KEY or OPENAI_API_KEY
""",
    add_completion=False,
)

# Disable colors if NO_COLOR env var is set (standard convention)
console = Console(force_terminal=True, no_color=os.getenv("NO_COLOR") is not None)


class Depth(str, Enum):
    basic = "basic"
    detailed = "detailed"
    comprehensive = "comprehensive"


def _run(operation: Callable[[GamePreviewAgent], Awaitable[dict]]) -> dict:
    """Build the agent, run one entry point, exit 1 on a failure envelope."""
    try:
        agent = build_agent()
    except ProviderConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}", style="red")
        raise typer.Exit(code=1)

    result = asyncio.run(operation(agent))
    if not result.get("success", True):
        console.print(f"[bold red]Error:[/bold red] {result.get('error', 'Unknown error')}", style="red")
        raise typer.Exit(code=1)
    return result


def _show_focused(title: str, result: dict) -> None:
    console.print(format_focused_analysis(title, result["analysis"]))
    console.print(f"[dim]Generated {result['timestamp']}[/dim]")


@cli.command()
def preview(
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Game date as YYYY-MM-DD (default: today)"),
    no_weather: bool = typer.Option(False, "--no-weather", help="Leave weather out of the analysis"),
    no_injuries: bool = typer.Option(False, "--no-injuries", help="Leave injured lists out of the analysis"),
    no_head_to_head: bool = typer.Option(False, "--no-head-to-head", help="Leave the season series out"),
    depth: Depth = typer.Option(Depth.detailed, "--depth", help="How much detail to ask the model for"),
    raw: bool = typer.Option(False, "--raw", help="Print the model text instead of parsed sections"),
):
    """Generate a preview for your team's game on a date.

    \b
    Examples:
      mlb-preview preview
      mlb-preview preview -d 2025-07-04 --no-weather
      mlb-preview preview --depth comprehensive
    """
    options = PreviewOptions(
        include_weather=not no_weather,
        include_injuries=not no_injuries,
        include_head_to_head=not no_head_to_head,
        analysis_depth=depth.value,
    )

    with console.status("[bold green]Building preview..."):
        result = _run(lambda agent: agent.get_game_preview(date, options))

    analysis = result["analysis"]
    console.print(format_game_header(result))

    if raw:
        console.print(analysis["raw_analysis"])
    else:
        for panel in format_preview_sections(analysis):
            console.print(panel)

    console.print()
    console.print(format_predictions(analysis["predictions"]))
    console.print(format_player_spotlight(analysis["player_spotlight"]))
    console.print(format_preview_metadata(result["metadata"]))


@cli.command()
def momentum(
    games: int = typer.Option(10, "--games", "-g", min=1, help="Number of recent games to consider"),
):
    """Analyze your team's recent form."""
    result = _run(lambda agent: agent.get_team_momentum_analysis(games))
    _show_focused("Team Momentum", result)


@cli.command("head-to-head")
def head_to_head(
    team2_id: int = typer.Argument(..., help="MLB team id of the opponent (e.g. 119 for the Dodgers)"),
    season: Optional[int] = typer.Option(None, "--season", "-s", help="Season year (default: current)"),
):
    """Analyze this season's series against one opponent."""
    result = _run(lambda agent: agent.analyze_head_to_head(team2_id, season))
    _show_focused("Head-to-Head", result)


@cli.command()
def pitcher(
    pitcher_id: int = typer.Argument(..., help="MLB person id of the pitcher"),
    team_id: int = typer.Argument(..., help="MLB team id of the opposing lineup"),
    season: Optional[int] = typer.Option(None, "--season", "-s", help="Season year (default: current)"),
):
    """Analyze one pitcher against one opposing team."""
    result = _run(lambda agent: agent.analyze_pitcher_matchup(pitcher_id, team_id, season))
    _show_focused("Pitcher Matchup", result)


@cli.command()
def injuries(
    include_minor: bool = typer.Option(False, "--include-minor", help="Also list low-impact injuries"),
):
    """Analyze how the injured list affects your team."""
    result = _run(lambda agent: agent.get_injury_impact_analysis(include_minor))
    _show_focused("Injury Impact", result)


@cli.command()
def staff():
    """Analyze your team's rotation and bullpen."""
    result = _run(lambda agent: agent.get_pitching_staff_analysis())
    _show_focused("Pitching Staff", result)


@cli.command()
def outlook():
    """Analyze your team's season outlook and playoff picture."""
    result = _run(lambda agent: agent.get_season_outlook())
    _show_focused("Season Outlook", result)


@cli.command()
def health(
    check_llm: bool = typer.Option(False, "--check-llm", help="Also send a tiny prompt to the LLM (costs tokens)"),
):
    """Check upstream services, circuit breakers and caches."""
    report = _run(lambda agent: agent.health_check(check_llm))
    console.print(format_health(report))
    if report["status"] != "healthy":
        raise typer.Exit(code=1)


@cli.command()
def version():
    """Show version and configuration info."""
    settings = get_settings()
    api_key = getattr(settings, f"{settings.llm_provider}_api_key", "")
    model = getattr(settings, f"{settings.llm_provider}_model", "unknown")

    console.print(f"[bold cyan]MLB Game Preview[/bold cyan] v{__version__}", highlight=False)
    console.print()
    console.print("[bold]Configuration:[/bold]")
    console.print(f"  Team: {settings.team_name} (id {settings.team_id})")
    console.print(f"  LLM: {settings.llm_provider} ({model})")
    console.print(
        f"  API key: {'✓ configured' if api_key else f'✗ missing {settings.llm_provider.upper()}_API_KEY'}"
    )
    console.print(f"  Stats API: {settings.mlb_api_base}")
    console.print(f"  Caching: {'enabled' if settings.enable_caching else 'disabled'}")


def main():
    """Entry point for CLI."""
    configure_logging(get_settings().log_mode)

    cli()


if __name__ == "__main__":
    main()
