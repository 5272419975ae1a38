"""Rich renderers for preview and analysis results.

Every function takes the plain dict an agent entry point returns and builds a
renderable; nothing here talks to the network.
"""

from rich.panel import Panel
from rich.table import Table

from mlb_preview_agent.agents.analysis_agent.prompts import PREVIEW_SECTIONS


def _outcome_style(outcome: str) -> str:
    return {
        "self_favored": "bold green",
        "opponent_favored": "bold red",
        "even": "yellow",
    }.get(outcome, "dim")


def format_game_header(result: dict) -> Panel:
    """One-panel summary of the fixture."""
    game = result.get("game") or {}
    where = "Home" if game.get("is_home_game") else "Away"
    lines = [
        f"[bold white]{game.get('away_team', 'Unknown')} @ {game.get('home_team', 'Unknown')}[/bold white]",
        f"Venue: [cyan]{game.get('venue', 'Unknown')}[/cyan] ({where})",
        f"Status: {game.get('status', 'Scheduled')}",
    ]
    if result.get("from_cache"):
        lines.append("[dim]Served from cache[/dim]")

    return Panel("\n".join(lines), title=f"[bold]Game Preview - {result.get('date')}[/bold]", border_style="cyan")


def format_preview_sections(analysis: dict) -> list[Panel]:
    """One panel per parsed section, in prompt order.

    Falls back to the raw model text when no heading could be found.
    """
    structured = analysis.get("structured") or {}
    panels = [
        Panel(structured[section.key]["content"] or "[dim]Empty section[/dim]", title=f"[bold]{section.heading}[/bold]")
        for section in PREVIEW_SECTIONS
        if section.key in structured
    ]
    if not panels and analysis.get("raw_analysis"):
        panels.append(Panel(analysis["raw_analysis"], title="[bold]Analysis[/bold]"))
    return panels


def format_predictions(predictions: dict) -> Table:
    table = Table(title="Prediction", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    outcome = predictions.get("outcome", "no_clear_prediction")
    table.add_row("Outcome", f"[{_outcome_style(outcome)}]{predictions.get('outcome_label', outcome)}[/]")
    table.add_row("Score", predictions.get("score") or "[dim]n/a[/dim]")
    table.add_row("Confidence", predictions.get("confidence", "medium"))
    for event in predictions.get("key_events") or []:
        table.add_row("Key event", event)
    return table


def format_player_spotlight(players: list[dict]) -> Table:
    table = Table(title="Players to Watch", show_header=True, header_style="bold cyan")
    table.add_column("Player", style="white", no_wrap=True)
    table.add_column("Why", style="yellow")
    table.add_column("Context", style="dim")

    if not players:
        table.add_row("[dim]No players identified[/dim]", "", "")
        return table

    for player in players:
        table.add_row(player.get("name", ""), player.get("reason", ""), player.get("context", ""))
    return table


def format_preview_metadata(metadata: dict) -> Table:
    table = Table(title="Run Details", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value")

    table.add_row("Provider", f"{metadata.get('llm_provider', '')} ({metadata.get('model', '')})")
    table.add_row("Data points", str(metadata.get("data_points", 0)))
    table.add_row("Tokens", str(metadata.get("tokens_used", 0)))
    table.add_row("Cost", f"${metadata.get('cost', 0.0):.4f}")
    table.add_row("Duration", f"{metadata.get('duration_ms', 0)} ms")
    return table


def format_focused_analysis(title: str, analysis: dict) -> Panel:
    """Labelled fields of a focused analysis as one panel.

    Bullet fields render as indented lists, text fields as paragraphs.
    """
    lines = []
    for key, value in analysis.items():
        if key in ("raw_analysis", "confidence"):
            continue
        label = key.replace("_", " ").title()
        lines.append(f"[bold]{label}:[/bold]")
        if isinstance(value, list):
            lines.extend(f"  • {item}" for item in value or ["[dim]none[/dim]"])
        else:
            lines.append(f"  {value}")
        lines.append("")
    lines.append(f"Confidence: [cyan]{analysis.get('confidence', 'medium')}[/cyan]")

    return Panel("\n".join(lines), title=f"[bold]{title}[/bold]", border_style="green")


def format_health(report: dict) -> Table:
    """Services, breakers and caches from GamePreviewAgent.health_check."""
    table = Table(
        title="Health Check",
        caption=f"Status: {report.get('status', 'unknown')} at {report.get('timestamp', '')}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Component", style="white", no_wrap=True)
    table.add_column("State", justify="center")
    table.add_column("Detail", style="dim")

    for name, ok in (report.get("services") or {}).items():
        if ok is None:
            state = "[dim]skipped[/dim]"
        else:
            state = "[green]✓ ok[/green]" if ok else "[red]✗ down[/red]"
        table.add_row(f"service: {name}", state, "")

    for name, breaker in (report.get("circuit_breakers") or {}).items():
        state = breaker.get("state", "closed")
        style = {"closed": "green", "open": "red"}.get(state, "yellow")
        table.add_row(f"breaker: {name}", f"[{style}]{state}[/{style}]", f"failures={breaker.get('failures', 0)}")

    for name, cache in (report.get("caches") or {}).items():
        table.add_row(
            f"cache: {name}",
            str(cache.get("size", 0)),
            f"hits={cache.get('hits', 0)} misses={cache.get('misses', 0)}",
        )

    usage = report.get("usage") or {}
    table.add_row(
        "llm usage",
        str(usage.get("request_count", 0)),
        f"total_cost=${usage.get('total_cost', 0.0):.4f}",
    )
    return table
