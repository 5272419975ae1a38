"""Prompt templates for the full game preview.

PREVIEW_SECTIONS is the output contract between the prompt and the response
parser: the prompt asks for these headings in this order and the parser
extracts them with the matching patterns. Change both through this table.
"""

import json
import re
from dataclasses import dataclass

from mlb_preview_agent.agents.analysis_agent.models import PreviewOptions


@dataclass(frozen=True)
class PreviewSection:
    """One "## Heading" block of the preview.

    Attributes:
        key: Field name in the parsed result
        heading: Heading text the prompt asks for
        match: Regex for the heading, prefix-tolerant ("Team Momentum" matches
            "Team Momentum & Recent Form")
        guidance: Bracketed instruction shown under the heading in the prompt
    """

    key: str
    heading: str
    match: str
    guidance: str

    @property
    def pattern(self) -> re.Pattern:
        """Captures the section body up to the next heading or end of text."""
        return re.compile(rf"##\s*{self.match}[^\n]*(?:\n|$)(.*?)(?=##|$)", re.I | re.S)


PREVIEW_SECTIONS: tuple[PreviewSection, ...] = (
    PreviewSection(
        "game_overview", "Game Overview", r"Game Overview",
        "Brief summary of the matchup and why it's interesting",
    ),
    PreviewSection(
        "pitching_matchup", "Pitching Matchup Analysis", r"Pitching Matchup",
        "Detailed analysis of starting pitchers and how they match up against opposing lineups",
    ),
    PreviewSection(
        "offensive_matchups", "Key Offensive Matchups", r"Key Offensive Matchups",
        "Specific batter vs pitcher matchups and lineup advantages",
    ),
    PreviewSection(
        "team_momentum", "Team Momentum & Recent Form", r"Team Momentum",
        "How recent performance trends might affect this game",
    ),
    PreviewSection(
        "strategic_factors", "Strategic Factors", r"Strategic Factors",
        "Tactical elements fans should watch for",
    ),
    PreviewSection(
        "key_players", "Key Players to Watch", r"Key Players",
        "Specific players who could determine the outcome",
    ),
    PreviewSection(
        "weather_venue", "Weather/Venue Impact", r"Weather",
        "How conditions might affect the game",
    ),
    PreviewSection(
        "prediction", "Prediction & Narrative", r"Prediction",
        "Your assessment of how the game might unfold and what makes it compelling",
    ),
)

SYSTEM_PROMPT = '''You are a professional baseball analyst with 20+ years of experience covering MLB.
You have deep knowledge of strategy, statistics, player performance, and baseball narratives.
You are previewing games for fans of the {team_name}.

Your analysis should be:
- Accurate and based on provided data
- Engaging for both casual and serious baseball fans
- Explanatory (explain WHY things matter, not just what)
- Contextual (provide historical and strategic context)
- Balanced (acknowledge uncertainties and multiple perspectives)

Analysis level: {depth}
{extras}
Focus on insights that help fans understand:
- What makes this game interesting from a baseball perspective
- Key strategic elements and player matchups
- How recent performance trends might affect the outcome
- Why certain statistical patterns matter
- What casual fans should watch for during the game

Avoid:
- Obvious statements that any fan would know
- Overly technical jargon without explanation
- Predictions presented as certainties
- Irrelevant statistical minutiae

Your tone should be knowledgeable but accessible, like a seasoned baseball analyst explaining the game to an interested audience.'''

CLOSING_NOTE = (
    "Remember: Explain WHY these factors matter, not just what they are. "
    "Focus on insights that enhance fan understanding and enjoyment of the game."
)

# (payload key, prompt label); optional blocks are skipped when absent
PAYLOAD_BLOCKS = (
    ("game_context", "GAME CONTEXT"),
    ("team_stats", "TEAM STATISTICS"),
    ("recent_performance", "RECENT PERFORMANCE"),
    ("pitching_matchup", "PITCHING MATCHUP"),
    ("injuries", "INJURY REPORT"),
    ("weather", "WEATHER CONDITIONS"),
    ("head_to_head", "HEAD-TO-HEAD RECORD"),
)


def to_prompt_json(data) -> str:
    return json.dumps(data, indent=2, default=str)


def get_baseball_expert_system_prompt(options: PreviewOptions, team_name: str) -> str:
    """Analyst persona for the preview, tuned by the caller's options."""
    extras = []
    if options.include_weather:
        extras.append("Include weather impact when relevant.")
    if options.include_injuries:
        extras.append("Consider injury impacts on team performance.")

    return SYSTEM_PROMPT.format(
        team_name=team_name,
        depth=options.analysis_depth,
        extras="".join(f"{line}\n" for line in extras),
    )


def format_output_template(depth: str) -> str:
    lines = [f"Please provide a {depth} analysis in the following format:", ""]
    for section in PREVIEW_SECTIONS:
        lines += [f"## {section.heading}", f"[{section.guidance}]", ""]
    lines.append(CLOSING_NOTE)
    return "\n".join(lines)


def build_game_analysis_prompt(payload: dict, options: PreviewOptions, team_name: str) -> str:
    """User message: payload blocks in a fixed order, then the output template.

    Args:
        payload: Output of DataFormatter.format_game_data
        options: Caller options (depth is echoed in the template)
        team_name: Team the preview is written for

    Returns:
        Prompt text
    """
    parts = [f"Analyze this {team_name} game data and provide a comprehensive preview:", ""]
    for key, label in PAYLOAD_BLOCKS:
        if key not in payload:
            continue
        parts += [f"{label}:", to_prompt_json(payload[key]), ""]

    parts.append(format_output_template(options.analysis_depth))
    return "\n".join(parts)
