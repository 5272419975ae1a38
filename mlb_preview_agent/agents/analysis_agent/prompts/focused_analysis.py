"""Prompt templates for the focused analyses (pitcher matchup, momentum, ...).

Each analysis asks for a short list of labelled fields ("Pitcher Overview:",
"Key Trends:"). The response parser reads the same FOCUSED_ANALYSES table, so
labels added here are extracted without further changes.
"""

import re
from dataclasses import dataclass
from typing import Literal

from mlb_preview_agent.agents.analysis_agent.prompts.game_preview import to_prompt_json

FocusedKind = Literal[
    "pitcher_matchup",
    "momentum",
    "head_to_head",
    "injury_impact",
    "pitching_staff",
    "season_outlook",
]


@dataclass(frozen=True)
class LabeledField:
    """One labelled field of a focused analysis.

    Attributes:
        key: Field name in the parsed result
        label: Label text the prompt asks for
        guidance: Bracketed instruction shown after the label
        kind: "text" keeps the paragraph, "bullets" splits it into items
        default: Parsed value when the label is missing (text fields)
        match: Label regex; defaults to the escaped label
    """

    key: str
    label: str
    guidance: str
    kind: Literal["text", "bullets"] = "text"
    default: str = ""
    match: str | None = None

    @property
    def label_pattern(self) -> str:
        return self.match or re.escape(self.label)


@dataclass(frozen=True)
class FocusedAnalysis:
    system: str
    subject: str
    fields: tuple[LabeledField, ...]
    comprehensive: bool = False


FOCUSED_ANALYSES: dict[str, FocusedAnalysis] = {
    "pitcher_matchup": FocusedAnalysis(
        system=(
            "You are a professional baseball analyst specializing in pitching matchups.\n"
            "Analyze the pitcher vs team matchup data and provide insights that explain:\n"
            "- Pitcher's strengths and weaknesses against this type of lineup\n"
            "- Historical performance patterns\n"
            "- Key batters to watch\n"
            "- Strategic considerations for both teams\n"
            "- Prediction of likely outcomes based on matchup data"
        ),
        subject="pitcher matchup",
        comprehensive=True,
        fields=(
            LabeledField("pitcher_overview", "Pitcher Overview", "Key stats and recent form",
                         default="No overview available"),
            LabeledField("matchup_advantages", "Matchup Advantages", "Where pitcher has edge", "bullets"),
            LabeledField("matchup_challenges", "Matchup Challenges", "Where opposing team has edge", "bullets"),
            LabeledField("key_batters", "Key Batters to Watch", "Specific matchups to monitor", "bullets",
                         match=r"Key Batters"),
            LabeledField("strategic_prediction", "Strategic Prediction", "Likely game flow and outcome",
                         default="No prediction available"),
        ),
    ),
    "momentum": FocusedAnalysis(
        system=(
            "You are a baseball analyst specializing in team momentum and performance trends.\n"
            "Analyze recent team performance to identify patterns that predict future success or struggles.\n"
            "Focus on sustainable trends vs. statistical noise."
        ),
        subject="team momentum",
        fields=(
            LabeledField("current_momentum", "Current Momentum", "Overall team direction",
                         default="Unknown momentum"),
            LabeledField("key_trends", "Key Trends", "Specific patterns in recent games", "bullets"),
            LabeledField("sustainable_factors", "Sustainable Factors", "What's likely to continue", "bullets"),
            LabeledField("warning_signs", "Warning Signs", "Areas of concern", "bullets"),
            LabeledField("outlook", "Outlook", "Short-term performance prediction",
                         default="No outlook available"),
        ),
    ),
    "head_to_head": FocusedAnalysis(
        system=(
            "You are a baseball analyst specializing in head-to-head matchups between teams.\n"
            "Analyze the historical and current season data to identify meaningful patterns and advantages."
        ),
        subject="head-to-head matchup",
        fields=(
            LabeledField("historical_context", "Historical Context", "Season series record and trends",
                         default="No historical context"),
            LabeledField("style_matchup", "Style Matchup", "How teams match up strategically",
                         default="No style analysis"),
            LabeledField("key_factors", "Key Factors", "Players/situations that determine outcomes", "bullets"),
            LabeledField("prediction", "Prediction", "Which team has the advantage and why",
                         default="No prediction available"),
        ),
    ),
    "injury_impact": FocusedAnalysis(
        system=(
            "You are a baseball analyst specializing in injury impact assessment.\n"
            "Analyze how injuries affect team performance, lineup construction, and strategic options."
        ),
        subject="injury impact",
        fields=(
            LabeledField("impact_assessment", "Impact Assessment", "How injuries affect team strength",
                         default="No impact assessment"),
            LabeledField("lineup_changes", "Lineup Changes", "How team is adapting", "bullets"),
            LabeledField("opportunity_assessment", "Opportunity Assessment", "Players stepping up",
                         default="No opportunity assessment"),
            LabeledField("strategic_implications", "Strategic Implications",
                         "How it changes team approach", "bullets"),
        ),
    ),
    "pitching_staff": FocusedAnalysis(
        system=(
            "You are a baseball analyst specializing in pitching staff evaluation.\n"
            "Analyze the complete pitching staff to identify strengths, weaknesses, and strategic implications."
        ),
        subject="pitching staff",
        fields=(
            LabeledField("rotation_strength", "Rotation Strength", "Starting pitching assessment",
                         default="No rotation analysis"),
            LabeledField("bullpen_analysis", "Bullpen Analysis", "Relief pitching evaluation",
                         default="No bullpen analysis"),
            LabeledField("workload_management", "Workload Management", "Usage patterns and concerns",
                         default="No workload analysis"),
            LabeledField("strategic_implications", "Strategic Implications",
                         "How pitching affects game planning", "bullets"),
        ),
    ),
    "season_outlook": FocusedAnalysis(
        system=(
            "You are a baseball analyst providing season outlook assessment.\n"
            "Analyze current standings, performance trends, and roster composition "
            "to project team's season trajectory."
        ),
        subject="season outlook",
        fields=(
            LabeledField("current_position", "Current Position", "Standings and playoff probability",
                         default="No position analysis"),
            LabeledField("team_strengths", "Team Strengths", "What's working well", "bullets"),
            LabeledField("areas_for_improvement", "Areas for Improvement", "What needs addressing", "bullets"),
            LabeledField("key_factors", "Key Factors", "What will determine season success", "bullets"),
            LabeledField("season_prediction", "Prediction", "Realistic season expectations",
                         default="No season prediction"),
        ),
    ),
}


def get_focused_analysis(kind: str) -> FocusedAnalysis:
    """Look up an analysis template.

    Raises:
        ValueError: If kind is not a known analysis
    """
    try:
        return FOCUSED_ANALYSES[kind]
    except KeyError:
        raise ValueError(f"Unknown analysis kind: {kind}") from None


def build_focused_prompt(kind: str, payload: dict) -> tuple[str, str]:
    """(system prompt, user prompt) for a focused analysis."""
    analysis = get_focused_analysis(kind)
    intro = (
        "Provide a comprehensive analysis in the following format:"
        if analysis.comprehensive
        else "Provide analysis covering:"
    )
    lines = [f"Analyze this {analysis.subject} data:", to_prompt_json(payload), "", intro]
    lines += [f"- {f.label}: [{f.guidance}]" for f in analysis.fields]
    return analysis.system, "\n".join(lines)
