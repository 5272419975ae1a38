"""Prompt templates for LLM game analysis."""

from mlb_preview_agent.agents.analysis_agent.prompts.focused_analysis import (
    FOCUSED_ANALYSES,
    FocusedAnalysis,
    LabeledField,
    build_focused_prompt,
    get_focused_analysis,
)
from mlb_preview_agent.agents.analysis_agent.prompts.game_preview import (
    PREVIEW_SECTIONS,
    PreviewSection,
    build_game_analysis_prompt,
    get_baseball_expert_system_prompt,
)

__all__ = [
    "FOCUSED_ANALYSES",
    "FocusedAnalysis",
    "LabeledField",
    "PREVIEW_SECTIONS",
    "PreviewSection",
    "build_focused_prompt",
    "build_game_analysis_prompt",
    "get_baseball_expert_system_prompt",
    "get_focused_analysis",
]
