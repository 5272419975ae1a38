"""Analysis agent: payload formatting, LLM completion and response parsing."""

from mlb_preview_agent.agents.analysis_agent.formatter import DataFormatter, calculate_advantage
from mlb_preview_agent.agents.analysis_agent.llm_analyzer import LLMAnalyzer
from mlb_preview_agent.agents.analysis_agent.llm_client import (
    AnthropicProvider,
    CompletionClient,
    CompletionResult,
    LLMProvider,
    OpenAIProvider,
    TokenUsage,
    create_provider,
)
from mlb_preview_agent.agents.analysis_agent.models import PreviewOptions
from mlb_preview_agent.agents.analysis_agent.response_parser import GameAnalysis, Outcome, ResponseParser

__all__ = [
    "AnthropicProvider",
    "CompletionClient",
    "CompletionResult",
    "DataFormatter",
    "GameAnalysis",
    "LLMAnalyzer",
    "LLMProvider",
    "OpenAIProvider",
    "Outcome",
    "PreviewOptions",
    "ResponseParser",
    "TokenUsage",
    "calculate_advantage",
    "create_provider",
]
