"""Turns analysis payloads into LLM completions.

LLMAnalyzer owns prompt selection and the token budget; the provider call,
retries and usage accounting live in CompletionClient.
"""

from mlb_preview_agent.agents.analysis_agent.llm_client import CompletionClient, CompletionResult
from mlb_preview_agent.agents.analysis_agent.models import PreviewOptions
from mlb_preview_agent.agents.analysis_agent.prompts import (
    build_focused_prompt,
    build_game_analysis_prompt,
    get_baseball_expert_system_prompt,
)

COMPREHENSIVE_MAX_TOKENS = 6000
DEFAULT_MAX_TOKENS = 4000
TEMPERATURE = 0.7


class LLMAnalyzer:
    """Game and focused analyses written for one team."""

    def __init__(self, client: CompletionClient, team_name: str):
        """Initialize the analyzer.

        Args:
            client: Completion client for the configured provider
            team_name: Team the previews are written for
        """
        self.client = client
        self.team_name = team_name

    async def analyze_game_data(self, payload: dict, options: PreviewOptions | None = None) -> CompletionResult:
        """Full game preview from a DataFormatter payload.

        Raises:
            PreviewError: The completion failed
        """
        options = options or PreviewOptions()
        system = get_baseball_expert_system_prompt(options, self.team_name)
        user = build_game_analysis_prompt(payload, options, self.team_name)
        max_tokens = COMPREHENSIVE_MAX_TOKENS if options.analysis_depth == "comprehensive" else DEFAULT_MAX_TOKENS
        return await self.client.complete(system, user, max_tokens=max_tokens, temperature=TEMPERATURE)

    async def analyze_focused(self, kind: str, payload: dict) -> CompletionResult:
        """Focused analysis ("momentum", "pitcher_matchup", ...).

        Raises:
            ValueError: Unknown analysis kind
            PreviewError: The completion failed
        """
        system, user = build_focused_prompt(kind, payload)
        return await self.client.complete(system, user, temperature=TEMPERATURE)
