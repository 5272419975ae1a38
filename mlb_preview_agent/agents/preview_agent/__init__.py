"""Preview agent: request orchestration for game previews."""

from mlb_preview_agent.agents.preview_agent.agent import GamePreviewAgent, build_agent

__all__ = ["GamePreviewAgent", "build_agent"]
