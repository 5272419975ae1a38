"""Pydantic models for preview requests."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

AnalysisDepth = Literal["basic", "detailed", "comprehensive"]


class PreviewOptions(BaseModel):
    """Caller options for a game preview.

    Attributes:
        include_weather: Add the weather block when weather was published
        include_injuries: Add the injury block when either side has injuries
        include_head_to_head: Add the season series block when games exist
        analysis_depth: Controls prompt emphasis and the output token budget
    """

    model_config = ConfigDict(frozen=True)

    include_weather: bool = True
    include_injuries: bool = True
    include_head_to_head: bool = True
    analysis_depth: AnalysisDepth = "detailed"

    def cache_key(self) -> str:
        """Stable string for result-cache keys."""
        return self.model_dump_json()
