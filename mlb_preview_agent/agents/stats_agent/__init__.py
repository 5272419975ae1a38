"""Stats agent: MLB Stats API access and response caching."""

from mlb_preview_agent.agents.stats_agent.cache import CacheEntry, TTLCache
from mlb_preview_agent.agents.stats_agent.mlb_client import MLBStatsClient
from mlb_preview_agent.agents.stats_agent.models import (
    GameDataBundle,
    ProbablePitchers,
    TeamIdentity,
)

__all__ = [
    "CacheEntry",
    "GameDataBundle",
    "MLBStatsClient",
    "ProbablePitchers",
    "TTLCache",
    "TeamIdentity",
]
