"""Metrics dataclasses for observability.

- CacheMetrics: hit/miss/expiry counts for the in-memory TTL caches
- UsageMetrics: LLM request count and running cost estimate

Usage:
    cm = CacheMetrics(hits=80, misses=15, expirations=5)
    print(f"Hit rate: {cm.hit_rate}%")  # 80.0%
"""

from dataclasses import dataclass


@dataclass
class CacheMetrics:
    """Track cache performance.

    Attributes:
        hits: Reads served from a live entry
        misses: Reads with no entry for the key
        expirations: Reads that found an entry past its TTL (evicted on read)
    """

    hits: int = 0
    misses: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        """Hit rate as a percentage of all reads, 0.0 when nothing was read."""
        total = self.hits + self.misses + self.expirations
        return round(self.hits / total * 100, 1) if total > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expirations": self.expirations,
            "hit_rate": self.hit_rate,
        }


@dataclass
class UsageMetrics:
    """Running LLM usage counters.

    Cost is an estimate from published per-token rates, not billing data.

    Attributes:
        request_count: Completion requests attempted
        total_cost: Estimated USD spent across successful requests
    """

    request_count: int = 0
    total_cost: float = 0.0

    @property
    def average_cost_per_request(self) -> float:
        return self.total_cost / self.request_count if self.request_count > 0 else 0.0

    def reset(self) -> None:
        self.request_count = 0
        self.total_cost = 0.0
