"""Monitoring module for structured logging and lightweight usage metrics.

Provides:
- Structured JSON logging for production, console output for development
- Correlation IDs for tracing one preview request across components
- CacheMetrics for read-through cache effectiveness
- UsageMetrics for LLM request counts and estimated cost
"""

from mlb_preview_agent.monitoring.logging import (
    configure_logging,
    get_logger,
    bind_correlation_id,
    unbind_correlation_id,
)
from mlb_preview_agent.monitoring.metrics import CacheMetrics, UsageMetrics

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_correlation_id",
    "unbind_correlation_id",
    "CacheMetrics",
    "UsageMetrics",
]
