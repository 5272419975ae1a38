"""Resilience wrappers for calls to external services (sports API, LLM API)."""

from mlb_preview_agent.resilience.breaker import CircuitBreakerState, ResilientCaller

__all__ = ["CircuitBreakerState", "ResilientCaller"]
