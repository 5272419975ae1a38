"""Error taxonomy for the preview pipeline.

Operational failures raised by the resilience layer, the stats gateway and the
completion client all derive from PreviewError, so the orchestrator can map
them to a failure envelope while letting programming errors propagate.

"No game on this date" is not an exception: it is a normal `success: False`
result. Parser misses are not exceptions either: every extractor has a default.
"""


class PreviewError(Exception):
    """Base class for expected, operational failures."""


class UpstreamFault(PreviewError):
    """Network or HTTP failure talking to an external service."""


class UpstreamTimeout(PreviewError):
    """External call exceeded its deadline on every attempt."""


class CircuitOpenError(UpstreamFault):
    """Call rejected without I/O because the dependency's breaker is open."""

    def __init__(self, dependency: str):
        super().__init__(f"{dependency} circuit breaker is open")
        self.dependency = dependency


class ProviderError(PreviewError):
    """LLM provider call failed."""


class ProviderConfigurationError(PreviewError, ValueError):
    """Unsupported or misconfigured LLM provider. Fatal, never retried."""
