"""Chat completion client with pluggable providers and usage tracking.

A provider is chosen once, when the client is built; call sites only ever see
CompletionClient.complete(system, user). Adding a provider means adding an
LLMProvider subclass and a PROVIDERS entry.

Example:
    client = CompletionClient.from_settings(get_settings())
    result = await client.complete("You are a baseball analyst.", prompt)
    print(result.content, result.cost)
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import anthropic
import openai

from mlb_preview_agent.config import Settings
from mlb_preview_agent.errors import (
    CircuitOpenError,
    ProviderConfigurationError,
    ProviderError,
    UpstreamFault,
    UpstreamTimeout,
)
from mlb_preview_agent.monitoring import UsageMetrics, get_logger
from mlb_preview_agent.resilience import ResilientCaller

log = get_logger()

DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.7


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int
    output_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class CompletionResult:
    """One completion.

    Attributes:
        content: Generated text
        usage: Token counts reported by the provider
        cost: Estimated USD cost from published per-token rates
        duration_ms: Wall time of the call, retries included
        model: Model that produced the text
    """

    content: str
    usage: TokenUsage
    cost: float
    duration_ms: int
    model: str = ""


class LLMProvider(ABC):
    """One chat completion API.

    Subclasses set `name`, the SDK exception tuples, and implement create().
    """

    name: str = ""
    # Transient SDK errors worth another attempt
    retryable_errors: tuple[type[Exception], ...] = ()
    # Base SDK error type, anything else is a programming error
    api_errors: tuple[type[Exception], ...] = ()

    def __init__(self, api_key: str, model: str, input_cost_per_mtok: float, output_cost_per_mtok: float):
        self.api_key = api_key
        self.model = model
        self.input_cost_per_mtok = input_cost_per_mtok
        self.output_cost_per_mtok = output_cost_per_mtok

    @abstractmethod
    async def create(self, system: str, user: str, max_tokens: int, temperature: float) -> tuple[str, TokenUsage]:
        """Send one system + user exchange, return (text, usage)."""

    def estimate_cost(self, usage: TokenUsage) -> float:
        return (
            usage.input_tokens * self.input_cost_per_mtok
            + usage.output_tokens * self.output_cost_per_mtok
        ) / 1_000_000


class AnthropicProvider(LLMProvider):
    name = "anthropic"
    retryable_errors = (
        anthropic.APIConnectionError,
        anthropic.RateLimitError,
        anthropic.InternalServerError,
    )
    api_errors = (anthropic.APIError,)

    def __init__(self, api_key: str, model: str, input_cost_per_mtok: float = 3.0, output_cost_per_mtok: float = 15.0):
        super().__init__(api_key, model, input_cost_per_mtok, output_cost_per_mtok)
        # Retries are owned by the resilience layer
        self.client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)

    async def create(self, system: str, user: str, max_tokens: int, temperature: float) -> tuple[str, TokenUsage]:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system,
            messages=[{"role": "user", "content": user}],
        )
        return response.content[0].text, TokenUsage(response.usage.input_tokens, response.usage.output_tokens)


class OpenAIProvider(LLMProvider):
    name = "openai"
    retryable_errors = (
        openai.APIConnectionError,
        openai.RateLimitError,
        openai.InternalServerError,
    )
    api_errors = (openai.OpenAIError,)

    def __init__(self, api_key: str, model: str, input_cost_per_mtok: float = 10.0, output_cost_per_mtok: float = 30.0):
        super().__init__(api_key, model, input_cost_per_mtok, output_cost_per_mtok)
        self.client = openai.AsyncOpenAI(api_key=api_key, max_retries=0)

    async def create(self, system: str, user: str, max_tokens: int, temperature: float) -> tuple[str, TokenUsage]:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        usage = response.usage
        return (
            response.choices[0].message.content or "",
            TokenUsage(usage.prompt_tokens if usage else 0, usage.completion_tokens if usage else 0),
        )


PROVIDERS: dict[str, type[LLMProvider]] = {
    AnthropicProvider.name: AnthropicProvider,
    OpenAIProvider.name: OpenAIProvider,
}


def create_provider(settings: Settings) -> LLMProvider:
    """Build the configured provider.

    Raises:
        ProviderConfigurationError: Unknown provider or missing API key
    """
    name = settings.llm_provider
    provider_cls = PROVIDERS.get(name)
    if provider_cls is None:
        raise ProviderConfigurationError(f"Unsupported LLM provider: {name}")

    api_key = getattr(settings, f"{name}_api_key", "")
    if not api_key:
        raise ProviderConfigurationError(
            f"{name.upper()}_API_KEY not found in environment. Set it in .env or the environment."
        )

    return provider_cls(
        api_key=api_key,
        model=getattr(settings, f"{name}_model"),
        input_cost_per_mtok=getattr(settings, f"{name}_input_cost_per_mtok"),
        output_cost_per_mtok=getattr(settings, f"{name}_output_cost_per_mtok"),
    )


class CompletionClient:
    """Sends prompts to one provider and keeps running usage totals."""

    def __init__(self, provider: LLMProvider, resilience: ResilientCaller | None = None):
        """Initialize the client.

        Args:
            provider: Provider strategy chosen at construction
            resilience: Shared wrapper for the LLM dependency
        """
        self.provider = provider
        self._resilience = resilience or ResilientCaller(
            f"llm_{provider.name}",
            timeout=60.0,
            retry_on=provider.retryable_errors,
        )
        self.usage = UsageMetrics()

    @classmethod
    def from_settings(cls, settings: Settings, resilience: ResilientCaller | None = None) -> "CompletionClient":
        provider = create_provider(settings)
        return cls(
            provider,
            resilience or ResilientCaller(
                f"llm_{provider.name}",
                timeout=settings.llm_timeout,
                max_attempts=settings.retry_max_attempts,
                base_delay=settings.retry_base_delay,
                failure_threshold=settings.breaker_failure_threshold,
                reset_timeout=settings.breaker_reset_timeout,
                retry_on=provider.retryable_errors,
            ),
        )

    @property
    def resilience(self) -> ResilientCaller:
        return self._resilience

    async def complete(
        self,
        system: str,
        user: str,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> CompletionResult:
        """Run one completion.

        Raises:
            ProviderError: The provider call failed
            UpstreamTimeout: Every attempt hit the LLM deadline
            CircuitOpenError: LLM breaker is open
        """
        self.usage.request_count += 1
        start_time = time.perf_counter()

        try:
            content, usage = await self._resilience.call(
                self.provider.create, system, user, max_tokens, temperature
            )
        except (UpstreamTimeout, CircuitOpenError):
            raise
        except UpstreamFault as e:
            raise ProviderError(f"LLM request failed ({self.provider.name}): {e}") from e
        except self.provider.api_errors as e:
            log.error("llm_request_failed", provider=self.provider.name, error=str(e))
            raise ProviderError(f"LLM request failed ({self.provider.name}): {e}") from e

        cost = self.provider.estimate_cost(usage)
        self.usage.total_cost += cost
        duration_ms = int((time.perf_counter() - start_time) * 1000)

        log.info(
            "llm_request_completed",
            provider=self.provider.name,
            model=self.provider.model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cost=round(cost, 6),
            duration_ms=duration_ms,
        )
        return CompletionResult(
            content=content,
            usage=usage,
            cost=cost,
            duration_ms=duration_ms,
            model=self.provider.model,
        )

    async def test_connection(self) -> bool:
        """True when the provider answers a trivial prompt as instructed."""
        try:
            result = await self.complete(
                "You are a helpful assistant.",
                'Respond with "Connection successful" if you can read this.',
                max_tokens=50,
            )
        except (ProviderError, UpstreamTimeout, CircuitOpenError) as e:
            log.warning("llm_connection_test_failed", provider=self.provider.name, error=str(e))
            return False
        return "connection successful" in result.content.lower()

    def get_usage_stats(self) -> dict:
        return {
            "provider": self.provider.name,
            "model": self.provider.model,
            "request_count": self.usage.request_count,
            "total_cost": self.usage.total_cost,
            "average_cost_per_request": self.usage.average_cost_per_request,
        }

    def reset_usage_stats(self) -> None:
        self.usage.reset()
