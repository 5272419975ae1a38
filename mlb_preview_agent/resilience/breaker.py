"""Timeout, retry and circuit breaker around one external dependency.

Each external service gets its own ResilientCaller, constructed once and shared
by every call to that service, so the breaker sees the dependency's health
across requests rather than per request.

Per call:
1. If the breaker is open, fail immediately with CircuitOpenError (no I/O).
2. Otherwise run up to `max_attempts` attempts, each bounded by `timeout`,
   sleeping `base_delay * attempt` between attempts.
3. The whole retried call counts as one breaker success or failure.

Example:
    caller = ResilientCaller("mlb_stats_api", timeout=10.0)
    data = await caller.call(fetch_json, url)
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal

from circuitbreaker import STATE_CLOSED, STATE_HALF_OPEN, STATE_OPEN, CircuitBreaker
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from mlb_preview_agent.errors import (
    CircuitOpenError,
    PreviewError,
    UpstreamFault,
    UpstreamTimeout,
)
from mlb_preview_agent.monitoring import get_logger

log = get_logger()

BreakerStateName = Literal["closed", "open", "half_open"]

_STATE_NAMES: dict[str, BreakerStateName] = {
    STATE_CLOSED: "closed",
    STATE_OPEN: "open",
    STATE_HALF_OPEN: "half_open",
}


@dataclass(frozen=True)
class CircuitBreakerState:
    """Point-in-time view of a breaker.

    Attributes:
        failures: Consecutive failed calls since the last success
        last_failure_time: Epoch seconds of the most recent failure, None if never
        state: "closed", "open" or "half_open"
    """

    failures: int
    last_failure_time: float | None
    state: BreakerStateName


class ResilientCaller:
    """Retry + timeout + circuit breaker for one dependency."""

    def __init__(
        self,
        name: str,
        *,
        timeout: float = 10.0,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        failure_threshold: int = 5,
        reset_timeout: float = 60.0,
        retry_on: tuple[type[BaseException], ...] = (Exception,),
        timeout_on: tuple[type[BaseException], ...] = (),
    ):
        """Initialize the wrapper.

        Args:
            name: Dependency name used in logs and errors
            timeout: Per-attempt deadline in seconds
            max_attempts: Attempts per call, including the first
            base_delay: Seconds; the wait after attempt N is base_delay * N
            failure_threshold: Consecutive failed calls that open the breaker
            reset_timeout: Seconds the breaker stays open before half-open
            retry_on: Exception types treated as transient
            timeout_on: Extra exception types reported as UpstreamTimeout
        """
        self.name = name
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._retry_on = (asyncio.TimeoutError, *retry_on)
        self._timeout_on = (asyncio.TimeoutError, *timeout_on)
        self._breaker = CircuitBreaker(
            failure_threshold=failure_threshold,
            recovery_timeout=reset_timeout,
            expected_exception=PreviewError,
            name=name,
        )
        self._last_failure_time: float | None = None

    async def call(self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        """Run `func(*args, **kwargs)` under the dependency's protection.

        Raises:
            CircuitOpenError: Breaker open, nothing was attempted
            UpstreamTimeout: Every attempt hit the deadline (or the last one did)
            UpstreamFault: Attempts exhausted on another transient error
        """
        if self._breaker.opened:
            log.warning("circuit_open_fast_fail", dependency=self.name)
            raise CircuitOpenError(self.name)

        was_half_open = self._breaker.state == STATE_HALF_OPEN
        # Anything other than PreviewError propagates here, leaving the breaker untouched
        error: PreviewError | None = None
        try:
            result = await self._call_with_retry(func, *args, **kwargs)
        except PreviewError as e:
            error = e

        try:
            with self._breaker:
                if error is not None:
                    raise error
        except PreviewError:
            self._last_failure_time = time.time()
            if self._breaker.opened:
                log.warning(
                    "circuit_opened",
                    dependency=self.name,
                    failures=self._breaker.failure_count,
                )
            raise

        if was_half_open:
            log.info("circuit_closed", dependency=self.name)
        return result

    async def _call_with_retry(self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.base_delay, increment=self.base_delay),
            retry=retry_if_exception_type(self._retry_on),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await asyncio.wait_for(func(*args, **kwargs), timeout=self.timeout)
        except self._timeout_on as e:
            raise UpstreamTimeout(f"{self.name} request timed out after {self.max_attempts} attempts") from e
        except self._retry_on as e:
            raise UpstreamFault(f"{self.name} request failed: {e}") from e
        return result

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        log.warning(
            "upstream_attempt_failed",
            dependency=self.name,
            attempt=retry_state.attempt_number,
            error=str(error) or type(error).__name__,
            will_retry=True,
        )

    def state(self) -> CircuitBreakerState:
        """Snapshot of the breaker's current state."""
        return CircuitBreakerState(
            failures=self._breaker.failure_count,
            last_failure_time=self._last_failure_time,
            state=_STATE_NAMES[self._breaker.state],
        )
