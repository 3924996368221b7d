"""
Retry mechanism for resilient upstream calls.

Only errors listed in ``retry_on`` are retried; anything else propagates on
first occurrence. When the budget runs out the last failure is replaced by a
RetryExhaustedError (a RateLimitedError) chained to it.
"""

import asyncio
import random
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TYPE_CHECKING

from shared.errors import RateLimitedError
from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(self,
                 max_retries: int = 3,
                 base_delay: float = 5.0,
                 max_delay: float = 60.0,
                 exponential_base: float = 2.0,
                 jitter: float = 0.5):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter


class RetryExhaustedError(RateLimitedError):
    """Raised when every retry attempt was rejected by rate limiting."""

    def __init__(self, message: str, last_exception: Exception, attempts: int):
        super().__init__(message, details={"attempts": attempts})
        self.last_exception = last_exception
        self.attempts = attempts


class RetryPolicy:
    """Bounded, jittered exponential backoff around an async callable."""

    def __init__(self,
                 config: Optional[RetryConfig] = None,
                 retry_on: Tuple[Type[BaseException], ...] = (RateLimitedError,),
                 name: str = "default",
                 metrics: Optional["MetricsCollector"] = None,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        self.config = config or RetryConfig()
        self.retry_on = retry_on
        self.name = name
        self.metrics = metrics
        self._sleep = sleep
        self.logger = get_logger(f"retry.{name}")

    def compute_delay(self, retry_number: int) -> float:
        """Delay before the given retry (1-based).

        The jittered value is kept within [base_delay, max_delay].
        """
        config = self.config
        delay = config.base_delay * (config.exponential_base ** (retry_number - 1))
        delay = min(delay, config.max_delay)

        if config.jitter:
            spread = delay * config.jitter
            delay += random.uniform(-spread, spread)

        return max(config.base_delay, min(delay, config.max_delay))

    async def call(self, func: Callable[..., Awaitable[Any]], *args, operation: Optional[str] = None, **kwargs) -> Any:
        """Execute ``func`` under the retry policy."""
        operation = operation or getattr(func, "__name__", self.name)
        retries = 0

        while True:
            try:
                result = await func(*args, **kwargs)
            except self.retry_on as exc:
                if retries >= self.config.max_retries:
                    self.logger.error(
                        "All retry attempts exhausted",
                        operation=operation,
                        attempts=retries + 1,
                        error=str(exc)
                    )
                    raise RetryExhaustedError(
                        f"Received 429 : Too Many Requests. Retry budget of "
                        f"{self.config.max_retries} retries exhausted for {operation}",
                        last_exception=exc,
                        attempts=retries + 1
                    ) from exc

                retries += 1
                delay = self.compute_delay(retries)

                self.logger.warning(
                    "Upstream call rate limited, waiting before next attempt",
                    operation=operation,
                    retry=retries,
                    max_retries=self.config.max_retries,
                    delay=round(delay, 3),
                    error=str(exc)
                )
                if self.metrics is not None:
                    self.metrics.increment_counter("upstream_retries_total", operation=operation)

                await self._sleep(delay)
                continue

            if retries:
                self.logger.info("Retry succeeded", operation=operation, retries=retries)
            return result

