"""
AssetPipe Retry Logic
=====================

Bounded retry loop with configurable backoff and an explicit abort branch:
exceptions listed in ``abort_on_exceptions`` are re-raised on the first
occurrence without consuming the retry budget.
"""

import asyncio
import inspect
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..utils.logging import get_logger_for_component


T = TypeVar('T')


class RetryStrategy(Enum):
    """Different retry strategy types."""
    FIXED_DELAY = "fixed_delay"              # Fixed interval between retries
    EXPONENTIAL_BACKOFF = "exponential"      # Exponentially increasing delays
    LINEAR_BACKOFF = "linear"                # Linearly increasing delays
    JITTERED_EXPONENTIAL = "jittered"        # Exponential with random jitter


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3                     # Retries after the first attempt
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL_BACKOFF
    base_delay: float = 1.0                  # Base delay in seconds
    max_delay: float = 10.0                  # Maximum delay in seconds
    exponential_base: float = 2.0

    retry_on_exceptions: tuple = (Exception,)
    abort_on_exceptions: tuple = ()

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_settings(cls, pipeline_settings, max_retries: int, **overrides) -> "RetryConfig":
        """Build a config from the ``pipeline`` settings section."""
        return cls(
            max_retries=max_retries,
            strategy=RetryStrategy(pipeline_settings.retry_strategy.value),
            base_delay=pipeline_settings.retry_base_delay,
            max_delay=pipeline_settings.retry_max_delay,
            **overrides,
        )


class RetryManager:
    """Runs an operation until it succeeds, aborts, or exhausts its retries."""

    def __init__(self, config: Optional[RetryConfig] = None):
        self.config = config or RetryConfig()
        self.logger = get_logger_for_component('retry_manager')

        self._delay_calculators = {
            RetryStrategy.FIXED_DELAY: self._calculate_fixed_delay,
            RetryStrategy.EXPONENTIAL_BACKOFF: self._calculate_exponential_delay,
            RetryStrategy.LINEAR_BACKOFF: self._calculate_linear_delay,
            RetryStrategy.JITTERED_EXPONENTIAL: self._calculate_jittered_exponential_delay,
        }

    async def retry_async(self,
                          func: Callable[..., Awaitable[T]],
                          *args,
                          config: Optional[RetryConfig] = None,
                          operation: Optional[str] = None,
                          **kwargs) -> T:
        """
        Retry an async function with the configured strategy.

        Args:
            func: Async function to retry
            *args: Function arguments
            config: Override default retry configuration
            operation: Name used in log messages (defaults to function name)
            **kwargs: Function keyword arguments

        Returns:
            Function result if successful

        Raises:
            The abort exception immediately, or the last exception once all
            attempts have failed
        """
        retry_config = config or self.config
        name = operation or getattr(func, '__name__', repr(func))

        for attempt in range(1, retry_config.max_attempts + 1):
            try:
                result = func(*args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result

                if attempt > 1:
                    self.logger.info(f"Retry successful for {name} on attempt {attempt}")

                return result

            except asyncio.CancelledError:
                raise

            except Exception as e:
                if isinstance(e, retry_config.abort_on_exceptions):
                    self.logger.info(f"Aborting {name} without retry: {e}")
                    raise

                if not isinstance(e, retry_config.retry_on_exceptions):
                    self.logger.info(f"Not retrying {name} due to non-retryable exception: {e}")
                    raise

                if attempt >= retry_config.max_attempts:
                    self.logger.error(f"All {retry_config.max_attempts} attempts failed for {name}: {e}")
                    raise

                delay = self._calculate_delay(attempt, retry_config)
                self.logger.warning(
                    f"Attempt {attempt} failed for {name}: {e}. "
                    f"Retrying in {delay:.2f}s (attempt {attempt + 1}/{retry_config.max_attempts})"
                )
                await asyncio.sleep(delay)

        # max_attempts is always >= 1, so the loop returns or raises
        raise RuntimeError(f"Retry loop for {name} exited without a result")

    def _calculate_delay(self, attempt: int, config: RetryConfig) -> float:
        """Calculate delay for retry attempt based on strategy."""
        calculator = self._delay_calculators.get(config.strategy, self._calculate_exponential_delay)
        delay = min(calculator(attempt, config), config.max_delay)
        return max(0.0, delay)

    def _calculate_fixed_delay(self, attempt: int, config: RetryConfig) -> float:
        return config.base_delay

    def _calculate_exponential_delay(self, attempt: int, config: RetryConfig) -> float:
        return config.base_delay * (config.exponential_base ** (attempt - 1))

    def _calculate_linear_delay(self, attempt: int, config: RetryConfig) -> float:
        return config.base_delay * attempt

    def _calculate_jittered_exponential_delay(self, attempt: int, config: RetryConfig) -> float:
        """Exponential backoff with full jitter."""
        exponential_delay = config.base_delay * (config.exponential_base ** (attempt - 1))
        return random.uniform(0, exponential_delay)
