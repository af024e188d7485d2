"""
Retry executor.

Wraps a single asynchronous operation with bounded-attempt retry and a
fixed inter-attempt delay (no exponential growth, no jitter).

Semantics:
    - Up to `max_attempts` attempts; success at any attempt returns that
      attempt's result immediately.
    - The delay only separates attempts; there is no wait after the final
      failed attempt.
    - An exception listed in `fatal_errors` ends the retry loop at once.
    - An optional per-attempt timeout turns a hung call into a failed
      attempt instead of blocking the pipeline forever.
    - Exhaustion raises RetryExhaustedError naming the operation and
      chaining the last cause.

The executor keeps no per-call state on the instance, so one executor can
serve any number of concurrent operations.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from .. import constants as CONSTANTS
from .config import RetrySettings
from .exceptions import RetryExhaustedError
from .reporter import Reporter

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Uniform retry policy applied to every resource call.

    Attributes:
        max_attempts: Total attempts including the first one (1 = no retry)
        delay_seconds: Fixed wait between two attempts
        attempt_timeout: Optional per-attempt timeout in seconds
        fatal_errors: Exception types that must not be retried
    """

    max_attempts: int = CONSTANTS.DEFAULT_MAX_ATTEMPTS
    delay_seconds: float = CONSTANTS.DEFAULT_RETRY_DELAY_SECONDS
    attempt_timeout: Optional[float] = None
    fatal_errors: Tuple[Type[BaseException], ...] = ()

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must not be negative, got {self.delay_seconds}")
        if self.attempt_timeout is not None and self.attempt_timeout <= 0:
            raise ValueError(f"attempt_timeout must be positive, got {self.attempt_timeout}")

    @classmethod
    def from_settings(
        cls,
        settings: RetrySettings,
        fatal_errors: Tuple[Type[BaseException], ...] = ()
    ) -> "RetryPolicy":
        return cls(
            max_attempts=settings.max_attempts,
            delay_seconds=settings.delay_seconds,
            attempt_timeout=settings.attempt_timeout,
            fatal_errors=fatal_errors,
        )


class RetryExecutor:
    """Runs operations under a RetryPolicy and reports every failed attempt."""

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        reporter: Optional[Reporter] = None,
        sleep: Sleep = asyncio.sleep
    ):
        self.policy = policy or RetryPolicy()
        self.reporter = reporter or Reporter()
        self._sleep = sleep

    async def _attempt(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self.policy.attempt_timeout is None:
            return await operation()
        return await asyncio.wait_for(operation(), timeout=self.policy.attempt_timeout)

    async def run(self, operation: Callable[[], Awaitable[T]], operation_name: str) -> T:
        """
        Execute `operation` until it succeeds or the policy is exhausted.

        Args:
            operation: Zero-argument callable returning a fresh awaitable
            operation_name: Name used in events and the terminal error

        Returns:
            The result of the first successful attempt.

        Raises:
            RetryExhaustedError: If every attempt failed, or a fatal error
                was raised.
        """
        max_attempts = self.policy.max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                result = await self._attempt(operation)
            except self.policy.fatal_errors as e:
                self.reporter.attempt_failed(operation_name, attempt, max_attempts, e, fatal=True)
                raise RetryExhaustedError(operation_name, attempt, e) from e
            except Exception as e:
                self.reporter.attempt_failed(operation_name, attempt, max_attempts, e)
                if attempt == max_attempts:
                    raise RetryExhaustedError(operation_name, attempt, e) from e
                self.reporter.retry_scheduled(operation_name, attempt + 1, self.policy.delay_seconds)
                await self._sleep(self.policy.delay_seconds)
            else:
                if attempt > 1:
                    self.reporter.attempt_recovered(operation_name, attempt, max_attempts)
                return result

        # Unreachable: the loop either returns or raises.
        raise AssertionError("retry loop exited without a result")
