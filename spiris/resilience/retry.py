"""Exponential Backoff Retry Executor.

Runs an operation under a bounded exponential-backoff policy:
- Bounded number of attempts
- Delay grows by a multiplier, capped at max_delay
- Optional wall-clock budget across all attempts
- Only transient failures (network, 429, 5xx) are retried
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, TypeVar

from spiris.config.constants import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_ELAPSED,
)
from spiris.core.errors import ConfigError, ErrorKind, classify
from spiris.observability.logger import get_logger, log_context

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry configuration; safe to share across operations.

    Durations are in seconds.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay: float = DEFAULT_INITIAL_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    max_elapsed: float | None = DEFAULT_MAX_ELAPSED

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay < 0:
            raise ConfigError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.max_delay < self.initial_delay:
            raise ConfigError(
                f"max_delay ({self.max_delay}) must be >= initial_delay ({self.initial_delay})"
            )
        if self.backoff_multiplier < 1.0:
            raise ConfigError(f"backoff_multiplier must be >= 1.0, got {self.backoff_multiplier}")
        if self.max_elapsed is not None and self.max_elapsed <= 0:
            raise ConfigError(f"max_elapsed must be positive, got {self.max_elapsed}")

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        """Single attempt, never sleeps."""
        return cls(max_attempts=1, initial_delay=0.0, max_delay=0.0, max_elapsed=None)

    def next_delay(self, delay: float) -> float:
        return min(delay * self.backoff_multiplier, self.max_delay)

    def delays(self) -> Iterator[float]:
        """Yield the backoff delays between attempts (max_attempts - 1 values).

        delay[i+1] = min(delay[i] * backoff_multiplier, max_delay)
        """
        delay = self.initial_delay
        for _ in range(self.max_attempts - 1):
            yield delay
            delay = self.next_delay(delay)


@dataclass
class RetryExecutor:
    """Retry executor with exponential backoff.

    Usage:
        executor = RetryExecutor(RetryPolicy(max_attempts=5))

        result = await executor.execute(lambda: client.get("/customers"))
    """

    policy: RetryPolicy = field(default_factory=RetryPolicy)
    classifier: Callable[[BaseException], ErrorKind] = classify

    # Injectable for tests; sleep must be cooperative and cancellable
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    async def execute(self, operation: Callable[[], Awaitable[T] | T]) -> T:
        """Run `operation` until it succeeds or the policy gives up.

        Args:
            operation: Zero-argument callable producing a fresh attempt per call.
                Must be idempotent; do not pass resource creation without
                an idempotency guarantee.

        Returns:
            The operation's result

        Raises:
            The latest error, unwrapped, once it is fatal or the attempt or
            elapsed-time budget is spent
        """
        policy = self.policy
        delay = policy.initial_delay
        started = self.clock()
        attempt = 0

        while True:
            try:
                with log_context(attempt=attempt + 1):
                    result = operation()
                    if inspect.isawaitable(result):
                        result = await result
                return result
            except Exception as e:
                kind = self.classifier(e)

                if not kind.is_retryable:
                    logger.debug(
                        f"Non-retryable error: {type(e).__name__}",
                        extra={"kind": kind.value, "attempt": attempt + 1},
                    )
                    raise

                if attempt >= policy.max_attempts - 1:
                    logger.warning(
                        f"Max attempts ({policy.max_attempts}) exhausted",
                        extra={"kind": kind.value, "error": str(e)},
                    )
                    raise

                elapsed = self.clock() - started
                if policy.max_elapsed is not None and elapsed > policy.max_elapsed:
                    logger.warning(
                        f"Retry budget of {policy.max_elapsed:.1f}s exhausted after {elapsed:.1f}s",
                        extra={"kind": kind.value, "attempt": attempt + 1, "error": str(e)},
                    )
                    raise

                logger.info(
                    f"Retry {attempt + 1}/{policy.max_attempts - 1} after {delay:.2f}s",
                    extra={"kind": kind.value, "error": type(e).__name__},
                )

            await self.sleep(delay)
            delay = policy.next_delay(delay)
            attempt += 1


async def retry_request(
    policy: RetryPolicy,
    operation: Callable[[], Awaitable[T] | T],
) -> T:
    """Run `operation` under `policy` with the default classifier."""
    return await RetryExecutor(policy).execute(operation)
