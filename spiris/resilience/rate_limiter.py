"""Token Bucket Rate Limiter.

Limits the outbound call rate with burst support:
- Requests consume tokens from the bucket
- Tokens refill at a constant rate
- Burst allowed up to bucket capacity

One limiter may be shared by many clients and streams; acquisition is
serialised by an asyncio lock.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field

from spiris.config.constants import DEFAULT_BURST_SIZE, RATE_LIMIT_PER_MINUTE
from spiris.core.errors import ConfigError
from spiris.observability.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimiter:
    """Token bucket rate limiter.

    Usage:
        limiter = RateLimiter.per_minute(600, burst=10)

        # Acquire before making request
        await limiter.acquire()
        await make_request()
    """

    # Configuration
    rate: float = RATE_LIMIT_PER_MINUTE / 60.0  # Tokens per second
    burst: int = DEFAULT_BURST_SIZE  # Maximum bucket capacity

    # State
    _tokens: float = field(init=False)
    _last_refill: float = field(init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate and start with a full bucket."""
        if self.rate <= 0:
            raise ConfigError(f"rate must be positive, got {self.rate}")
        if self.burst < 1:
            raise ConfigError(f"burst must be >= 1, got {self.burst}")
        self._tokens = float(self.burst)
        self._last_refill = time.monotonic()

    @classmethod
    def per_minute(cls, requests: int = RATE_LIMIT_PER_MINUTE, burst: int = DEFAULT_BURST_SIZE) -> RateLimiter:
        return cls(rate=requests / 60.0, burst=burst)

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self.burst, self._tokens + elapsed * self.rate)
        self._last_refill = now

    async def acquire(self, tokens: int = 1) -> float:
        """Acquire tokens from the bucket.

        Granted immediately within the burst allowance, otherwise the caller
        suspends until enough tokens have accumulated.

        Args:
            tokens: Number of tokens to acquire

        Returns:
            Wait time in seconds (0 if no wait needed)
        """
        if tokens > self.burst:
            raise ConfigError(f"Cannot acquire {tokens} tokens from a bucket of {self.burst}")

        async with self._lock:
            self._refill()

            if self._tokens >= tokens:
                self._tokens -= tokens
                return 0.0

            needed = tokens - self._tokens
            wait_time = needed / self.rate
            logger.debug(f"Rate limited, waiting {wait_time:.3f}s")

            # Waiters queue behind the lock so permits are handed out in order
            await asyncio.sleep(wait_time)
            self._refill()
            self._tokens = max(0.0, self._tokens - tokens)
            return wait_time

    async def try_acquire(self, tokens: int = 1) -> bool:
        """Try to acquire tokens without waiting.

        Returns:
            True if tokens acquired, False if not enough tokens
        """
        async with self._lock:
            self._refill()

            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    @property
    def available_tokens(self) -> float:
        """Get current number of available tokens (approximate)."""
        elapsed = time.monotonic() - self._last_refill
        return min(self.burst, self._tokens + elapsed * self.rate)
