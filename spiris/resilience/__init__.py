"""Resilience components for API calls.

Provides fault tolerance patterns for transient API failures:
- RetryExecutor: Bounded exponential backoff driven by error classification
- RateLimiter: Token bucket algorithm
"""

from .rate_limiter import RateLimiter
from .retry import RetryExecutor, RetryPolicy, retry_request

__all__ = [
    "RateLimiter",
    "RetryExecutor",
    "RetryPolicy",
    "retry_request",
]
