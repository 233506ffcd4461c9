"""Configuration module for the Spiris client."""

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_BURST_SIZE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    MAX_PAGE_SIZE,
    RATE_LIMIT_PER_MINUTE,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_BASE_URL",
    "DEFAULT_BURST_SIZE",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_REQUEST_TIMEOUT",
    "MAX_PAGE_SIZE",
    "RATE_LIMIT_PER_MINUTE",
]
