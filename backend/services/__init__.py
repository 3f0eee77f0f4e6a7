"""Business logic services."""

from .rate_limiter import (
    InMemoryRateLimitClient,
    RateLimitMiddleware,
    RateLimiter,
    build_auth_rate_limiters,
    get_rate_limiters,
    set_rate_limiters,
)
from .security_headers import DEFAULT_SECURITY_HEADERS, SecurityHeadersMiddleware

__all__ = [
    "InMemoryRateLimitClient",
    "RateLimiter",
    "RateLimitMiddleware",
    "build_auth_rate_limiters",
    "get_rate_limiters",
    "set_rate_limiters",
    "DEFAULT_SECURITY_HEADERS",
    "SecurityHeadersMiddleware",
]
