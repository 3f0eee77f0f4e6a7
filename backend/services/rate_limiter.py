"""Fixed-window rate limiting for the authentication endpoints."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from functools import lru_cache
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network, ip_address, ip_network
from typing import Protocol, runtime_checkable

from fastapi import status
from redis.asyncio import Redis
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.types import ASGIApp

from core import error_response, settings

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"
REGISTER_PATH = "/api/auth/register"
RESET_PASSWORD_PATH = "/api/auth/reset-password"
Clock = Callable[[], float]


@runtime_checkable
class SupportsRateLimitClient(Protocol):
    async def incr(self, key: str) -> int: ...

    async def expire(self, key: str, ttl: int) -> None: ...


class InMemoryRateLimitClient:
    """Process-local counter store with the subset of the Redis API we use."""

    def __init__(self, clock: Clock = time.time) -> None:
        self.clock = clock
        self.data: dict[str, int] = {}
        self.expires_at: dict[str, float] = {}

    def _evict_expired(self) -> None:
        now = self.clock()
        expired = [key for key, deadline in self.expires_at.items() if deadline <= now]
        for key in expired:
            self.data.pop(key, None)
            self.expires_at.pop(key, None)

    async def incr(self, key: str) -> int:
        self._evict_expired()
        value = self.data.get(key, 0) + 1
        self.data[key] = value
        return value

    async def expire(self, key: str, ttl: int) -> None:
        if key in self.data:
            self.expires_at[key] = self.clock() + ttl


IPAddress = IPv4Address | IPv6Address


@lru_cache(maxsize=8)
def _trusted_proxy_networks(cidrs: tuple[str, ...]) -> tuple[IPv4Network | IPv6Network, ...]:
    try:
        return tuple(ip_network(cidr, strict=False) for cidr in cidrs)
    except ValueError as exc:
        raise ValueError(f"Invalid proxy CIDR in {list(cidrs)!r}") from exc


def _first_forwarded_address(request: Request) -> str | None:
    """Leftmost parseable address from the configured forwarding headers."""
    for header in settings.rate_limit_ip_headers:
        raw = request.headers.get(header, "")
        for part in raw.split(","):
            candidate = part.strip()
            if candidate and _parse_address(candidate) is not None:
                return candidate
    return None


def _parse_address(value: str) -> IPAddress | None:
    try:
        return ip_address(value)
    except ValueError:
        return None


def _from_trusted_proxy(peer: str) -> bool:
    address = _parse_address(peer)
    if address is None:
        return False
    networks = _trusted_proxy_networks(tuple(settings.rate_limit_trusted_proxies))
    return any(address in network for network in networks)


def default_client_identifier(request: Request) -> str:
    """Resolve the source address a request is counted against."""
    peer = request.client.host if request.client else ""
    if not peer:
        return "anonymous"

    # Forwarded address headers are only honoured from configured proxies.
    if _from_trusted_proxy(peer):
        return _first_forwarded_address(request) or peer
    return peer


class RateLimiter:
    """Fixed-window counter over a Redis-compatible client."""

    def __init__(
        self,
        redis_client: SupportsRateLimitClient,
        limit: int,
        window_seconds: int,
        prefix: str = "rate-limit",
        clock: Clock = time.time,
    ) -> None:
        self.redis = redis_client
        self.limit = max(limit, 0)
        self.window_seconds = max(window_seconds, 0)
        self.prefix = prefix
        self.clock = clock

    async def allow(self, key: str) -> bool:
        """Return True when the request should be allowed, False if limited."""
        if self.limit == 0 or self.window_seconds == 0:
            return True

        bucket = int(self.clock()) // self.window_seconds
        redis_key = f"{self.prefix}:{key}:{bucket}"

        count = await self.redis.incr(redis_key)
        if count == 1:
            await self.redis.expire(redis_key, self.window_seconds)
        return count <= self.limit

    def retry_after(self) -> int:
        """Seconds until the current window closes."""
        if self.window_seconds == 0:
            return 0
        elapsed = int(self.clock()) % self.window_seconds
        return self.window_seconds - elapsed


@lru_cache
def get_rate_limit_client() -> SupportsRateLimitClient:
    """Return the shared counter store: Redis when configured, else in-process."""
    if settings.redis_url:
        return Redis.from_url(settings.redis_url, decode_responses=False)
    return InMemoryRateLimitClient()


def build_auth_rate_limiters(
    client: SupportsRateLimitClient,
    clock: Clock = time.time,
) -> dict[str, RateLimiter]:
    """Map each rate-limited auth path to its own fixed-window limiter."""
    return {
        LOGIN_PATH: RateLimiter(
            client,
            limit=settings.login_rate_limit_requests,
            window_seconds=settings.login_rate_limit_window_seconds,
            prefix="rate-limit:login",
            clock=clock,
        ),
        REGISTER_PATH: RateLimiter(
            client,
            limit=settings.register_rate_limit_requests,
            window_seconds=settings.register_rate_limit_window_seconds,
            prefix="rate-limit:register",
            clock=clock,
        ),
        RESET_PASSWORD_PATH: RateLimiter(
            client,
            limit=settings.reset_rate_limit_requests,
            window_seconds=settings.reset_rate_limit_window_seconds,
            prefix="rate-limit:reset-password",
            clock=clock,
        ),
    }


_cached_rate_limiters: dict[str, RateLimiter] | None = None


def get_rate_limiters() -> Mapping[str, RateLimiter]:
    """Singleton accessor for the shared per-path limiters."""
    global _cached_rate_limiters
    if _cached_rate_limiters is None:
        _cached_rate_limiters = build_auth_rate_limiters(get_rate_limit_client())
    return _cached_rate_limiters


def set_rate_limiters(limiters: Mapping[str, RateLimiter] | None) -> None:
    """Override the cached limiters (primarily for tests)."""
    global _cached_rate_limiters
    _cached_rate_limiters = dict(limiters) if limiters is not None else None


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Counts POSTs to the limited auth paths and rejects once a window is spent."""

    def __init__(
        self,
        app: ASGIApp,
        limiters_factory: Callable[[], Mapping[str, RateLimiter]],
        client_identifier: Callable[[Request], str] | None = None,
    ) -> None:
        super().__init__(app)
        self.limiters_factory = limiters_factory
        self.client_identifier = client_identifier or default_client_identifier

    def _limiter_for(self, request: Request) -> RateLimiter | None:
        if request.method != "POST":
            return None
        override = getattr(request.app.state, "rate_limiters_override", None)
        limiters = override if override is not None else self.limiters_factory()
        return limiters.get(request.url.path.rstrip("/") or "/")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        limiter = self._limiter_for(request)
        if limiter is None:
            return await call_next(request)

        source = self.client_identifier(request) or "anonymous"
        try:
            allowed = await limiter.allow(source)
        except Exception:  # pragma: no cover - counter store outage
            logger.exception("Rate limit store unavailable for %s", request.url.path)
            return error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "Service unavailable",
                "SERVICE_UNAVAILABLE",
            )

        if allowed:
            return await call_next(request)

        logger.warning("Rate limit exceeded for %s on %s", source, request.url.path)
        return error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Too many requests. Please try again later.",
            "RATE_LIMIT_EXCEEDED",
            headers={"Retry-After": str(limiter.retry_after())},
        )
