"""
Rate limiting for the Kamioun backend
Uses in-memory storage with a fixed window per key
"""
import threading
import time
from typing import Dict, NamedTuple, Optional

from fastapi import Request, HTTPException, status

from kamioun.core.config import settings


class RateLimitResult(NamedTuple):
    is_allowed: bool
    remaining: int


class _Window:
    __slots__ = ("count", "expires_at")

    def __init__(self, count: int, expires_at: float):
        self.count = count
        self.expires_at = expires_at


class FixedWindowRateLimiter:
    """
    In-memory fixed-window rate limiter.

    Each key holds a request count and the time its window expires. The
    first request after expiry opens a new window. A request is rejected
    once the count in the current window exceeds the limit.

    State lives in the process: it is lost on restart and not shared
    between workers.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()
        # Clean up expired entries periodically
        self._last_cleanup = clock()
        self._cleanup_interval = 60  # seconds

    def _cleanup_expired(self, now: float):
        """Drop windows that have already expired"""
        if now - self._last_cleanup < self._cleanup_interval:
            return

        for key in [k for k, w in self._windows.items() if w.expires_at <= now]:
            del self._windows[key]

        self._last_cleanup = now

    def check(self, identifier: str, limit: int = 5, window_seconds: int = 60) -> RateLimitResult:
        """
        Count a request for identifier and report whether it is allowed.

        Returns:
            RateLimitResult(is_allowed, remaining)
        """
        key = f"rate-limit:{identifier}"

        with self._lock:
            now = self._clock()
            self._cleanup_expired(now)

            window = self._windows.get(key)
            if window is not None and window.expires_at > now:
                window.count += 1
                return RateLimitResult(window.count <= limit, max(0, limit - window.count))

            self._windows[key] = _Window(count=1, expires_at=now + window_seconds)
            return RateLimitResult(True, limit - 1)

    def reset(self):
        with self._lock:
            self._windows.clear()


# Global rate limiter instance
rate_limiter = FixedWindowRateLimiter()


def get_client_ip(request: Request) -> str:
    """Get the client IP, considering proxies"""
    # Check X-Forwarded-For header first (for proxied requests)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP in the chain (original client)
        return forwarded_for.split(",")[0].strip()

    return "127.0.0.1"


async def login_rate_limit(request: Request) -> Optional[RateLimitResult]:
    """
    Dependency applying the login limit per client address.

    Usage:
        @router.post("/login")
        async def login(..., _: None = Depends(login_rate_limit)):
            ...
    """
    result = rate_limiter.check(
        identifier=f"login:{get_client_ip(request)}",
        limit=settings.LOGIN_RATE_LIMIT,
        window_seconds=settings.LOGIN_RATE_WINDOW_SECONDS,
    )

    if not result.is_allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many attempts. Try again later.",
            headers={
                "X-RateLimit-Limit": str(settings.LOGIN_RATE_LIMIT),
                "X-RateLimit-Remaining": "0",
                "Retry-After": str(settings.LOGIN_RATE_WINDOW_SECONDS),
            }
        )

    return result
