"""
Per-endpoint rate limiting for TechTots Backend
Uses in-memory storage with sliding window algorithm
"""
import time
from typing import Dict, Tuple
from collections import defaultdict

from fastapi import Request, HTTPException, status


class RateLimiter:
    """
    In-memory rate limiter using sliding window algorithm.

    State is per process; run behind a shared store if the API is scaled out.
    """

    def __init__(self):
        # {identifier: [timestamp, ...]}
        self._requests: Dict[str, list] = defaultdict(list)
        self._last_cleanup = time.time()
        self._cleanup_interval = 60  # seconds
        self._max_window = 60

    def _cleanup_old_entries(self):
        """Remove entries older than the largest window seen so far"""
        now = time.time()

        if now - self._last_cleanup < self._cleanup_interval:
            return

        cutoff = now - self._max_window
        for identifier in list(self._requests.keys()):
            self._requests[identifier] = [ts for ts in self._requests[identifier] if ts > cutoff]
            if not self._requests[identifier]:
                del self._requests[identifier]

        self._last_cleanup = now

    def is_allowed(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int = 60
    ) -> Tuple[bool, int, int]:
        """
        Check if a request is allowed under the rate limit.

        Returns:
            Tuple of (is_allowed, remaining_requests, retry_after_seconds)
        """
        self._max_window = max(self._max_window, window_seconds)
        self._cleanup_old_entries()

        now = time.time()
        window_start = now - window_seconds

        requests_in_window = [ts for ts in self._requests[identifier] if ts > window_start]

        if len(requests_in_window) >= max_requests:
            oldest_timestamp = min(requests_in_window)
            retry_after = int(oldest_timestamp + window_seconds - now) + 1
            return False, 0, retry_after

        self._requests[identifier].append(now)

        remaining = max_requests - len(requests_in_window) - 1
        return True, remaining, 0

    def reset(self):
        self._requests.clear()


# Global rate limiter instance
rate_limiter = RateLimiter()


def _client_identifier(request: Request) -> str:
    """Bearer token when present, otherwise the client IP (proxy aware)"""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return f"jwt:{hash(auth_header)}"

    client_ip = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if not client_ip and request.client:
        client_ip = request.client.host
    return f"ip:{client_ip or 'unknown'}"


def rate_limit(max_requests: int, window_seconds: int = 60, scope: str = None):
    """
    Dependency factory for applying rate limits to specific endpoints.

    Usage:
        @router.get("/customers")
        async def list_customers(
            _: None = Depends(rate_limit(30, 600))  # 30 requests per 10 minutes
        ):
            pass
    """
    async def checker(request: Request):
        key_scope = scope or f"{request.method}:{request.url.path}"
        identifier = f"endpoint:{key_scope}:{_client_identifier(request)}"

        is_allowed, remaining, retry_after = rate_limiter.is_allowed(
            identifier=identifier,
            max_requests=max_requests,
            window_seconds=window_seconds
        )

        if not is_allowed:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Rate limit exceeded for this endpoint. Try again in {retry_after} seconds.",
                headers={
                    "X-RateLimit-Limit": str(max_requests),
                    "X-RateLimit-Remaining": "0",
                    "Retry-After": str(retry_after),
                }
            )

    return checker
