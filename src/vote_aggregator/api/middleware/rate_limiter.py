"""Vote intake rate limiter.

Sliding one-minute window per client IP, in memory. Suitable for a single
instance; the limit is per process. X-Forwarded-For is only honoured when
the service runs behind a trusted proxy (TRUST_FORWARDED_FOR).
"""

import time
from collections import deque
from collections.abc import Callable
from typing import Any

from fastapi import HTTPException, Request

DEFAULT_REQUESTS_PER_MINUTE = 100


class VoteRateLimiter:
    """IP-based sliding window limiter for POST /v1/votes."""

    WINDOW_SECONDS: int = 60

    def __init__(
        self,
        requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE,
        trust_forwarded_for: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.requests_per_minute = requests_per_minute
        self.trust_forwarded_for = trust_forwarded_for
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    @property
    def tracked_clients(self) -> int:
        return len(self._requests)

    def _get_client_key(self, request: Request) -> str:
        """Client IP, or the first X-Forwarded-For hop behind a trusted proxy."""
        if self.trust_forwarded_for:
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                return forwarded.split(",")[0].strip()
        if request.client and request.client.host:
            return request.client.host
        return "unknown"

    def _window(self, client_key: str, now: float) -> deque[float]:
        window = self._requests.get(client_key) or deque()
        self._trim(window, now)
        return window

    def _trim(self, window: deque[float], now: float) -> None:
        cutoff = now - self.WINDOW_SECONDS
        while window and window[0] <= cutoff:
            window.popleft()

    def _evict_idle_clients(self, now: float) -> None:
        """Drop clients with no request inside the window, at most once per window."""
        if now - self._last_sweep < self.WINDOW_SECONDS:
            return
        self._last_sweep = now
        for client_key in list(self._requests):
            window = self._requests[client_key]
            self._trim(window, now)
            if not window:
                del self._requests[client_key]

    async def check_rate_limit(self, request: Request) -> None:
        """Record the request or reject it.

        Raises:
            HTTPException: 429 if the client exceeded its budget.
        """
        client_key = self._get_client_key(request)
        now = self._clock()
        self._evict_idle_clients(now)
        window = self._window(client_key, now)

        if len(window) >= self.requests_per_minute:
            retry_after = max(1, int(window[0] + self.WINDOW_SECONDS - now) + 1)
            raise HTTPException(
                status_code=429,
                detail={
                    "type": "urn:vote-aggregator:rate-limit-exceeded",
                    "title": "Rate Limit Exceeded",
                    "status": 429,
                    "detail": (
                        f"Maximum {self.requests_per_minute} vote requests per minute exceeded"
                    ),
                    "instance": str(request.url),
                },
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(self.requests_per_minute),
                    "X-RateLimit-Remaining": "0",
                },
            )

        window.append(now)
        self._requests[client_key] = window

    def get_rate_limit_info(self, request: Request) -> dict[str, Any]:
        client_key = self._get_client_key(request)
        window = self._window(client_key, self._clock())
        return {
            "limit": self.requests_per_minute,
            "remaining": max(0, self.requests_per_minute - len(window)),
        }
