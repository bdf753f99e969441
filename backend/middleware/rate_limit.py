"""
In-memory rate limiting for value-moving endpoints.

Each payment or withdrawal request costs a transaction fee on-chain, so
the submit routes are throttled per client IP and route with a sliding
window. Limits come from PAYMENT_RATE_LIMIT / PAYMENT_RATE_WINDOW_SECONDS
unless a route passes its own.

For multi-worker deployments put a shared limiter in front of the app.
"""
import logging
import math
import time
from collections import deque
from typing import Callable, NamedTuple

from fastapi import HTTPException, Request

from config import settings

logger = logging.getLogger(__name__)


class Verdict(NamedTuple):
    allowed: bool
    remaining: int
    retry_after: int     # seconds until a slot frees up; 0 when allowed


class RateLimiter:
    """
    Sliding-window request counter keyed by ``"<client ip>:<route path>"``.

    A key is forgotten as soon as its window holds no requests. Idle keys
    belonging to clients that never come back are dropped by ``sweep()``,
    which ``hit()`` runs at most once per window.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._windows: dict[str, float] = {}
        self._next_sweep = 0.0

    def __len__(self) -> int:
        return len(self._hits)

    def _expire(self, key: str, now: float) -> None:
        hits = self._hits.get(key)
        if hits is None:
            return
        cutoff = now - self._windows[key]
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]
            del self._windows[key]

    def sweep(self) -> None:
        """Drop every key whose window has emptied."""
        now = self._clock()
        for key in list(self._hits):
            self._expire(key, now)

    def hit(self, key: str, limit: int, window_seconds: float) -> Verdict:
        """Count one request against ``key`` unless the window is already full."""
        now = self._clock()
        if now >= self._next_sweep:
            self.sweep()
            self._next_sweep = now + window_seconds

        if key in self._hits:
            self._windows[key] = window_seconds
            self._expire(key, now)

        hits = self._hits.get(key)
        if hits is not None and len(hits) >= limit:
            retry_after = max(1, math.ceil(hits[0] + window_seconds - now))
            return Verdict(False, 0, retry_after)

        if hits is None:
            hits = self._hits[key] = deque()
            self._windows[key] = window_seconds
        hits.append(now)
        return Verdict(True, max(0, limit - len(hits)), 0)

    def reset(self) -> None:
        self._hits.clear()
        self._windows.clear()
        self._next_sweep = 0.0


_limiter = RateLimiter()


def reset_rate_limits():
    """Forget every recorded request (used between tests)."""
    _limiter.reset()


def rate_limit(max_requests: int | None = None, window_seconds: int | None = None):
    """
    FastAPI dependency factory for the submit routes.

    Settings are read per request, so changing them at runtime takes effect
    on the next call.

    Usage:
        @router.post("/process-payment", dependencies=[Depends(rate_limit())])
    """
    async def _check_rate_limit(request: Request):
        limit = max_requests if max_requests is not None else settings.payment_rate_limit
        window = window_seconds if window_seconds is not None else settings.payment_rate_window_seconds

        client_ip = request.client.host if request.client else "unknown"
        route_path = request.url.path
        verdict = _limiter.hit(f"{client_ip}:{route_path}", limit, window)

        if not verdict.allowed:
            logger.warning(f"Rate limit exceeded: {client_ip} on {route_path} ({limit}/{window}s)")
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded. Maximum {limit} requests "
                       f"per {window} seconds. Try again in {verdict.retry_after}s.",
                headers={
                    "Retry-After": str(verdict.retry_after),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": str(verdict.remaining),
                },
            )

    return _check_rate_limit
