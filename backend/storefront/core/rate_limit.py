"""
Per-caller request limits for the /api routes

Sliding one-minute windows kept in process memory; every worker counts on its
own.
"""
import time
from collections import deque
from typing import Callable, Deque, Dict, NamedTuple, Tuple

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

WINDOW_SECONDS = 60

# Requests per window
AUTHENTICATED_LIMIT = 600      # merchants in the admin panel
ANONYMOUS_LIMIT = 120          # storefront visitors (analytics, coupons, checkout)

LIMITED_PREFIX = "/api/"


class Decision(NamedTuple):
    allowed: bool
    remaining: int
    retry_after: int


class RateLimiter:

    def __init__(self, window_seconds: int = WINDOW_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._next_prune = clock() + window_seconds

    def hit(self, key: str, limit: int) -> Decision:
        """Record a request for `key` unless it already used `limit` slots in the window"""
        now = self._clock()
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

        if len(hits) >= limit:
            retry_after = int(hits[0] + self.window_seconds - now) + 1
            return Decision(False, 0, retry_after)

        hits.append(now)
        self._prune(now)
        return Decision(True, limit - len(hits), 0)

    def _prune(self, now: float) -> None:
        # Forget callers idle for a whole window, at most once per window
        if now < self._next_prune:
            return
        self._next_prune = now + self.window_seconds
        idle = [key for key, hits in self._hits.items() if hits[-1] <= now - self.window_seconds]
        for key in idle:
            del self._hits[key]

    def reset(self) -> None:
        self._hits.clear()


rate_limiter = RateLimiter()


def get_client_ip(request: Request) -> str:
    """Caller IP behind the proxy chain"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers["X-Real-IP"]
    return request.client.host if request.client else "unknown"


def caller_key(request: Request) -> Tuple[str, int]:
    """(bucket key, limit): bearer token holders get their own bucket, others share their IP's"""
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        return f"token:{hash(authorization)}", AUTHENTICATED_LIMIT
    return f"ip:{get_client_ip(request)}", ANONYMOUS_LIMIT


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Answers 429 {"error": ...} with Retry-After once a caller exceeds its limit.

    Every limited response carries X-RateLimit-Limit and X-RateLimit-Remaining.
    """

    def __init__(self, app, limiter: RateLimiter = None):
        super().__init__(app)
        self.limiter = limiter or rate_limiter

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or not request.url.path.startswith(LIMITED_PREFIX):
            return await call_next(request)

        key, limit = caller_key(request)
        decision = self.limiter.hit(key, limit)

        if not decision.allowed:
            # Returned from here, not raised, so CORS headers still get added
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Too many requests. Please slow down."},
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "Retry-After": str(decision.retry_after),
                }
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response
