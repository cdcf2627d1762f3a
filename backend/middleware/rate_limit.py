"""Rate limiting middleware for the DeclutterAI API."""

import time
from collections import defaultdict
from typing import Callable, Optional, Sequence

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

# Routes that trigger a paid AI call
AI_ROUTES = ("/api/analyze-room",)

# Routes that touch billing state
BILLING_ROUTES = ("/api/checkout", "/api/dev/plan")

# Never limited (payment provider retries must always get through)
EXEMPT_ROUTES = ("/api/health", "/api/webhook/stripe")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per client, kept in process memory.

    Limits are per process; several workers each keep their own window.
    """

    # Prune stale client keys every 5 minutes
    _CLEANUP_INTERVAL = 300
    _WINDOW = 60

    def __init__(
        self,
        app,
        requests_per_minute: int = 60,
        ai_requests_per_minute: int = 10,
        billing_requests_per_minute: int = 5,
        ai_routes: Sequence[str] = AI_ROUTES,
        billing_routes: Sequence[str] = BILLING_ROUTES,
    ):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.ai_requests_per_minute = ai_requests_per_minute
        self.billing_requests_per_minute = billing_requests_per_minute
        self.ai_routes = tuple(ai_routes)
        self.billing_routes = tuple(billing_routes)
        self._requests: dict[str, list[float]] = defaultdict(list)
        self._last_cleanup = time.monotonic()

    def _get_client_id(self, request: Request) -> str:
        """Get a client identifier from the request."""
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"

    def _cleanup_stale_keys(self, now: float) -> None:
        if now - self._last_cleanup < self._CLEANUP_INTERVAL:
            return
        self._last_cleanup = now
        window_start = now - self._WINDOW
        stale = [key for key, stamps in self._requests.items() if not stamps or stamps[-1] < window_start]
        for key in stale:
            del self._requests[key]

    def _window(self, key: str, now: float) -> list[float]:
        window_start = now - self._WINDOW
        stamps = [t for t in self._requests[key] if t > window_start]
        self._requests[key] = stamps
        return stamps

    def _admit(self, buckets: list[tuple[str, int, str]], now: float) -> Optional[str]:
        """Return the rejection detail, or record a hit in every bucket and return None."""
        for key, limit, detail in buckets:
            if len(self._window(key, now)) >= limit:
                return detail
        for key, _, _ in buckets:
            self._requests[key].append(now)
        return None

    def _buckets(self, path: str, client_id: str) -> list[tuple[str, int, str]]:
        buckets = []
        if path.startswith(self.billing_routes):
            buckets.append((f"{client_id}:billing", self.billing_requests_per_minute,
                            "Too many billing requests. Please wait before trying again."))
        if path.startswith(self.ai_routes):
            buckets.append((f"{client_id}:ai", self.ai_requests_per_minute,
                            "AI request rate limit exceeded. Please wait before trying again."))
        buckets.append((client_id, self.requests_per_minute,
                        "Rate limit exceeded. Please wait before trying again."))
        return buckets

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path.startswith(EXEMPT_ROUTES):
            return await call_next(request)

        now = time.monotonic()
        self._cleanup_stale_keys(now)
        client_id = self._get_client_id(request)

        # Strictest bucket first
        detail = self._admit(self._buckets(path, client_id), now)
        if detail is not None:
            return JSONResponse(status_code=429, content={"detail": detail})

        return await call_next(request)
