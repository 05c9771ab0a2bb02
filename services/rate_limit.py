import math
import time
from collections import deque
from typing import Deque, Dict, NamedTuple

from fastapi import HTTPException, Request, Response


class RateLimitDecision(NamedTuple):
    allowed: bool
    remaining: int
    reset_after: float  # seconds until the oldest request leaves the window


class WindowLimiter:
    """
    Sliding-window request counter keyed by client.

    Keys whose window has emptied are dropped, and every `window_seconds` all
    idle keys are swept, so memory is bounded by the clients active in the
    last window.
    """

    def __init__(self, max_requests: int, window_seconds: float):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._buckets: Dict[str, Deque[float]] = {}
        self._last_sweep = time.monotonic()

    def __len__(self) -> int:
        return len(self._buckets)

    def _prune(self, key: str, now: float) -> None:
        window = self._buckets[key]
        while window and now - window[0] >= self.window_seconds:
            window.popleft()
        if not window:
            del self._buckets[key]

    def _sweep(self, now: float) -> None:
        for key in list(self._buckets):
            self._prune(key, now)
        self._last_sweep = now

    def hit(self, key: str) -> RateLimitDecision:
        now = time.monotonic()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)
        elif key in self._buckets:
            self._prune(key, now)

        window = self._buckets.get(key)
        if window is not None and len(window) >= self.max_requests:
            return RateLimitDecision(False, 0, self.window_seconds - (now - window[0]))

        if window is None:
            window = self._buckets[key] = deque()
        window.append(now)
        reset_after = self.window_seconds - (now - window[0])
        return RateLimitDecision(True, self.max_requests - len(window), reset_after)


def client_ip(req: Request, trust_proxy: bool = False) -> str:
    if trust_proxy:
        xff = req.headers.get("x-forwarded-for")
        if xff:
            return xff.split(",")[0].strip()
    return req.client.host if req.client else "unknown"


def _enforce(limiter: WindowLimiter, key: str, response: Response, message: str) -> None:
    decision = limiter.hit(key)
    headers = {
        "RateLimit-Limit": str(limiter.max_requests),
        "RateLimit-Remaining": str(decision.remaining),
        "RateLimit-Reset": str(math.ceil(decision.reset_after)),
    }
    if not decision.allowed:
        headers["Retry-After"] = headers["RateLimit-Reset"]
        raise HTTPException(status_code=429, detail=message, headers=headers)
    response.headers.update(headers)


async def api_rate_limit(request: Request, response: Response) -> None:
    _enforce(
        request.app.state.api_limiter,
        f"api:{client_ip(request, request.app.state.settings.TRUST_PROXY)}",
        response,
        "Demasiadas solicitudes desde esta IP, intenta de nuevo más tarde.",
    )


async def bulk_rate_limit(request: Request, response: Response) -> None:
    _enforce(
        request.app.state.bulk_limiter,
        f"bulk:{client_ip(request, request.app.state.settings.TRUST_PROXY)}",
        response,
        "Límite de procesamiento bulk alcanzado. Intenta más tarde.",
    )
