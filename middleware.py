import logging
import time
from threading import Lock
from typing import Callable, Dict, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


class FixedWindowRateLimiter:
    """Counts requests per client key within fixed windows of `window_seconds`."""

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[int, int]] = {}
        self._lock = Lock()

    def hit(self, key: str) -> bool:
        """Record one request for `key`; False once the window's quota is used up."""
        window = int(self.clock() // self.window_seconds)
        with self._lock:
            current, count = self._windows.get(key, (window, 0))
            if current != window:
                count = 0
                # Drop counters from earlier windows
                self._windows = {k: v for k, v in self._windows.items() if v[0] == window}
            count += 1
            self._windows[key] = (window, count)
        return count <= self.max_requests


def install_error_trap(app: FastAPI) -> None:
    """Turn any exception no handler claimed into a generic 500 body."""

    @app.middleware("http")
    async def error_trap(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(status_code=500, content={"error": "Server error"})


def install_rate_limit(app: FastAPI, limiter: FixedWindowRateLimiter) -> None:
    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        client = request.client.host if request.client else "unknown"
        if not limiter.hit(client):
            logger.warning("Rate limit exceeded for %s", client)
            return JSONResponse(status_code=429, content={"error": "Too many requests"})
        return await call_next(request)


def install_security_headers(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
