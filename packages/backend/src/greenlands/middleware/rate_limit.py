"""Per-IP request cap on the /api/ surface.

Counts live in Redis under ``greenlands:rl:<ip>:<window index>`` (fixed
windows, 100 requests per 15 minutes unless configured otherwise). When
Redis is not connected or errors, requests pass through uncounted.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from greenlands.realtime.pubsub import get_redis

logger = structlog.get_logger()

LIMITED_PREFIX = "/api/"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_requests: int = 100, window_seconds: int = 900):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next) -> Response:
        if not request.url.path.startswith(LIMITED_PREFIX):
            return await call_next(request)

        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        window = int(time.time() // self.window_seconds)
        key = f"greenlands:rl:{client_ip}:{window}"
        retry_after = self.window_seconds - int(time.time() % self.window_seconds)

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, self.window_seconds * 2)
        except Exception as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > self.max_requests:
            return JSONResponse(
                status_code=429,
                content={
                    "message": "Too many requests from this IP, please try again later.",
                    "code": "RATE_LIMITED",
                },
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.max_requests - count))
        return response
