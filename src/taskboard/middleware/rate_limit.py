"""Rate limiting middleware — Redis fixed-window counters.

Each IP gets a counter per minute: "taskboard:rl:{ip}:{bucket}:{minute}".
Login and register share a stricter bucket to slow down credential
guessing. If Redis is not configured or errors, requests pass through.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from taskboard.redis_client import get_redis
from taskboard.schemas.error import ErrorResponse

logger = structlog.get_logger()

AUTH_PATHS = ("/api/auth/login", "/api/auth/register")


def rate_limit_key(client_ip: str, path: str, now: float) -> tuple[str, bool]:
    """Counter key for this request and whether it is an auth request."""
    is_auth = path.startswith(AUTH_PATHS)
    bucket = "auth" if is_auth else "api"
    window = int(now // 60)
    return f"taskboard:rl:{client_ip}:{bucket}:{window}", is_auth


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP, per-minute request limits."""

    def __init__(self, app, default_rpm: int = 100, auth_rpm: int = 10):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        key, is_auth = rate_limit_key(client_ip, request.url.path, time.time())
        rpm = self.auth_rpm if is_auth else self.default_rpm

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, 120)
        except Exception as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.info("rate_limit.exceeded", client_ip=client_ip, auth=is_auth)
            body = ErrorResponse.for_status(429, "Rate limit exceeded. Try again later.")
            return JSONResponse(
                status_code=429,
                content=body.to_content(),
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
