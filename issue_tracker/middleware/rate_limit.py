"""
Rate Limiting Middleware

Per-organization rate limiting using a token bucket stored in Redis.

Each organization gets a bucket of RATE_LIMIT_BURST tokens refilled at
RATE_LIMIT_PER_MINUTE. Redis failures let the request through.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from typing import Optional, Tuple
import redis
import time
import logging

from issue_tracker.config import get_settings
from issue_tracker.core.exceptions import RateLimitExceeded
from issue_tracker.utils.logging import log_security_event

logger = logging.getLogger(__name__)
settings = get_settings()

# Bucket state expires after this many seconds of inactivity
BUCKET_TTL = 60


class TokenBucketLimiter:
    """
    Token bucket over a Redis client.

    Keys:
    - rate_limit:{organization_id}            remaining tokens
    - rate_limit:{organization_id}:timestamp  last refill time
    """

    def __init__(self, redis_client, rate_per_minute: int, burst: int, clock=time.time):
        self.redis_client = redis_client
        self.rate_per_minute = rate_per_minute
        self.burst = burst
        self.clock = clock

    def check(self, organization_id: str) -> Tuple[bool, int]:
        """
        Consume one token for the organization.

        Returns: (allowed, retry_after_seconds)
        """
        key = f"rate_limit:{organization_id}"
        key_timestamp = f"{key}:timestamp"

        try:
            current_tokens = self.redis_client.get(key)
            last_update = self.redis_client.get(key_timestamp)

            now = self.clock()

            if current_tokens is None:
                # First request, full bucket minus this one
                self._store(key, key_timestamp, self.burst - 1, now)
                return True, 0

            current_tokens = float(current_tokens)
            last_update = float(last_update) if last_update else now

            elapsed = now - last_update
            tokens_to_add = elapsed * (self.rate_per_minute / 60.0)
            new_tokens = min(self.burst, current_tokens + tokens_to_add)

            if new_tokens >= 1:
                self._store(key, key_timestamp, new_tokens - 1, now)
                return True, 0

            tokens_needed = 1 - new_tokens
            retry_after = int((tokens_needed / (self.rate_per_minute / 60.0)) + 1)
            return False, retry_after

        except redis.RedisError as e:
            logger.error(f"Redis error in rate limiting: {e}")
            return True, 0

    def _store(self, key: str, key_timestamp: str, tokens: float, now: float) -> None:
        self.redis_client.setex(key, BUCKET_TTL, tokens)
        self.redis_client.setex(key_timestamp, BUCKET_TTL, now)


def build_limiter() -> Optional[TokenBucketLimiter]:
    """Connect to Redis and build a limiter, or None if Redis is unreachable."""
    try:
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5
        )
        client.ping()
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.error(f"Redis connection failed: {e}")
        return None

    logger.info("Redis connection established for rate limiting")
    return TokenBucketLimiter(
        client,
        rate_per_minute=settings.RATE_LIMIT_PER_MINUTE,
        burst=settings.RATE_LIMIT_BURST
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiter keyed by the organization set by TenantMiddleware.

    Must run after TenantMiddleware, i.e. be added before it.
    """

    def __init__(self, app, limiter: Optional[TokenBucketLimiter] = None):
        super().__init__(app)
        self.limiter = limiter if limiter is not None else build_limiter()

    async def dispatch(self, request: Request, call_next):
        if self.limiter is None:
            return await call_next(request)

        # Excluded paths carry no tenant context
        organization_id = getattr(request.state, "organization_id", None)
        if not organization_id:
            return await call_next(request)

        allowed, retry_after = self.limiter.check(organization_id)

        if not allowed:
            log_security_event(
                "rate_limit_exceeded",
                {"organization_id": organization_id, "path": request.url.path},
                logger
            )
            exc = RateLimitExceeded(retry_after=retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "detail": exc.detail,
                    "type": "rate_limit_exceeded",
                    "retry_after": retry_after
                },
                headers=exc.headers
            )

        return await call_next(request)
