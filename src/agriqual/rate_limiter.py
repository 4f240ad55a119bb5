"""Per-client rate limiting backed by Redis."""

import logging
import math
import time
from typing import Optional

import redis.asyncio as redis

from agriqual.config import (
    REDIS_URL,
    RATE_LIMIT_REQUESTS_PER_WINDOW,
    RATE_LIMIT_WINDOW_SECONDS,
    RATE_LIMIT_REDIS_KEY_PREFIX
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding window rate limiter using one Redis sorted set per client.

    Allows requests if Redis is unavailable.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        max_requests: int = RATE_LIMIT_REQUESTS_PER_WINDOW,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
        key_prefix: str = RATE_LIMIT_REDIS_KEY_PREFIX
    ):
        """Initialize rate limiter.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            max_requests: Requests allowed per client within one window
            window_seconds: Window length in seconds
            key_prefix: Prefix for per-client sorted set keys
        """
        self.redis_client = redis_client or redis.from_url(REDIS_URL)
        self.max_requests = max_requests
        self.window_size = float(window_seconds)
        self.key_prefix = key_prefix

    def key_for(self, client_id: str) -> str:
        """Sorted set key for one client."""
        return f"{self.key_prefix}:{client_id}"

    async def is_allowed(self, client_id: str) -> tuple[bool, int]:
        """Check if a request from a client is allowed under the rate limit.

        Args:
            client_id: Client identifier, usually the remote address

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
            - is_allowed: True if request should be allowed
            - retry_after_seconds: Seconds to wait before retrying (0 if allowed)
        """
        key = self.key_for(client_id)
        try:
            current_time = time.time()
            # Microsecond scores
            current_timestamp = int(current_time * 1000000)
            window_start = (current_time - self.window_size) * 1000000

            # Init pipeline
            pipe = self.redis_client.pipeline()

            # Add current request timestamp
            pipe.zadd(key, {str(current_timestamp): current_timestamp})

            # Remove old entries outside the window
            pipe.zremrangebyscore(key, 0, window_start)

            # Count current requests in window
            pipe.zcard(key)

            # Set expiration
            pipe.expire(key, int(self.window_size * 2))

            _, _, request_count, _ = await pipe.execute()

            # Check if rate limited
            if request_count > self.max_requests:
                retry_after = max(1, math.ceil(self.window_size))
                logger.debug(f"Rate limited {client_id}: count={request_count}, max={self.max_requests}")
                return False, retry_after

            logger.debug(f"Not rate limited {client_id}: count={request_count}, max={self.max_requests}")
            return True, 0

        except Exception as e:
            # Allow request if Redis is down
            logger.error(f"Rate limiter error: {e}")
            return True, 0

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
