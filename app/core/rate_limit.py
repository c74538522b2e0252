import structlog

from app.core.redis import RedisClient

logger = structlog.get_logger(__name__)


class RateLimiter:
    """Fixed-window request counter backed by Redis.

    Fails open: when Redis is unreachable every request is allowed.
    """

    def __init__(
        self, redis_client: RedisClient, limit: int, window_seconds: int, prefix: str
    ):
        self.redis_client = redis_client
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix

    def _key(self, identity: str) -> str:
        return f"rate:{self.prefix}:{identity}"

    async def hit(self, identity: str) -> bool:
        """Count one request for ``identity``; False once the limit is exceeded."""
        count = await self.redis_client.incr_with_expiry(
            self._key(identity), self.window_seconds
        )
        if count is None:
            return True

        if count > self.limit:
            logger.warning(
                "Rate limit exceeded",
                prefix=self.prefix,
                identity=identity,
                count=count,
                limit=self.limit,
            )
            return False
        return True
