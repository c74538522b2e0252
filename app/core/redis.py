from datetime import date
from typing import Optional

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

logger = structlog.get_logger(__name__)

# Compare-and-delete, so an expired lock taken over by another request is kept
_RELEASE_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class RedisClient:
    """Redis client for booking locks and request counters.

    One instance is created per application and kept on ``app.state``.
    """

    def __init__(self, url: str):
        self.url = url
        self.redis_pool = None

    async def init_redis(self):
        """Initialize Redis connection pool."""
        try:
            self.redis_pool = redis.ConnectionPool.from_url(
                self.url,
                decode_responses=True,
                retry_on_timeout=True,
                socket_keepalive=True,
            )

            async with redis.Redis(connection_pool=self.redis_pool) as r:
                await r.ping()
                logger.info("Redis connection established")

        except Exception as e:
            self.redis_pool = None
            logger.error("Failed to connect to Redis", exc_info=e)
            raise

    async def get_redis(self) -> redis.Redis:
        """Get Redis client instance."""
        if not self.redis_pool:
            await self.init_redis()
        return redis.Redis(connection_pool=self.redis_pool)

    async def close(self):
        if self.redis_pool:
            await self.redis_pool.disconnect()
            self.redis_pool = None

    async def incr_with_expiry(self, key: str, expire: int) -> Optional[int]:
        """Increment a counter, setting its TTL on first hit.

        Returns None when Redis is unreachable.
        """
        try:
            client = await self.get_redis()
            # SET NX seeds the window with its TTL; INCR keeps it
            async with client.pipeline(transaction=True) as pipe:
                pipe.set(key, 0, ex=expire, nx=True)
                pipe.incr(key)
                _, count = await pipe.execute()
            return count
        except (RedisError, OSError) as e:
            logger.error("Redis INCR error", key=key, exc_info=e)
            return None

    @staticmethod
    def booking_lock_key(business_id: int, stylist_id: int, day: date) -> str:
        return f"booking_lock:{business_id}:{stylist_id}:{day.isoformat()}"

    async def acquire_booking_lock(
        self, business_id: int, stylist_id: int, day: date, token: str, ttl_seconds: int
    ) -> bool:
        """Take the per-stylist, per-day booking lock.

        Returns False only when another request holds the lock. Redis errors
        are logged and treated as acquired so bookings keep flowing; the
        database unique index still rejects identical starts.
        """
        lock_key = self.booking_lock_key(business_id, stylist_id, day)
        try:
            client = await self.get_redis()
            acquired = await client.set(lock_key, token, nx=True, ex=ttl_seconds)
            return bool(acquired)
        except (RedisError, OSError) as e:
            logger.error("Redis booking lock error", key=lock_key, exc_info=e)
            return True

    async def release_booking_lock(
        self, business_id: int, stylist_id: int, day: date, token: str
    ) -> bool:
        """Release the booking lock if it is still held by ``token``."""
        lock_key = self.booking_lock_key(business_id, stylist_id, day)
        try:
            client = await self.get_redis()
            released = await client.eval(_RELEASE_LOCK_SCRIPT, 1, lock_key, token)
            return bool(released)
        except (RedisError, OSError) as e:
            logger.error("Redis booking unlock error", key=lock_key, exc_info=e)
            return False
