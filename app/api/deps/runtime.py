from typing import Optional

from fastapi import HTTPException, Request, status

from app.core.clock import BookingClock
from app.core.rate_limit import RateLimiter
from app.core.redis import RedisClient


def get_clock(request: Request) -> BookingClock:
    return request.app.state.clock


def get_redis_client(request: Request) -> Optional[RedisClient]:
    """Shared Redis client, None when REDIS_URL is not configured."""
    return request.app.state.redis


async def enforce_booking_rate_limit(request: Request) -> None:
    """Reject the request with 429 once the client exceeds the booking rate."""
    limiter: Optional[RateLimiter] = request.app.state.rate_limiter
    if limiter is None:
        return

    identity = request.client.host if request.client else "unknown"
    if not await limiter.hit(identity):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "reason": "rate_limited",
                "message": "Too many booking attempts, please try again later",
            },
        )
