from typing import Optional

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.database import get_db
from app.api.deps.runtime import get_redis_client
from app.core.config import settings
from app.core.database import check_db
from app.core.redis import RedisClient

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),
    redis_client: Optional[RedisClient] = Depends(get_redis_client),
):
    """Report database and Redis reachability."""
    checks = {"database": "ok", "redis": "disabled"}

    try:
        await check_db(db)
    except Exception as e:
        logger.error("Health check database failure", error=str(e))
        checks["database"] = "error"

    if redis_client is not None:
        try:
            client = await redis_client.get_redis()
            await client.ping()
            checks["redis"] = "ok"
        except Exception as e:
            logger.error("Health check redis failure", error=str(e))
            checks["redis"] = "error"

    healthy = "error" not in checks.values()
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "checks": checks,
        },
    )
