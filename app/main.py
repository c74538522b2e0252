from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.api import api_router
from app.core.clock import BookingClock
from app.core.config import settings
from app.core.database import init_db
from app.core.logging import setup_logging
from app.core.rate_limit import RateLimiter
from app.core.redis import RedisClient

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(
        "Starting application",
        project=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
    )
    await init_db()

    yield

    if app.state.redis is not None:
        await app.state.redis.close()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    setup_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Multi-tenant salon booking API",
        version=settings.VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.state.clock = BookingClock(settings.BOOKING_TIMEZONE)
    app.state.redis = RedisClient(settings.REDIS_URL) if settings.REDIS_URL else None
    app.state.rate_limiter = (
        RateLimiter(
            app.state.redis,
            limit=settings.BOOKING_RATE_LIMIT,
            window_seconds=settings.BOOKING_RATE_WINDOW_SECONDS,
            prefix="booking",
        )
        if app.state.redis is not None
        else None
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled error",
            method=request.method,
            path=request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
