import structlog
from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from app.core.config import settings

logger = structlog.get_logger(__name__)

# Stable constraint names so PostgreSQL errors point at a known constraint
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def build_engine(url: str, **overrides) -> AsyncEngine:
    """Async engine for ``url``.

    Pool tuning only applies to server databases; SQLite (used by the test
    suite) keeps SQLAlchemy's defaults.
    """
    options = {"echo": False, "future": True}
    if not url.startswith("sqlite"):
        options.update(pool_pre_ping=True, pool_recycle=300)
    options.update(overrides)
    return create_async_engine(url, **options)


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL)
AsyncSessionLocal = build_sessionmaker(engine)

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))


async def init_db():
    """Verify the database connection at startup."""
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

        logger.info(
            "Database connection initialized",
            database=engine.url.render_as_string(hide_password=True),
        )
    except Exception as e:
        logger.error("Failed to initialize database", exc_info=e)
        raise


async def check_db(db: AsyncSession) -> bool:
    """Run a trivial query on the given session."""
    await db.execute(text("SELECT 1"))
    return True


async def get_db() -> AsyncSession:
    """Request-scoped session; rolled back if the handler raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error("Database session error", exc_info=e)
            raise
