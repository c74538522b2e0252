#!/usr/bin/env python3
"""
Create (or drop) the booking tables in the database named by DATABASE_URL.

Usage:
    python scripts/create_schema.py          # create missing tables
    python scripts/create_schema.py drop     # drop every table
"""

import asyncio
import os
import sys

import structlog

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import app.models  # noqa: E402,F401  registers every table on Base.metadata
from app.core.config import settings  # noqa: E402
from app.core.database import Base, engine  # noqa: E402
from app.core.logging import setup_logging  # noqa: E402

logger = structlog.get_logger("create_schema")


async def create_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(
        "Schema created",
        tables=sorted(Base.metadata.tables),
        database=engine.url.render_as_string(hide_password=True),
    )


async def drop_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning(
        "Schema dropped", database=engine.url.render_as_string(hide_password=True)
    )


async def main(command: str) -> int:
    try:
        if command == "drop":
            await drop_schema()
        else:
            await create_schema()
    except Exception as e:
        logger.error(
            "Schema command failed",
            command=command,
            environment=settings.ENVIRONMENT,
            error=str(e),
        )
        return 1
    finally:
        await engine.dispose()
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "create")))
