"""
Note Service: Database Engine Management
==========================================

What:  Builds the async SQLAlchemy engine and probes it for liveness.
Why:   Keeps driver and pool configuration in one place, away from the
       statements the store executes.
How:   create_engine_from_settings() maps the configured connection limits
       onto SQLAlchemy's QueuePool; ping() runs SELECT 1 on a fresh
       connection.
Who:   Called by SqlNoteStore.connect() during application startup.

Connection Pooling:
    pool_size     = db_max_idle_conns   connections kept open between requests
    max_overflow  = max_open - max_idle extra connections opened under load
    pool_pre_ping                       stale connections (e.g. after a
                                        PostgreSQL restart) are replaced
                                        before use

    The engine is created once per process and owned by the store; nothing
    in this module holds it globally.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from noteservice.config import Settings

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the pooled async engine described by `settings`.

    Creating the engine opens no connection; call ping() to verify the
    database is reachable.
    """
    return create_async_engine(
        settings.database_dsn,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        echo=settings.log_level == "DEBUG",
    )


async def ping(engine: AsyncEngine) -> None:
    """Run a trivial query; raises whatever the driver raises on failure."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close every pooled connection."""
    await engine.dispose()
    logger.info("Database connections closed")
