"""
Database Configuration and Session Management
============================================

Async engine, session factory and table creation for the balance ledger.
The engine is built explicitly at startup and handed to the services through
the application context; nothing here opens a connection at import time.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from models import Base

logger = logging.getLogger(__name__)


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for the ledger database"""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Handlers and the deposit monitor share the connection pool
        connect_args["check_same_thread"] = False
    return create_async_engine(
        database_url,
        echo=echo,          # Set to True for SQL logging in development
        pool_pre_ping=True,  # Validate connections before use
        connect_args=connect_args,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the given engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,  # Rows are read after commit in handlers
    )


@asynccontextmanager
async def async_managed_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Async context manager for database sessions: commit on success, rollback on error"""
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception as e:
        logger.error(f"Database session error: {e}")
        await session.rollback()
        raise
    finally:
        await session.close()


async def create_tables(engine: AsyncEngine) -> None:
    """Create all database tables if they don't exist"""
    logger.info("🏗️ Creating database tables (if they don't exist)...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"✅ Database schema verified: {', '.join(sorted(Base.metadata.tables))}")


async def verify_connection(engine: AsyncEngine) -> bool:
    """Test database connection"""
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
        logger.info("✅ Database connection test successful")
        return True
    except Exception as e:
        logger.error(f"❌ Database connection test failed: {e}")
        return False


async def dispose_engine(engine: Optional[AsyncEngine]) -> None:
    """Close pooled connections on shutdown"""
    if engine is not None:
        await engine.dispose()
        logger.info("✅ Database engine disposed")
