"""
Core database module for the application.

This module provides the declarative base, the async engine, the session
factory and the ``get_session`` dependency used by every router.
"""

from typing import AsyncGenerator, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy import Column, DateTime, text
from sqlalchemy.exc import SQLAlchemyError

from bookburst.common.utils.date_utils import utcnow
from bookburst.core.config import get_settings
from bookburst.logging.setup import get_logger

settings = get_settings()
logger = get_logger("bookburst.db")


class CustomBase:
    """Base class for all models with common columns and utility methods."""

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


Base = declarative_base(cls=CustomBase)


def build_engine(database_url: str, **kwargs):
    """Create an async engine; pool sizing only applies to server databases."""
    engine_kwargs: Dict[str, Any] = {"echo": settings.DB_ECHO}
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_pre_ping=True,
        )
    engine_kwargs.update(kwargs)
    return create_async_engine(database_url, **engine_kwargs)


def build_session_factory(bind) -> sessionmaker:
    return sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL)
async_session = build_session_factory(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session as a dependency.

    Yields:
        AsyncSession: SQLAlchemy async session
    """
    async with async_session() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Session error: {e}")
            await session.rollback()
            raise


async def init_models(bind=None) -> None:
    """Create all tables that do not exist yet."""
    # Registers every model on Base.metadata
    import bookburst.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_models(bind=None) -> None:
    import bookburst.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def check_database_connection() -> bool:
    """
    Check if database connection is working.
    Returns True if connection is successful, False otherwise.
    """
    try:
        async with async_session() as session:
            await session.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
