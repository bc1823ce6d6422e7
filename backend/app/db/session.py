"""
Database session configuration.

Async SQLAlchemy engine, session factory and declarative base shared by
every model. Bookings, tours, vehicles, drivers and companies all live in
the same relational store; nothing is cached in-process.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from backend.app.core.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """
    FastAPI dependency for database sessions.

    Yields an async database session and ensures it's properly closed.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def ping_database(db: AsyncSession) -> bool:
    """Return True when a trivial query round-trips."""
    try:
        await db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
