"""
Async engine, session factory and declarative base.

PostgreSQL (asyncpg) in production; SQLite (aiosqlite) for local runs and
tests, where pool sizing does not apply.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from coursestore.app.core.config import settings

engine_options = {"echo": settings.db_echo}
if not settings.database_url.startswith("sqlite"):
    engine_options.update(pool_size=settings.db_pool_size, max_overflow=settings.db_max_overflow)

engine = create_async_engine(settings.database_url, **engine_options)

# Services flush and commit explicitly
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def init_models():
    """Create missing tables for every model imported so far."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """
    FastAPI dependency yielding one session per request.

    Whatever the endpoint left uncommitted is rolled back on close.
    """
    async with AsyncSessionLocal() as session:
        yield session
