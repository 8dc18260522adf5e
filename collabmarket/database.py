"""Database configuration and session management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import settings
from .models.base import Base


def _engine_options() -> dict[str, Any]:
    """Pool options for the configured backend.

    SQLite's async driver does not take a sized connection pool.
    """
    if settings.is_sqlite:
        return {}
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


# Create async engine
engine: AsyncEngine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(),
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency to get database session.

    Yields:
        AsyncSession: Database session

    Example:
        @router.get("/jobs")
        async def list_jobs(db: AsyncSession = Depends(get_db)):
            return await load_listings(db)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Initialize database tables.

    Creates all tables defined in the models if they don't exist.
    Should be called during application startup.

    Args:
        bind: Engine to create the tables on. Defaults to the module engine.
    """
    async with (bind or engine).begin() as conn:
        # Import all models to ensure they are registered
        from .models import (  # noqa: F401
            JobApplication,
            JobPosting,
            Profile,
            SavedJob,
        )

        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections.

    Disposes the engine and closes all connections.
    Should be called during application shutdown.
    """
    await engine.dispose()
