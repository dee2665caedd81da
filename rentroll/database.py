from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
import logging

from rentroll.core.config import settings
from rentroll.db.base import Base

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url_async

if not DATABASE_URL:
    raise ValueError("[ERROR] DATABASE_URL not found!")

if settings.is_sqlite:
    # SQLite: no pool sizing, allow use across the event loop's threads
    engine = create_async_engine(
        DATABASE_URL,
        echo=settings.DB_ECHO,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_async_engine(
        DATABASE_URL,
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_timeout=30,
    )

# Create AsyncSessionLocal class
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


def get_session_factory() -> async_sessionmaker:
    """Dependency for services that open their own units of work."""
    return AsyncSessionLocal


async def test_connection() -> bool:
    """Test database connection - NON-BLOCKING."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"[DB] Database connection failed (continuing): {e}")
        return False


async def init_db() -> None:
    """Create tables directly when migrations are not in use."""
    # Import all models so they're registered with Base
    import rentroll.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("[DB] Database tables initialized")


async def close_db_connection() -> None:
    """Close database connections."""
    await engine.dispose()
    logger.info("[DB] Database connections closed")
