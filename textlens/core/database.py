"""Async database session setup using SQLAlchemy.

Provides:
- Async engine creation
- Async session factory
- Schema creation at startup
"""

from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy import event, make_url, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from textlens.core.config import get_settings
from textlens.core.logging import get_logger
from textlens.models import Base

logger = get_logger(__name__)

# Global engine and session factory (initialized during lifespan)
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine | None:
    """Get the database engine instance.

    Returns None if not initialized.
    """
    return _engine


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return
    database = url.database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``database_url``.

    SQLite connections get foreign key enforcement switched on.
    """
    _ensure_sqlite_directory(database_url)
    engine = create_async_engine(
        database_url,
        pool_pre_ping=True,
        echo=echo,
    )
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables and indexes that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_database() -> None:
    """Initialize the database engine and session factory.

    Called during application startup. Creates the schema if needed.
    """
    global _engine, _async_session_factory

    settings = get_settings()

    logger.info(
        "Initializing database connection",
        database=make_url(settings.database_url).render_as_string(hide_password=True),
    )

    _engine = build_engine(settings.database_url, echo=settings.database_echo)
    _async_session_factory = build_session_factory(_engine)

    await create_schema(_engine)

    logger.info("Database connection initialized")


async def close_database() -> None:
    """Close database connections.

    Called during application shutdown.
    Disposes of the engine and releases all connections.
    """
    global _engine, _async_session_factory

    if _engine is not None:
        logger.info("Closing database connections")
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("Database connections closed")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session.

    Yields a session and ensures proper cleanup.
    Use as a dependency in FastAPI routes.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    async with _async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_database_health() -> tuple[bool, str | None]:
    """Check database connectivity.

    Returns:
        Tuple of (is_healthy, error_message)
    """
    if _engine is None:
        return False, "Database not initialized"

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True, None
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return False, str(e)
