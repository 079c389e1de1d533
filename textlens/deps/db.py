"""Database dependency injection for FastAPI routes.

Provides:
- Database session dependency for route injection
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from textlens.core.database import get_db_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    The session rolls back on exceptions and is closed after the request.
    Writers commit explicitly.
    """
    async for session in get_db_session():
        yield session


# Type alias for dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
