"""Database session dependency."""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.infra.db import base


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session and make sure it is closed (and any open transaction rolled back)."""
    if base.AsyncSessionLocal is None:
        raise RuntimeError("Database is not configured; override get_db in tests")
    async with base.AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
