from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..config import settings
from .base import Base
from .urls import normalize_database_url


def build_async_engine(database_url: Optional[str] = None) -> AsyncEngine:
    return create_async_engine(normalize_database_url(database_url or settings.DATABASE_URL), echo=False)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


engine: AsyncEngine = build_async_engine()
SessionLocal = build_session_factory(engine)


@asynccontextmanager
async def session_scope(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> AsyncIterator[AsyncSession]:
    """Async session context manager for DB operations; commits on success."""
    factory = session_factory or SessionLocal
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_all(bind: Optional[AsyncEngine] = None) -> None:
    """Create all tables (local runs; use Alembic for managed databases)."""
    # models must be imported so their tables are registered on the metadata
    from . import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


if __name__ == "__main__":
    asyncio.run(create_all())
