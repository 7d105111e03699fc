"""
Database utilities and connection management
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlmodel import SQLModel

from utils.config import get_config
import models.database  # noqa: F401  registers table metadata


def to_async_url(url: str) -> str:
    """Rewrite a plain Postgres URL (as Supabase hands it out) for asyncpg"""
    if url.startswith("postgresql+asyncpg://"):
        return url
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url.replace("postgresql://", "postgresql+asyncpg://", 1)


@lru_cache()
def get_engine() -> AsyncEngine:
    """Create the async engine on first use"""
    config = get_config()
    return create_async_engine(
        to_async_url(config.database_url),
        echo=config.environment == "development",
        pool_pre_ping=True,
    )


@lru_cache()
def get_session_factory() -> async_sessionmaker:
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db():
    """Initialize database tables"""
    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Get database session"""
    async with get_session_factory()() as session:
        yield session


async def get_db():
    """Dependency for FastAPI to get database session"""
    async with get_session() as session:
        yield session
