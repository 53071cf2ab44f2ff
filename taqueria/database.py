"""
Catalog database: async SQLAlchemy engine, session factory and the
declarative base shared by taqueria.models.
"""

import logging
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from taqueria.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    options = {"echo": settings.debug}
    # sqlite picks its own pool class; sizing is for server databases
    if not settings.is_sqlite:
        options.update(pool_size=5, max_overflow=10, pool_pre_ping=True)
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

async_session_maker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request."""
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """Create missing tables (categories, menu_items, orders, settings)."""
    from taqueria import models  # noqa: F401  registers the tables

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Catalog tables ready ({engine.url.get_backend_name()})")
