"""
Database connection management for Yomikata.

One async engine per database URL, created lazily. Sessions are short
lived: every store call opens its own so that concurrent calls never
share one.
"""

import logging
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from yomikata.db.models import Base
from yomikata.settings import DB_URL, DEBUG

logger = logging.getLogger(__name__)

_engines: Dict[str, AsyncEngine] = {}


def get_db_url() -> str:
    """Get the configured database URL."""
    return DB_URL


def get_engine(db_url: Optional[str] = None) -> AsyncEngine:
    """
    Get (or create) the engine for a database URL.

    Args:
        db_url: SQLAlchemy async URL. Defaults to settings.DB_URL.
    """
    if db_url is None:
        db_url = get_db_url()
    engine = _engines.get(db_url)
    if engine is None:
        engine = create_async_engine(db_url, echo=DEBUG)
        _engines[db_url] = engine
    return engine


def get_session_factory(db_url: Optional[str] = None) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(db_url), expire_on_commit=False)


async def init_db(db_url: Optional[str] = None) -> None:
    """Create all tables that don't exist yet."""
    engine = get_engine(db_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database schema ready: {engine.url}")


async def dispose(db_url: Optional[str] = None) -> None:
    """Dispose the engine for a URL, or all engines."""
    if db_url is not None:
        engine = _engines.pop(db_url, None)
        if engine is not None:
            await engine.dispose()
        return
    for engine in list(_engines.values()):
        await engine.dispose()
    _engines.clear()
