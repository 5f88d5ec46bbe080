# sitevisits/core/db.py
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession

from sitevisits.core.config import Settings

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: Settings) -> Optional[AsyncEngine]:
    """Создает async-движок, если хранилище настроено. Соединение открывается лениво."""
    url = settings.ASYNC_DATABASE_URL
    if not url:
        return None

    connect_args = {}
    if url.startswith("postgresql+asyncpg://") and (settings.PGSSLMODE or "").lower() == "disable":
        connect_args["ssl"] = False

    engine = create_async_engine(url, echo=settings.SQL_ECHO, connect_args=connect_args)
    logger.info(f"Database engine created for dialect '{engine.dialect.name}'")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)
