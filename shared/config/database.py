from typing import AsyncIterator

import structlog
from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from .settings import Settings

log = structlog.get_logger(__name__)

Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    url = settings.database_url
    if url.startswith("sqlite"):
        # Local/test fallback. One shared connection keeps an in-memory
        # database alive across sessions.
        log.info("db_config", backend="sqlite", url=url)
        return create_async_engine(
            url,
            echo=settings.DB_ECHO,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    log.info("db_config", backend="postgres", host=settings.POSTGRES_HOST)
    return create_async_engine(url, echo=settings.DB_ECHO, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables registered on ``Base``."""
    # IMPORTANT: import models so they register with Base
    from services.auth_service import models as auth_models  # noqa: F401
    from services.product_service import models as product_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("db_tables_ready", tables=sorted(Base.metadata.tables.keys()))


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.session_factory() as session:
        yield session
