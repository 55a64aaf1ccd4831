# db.py
"""
Async engine and session factory for the fleet database.

Views get their session from get_session(); the service functions take it
as an argument and never open one themselves.
"""
import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from config import settings
from db_base import Base

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict:
    options = {"echo": settings.DEBUG, "future": True}
    if not url.startswith("sqlite"):
        # server databases drop idle connections; check before reuse
        options["pool_pre_ping"] = True
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

# expire_on_commit=False: rows stay readable after the service commits
SessionFactory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """
    Create missing fleet tables straight from the models.

    Local runs only. Deployed databases are migrated with Alembic.
    """
    import db_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Fleet tables ready on %s", engine.url.render_as_string(hide_password=True))


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with SessionFactory() as session:
        yield session
