from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.platform.config import Settings
from app.platform.db.base import Base
from app.platform.logger import get_logger

logger = get_logger("database")


class DataStore:
    """
    Owns the async engine and session factory for one application instance.

    Built once at startup by the application lifespan and kept on ``app.state``;
    request handlers receive sessions through :func:`get_db`.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.sessionmaker = async_sessionmaker(
            engine, expire_on_commit=False, autoflush=False, autocommit=False
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DataStore":
        engine_kwargs = {"echo": settings.DB_ECHO, "future": True, "pool_pre_ping": True}
        if not settings.DATABASE_URL.startswith("sqlite"):
            engine_kwargs.update(
                pool_recycle=1800,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
            )
        return cls(create_async_engine(settings.DATABASE_URL, **engine_kwargs))

    async def create_tables(self) -> None:
        # Importing the models registers their tables on Base.metadata
        import app.features.waitlist.models.user  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def create_data_store(settings: Settings) -> Optional[DataStore]:
    if not settings.DATABASE_URL:
        logger.error("DATABASE_URL is not set; data-backed routes will answer 503")
        return None
    return DataStore.from_settings(settings)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    data_store: Optional[DataStore] = getattr(request.app.state, "data_store", None)
    if data_store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service unavailable"
        )

    async with data_store.sessionmaker() as session:
        yield session
