# DB connections

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi import Request
from app.core.config import Settings
from app.models.base import Base
from app.models import event as _event, property as _property, tracking_plan as _tracking_plan  # noqa: F401
import structlog

logger = structlog.get_logger()


class Database:
    """Store handle owning the async engine and session factory.

    Built once at application startup and disposed at shutdown; request
    dependencies and scripts receive it explicitly.
    """

    def __init__(self, url: str, echo: bool = False, pool_size: int = 20):
        engine_kwargs = {"echo": echo}
        if url.startswith("sqlite"):
            # In-memory SQLite must share one connection across sessions
            engine_kwargs.update(
                poolclass=StaticPool,
                connect_args={"check_same_thread": False}
            )
        else:
            engine_kwargs.update(pool_size=pool_size, max_overflow=0)

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            echo=settings.debug,
            pool_size=settings.database_pool_size
        )

    async def create_all(self) -> None:
        """Create all tables (dev/test only, production uses Alembic)"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created")

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("database_disposed")


def get_database(request: Request) -> Database:
    """Dependency returning the store handle attached at startup"""
    return request.app.state.database
