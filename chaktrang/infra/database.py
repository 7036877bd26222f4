"""
SQL database connection with SQLAlchemy ORM (PostgreSQL via asyncpg, SQLite via aiosqlite)
"""

from typing import Optional
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine

from chaktrang.infra.config.settings import get_settings
from chaktrang.infra.models import Base
from chaktrang.core.logger.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()


class DatabaseManager:
    """SQLAlchemy async database manager"""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.DATABASE_URL
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    def _engine_options(self) -> dict:
        url = make_url(self.database_url)
        if url.get_backend_name() == "sqlite":
            return {"echo": settings.DB_LOGGING_ENABLED}
        return {
            "echo": settings.DB_LOGGING_ENABLED,
            "pool_pre_ping": True,
            "pool_size": settings.DB_POOL_SIZE,
            "pool_recycle": 3600
        }

    async def connect(self) -> AsyncEngine:
        """Initialize database engine, session factory and schema"""
        if self._engine is not None:
            return self._engine

        engine = create_async_engine(self.database_url, **self._engine_options())
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            await engine.dispose()
            logger.error(
                "Failed to connect to database",
                extra={
                    "backend": make_url(self.database_url).get_backend_name(),
                    "error": str(e)
                }
            )
            raise

        self._engine = engine
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )

        logger.info(
            "Connected to database with SQLAlchemy successfully",
            extra={"backend": make_url(self.database_url).get_backend_name()}
        )
        return self._engine

    async def close(self):
        """Close database engine"""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine closed")
            self._engine = None
            self._session_factory = None

    def get_engine(self) -> Optional[AsyncEngine]:
        """Get the current engine"""
        return self._engine

    def get_session_factory(self) -> Optional[async_sessionmaker]:
        """Get the session factory"""
        return self._session_factory
