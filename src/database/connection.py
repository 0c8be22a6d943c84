"""
Database connection management for TopicLink.

One `DatabaseManager` owns the async engine and session factory for the
graphs/topics store. Tables are created on first initialization.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
from urllib.parse import urlsplit, urlunsplit

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.common.config_utils import get_database_url, get_section

from .models import Base

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 10

_db_manager: Optional["DatabaseManager"] = None


class DatabaseManager:
    """Owns the engine for the graph store and hands out transactional sessions."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        pool_size: int = DEFAULT_POOL_SIZE,
        echo: bool = False,
    ):
        self.database_url = database_url or get_database_url()
        self.pool_size = pool_size
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None
        self._initialized = False

    @classmethod
    def from_config(cls, config_path: str = "config.yaml") -> "DatabaseManager":
        """Build a manager from the `database` section of config.yaml."""
        db_cfg = get_section("database", config_path)
        return cls(
            database_url=get_database_url(config_path),
            pool_size=int(db_cfg.get("pool_size", DEFAULT_POOL_SIZE)),
            echo=bool(db_cfg.get("echo", False)),
        )

    def _build_engine(self) -> AsyncEngine:
        return create_async_engine(
            self.database_url,
            echo=self.echo,
            pool_size=self.pool_size,
            max_overflow=self.pool_size * 2,
            pool_pre_ping=True,
        )

    async def _create_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def initialize(self) -> None:
        """Connect to the graph store and make sure `graphs` and `topics` exist."""
        if self._initialized:
            return

        logger.info("Connecting to graph store at %s", self._mask_password(self.database_url))
        self._engine = self._build_engine()
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        await self._create_schema()
        self._initialized = True
        logger.info("Graph store ready")

    async def close(self) -> None:
        """Dispose the engine; a later `session()` reconnects."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        self._initialized = False
        logger.info("Graph store connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session wrapped in one transaction.

        The transaction commits when the block exits normally and rolls back
        when it raises.
        """
        if not self._initialized:
            await self.initialize()

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> bool:
        """Return True when the store answers `SELECT 1`."""
        try:
            async with self.session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error("Graph store health check failed: %s", e)
            return False

    @staticmethod
    def _mask_password(url: str) -> str:
        parts = urlsplit(url)
        if not parts.password:
            return url
        host = parts.netloc.rsplit("@", 1)[1]
        return urlunsplit(parts._replace(netloc=f"{parts.username}:****@{host}"))


def get_db_manager() -> DatabaseManager:
    """Return the process-wide manager, building it from config.yaml on first use."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager.from_config()
    return _db_manager
