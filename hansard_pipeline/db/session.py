"""
Database session and engine management.

Provides async database connections with connection pooling, transaction
management, and context managers.

Responsibility: Manage database connections and sessions
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker
)
from sqlalchemy.pool import NullPool
import logging

from ..config import DatabaseConfig

logger = logging.getLogger(__name__)


class Database:
    """
    Database connection manager.

    Handles engine creation, connection pooling, and session management
    for both local (SQLite) and production (PostgreSQL) environments.

    Example:
        db = Database(settings.db)
        await db.initialize()

        async with db.session() as session:
            result = await session.execute(query)

        await db.close()
    """

    def __init__(self, config: Optional[DatabaseConfig] = None):
        """Initialize database manager"""
        self.config = config or DatabaseConfig()
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None
        self._initialized = False

    @property
    def dialect_name(self) -> str:
        if not self.engine:
            raise RuntimeError("Database not initialized")
        return self.engine.dialect.name

    async def initialize(self) -> None:
        """
        Initialize database engine and session factory.

        SQLite runs without a connection pool; PostgreSQL uses the engine's
        default async queue pool sized from configuration.
        """
        if self._initialized:
            logger.warning("Database already initialized")
            return

        connection_string = self.config.connection_string

        logger.info(f"Initializing database: {connection_string.split('://')[0]}")

        if self.config.is_sqlite:
            # SQLite: No connection pooling (single-file database)
            engine_kwargs = {"poolclass": NullPool}
            logger.info("Using SQLite with NullPool")
        else:
            engine_kwargs = {
                "pool_size": self.config.pool_size,
                "max_overflow": self.config.max_overflow,
                "pool_timeout": self.config.pool_timeout,
                "pool_recycle": self.config.pool_recycle,
                "pool_pre_ping": True,
            }
            logger.info(
                f"Using PostgreSQL with connection pool "
                f"(size={self.config.pool_size}, "
                f"max_overflow={self.config.max_overflow})"
            )

        self.engine = create_async_engine(
            connection_string,
            echo=self.config.echo,
            **engine_kwargs
        )

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire objects after commit
            autoflush=False,  # Manual flush control
        )

        self._initialized = True
        logger.info("Database initialized successfully")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Create a new database session with automatic cleanup.

        Commits on success, rolls back on error.

        Yields:
            AsyncSession for database operations
        """
        if not self._initialized or not self.session_factory:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self.session_factory()

        try:
            yield session
            if session.in_transaction():
                await session.commit()
        except Exception as e:
            logger.error(f"Session error, rolling back: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """
        Create all database tables if they don't exist.
        """
        if not self._initialized or not self.engine:
            raise RuntimeError("Database not initialized")

        from .models import Base

        logger.info("Creating database tables...")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database tables created successfully")

    async def close(self) -> None:
        """
        Close database engine and cleanup connections.
        """
        if not self._initialized:
            return

        if self.engine:
            logger.info("Closing database connections...")
            await self.engine.dispose()
            self.engine = None

        self.session_factory = None
        self._initialized = False

        logger.info("Database closed")
