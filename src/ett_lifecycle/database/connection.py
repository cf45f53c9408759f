"""
Database connection management using asyncpg.
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import asyncpg
from asyncpg import Pool, Record

from ..config.settings import EttSettings
from ..core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages the asyncpg connection pool used by the repositories."""

    def __init__(self, settings: EttSettings, **pool_config):
        """Initialize DatabaseManager.

        Args:
            settings: Lifecycle settings carrying the database URL and pool sizes
            **pool_config: Additional pool configuration options
        """
        self.pool: Optional[Pool] = None
        self.dsn = settings.database_url
        if "+asyncpg" in self.dsn:
            self.dsn = self.dsn.replace("+asyncpg", "")
        self.app_name = settings.app_name

        self.pool_config = {
            "min_size": settings.db_pool_min_size,
            "max_size": settings.db_pool_max_size,
            "max_inactive_connection_lifetime": 300,
            "command_timeout": settings.db_command_timeout,
            **pool_config
        }

    async def create_pool(self) -> Pool:
        """Create and return a connection pool."""
        if self.pool is None:
            logger.info(f"Creating database pool with size {self.pool_config['max_size']}")
            try:
                self.pool = await asyncpg.create_pool(
                    self.dsn,
                    server_settings={"application_name": self.app_name},
                    **self.pool_config
                )
            except (OSError, asyncpg.PostgresError) as e:
                raise DatabaseError(f"Cannot connect to database: {e}") from e
            logger.info("Database pool created successfully")
        return self.pool

    async def close_pool(self):
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database pool closed")

    @asynccontextmanager
    async def acquire(self):
        """Acquire a connection from the pool."""
        if not self.pool:
            await self.create_pool()

        async with self.pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self):
        """Create a transaction context."""
        async with self.acquire() as connection:
            async with connection.transaction():
                yield connection

    async def execute(self, query: str, *args, timeout: float = None) -> str:
        """Execute a query without returning results."""
        async with self.acquire() as connection:
            return await connection.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: float = None) -> List[Record]:
        """Fetch multiple rows."""
        async with self.acquire() as connection:
            return await connection.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args, timeout: float = None) -> Optional[Record]:
        """Fetch a single row."""
        async with self.acquire() as connection:
            return await connection.fetchrow(query, *args, timeout=timeout)


def rows_affected(status: str) -> int:
    """Number of rows reported by an asyncpg command status such as 'DELETE 3'."""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0
