"""Database connection utilities for docpager."""

import logging
from typing import Optional
import asyncpg
from asyncpg import Pool

from ..config import Settings, get_settings


logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the asyncpg connection pool for one application instance."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.pool: Optional[Pool] = None

    async def initialize(self) -> None:
        """Create the connection pool if it does not exist yet."""
        if self.pool is None:
            self.pool = await asyncpg.create_pool(
                self.settings.database_url,
                min_size=self.settings.db_pool_min_size,
                max_size=self.settings.db_pool_max_size,
                command_timeout=self.settings.db_command_timeout
            )
            logger.info("Database connection pool created")

    async def close(self) -> None:
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None

    async def get_pool(self) -> Pool:
        """Return the pool, creating it on first use."""
        if not self.pool:
            await self.initialize()
        return self.pool

    async def ping(self) -> None:
        """Run a trivial query; raises if the database is unreachable."""
        pool = await self.get_pool()
        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")
