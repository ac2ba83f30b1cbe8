"""
Database connection management using asyncpg.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import asyncpg
from asyncpg import Connection, Pool

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages the connection pool and dedicated listener connections."""
    
    def __init__(self, database_url: Optional[str] = None, **pool_config):
        """Initialize DatabaseManager.
        
        Args:
            database_url: Database URL (defaults to DATABASE_URL env var)
            **pool_config: Additional pool configuration options
        """
        self.pool: Optional[Pool] = None
        self.dsn = database_url or os.getenv("DATABASE_URL", "")
        if "+asyncpg" in self.dsn:
            self.dsn = self.dsn.replace("+asyncpg", "")
        
        self.pool_config = {
            "min_size": 2,
            "max_size": 10,
            "max_inactive_connection_lifetime": 300,
            "command_timeout": 30,
            **pool_config
        }
        self.server_settings = {"application_name": os.getenv("APP_NAME", "wellcoach")}
    
    @classmethod
    def from_settings(cls, settings) -> 'DatabaseManager':
        return cls(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
    
    async def create_pool(self) -> Pool:
        """Create and return a connection pool."""
        if self.pool is None:
            logger.info(f"Creating database pool with size {self.pool_config['max_size']}")
            self.pool = await asyncpg.create_pool(
                self.dsn,
                server_settings=self.server_settings,
                **self.pool_config
            )
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
    
    async def connect(self) -> Connection:
        """Open a dedicated connection outside the pool.
        
        LISTEN registrations live as long as their connection, so change
        feed channels get their own instead of borrowing a pooled one.
        """
        return await asyncpg.connect(self.dsn, server_settings=self.server_settings)
