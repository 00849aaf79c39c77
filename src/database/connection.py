"""
Database connection and pool management
"""

import asyncpg
import logging
from typing import Optional

from config.settings import Settings
from database.user_repository import UserRepository, PostgresUserRepository, InMemoryUserRepository
from models.user import USERS_TABLE_DDL

logger = logging.getLogger(__name__)

# Global database pool and repository
db_pool: Optional[asyncpg.Pool] = None
user_repository: Optional[UserRepository] = None


async def init_database(settings: Settings):
    """Initialize the users store for the configured backend"""
    global db_pool, user_repository

    if settings.storage_backend == "memory":
        user_repository = InMemoryUserRepository()
        logger.info("In-memory users store initialized")
        return

    db = settings.database
    db_pool = await asyncpg.create_pool(
        host=db.host,
        port=db.port,
        user=db.user,
        password=db.password,
        database=db.database,
        min_size=db.min_pool_size,
        max_size=db.max_pool_size,
        command_timeout=db.command_timeout,
        statement_cache_size=0  # Fix for pgbouncer compatibility
    )

    # Test connection
    async with db_pool.acquire() as conn:
        await conn.fetchval("SELECT 1")
        if db.synchronize:
            await conn.execute(USERS_TABLE_DDL)
            logger.info("Users table synchronized")

    user_repository = PostgresUserRepository(db_pool)
    logger.info(f"Database initialized successfully: {db!r}")


async def close_database():
    """Close database connection pool"""
    global db_pool, user_repository
    if db_pool:
        await db_pool.close()
        db_pool = None
    user_repository = None
    logger.info("Database connections closed")


def get_db_pool() -> Optional[asyncpg.Pool]:
    """Get the database pool instance"""
    return db_pool


def get_user_repository() -> UserRepository:
    """Get the users repository for the active backend"""
    if user_repository is None:
        raise RuntimeError("Database not initialized")
    return user_repository


async def ping_database() -> bool:
    """Check that the active store answers"""
    if user_repository is None:
        return False

    pool = get_db_pool()
    if pool is None:
        # In-memory store is always reachable once initialized
        return True

    try:
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        return True
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return False
