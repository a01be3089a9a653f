# ============================================================================
# DATABASE CONNECTION POOL
# ============================================================================
# STATUS: Core - Async PostgreSQL connection management
# PURPOSE: Build, open and query the psycopg3 connection pool
# CREATED: 19 OCT 2026
# ============================================================================
"""
Database Connection Pool

Manages async PostgreSQL connections using psycopg3 and psycopg_pool.
The pool is owned by the relational StoreHandle (stores/relational.py);
these helpers only build and probe it.

Usage:
    pool = create_pool(config)
    await open_pool(pool, timeout=config.connect_timeout_seconds)
    async with pool.connection() as conn:
        await conn.execute("SELECT 1")
"""

import logging

from psycopg import sql
from psycopg_pool import AsyncConnectionPool

from core.config import RelationalStoreConfig

logger = logging.getLogger(__name__)


def create_pool(config: RelationalStoreConfig) -> AsyncConnectionPool:
    """
    Build an unopened connection pool.

    Args:
        config: Relational store settings

    Returns:
        AsyncConnectionPool instance (not yet open)
    """
    logger.info(f"Initializing connection pool: {config.safe_conninfo}")

    return AsyncConnectionPool(
        conninfo=config.conninfo,
        min_size=config.pool_min_size,
        max_size=config.pool_max_size,
        timeout=config.connect_timeout_seconds,
        open=False,  # opened explicitly by the store handle
    )


async def open_pool(pool: AsyncConnectionPool, timeout: float) -> None:
    """
    Open the pool and wait for min_size connections.

    Raises:
        psycopg_pool.PoolTimeout: no connection within `timeout` seconds.
            The pool is closed before re-raising so its background
            reconnect workers stop.
    """
    try:
        await pool.open(wait=True, timeout=timeout)
    except Exception:
        await pool.close()
        raise
    logger.info(f"Connection pool opened (min={pool.min_size}, max={pool.max_size})")


async def ping(pool: AsyncConnectionPool) -> None:
    """Round-trip a trivial query."""
    async with pool.connection() as conn:
        await conn.execute("SELECT 1")


async def count_tables(pool: AsyncConnectionPool, schema: str) -> int:
    """Number of base tables in `schema`."""
    async with pool.connection() as conn:
        result = await conn.execute(
            sql.SQL(
                "SELECT count(*) FROM information_schema.tables "
                "WHERE table_schema = {} AND table_type = 'BASE TABLE'"
            ).format(sql.Literal(schema)),
        )
        row = await result.fetchone()
        return int(row[0]) if row else 0


__all__ = [
    "create_pool",
    "open_pool",
    "ping",
    "count_tables",
]
