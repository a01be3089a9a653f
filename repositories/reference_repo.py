# ============================================================================
# REFERENCE DATA REPOSITORY
# ============================================================================
# STATUS: Domain - Count and bulk-insert for lookup catalogs
# PURPOSE: Relational access used by the seed catalog
# CREATED: 19 OCT 2026
# ============================================================================
"""
Reference Repository

Record-count and bulk-insert API per reference entity.
All SQL uses psycopg sql.SQL composition for injection safety.

Writes go through a session bound to a single connection and a single
transaction, so a seeding run either lands completely or not at all:

    repo = ReferenceRepository(pool, "indiec")
    async with repo.session() as session:
        if await session.count("statuses") == 0:
            ids = await session.bulk_insert("statuses", rows, key_field="name")
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Sequence

from psycopg import AsyncConnection, sql
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)


def _adapt(value: Any) -> Any:
    """Wrap container values for JSONB columns."""
    if isinstance(value, (dict, list)):
        return Json(value)
    return value


class ReferenceSession:
    """Reference table operations on one open transaction."""

    def __init__(self, conn: AsyncConnection, schema: str):
        self.conn = conn
        self.schema = schema

    def _table(self, table: str) -> sql.Identifier:
        return sql.Identifier(self.schema, table)

    async def count(self, table: str) -> int:
        """Number of rows in a reference table."""
        result = await self.conn.execute(
            sql.SQL("SELECT count(*) FROM {}").format(self._table(table))
        )
        row = await result.fetchone()
        return int(row[0]) if row else 0

    async def bulk_insert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        key_field: str = "name",
    ) -> Dict[Any, int]:
        """
        Insert all rows in a single statement.

        Args:
            table: Reference table name
            rows: Row mappings; every row must have the same columns
            key_field: Natural key column returned alongside the new id

        Returns:
            Mapping of natural key to generated id
        """
        if not rows:
            return {}

        columns = list(rows[0].keys())
        row_placeholder = sql.SQL("({})").format(
            sql.SQL(", ").join(sql.Placeholder() * len(columns))
        )
        query = sql.SQL("INSERT INTO {} ({}) VALUES {} RETURNING {}, id").format(
            self._table(table),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(row_placeholder for _ in rows),
            sql.Identifier(key_field),
        )
        params = [_adapt(row[c]) for row in rows for c in columns]

        result = await self.conn.execute(query, params)
        returned = await result.fetchall()
        logger.debug(f"Inserted {len(returned)} rows into {self.schema}.{table}")
        return {key: row_id for key, row_id in returned}

    async def fetch_keys(self, table: str, key_field: str = "name") -> Dict[Any, int]:
        """Natural key to id mapping for rows already present."""
        result = await self.conn.execute(
            sql.SQL("SELECT {}, id FROM {}").format(
                sql.Identifier(key_field), self._table(table)
            )
        )
        return {key: row_id for key, row_id in await result.fetchall()}


class ReferenceRepository:
    """Repository for reference catalog tables."""

    def __init__(self, pool: AsyncConnectionPool, schema: str):
        self.pool = pool
        self.schema = schema

    @asynccontextmanager
    async def session(self) -> AsyncIterator[ReferenceSession]:
        """Open a transaction; it commits on clean exit and rolls back on error."""
        async with self.pool.connection() as conn:
            async with conn.transaction():
                yield ReferenceSession(conn, self.schema)

    async def count(self, table: str) -> int:
        """Row count outside of any seeding transaction."""
        async with self.session() as session:
            return await session.count(table)

    async def counts(self, tables: List[str]) -> Dict[str, int]:
        """Row counts for several tables in one round of queries."""
        async with self.session() as session:
            return {table: await session.count(table) for table in tables}


__all__ = [
    "ReferenceSession",
    "ReferenceRepository",
]
