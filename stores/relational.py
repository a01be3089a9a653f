# ============================================================================
# RELATIONAL STORE HANDLE
# ============================================================================
# STATUS: Core - PostgreSQL store handle
# PURPOSE: Pool lifecycle, schema sync, table count and reference access
# CREATED: 19 OCT 2026
# ============================================================================
"""
Relational Store

PostgreSQL-backed StoreHandle. Connecting opens the psycopg pool and
synchronizes the reference schema; closing drains the pool.
"""

import logging
from typing import Optional

from psycopg_pool import AsyncConnectionPool

from core.config import RelationalStoreConfig
from core.contracts import StoreKind
from core.errors import StoreConnectionError
from repositories import database
from repositories.reference_repo import ReferenceRepository
from repositories.schema import ensure_reference_schema
from stores.base import StoreHandle

logger = logging.getLogger(__name__)


class RelationalStore(StoreHandle):
    """Handle for the relational (PostgreSQL) store."""

    kind = StoreKind.RELATIONAL

    def __init__(self, config: RelationalStoreConfig, name: Optional[str] = None):
        super().__init__(name)
        self.config = config
        self._pool: Optional[AsyncConnectionPool] = None

    @property
    def target(self) -> str:
        return self.config.safe_conninfo

    @property
    def pool(self) -> AsyncConnectionPool:
        if self._pool is None:
            raise StoreConnectionError(f"Store '{self.name}' has no open pool", store=self.name)
        return self._pool

    async def _open(self) -> None:
        pool = database.create_pool(self.config)
        await database.open_pool(pool, timeout=self.config.connect_timeout_seconds)
        try:
            if self.config.sync_schema:
                await ensure_reference_schema(pool, self.config.schema)
        except Exception:
            await pool.close()
            raise
        self._pool = pool

    async def _close(self) -> None:
        pool, self._pool = self._pool, None
        if pool is not None:
            await pool.close()

    async def _ping(self) -> None:
        await database.ping(self.pool)

    async def count_tables(self) -> int:
        """Number of tables in the configured schema."""
        return await database.count_tables(self.pool, self.config.schema)

    def reference_repository(self) -> ReferenceRepository:
        """Repository over the reference catalogs in this store."""
        return ReferenceRepository(self.pool, self.config.schema)


__all__ = ["RelationalStore"]
