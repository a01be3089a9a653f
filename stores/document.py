# ============================================================================
# DOCUMENT STORE HANDLE
# ============================================================================
# STATUS: Core - MongoDB store handle
# PURPOSE: Async client lifecycle for the document store
# CREATED: 19 OCT 2026
# ============================================================================
"""
Document Store

MongoDB-backed StoreHandle using pymongo's asyncio client. Connecting
builds the client and forces server selection with a ping, so an
unreachable server fails within `server_selection_timeout_ms`.
"""

import logging
from typing import Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from core.config import DocumentStoreConfig
from core.contracts import StoreKind
from core.errors import StoreConnectionError
from stores.base import StoreHandle

logger = logging.getLogger(__name__)


class DocumentStore(StoreHandle):
    """Handle for the document (MongoDB) store."""

    kind = StoreKind.DOCUMENT

    def __init__(self, config: DocumentStoreConfig, name: Optional[str] = None):
        super().__init__(name)
        self.config = config
        self._client: Optional[AsyncMongoClient] = None

    @property
    def target(self) -> str:
        return f"{self.config.safe_uri}/{self.config.database}"

    @property
    def database(self) -> AsyncDatabase:
        if self._client is None:
            raise StoreConnectionError(f"Store '{self.name}' has no client", store=self.name)
        return self._client[self.config.database]

    async def _open(self) -> None:
        client = AsyncMongoClient(
            self.config.uri,
            serverSelectionTimeoutMS=self.config.server_selection_timeout_ms,
        )
        try:
            await client.admin.command("ping")
        except Exception:
            await client.close()
            raise
        self._client = client
        logger.info(f"MongoDB reachable at {self.target}")

    async def _close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.close()

    async def _ping(self) -> None:
        if self._client is None:
            raise StoreConnectionError(f"Store '{self.name}' has no client", store=self.name)
        await self._client.admin.command("ping")


__all__ = ["DocumentStore"]
