# ============================================================================
# STORES MODULE
# ============================================================================
# STATUS: Core - Persistent store handles
# PURPOSE: One handle per store kind, owned by the lifecycle orchestrator
# CREATED: 19 OCT 2026
# ============================================================================
"""
Stores Module

- StoreHandle: connect/close/status state machine
- RelationalStore: PostgreSQL (psycopg pool)
- DocumentStore: MongoDB (pymongo async client)
"""

from stores.base import ErrorInfo, StoreHandle, StoreStatus
from stores.relational import RelationalStore
from stores.document import DocumentStore

__all__ = [
    "ErrorInfo",
    "StoreHandle",
    "StoreStatus",
    "RelationalStore",
    "DocumentStore",
]
