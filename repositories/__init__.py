# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# STATUS: Core - Database access layer
# PURPOSE: Pool helpers, schema sync and reference data access
# CREATED: 19 OCT 2026
# ============================================================================
"""
Repositories Module

Provides relational access for the service core.
Uses psycopg3 async with connection pooling.

Usage:
    from repositories import ReferenceRepository

    repo = ReferenceRepository(pool, "indiec")
    async with repo.session() as session:
        count = await session.count("statuses")
"""

from .database import create_pool, open_pool, count_tables
from .reference_repo import ReferenceRepository, ReferenceSession
from .schema import build_reference_ddl, ensure_reference_schema

__all__ = [
    "create_pool",
    "open_pool",
    "count_tables",
    "ReferenceRepository",
    "ReferenceSession",
    "build_reference_ddl",
    "ensure_reference_schema",
]
