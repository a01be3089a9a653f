# ============================================================================
# REFERENCE SCHEMA SYNC
# ============================================================================
# STATUS: Infrastructure - Idempotent DDL for reference tables
# PURPOSE: Create the schema and reference tables on connect
# CREATED: 19 OCT 2026
# ============================================================================
"""
Reference Schema Sync

Generates CREATE ... IF NOT EXISTS statements from the reference models'
SQL metadata and runs them in one transaction. Safe to run on every start.

Tables are emitted in REFERENCE_MODELS order so that foreign keys always
point at a table created earlier in the same run.
"""

import logging
from typing import List, Sequence, Type

from psycopg import sql
from psycopg_pool import AsyncConnectionPool

from core.models.reference import REFERENCE_MODELS, ReferenceEntity

logger = logging.getLogger(__name__)


def build_table_ddl(schema: str, model: Type[ReferenceEntity]) -> sql.Composed:
    """CREATE TABLE statement for one reference model."""
    columns: List[sql.Composable] = [sql.SQL("id SERIAL PRIMARY KEY")]

    for name, definition in model.__sql_columns__:
        column = sql.SQL("{} {}").format(sql.Identifier(name), sql.SQL(definition))
        referenced = model.__sql_foreign_keys__.get(name)
        if referenced:
            column = sql.SQL("{} REFERENCES {} (id)").format(
                column, sql.Identifier(schema, referenced)
            )
        columns.append(column)

    columns.append(sql.SQL("created_at TIMESTAMPTZ NOT NULL DEFAULT now()"))

    return sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(
        sql.Identifier(schema, model.__sql_table__),
        sql.SQL(", ").join(columns),
    )


def build_reference_ddl(
    schema: str,
    models: Sequence[Type[ReferenceEntity]] = REFERENCE_MODELS,
) -> List[sql.Composed]:
    """All statements needed for the reference schema, in execution order."""
    statements = [
        sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(schema)),
    ]
    statements.extend(build_table_ddl(schema, model) for model in models)
    return statements


async def ensure_reference_schema(pool: AsyncConnectionPool, schema: str) -> int:
    """
    Create the schema and reference tables if missing.

    Returns:
        Number of statements executed
    """
    statements = build_reference_ddl(schema)
    async with pool.connection() as conn:
        async with conn.transaction():
            for statement in statements:
                await conn.execute(statement)

    logger.info(f"Reference schema '{schema}' synchronized ({len(statements) - 1} tables)")
    return len(statements)


__all__ = [
    "build_table_ddl",
    "build_reference_ddl",
    "ensure_reference_schema",
]
