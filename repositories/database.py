# ============================================================================
# DATABASE CONNECTION POOL
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - Async PostgreSQL connection management
# PURPOSE: Provide connection pooling for psycopg3 async
# CREATED: 14 OCT 2026
# ============================================================================
"""
Database Connection Pool

Manages async PostgreSQL connections using psycopg3 and psycopg_pool.
Singleton pattern ensures one pool per application.

Connection settings come from DATABASE_URL or the POSTGRES_* variables.

Usage:
    from repositories.database import get_pool

    pool = await get_pool()
    async with pool.connection() as conn:
        result = await conn.execute("SELECT 1")
"""

import os
import logging
from typing import Optional

from psycopg import AsyncConnection, sql
from psycopg_pool import AsyncConnectionPool

from core.config import get_defaults

logger = logging.getLogger(__name__)

# Global pool instance
_pool: Optional[AsyncConnectionPool] = None


def get_connection_string() -> str:
    """
    Get database connection string from environment.

    Priority:
    1. DATABASE_URL environment variable
    2. Individual POSTGRES_* components

    Returns:
        PostgreSQL connection string
    """
    if url := os.environ.get("DATABASE_URL"):
        return url

    host = os.environ.get("POSTGRES_HOST", "localhost")
    port = os.environ.get("POSTGRES_PORT", "5432")
    name = os.environ.get("POSTGRES_DB", "postgres")
    user = os.environ.get("POSTGRES_USER", "postgres")
    password = os.environ.get("POSTGRES_PASSWORD", "")
    sslmode = os.environ.get("POSTGRES_SSLMODE", "prefer")

    return f"postgresql://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}"


def mask_connection_string(conninfo: str) -> str:
    """Strip credentials from a connection string for logging."""
    if "@" in conninfo:
        return conninfo.split("@")[-1]
    if "password=" in conninfo:
        return conninfo.split("password=")[0] + "password=***"
    return conninfo


async def init_pool(
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
    connection_string: Optional[str] = None,
) -> AsyncConnectionPool:
    """
    Initialize the global connection pool.

    Args:
        min_size: Minimum connections to maintain (defaults to config)
        max_size: Maximum connections allowed (defaults to config)
        connection_string: Override connection string (defaults to env)

    Returns:
        AsyncConnectionPool instance
    """
    global _pool

    if _pool is not None:
        logger.warning("Pool already initialized, returning existing pool")
        return _pool

    db_defaults = get_defaults().database
    min_size = min_size if min_size is not None else db_defaults.pool_min_size
    max_size = max_size if max_size is not None else db_defaults.pool_max_size

    conninfo = connection_string or get_connection_string()
    logger.info(f"Initializing connection pool: {mask_connection_string(conninfo)}")

    _pool = AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        open=False,  # We'll open it explicitly
    )

    await _pool.open()
    logger.info(f"Connection pool opened (min={min_size}, max={max_size})")

    return _pool


async def get_pool() -> AsyncConnectionPool:
    """
    Get the global connection pool, initializing if needed.

    Returns:
        AsyncConnectionPool instance
    """
    if _pool is None:
        await init_pool()

    return _pool


async def close_pool() -> None:
    """Close the global connection pool."""
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Connection pool closed")


async def set_statement_timeout(conn: AsyncConnection, timeout_ms: int) -> None:
    """
    Bound every statement of the current transaction.

    SET LOCAL only lasts until commit or rollback, so the pooled
    connection is returned with its usual timeout.
    """
    await conn.execute(
        sql.SQL("SET LOCAL statement_timeout = {}").format(sql.Literal(int(timeout_ms)))
    )


# ============================================================================
# SCHEMA CONSTANTS
# ============================================================================

SCHEMA = get_defaults().database.schema_name

# Table identifiers - use with psycopg sql.SQL().format() for injection-safe queries
TABLE_DATA_MODELS = sql.Identifier(SCHEMA, "data_models")
TABLE_MODEL_ENTITIES = sql.Identifier(SCHEMA, "model_entities")
TABLE_MODEL_FIELDS = sql.Identifier(SCHEMA, "model_fields")
TABLE_MODEL_RELATIONS = sql.Identifier(SCHEMA, "model_relations")
TABLE_CHAT_MESSAGES = sql.Identifier(SCHEMA, "chat_messages")
