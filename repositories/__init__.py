# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - Database access layer
# PURPOSE: CRUD operations for data models and their schema projection
# CREATED: 15 OCT 2026
# ============================================================================
"""
Repositories Module

Provides database access for data models and their normalized schemas.
Uses psycopg3 async with connection pooling.

Usage:
    from repositories import DataModelRepository, get_pool

    pool = await get_pool()
    repo = DataModelRepository(pool)
    model = await repo.get(data_model_id)
"""

from .database import get_pool, close_pool, init_pool, set_statement_timeout
from .chat_repo import ChatRepository
from .data_model_repo import DataModelRepository
from .schema_repo import SchemaRepository

__all__ = [
    "get_pool",
    "close_pool",
    "init_pool",
    "set_statement_timeout",
    "DataModelRepository",
    "SchemaRepository",
    "ChatRepository",
]
