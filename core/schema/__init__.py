# ============================================================================
# CLAUDE CONTEXT - SCHEMA MODULE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - Schema generation from Pydantic models
# PURPOSE: Generate PostgreSQL DDL from Pydantic models (single source of truth)
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.schema import ddl_utils
from core.schema.sql_generator import PydanticToSQL

__all__ = [
    "PydanticToSQL",
    "ddl_utils",
]
