# ============================================================================
# SERVICES MODULE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - Business logic layer
# PURPOSE: Schema synchronization service
# CREATED: 18 OCT 2026
# ============================================================================
"""
Services Module

Business logic for data model schemas.
Services coordinate between the SDL engine and repositories.

Usage:
    from services import SchemaService

    schema_service = SchemaService(pool)
    result = await schema_service.replace_schema(model_id, text, principal_id)
"""

from .schema_service import (
    SchemaService,
    SchemaSyncResult,
    SchemaDrafter,
    SchemaServiceError,
    Unauthenticated,
    NotFound,
    Forbidden,
    InvalidSchema,
    PersistenceFailure,
)

__all__ = [
    "SchemaService",
    "SchemaSyncResult",
    "SchemaDrafter",
    "SchemaServiceError",
    "Unauthenticated",
    "NotFound",
    "Forbidden",
    "InvalidSchema",
    "PersistenceFailure",
]
