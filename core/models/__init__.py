# ============================================================================
# CLAUDE CONTEXT - MODELS MODULE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# LAST_REVIEWED: 15 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

All Pydantic models for the schema store.
Models define SQL metadata via __sql_* ClassVar attributes for DDL generation.

Single Source of Truth Pattern:
    - Pydantic models define structure
    - PydanticToSQL reads __sql_* metadata
    - PostgreSQL schema generated from models
"""

from core.models.chat import ChatMessage
from core.models.data_model import DataModel
from core.models.projection import ModelEntity, ModelField, ModelRelation, PersistedSchema

__all__ = [
    "ChatMessage",
    "DataModel",
    "ModelEntity",
    "ModelField",
    "ModelRelation",
    "PersistedSchema",
]
