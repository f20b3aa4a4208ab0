# ============================================================================
# CLAUDE CONTEXT - CORE MODULE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core module initialization
# PURPOSE: Export core contracts and models
# LAST_REVIEWED: 15 OCT 2026
# ============================================================================
"""
Core Module

Contracts and configuration are imported eagerly. Models and the schema
generator depend on the sdl package and are imported from their own
modules (core.models, core.schema).
"""

from core.contracts import Cardinality, ChatSender, DbType, DiagnosticKind, RelationType, ScalarKind

__all__ = [
    # Enums
    "ScalarKind",
    "Cardinality",
    "DiagnosticKind",
    "DbType",
    "RelationType",
    "ChatSender",
]
