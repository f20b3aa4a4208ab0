# ============================================================================
# CLAUDE CONTEXT - BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Foundation - Core enums shared by the engine and the store
# PURPOSE: Scalar vocabulary, cardinality, diagnostics and store enums
# LAST_REVIEWED: 16 OCT 2026
# EXPORTS: ScalarKind, Cardinality, DiagnosticKind, DbType, RelationType, ChatSender
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the data model SDL engine.

These enums cross boundaries:
- SDL text (parser / serializer)
- SQL (PostgreSQL enum types and columns)
- HTTP (API responses)
"""

from enum import Enum


# ============================================================================
# SDL VOCABULARY
# ============================================================================

class ScalarKind(str, Enum):
    """
    Built-in scalar field types.

    Values are the exact tokens accepted in SDL source (case-sensitive).
    """
    STRING = "string"
    TEXT = "text"
    NUMBER = "number"
    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATE = "date"
    TIME = "time"
    IDENTIFIER = "ID"
    JSON = "json"
    EMAIL = "email"
    URL = "url"
    UUID = "uuid"
    BIGINT = "bigint"
    BINARY = "binary"

    @classmethod
    def from_token(cls, token: str):
        """Return the kind for an SDL token, or None if it is not a scalar."""
        try:
            return cls(token)
        except ValueError:
            return None


class Cardinality(str, Enum):
    """Relation cardinality, derived from array notation on the field."""
    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"


class DiagnosticKind(str, Enum):
    """
    Diagnostic categories.

    SYNTAX and TYPE come from the parser (offending line or field skipped).
    REFERENTIAL comes from the synchronizer (relation dropped).
    """
    SYNTAX = "syntax"
    TYPE = "type"
    REFERENTIAL = "referential"


# ============================================================================
# STORE ENUMS
# ============================================================================

class DbType(str, Enum):
    """Target database family of a data model."""
    SQL = "SQL"
    NOSQL = "NOSQL"
    GRAPH = "GRAPH"


class RelationType(str, Enum):
    """How a persisted relation is realised in the target database."""
    FOREIGN_KEY = "FOREIGN_KEY"
    REFERENCE = "REFERENCE"
    EDGE = "EDGE"


class ChatSender(str, Enum):
    """Author of a chat message attached to a data model."""
    USER = "user"
    AI = "ai"
