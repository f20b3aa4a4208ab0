# ============================================================================
# CLAUDE CONTEXT - SDL ENGINE MODULE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Engine - Module exports
# PURPOSE: Parse, classify and serialize schema-definition-language text
# LAST_REVIEWED: 17 OCT 2026
# ============================================================================
"""
SDL Engine

Pure, synchronous and side-effect free. Safe to call concurrently.

Usage:
    from sdl import parse, serialize

    schema = parse(text)
    if schema.is_valid:
        canonical = serialize(schema)
"""

from sdl.types import (
    ScalarType,
    EnumType,
    EntityRefType,
    FieldModifiers,
    is_renderable_default,
    SchemaField,
    Entity,
    Relation,
    Diagnostic,
    Schema,
    derive_relations,
)
from sdl.scanner import Statement, scan
from sdl.resolver import Unknown, classify, resolve_type_expression
from sdl.parser import SchemaParser, parse
from sdl.serializer import serialize, format_source, render_type, render_field

__all__ = [
    # Graph
    "ScalarType",
    "EnumType",
    "EntityRefType",
    "FieldModifiers",
    "is_renderable_default",
    "SchemaField",
    "Entity",
    "Relation",
    "Diagnostic",
    "Schema",
    "derive_relations",
    # Scanner
    "Statement",
    "scan",
    # Resolver
    "Unknown",
    "classify",
    "resolve_type_expression",
    # Parser
    "SchemaParser",
    "parse",
    # Serializer
    "serialize",
    "format_source",
    "render_type",
    "render_field",
]
