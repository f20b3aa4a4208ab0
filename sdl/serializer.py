# ============================================================================
# CLAUDE CONTEXT - CANONICAL SERIALIZER
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Engine - Schema graph to SDL text
# PURPOSE: Deterministic rendering so parse(serialize(s)) == s
# LAST_REVIEWED: 17 OCT 2026
# EXPORTS: render_type, render_modifiers, render_field, serialize, format_source
# DEPENDENCIES: none
# ============================================================================
"""
Canonical Serializer

Output layout:

    entity User {
      id: ID @primary
      email: string @unique
      status: enum(active,suspended) @default(active)
      posts: Post[]
    }

    entity Post {
      ...
    }

Entities and fields keep the schema's iteration order. Modifiers are
always written in the same order: @primary @unique @index @nullable(false)
@default(...). @nullable is only written when it differs from the default
(nullable, or non-null implied by @primary).

Default values are written verbatim inside @default(...). FieldModifiers
only accepts values for which that is lossless (see is_renderable_default),
so every graph the serializer can be given re-parses to itself.
"""

from typing import List, Optional, Tuple

from sdl.parser import parse
from sdl.types import (
    Diagnostic,
    Entity,
    EntityRefType,
    EnumType,
    FieldModifiers,
    FieldType,
    Schema,
    SchemaField,
)

INDENT = "  "


def render_type(field_type: FieldType) -> str:
    """Render a type expression, array suffix included."""
    if isinstance(field_type, EnumType):
        text = f"enum({','.join(field_type.values)})"
    elif isinstance(field_type, EntityRefType) and field_type.target_field:
        text = f"{field_type.target_entity}.{field_type.target_field}"
    else:
        text = field_type.base_name
    if field_type.is_array:
        text += "[]"
    return text


def render_modifiers(modifiers: FieldModifiers) -> List[str]:
    """Render modifier clauses in canonical order."""
    clauses = []
    if modifiers.is_primary:
        clauses.append("@primary")
    if modifiers.is_unique:
        clauses.append("@unique")
    if modifiers.is_index:
        clauses.append("@index")
    if not modifiers.is_nullable and not modifiers.is_primary:
        clauses.append("@nullable(false)")
    if modifiers.default_value is not None:
        clauses.append(f"@default({modifiers.default_value})")
    return clauses


def render_field(schema_field: SchemaField) -> str:
    """Render one field declaration (without indentation)."""
    parts = [f"{schema_field.name}: {render_type(schema_field.type)}"]
    parts.extend(render_modifiers(schema_field.modifiers))
    return " ".join(parts)


def _render_entity(entity: Entity) -> str:
    lines = [f"entity {entity.name} {{"]
    lines.extend(INDENT + render_field(f) for f in entity.fields.values())
    lines.append("}")
    return "\n".join(lines)


def serialize(schema: Schema) -> str:
    """
    Render a schema as canonical SDL text.

    Args:
        schema: Schema to render (errors are not rendered)

    Returns:
        SDL text ending with a newline, or "" for an empty schema
    """
    if not schema.entities:
        return ""
    blocks = [_render_entity(entity) for entity in schema.entities.values()]
    return "\n\n".join(blocks) + "\n"


def format_source(source: str) -> Tuple[Optional[str], List[Diagnostic]]:
    """
    Canonically re-format SDL source.

    Returns:
        (formatted text, []) when valid, (None, errors) otherwise
    """
    schema = parse(source)
    if not schema.is_valid:
        return None, schema.errors
    return serialize(schema), []
