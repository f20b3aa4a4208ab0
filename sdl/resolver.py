# ============================================================================
# CLAUDE CONTEXT - TYPE RESOLVER
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Engine - Field type classification
# PURPOSE: Classify type expressions as scalar, enum or entity reference
# LAST_REVIEWED: 17 OCT 2026
# EXPORTS: Unknown, classify, resolve_type_expression, IDENTIFIER_PATTERN
# DEPENDENCIES: re
# ============================================================================
"""
Type Resolver

Pure functions. Must run after every entity name is known (parser pass 1)
so that forward references resolve.

Type expression forms:
    string              scalar
    enum(a,b,c)         enumeration
    User                entity reference to User's identifier field
    User.email          entity reference to a named field
    <any of the above>[]  collection
"""

import re
from dataclasses import dataclass
from typing import Collection, Optional, Union

from core.contracts import ScalarKind
from sdl.types import EntityRefType, EnumType, FieldType, ScalarType

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
ENUM_PATTERN = re.compile(r"^enum\s*\((.*)\)$")
ARRAY_SUFFIX = "[]"


@dataclass(frozen=True)
class Unknown:
    """Classification failure, with a message for the diagnostic."""
    name: str
    reason: str


def _parse_enum_values(body: str) -> Union[EnumType, Unknown]:
    values = [v.strip() for v in body.split(",")]
    if values == [""]:
        return Unknown("enum", "Enum type requires at least one value")
    if any(not v for v in values):
        return Unknown("enum", "Enum type contains an empty value")
    seen = set()
    for v in values:
        if v in seen:
            return Unknown("enum", f'Enum value "{v}" is declared more than once')
        seen.add(v)
    return EnumType(values=tuple(values))


def classify(
    base_type: str,
    known_entities: Collection[str],
    referenced_field: Optional[str] = None,
    is_array: bool = False,
) -> Union[FieldType, Unknown]:
    """
    Classify a base type token.

    Args:
        base_type: Type token with array suffix and field qualifier removed
        known_entities: Entity names registered by pass 1
        referenced_field: Field qualifier (only valid for entity references)
        is_array: Collection marker

    Returns:
        ScalarType, EnumType, EntityRefType, or Unknown
    """
    match = ENUM_PATTERN.match(base_type)
    if match:
        if referenced_field is not None:
            return Unknown(base_type, "Enum types cannot reference a field")
        result = _parse_enum_values(match.group(1))
        if isinstance(result, EnumType):
            return EnumType(values=result.values, is_array=is_array)
        return result

    kind = ScalarKind.from_token(base_type)
    if kind is not None:
        if referenced_field is not None:
            return Unknown(base_type, f'Scalar type "{base_type}" cannot reference a field')
        return ScalarType(kind=kind, is_array=is_array)

    if base_type in known_entities:
        return EntityRefType(
            target_entity=base_type,
            target_field=referenced_field,
            is_array=is_array,
        )

    return Unknown(base_type, f'Unknown type "{base_type}"')


def resolve_type_expression(
    expression: str,
    known_entities: Collection[str],
) -> Union[FieldType, Unknown]:
    """
    Resolve a full type expression (array suffix and qualifier included).

    Args:
        expression: Text between ':' and the first modifier
        known_entities: Entity names registered by pass 1

    Returns:
        ScalarType, EnumType, EntityRefType, or Unknown
    """
    expr = expression.strip()
    if not expr:
        return Unknown("", "Missing field type")

    is_array = expr.endswith(ARRAY_SUFFIX)
    if is_array:
        expr = expr[: -len(ARRAY_SUFFIX)].strip()

    if ENUM_PATTERN.match(expr):
        return classify(expr, known_entities, is_array=is_array)

    parts = expr.split(".")
    if len(parts) > 2:
        return Unknown(expr, f'Invalid type reference "{expr}"')

    base_type = parts[0].strip()
    referenced_field = parts[1].strip() if len(parts) == 2 else None
    if referenced_field is not None and not IDENTIFIER_PATTERN.match(referenced_field):
        return Unknown(expr, f'Invalid referenced field "{referenced_field}"')
    if not IDENTIFIER_PATTERN.match(base_type):
        return Unknown(base_type, f'Unknown type "{base_type}"')

    return classify(base_type, known_entities, referenced_field, is_array)
