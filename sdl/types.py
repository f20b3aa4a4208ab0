# ============================================================================
# CLAUDE CONTEXT - SCHEMA GRAPH
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Engine - Normalized in-memory schema graph
# PURPOSE: Field types, modifiers, entities, derived relations, diagnostics
# LAST_REVIEWED: 17 OCT 2026
# EXPORTS: ScalarType, EnumType, EntityRefType, FieldModifiers, SchemaField,
#          Entity, Relation, Diagnostic, Schema
# DEPENDENCIES: dataclasses
# ============================================================================
"""
Schema Graph

The normalized output of the parser and the input of the serializer and
the synchronizer.

Relations are never stored: Schema.relations is computed from the field
graph on every access, so it cannot drift from the field declarations.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from core.contracts import Cardinality, DiagnosticKind, ScalarKind


# ============================================================================
# FIELD TYPES
# ============================================================================

@dataclass(frozen=True)
class ScalarType:
    """Built-in scalar type."""
    kind: ScalarKind
    is_array: bool = False

    @property
    def base_name(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class EnumType:
    """Inline enumeration, values in declaration order."""
    values: Tuple[str, ...]
    is_array: bool = False

    @property
    def base_name(self) -> str:
        return "enum"


@dataclass(frozen=True)
class EntityRefType:
    """
    Reference to another entity.

    target_field is only set for the qualified form (Entity.field).
    """
    target_entity: str
    target_field: Optional[str] = None
    is_array: bool = False

    @property
    def base_name(self) -> str:
        return self.target_entity


FieldType = Union[ScalarType, EnumType, EntityRefType]


def is_renderable_default(value: str) -> bool:
    """
    True if value survives being written back as @default(value).

    The serializer emits the value verbatim inside parentheses, so it must
    be a single line without surrounding whitespace and its parentheses
    must balance. Anything else would re-parse as a different value.
    """
    if not value or value != value.strip() or "\n" in value:
        return False
    depth = 0
    for ch in value:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


@dataclass(frozen=True)
class FieldModifiers:
    """Modifiers attached to a field declaration."""
    is_primary: bool = False
    is_unique: bool = False
    is_index: bool = False
    is_nullable: bool = True
    default_value: Optional[str] = None

    def __post_init__(self):
        if self.default_value is not None and not is_renderable_default(self.default_value):
            raise ValueError(f"Default value {self.default_value!r} cannot be written as @default(...)")


# ============================================================================
# ENTITIES
# ============================================================================

@dataclass
class SchemaField:
    """A named, typed attribute of an entity."""
    name: str
    type: FieldType
    modifiers: FieldModifiers = field(default_factory=FieldModifiers)
    line: int = field(default=0, compare=False)


@dataclass
class Entity:
    """A named record type with an ordered set of fields."""
    name: str
    fields: Dict[str, SchemaField] = field(default_factory=dict)
    line: int = field(default=0, compare=False)

    def add_field(self, schema_field: SchemaField) -> None:
        self.fields[schema_field.name] = schema_field

    def identifier_field(self) -> Optional[str]:
        """
        Name of the field relations target by default.

        First field of scalar kind ID, else the first @primary field.
        """
        for f in self.fields.values():
            if isinstance(f.type, ScalarType) and f.type.kind == ScalarKind.IDENTIFIER:
                return f.name
        for f in self.fields.values():
            if f.modifiers.is_primary:
                return f.name
        return None


# ============================================================================
# RELATIONS
# ============================================================================

@dataclass(frozen=True)
class Relation:
    """Edge between two entities implied by one entity-reference field."""
    from_entity: str
    from_field: str
    to_entity: str
    to_field: str
    cardinality: Cardinality
    is_nullable: bool = True

    @property
    def key(self) -> Tuple[str, str]:
        return (self.from_entity, self.from_field)

    @property
    def name(self) -> str:
        return f"{self.from_entity}_{self.from_field}_{self.to_entity}"


def derive_relations(
    entities: Dict[str, Entity],
    identifier_field: str = "id",
) -> List[Relation]:
    """
    Derive one relation per entity-reference field, in declaration order.

    Args:
        entities: Entities keyed by name
        identifier_field: Fallback target when the target entity has no
            identifier field

    Returns:
        List of Relation
    """
    relations = []
    for entity in entities.values():
        for f in entity.fields.values():
            if not isinstance(f.type, EntityRefType):
                continue
            to_field = f.type.target_field
            if to_field is None:
                target = entities.get(f.type.target_entity)
                to_field = (target.identifier_field() if target else None) or identifier_field
            relations.append(Relation(
                from_entity=entity.name,
                from_field=f.name,
                to_entity=f.type.target_entity,
                to_field=to_field,
                cardinality=Cardinality.ONE_TO_MANY if f.type.is_array else Cardinality.ONE_TO_ONE,
                is_nullable=f.modifiers.is_nullable,
            ))
    return relations


# ============================================================================
# DIAGNOSTICS
# ============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """A problem tied to a source line (0 when not tied to a line)."""
    line: int
    message: str
    kind: DiagnosticKind = DiagnosticKind.SYNTAX

    def __str__(self) -> str:
        return f"Line {self.line}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"line": self.line, "message": self.message, "kind": self.kind.value}


# ============================================================================
# SCHEMA
# ============================================================================

@dataclass
class Schema:
    """
    Parsed schema: entities in declaration order plus accumulated errors.

    A Schema is produced fresh by every parse. is_valid is simply
    "no errors"; callers must not persist an invalid schema.
    """
    entities: Dict[str, Entity] = field(default_factory=dict)
    errors: List[Diagnostic] = field(default_factory=list)
    identifier_field: str = field(default="id", compare=False)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def relations(self) -> List[Relation]:
        return derive_relations(self.entities, self.identifier_field)

    def relation_map(self) -> Dict[Tuple[str, str], Relation]:
        """Relations keyed by (entity name, field name)."""
        return {r.key: r for r in self.relations}

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary for API responses."""
        entities = {}
        for entity in self.entities.values():
            fields = {}
            for f in entity.fields.values():
                entry = {
                    "type": f.type.base_name,
                    "is_array": f.type.is_array,
                    "is_primary": f.modifiers.is_primary,
                    "is_unique": f.modifiers.is_unique,
                    "is_index": f.modifiers.is_index,
                    "is_nullable": f.modifiers.is_nullable,
                    "default_value": f.modifiers.default_value,
                }
                if isinstance(f.type, EnumType):
                    entry["enum_values"] = list(f.type.values)
                if isinstance(f.type, EntityRefType) and f.type.target_field:
                    entry["referenced_field"] = f.type.target_field
                fields[f.name] = entry
            entities[entity.name] = {"fields": fields}

        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "entities": entities,
            "relations": [
                {
                    "name": r.name,
                    "from_entity": r.from_entity,
                    "from_field": r.from_field,
                    "to_entity": r.to_entity,
                    "to_field": r.to_field,
                    "cardinality": r.cardinality.value,
                    "is_nullable": r.is_nullable,
                }
                for r in self.relations
            ],
        }
