# ============================================================================
# CLAUDE CONTEXT - SCHEMA PARSER
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Engine - Two-pass SDL parser
# PURPOSE: Turn SDL text into a normalized Schema with positioned errors
# LAST_REVIEWED: 17 OCT 2026
# EXPORTS: SchemaParser, parse
# DEPENDENCIES: re, core.config
# ============================================================================
"""
Schema Parser

Two passes over the scanned statements:

    Pass 1: register every entity header, so references can point forward.
    Pass 2: parse field declarations inside each entity block.

Then qualified references (Entity.field) are checked against the parsed
fields of their target.

The parser never raises. It accumulates diagnostics and skips what it
cannot understand: a bad header skips its block, a bad field skips the
field, an unknown modifier skips only the modifier.

Usage:
    from sdl import parse

    schema = parse(text)
    if not schema.is_valid:
        for error in schema.errors:
            print(error)
"""

import logging
import re
from typing import Dict, List, Optional

from core.config import get_defaults
from core.contracts import DiagnosticKind, ScalarKind
from sdl.resolver import IDENTIFIER_PATTERN, Unknown, resolve_type_expression
from sdl.scanner import Statement, scan, split_outside_parens
from sdl.types import (
    Diagnostic,
    Entity,
    EntityRefType,
    FieldModifiers,
    Schema,
    SchemaField,
    is_renderable_default,
)

logger = logging.getLogger(__name__)

HEADER_PREFIX = re.compile(r"^entity(\s|\{|$)")
HEADER_PATTERN = re.compile(r"^entity\s+([A-Za-z0-9_]+)\s*\{$")
MODIFIER_PATTERN = re.compile(r"^([A-Za-z_]+)\s*(?:\((.*)\)|=(.*))?$")

FLAG_MODIFIERS = ("primary", "unique", "index")
MODIFIERS = FLAG_MODIFIERS + ("nullable", "default")
RESERVED_NAMES = frozenset({kind.value for kind in ScalarKind} | {"enum", "entity"})


def _is_header(text: str) -> bool:
    return bool(HEADER_PREFIX.match(text)) and ":" not in text


class SchemaParser:
    """
    Parse SDL source into a Schema.

    A parser instance holds the state of one parse; use parse() or create
    a new instance per document.
    """

    def __init__(self, identifier_field: Optional[str] = None):
        self.identifier_field = identifier_field or get_defaults().schema.identifier_field
        self.entities: Dict[str, Entity] = {}
        self.errors: List[Diagnostic] = []
        # statement index -> entity name, for headers accepted by pass 1
        self._headers: Dict[int, str] = {}

    def parse(self, source: str) -> Schema:
        """
        Parse SDL source.

        Args:
            source: SDL text

        Returns:
            Schema (check is_valid / errors)
        """
        statements = scan(source)

        self._register_entities(statements)
        self._parse_fields(statements)
        self._check_field_references()

        self.errors.sort(key=lambda d: d.line)
        schema = Schema(
            entities=self.entities,
            errors=self.errors,
            identifier_field=self.identifier_field,
        )
        logger.debug(
            f"Parsed {len(schema.entities)} entities, "
            f"{len(schema.errors)} errors"
        )
        return schema

    # =========================================================================
    # DIAGNOSTICS
    # =========================================================================

    def _error(self, line: int, message: str, kind: DiagnosticKind = DiagnosticKind.SYNTAX) -> None:
        self.errors.append(Diagnostic(line=line, message=message, kind=kind))

    # =========================================================================
    # PASS 1: ENTITY HEADERS
    # =========================================================================

    def _register_entities(self, statements: List[Statement]) -> None:
        for index, stmt in enumerate(statements):
            if not _is_header(stmt.text):
                continue

            match = HEADER_PATTERN.match(stmt.text)
            if not match:
                self._error(stmt.line, "Invalid entity declaration")
                continue

            name = match.group(1)
            if name in RESERVED_NAMES:
                self._error(stmt.line, f'Entity name "{name}" is a reserved type name')
                continue
            if name in self.entities:
                first = self.entities[name].line
                self._error(
                    stmt.line,
                    f'Duplicate entity "{name}" (first declared on line {first})',
                )
                continue

            self.entities[name] = Entity(name=name, line=stmt.line)
            self._headers[index] = name

    # =========================================================================
    # PASS 2: FIELDS
    # =========================================================================

    def _parse_fields(self, statements: List[Statement]) -> None:
        current: Optional[Entity] = None
        in_block = False
        opened: Optional[Statement] = None

        for index, stmt in enumerate(statements):
            text = stmt.text

            if _is_header(text):
                if in_block:
                    self._unclosed(opened, current)
                name = self._headers.get(index)
                opened = stmt
                # Rejected headers keep in_block so their fields are skipped quietly
                current = self.entities[name] if name else None
                in_block = True
                continue

            if text == "}":
                if not in_block:
                    self._error(stmt.line, "Unexpected '}'")
                current = None
                in_block = False
                continue

            if ":" in text:
                if not in_block:
                    self._error(stmt.line, "Field declaration outside of an entity block")
                elif current is not None:
                    self._parse_field(current, stmt)
                continue

            if in_block and current is None:
                continue
            self._error(stmt.line, f'Unrecognized statement "{text}"')

        if in_block:
            self._unclosed(opened, current)

    def _unclosed(self, header: Statement, entity: Optional[Entity]) -> None:
        """Report a block that is still open when the next one (or the input) starts."""
        if entity is None:
            self._error(header.line, 'Entity block is missing a closing "}"')
        else:
            self._error(header.line, f'Entity "{entity.name}" is missing a closing "}}"')

    def _parse_field(self, entity: Entity, stmt: Statement) -> None:
        name, _, rest = stmt.text.partition(":")
        name = name.strip()

        if not IDENTIFIER_PATTERN.match(name):
            self._error(stmt.line, f'Invalid field name "{name}"')
            return
        if name in entity.fields:
            self._error(
                stmt.line,
                f'Duplicate field "{name}" in entity "{entity.name}" '
                f"(first declared on line {entity.fields[name].line})",
            )
            return

        clauses = split_outside_parens(rest, "@")
        field_type = resolve_type_expression(clauses[0], self.entities)
        if isinstance(field_type, Unknown):
            self._error(stmt.line, field_type.reason, DiagnosticKind.TYPE)
            return

        modifiers = self._parse_modifiers(clauses[1:], stmt.line)
        entity.add_field(SchemaField(
            name=name,
            type=field_type,
            modifiers=modifiers,
            line=stmt.line,
        ))

    def _parse_modifiers(self, clauses: List[str], line: int) -> FieldModifiers:
        flags = {name: False for name in FLAG_MODIFIERS}
        is_nullable = True
        default_value = None

        for clause in clauses:
            clause = clause.strip()
            match = MODIFIER_PATTERN.match(clause)
            if not match:
                self._error(line, f'Invalid modifier "@{clause}"')
                continue

            name = match.group(1)
            value = match.group(2) if match.group(2) is not None else match.group(3)
            if value is not None:
                value = value.strip()

            if name not in MODIFIERS:
                self._error(line, f'Unknown modifier "@{name}"')
            elif name in FLAG_MODIFIERS:
                if value:
                    self._error(line, f'Modifier "@{name}" does not take a value')
                flags[name] = True
            elif name == "nullable":
                if value is None:
                    is_nullable = True
                elif value.lower() in ("true", "false"):
                    is_nullable = value.lower() == "true"
                else:
                    self._error(line, f'Invalid @nullable value "{value}" (expected true or false)')
            elif not value:
                self._error(line, 'Modifier "@default" requires a value')
            elif not is_renderable_default(value):
                self._error(line, f'Invalid @default value "{value}" (unbalanced parentheses)')
            else:
                default_value = value

        # @primary wins over any @nullable, whatever the order
        if flags["primary"]:
            is_nullable = False

        return FieldModifiers(
            is_primary=flags["primary"],
            is_unique=flags["unique"],
            is_index=flags["index"],
            is_nullable=is_nullable,
            default_value=default_value,
        )

    # =========================================================================
    # QUALIFIED REFERENCES
    # =========================================================================

    def _check_field_references(self) -> None:
        """Drop references to fields that do not exist, until stable."""
        changed = True
        while changed:
            changed = False
            for entity in self.entities.values():
                for schema_field in list(entity.fields.values()):
                    ref = schema_field.type
                    if not isinstance(ref, EntityRefType) or ref.target_field is None:
                        continue
                    target = self.entities[ref.target_entity]
                    if ref.target_field in target.fields:
                        continue
                    self._error(
                        schema_field.line,
                        f'Field "{ref.target_field}" does not exist on entity "{ref.target_entity}"',
                        DiagnosticKind.TYPE,
                    )
                    del entity.fields[schema_field.name]
                    changed = True


def parse(source: str, identifier_field: Optional[str] = None) -> Schema:
    """Parse SDL source into a Schema. Never raises on bad input."""
    return SchemaParser(identifier_field=identifier_field).parse(source)
