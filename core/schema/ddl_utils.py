# ============================================================================
# CLAUDE CONTEXT - DDL BUILDING BLOCKS
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - Composable DDL fragments for the schema store
# PURPOSE: Schema, enum, index, trigger and comment statements via psycopg.sql
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: qualified, create_schema, set_search_path, create_enum,
#          create_index, comment_on_table, touch_function, touch_trigger
# DEPENDENCIES: psycopg
# ============================================================================
"""
DDL building blocks.

Every helper returns psycopg.sql objects. Identifiers always go through
sql.Identifier and values through sql.Literal, so nothing here is built
by string concatenation.

Usage:
    from core.schema import ddl_utils

    for stmt in ddl_utils.create_schema("sdlapp", "Data model schemas"):
        cursor.execute(stmt)
    cursor.execute(ddl_utils.create_index("sdlapp", "model_fields", ["entity_id"]))
"""

from typing import Iterable, List, Optional, Sequence

from psycopg import sql


TOUCH_FUNCTION = "touch_updated_at"


def qualified(schema: str, name: str) -> sql.Composed:
    """schema.name with both parts quoted."""
    return sql.SQL("{}.{}").format(sql.Identifier(schema), sql.Identifier(name))


# ============================================================================
# SCHEMA
# ============================================================================

def create_schema(schema: str, comment: Optional[str] = None) -> List[sql.Composed]:
    stmts = [sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(schema))]
    if comment:
        stmts.append(
            sql.SQL("COMMENT ON SCHEMA {} IS {}").format(
                sql.Identifier(schema), sql.Literal(comment)
            )
        )
    return stmts


def set_search_path(schema: str) -> sql.Composed:
    return sql.SQL("SET search_path TO {}, public").format(sql.Identifier(schema))


def create_enum(schema: str, name: str, values: Iterable[str]) -> sql.Composed:
    """
    CREATE TYPE ... AS ENUM guarded by a pg_type lookup.

    PostgreSQL has no CREATE TYPE IF NOT EXISTS, so re-running the
    deployment must not fail on an existing type. Existing types are left
    as they are; adding a value needs a migration.
    """
    return sql.SQL(
        "DO $$ BEGIN "
        "IF NOT EXISTS (SELECT 1 FROM pg_type t JOIN pg_namespace n ON n.oid = t.typnamespace "
        "WHERE t.typname = {type_name} AND n.nspname = {schema_name}) THEN "
        "CREATE TYPE {qualified_name} AS ENUM ({values}); "
        "END IF; END $$"
    ).format(
        type_name=sql.Literal(name),
        schema_name=sql.Literal(schema),
        qualified_name=qualified(schema, name),
        values=sql.SQL(", ").join(sql.Literal(v) for v in values),
    )


# ============================================================================
# INDEXES
# ============================================================================

def create_index(
    schema: str,
    table: str,
    columns: Sequence[str],
    name: Optional[str] = None,
    unique: bool = False,
    where: Optional[str] = None,
) -> sql.Composed:
    """
    CREATE [UNIQUE] INDEX IF NOT EXISTS over one or more columns.

    Args:
        schema: Schema name
        table: Table name
        columns: Indexed columns, in order
        name: Index name (default idx_<table>_<col>_<col>)
        unique: Emit a unique index
        where: Partial index predicate, trusted SQL from model metadata
    """
    if isinstance(columns, str):
        columns = [columns]
    index_name = name or "_".join(["idx", table, *columns])

    stmt = sql.SQL("CREATE {kind} IF NOT EXISTS {name} ON {table} ({columns})").format(
        kind=sql.SQL("UNIQUE INDEX" if unique else "INDEX"),
        name=sql.Identifier(index_name),
        table=qualified(schema, table),
        columns=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
    )
    if where:
        stmt = sql.SQL("{} WHERE {}").format(stmt, sql.SQL(where))
    return stmt


# ============================================================================
# COMMENTS AND TRIGGERS
# ============================================================================

def comment_on_table(schema: str, table: str, comment: str) -> sql.Composed:
    return sql.SQL("COMMENT ON TABLE {} IS {}").format(
        qualified(schema, table), sql.Literal(comment)
    )


def touch_function(schema: str) -> sql.Composed:
    """Trigger function that stamps updated_at on every UPDATE."""
    return sql.SQL(
        "CREATE OR REPLACE FUNCTION {}() RETURNS TRIGGER LANGUAGE plpgsql AS $$ "
        "BEGIN NEW.updated_at = NOW(); RETURN NEW; END; $$"
    ).format(qualified(schema, TOUCH_FUNCTION))


def touch_trigger(schema: str, table: str) -> List[sql.Composed]:
    """DROP + CREATE so repeated deployments converge on one trigger."""
    trigger = sql.Identifier(f"trg_{table}_touch")
    target = qualified(schema, table)
    return [
        sql.SQL("DROP TRIGGER IF EXISTS {} ON {}").format(trigger, target),
        sql.SQL(
            "CREATE TRIGGER {} BEFORE UPDATE ON {} FOR EACH ROW EXECUTE FUNCTION {}()"
        ).format(trigger, target, qualified(schema, TOUCH_FUNCTION)),
    ]


__all__ = [
    "qualified",
    "create_schema",
    "set_search_path",
    "create_enum",
    "create_index",
    "comment_on_table",
    "touch_function",
    "touch_trigger",
]
