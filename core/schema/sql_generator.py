# ============================================================================
# CLAUDE CONTEXT - PYDANTIC TO SQL GENERATOR
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - DDL generation from Pydantic models
# PURPOSE: Generate PostgreSQL CREATE statements for the schema store
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: PydanticToSQL
# DEPENDENCIES: pydantic, psycopg, annotated_types
# ============================================================================
"""
Pydantic to PostgreSQL Schema Generator.

The store models are the single source of truth for the store's tables.
Each model declares its SQL metadata through ClassVar attributes:

    __sql_table__          table name
    __sql_schema__         schema name
    __sql_primary_key__    primary key column(s), string or list
    __sql_foreign_keys__   {column: "schema.table(column)"}, ON DELETE CASCADE
    __sql_indexes__        (name, columns[, where]) tuples or dicts with
                           name/columns/partial_where/unique keys
    __sql_serial_columns__ columns created as SERIAL

Usage:
    statements = PydanticToSQL(schema_name="sdlapp").generate_all()
"""

import re
import logging
from typing import Dict, List, Optional, Type, Any, Union, get_args, get_origin
from datetime import datetime
from enum import Enum
from pydantic import BaseModel
from pydantic.fields import FieldInfo
from psycopg import sql
from annotated_types import MaxLen

from core.schema import ddl_utils

logger = logging.getLogger(__name__)

FK_PATTERN = re.compile(r"(\w+)\.(\w+)\((\w+)\)")
TIMESTAMP_COLUMNS = ("created_at", "updated_at")


class PydanticToSQL:
    """
    Convert Pydantic models to PostgreSQL DDL statements.

    Enum-typed fields register their enum in self.enums as a side effect of
    type conversion; generate_all() emits those types before the tables.
    """

    TYPE_MAP = {
        str: "VARCHAR",
        int: "INTEGER",
        float: "DOUBLE PRECISION",
        bool: "BOOLEAN",
        datetime: "TIMESTAMPTZ",
        dict: "JSONB",
        Dict: "JSONB",
        list: "JSONB",
        List: "JSONB",
    }

    def __init__(self, schema_name: str = "sdlapp"):
        self.schema_name = schema_name
        self.enums: Dict[str, Type[Enum]] = {}

    # =========================================================================
    # METADATA EXTRACTION
    # =========================================================================

    @staticmethod
    def get_model_metadata(model: Type[BaseModel]) -> Dict[str, Any]:
        """
        Read the __sql_* attributes of a model.

        Python mangles them to _ClassName__sql_*, so both spellings are tried.
        """
        def get_attr(name: str, default=None):
            mangled = f"_{model.__name__}__{name}__"
            return getattr(model, mangled, getattr(model, f"__{name}__", default))

        primary_key = get_attr("sql_primary_key", [])
        return {
            "table": get_attr("sql_table"),
            "schema": get_attr("sql_schema", "sdlapp"),
            "primary_key": [primary_key] if isinstance(primary_key, str) else list(primary_key),
            "foreign_keys": get_attr("sql_foreign_keys", {}),
            "indexes": get_attr("sql_indexes", []),
            "serial_columns": get_attr("sql_serial_columns", []),
        }

    # =========================================================================
    # TYPE CONVERSION
    # =========================================================================

    @staticmethod
    def _unwrap_optional(field_type: Type) -> tuple:
        """Return (inner type, is_optional) for Optional[X]."""
        if get_origin(field_type) is Union:
            args = [a for a in get_args(field_type) if a is not type(None)]
            if len(args) < len(get_args(field_type)):
                return args[0], True
        return field_type, False

    def python_type_to_sql(self, field_type: Type, field_info: FieldInfo) -> str:
        """
        Map a Python annotation to a PostgreSQL column type.

        Strings with max_length become VARCHAR(n), other strings TEXT.
        Containers become JSONB. Enums become a schema enum type named
        after the class in snake_case.
        """
        actual_type, _ = self._unwrap_optional(field_type)
        if get_origin(actual_type) in (dict, Dict, list, List):
            return "JSONB"

        if actual_type is str:
            for constraint in field_info.metadata or []:
                if isinstance(constraint, MaxLen):
                    return f"VARCHAR({constraint.max_length})"
            return "TEXT"

        if isinstance(actual_type, type) and issubclass(actual_type, Enum):
            enum_name = re.sub(r'(?<!^)(?=[A-Z])', '_', actual_type.__name__).lower()
            self.enums[enum_name] = actual_type
            return enum_name

        return self.TYPE_MAP.get(actual_type, "JSONB")

    # =========================================================================
    # COLUMNS
    # =========================================================================

    def _column_default(self, field_name: str, field_info: FieldInfo, sql_type_str: str, schema_name: str) -> List[sql.Composable]:
        default = field_info.default

        if default is not None and default is not ... and not _is_undefined(default):
            if isinstance(default, Enum):
                return [
                    sql.SQL(" DEFAULT "),
                    sql.Literal(default.value),
                    sql.SQL("::"),
                    ddl_utils.qualified(schema_name, sql_type_str),
                ]
            # bool before int: bool is an int subclass
            if isinstance(default, bool):
                return [sql.SQL(" DEFAULT "), sql.SQL("true" if default else "false")]
            if isinstance(default, (str, int, float)):
                return [sql.SQL(" DEFAULT "), sql.Literal(default)]

        if field_name in TIMESTAMP_COLUMNS:
            return [sql.SQL(" DEFAULT NOW()")]

        if field_info.default_factory is not None and sql_type_str == "JSONB":
            empty = "'[]'" if get_origin(field_info.annotation) in (list, List) else "'{}'"
            return [sql.SQL(f" DEFAULT {empty}")]
        return []

    def _column(self, field_name: str, field_info: FieldInfo, meta: Dict[str, Any]) -> sql.Composed:
        schema_name = meta["schema"]
        _, is_optional = self._unwrap_optional(field_info.annotation)

        if field_name in meta["serial_columns"]:
            return sql.SQL("{} SERIAL").format(sql.Identifier(field_name))

        sql_type_str = self.python_type_to_sql(field_info.annotation, field_info)
        if sql_type_str in self.enums:
            column_type = ddl_utils.qualified(schema_name, sql_type_str)
        else:
            column_type = sql.SQL(sql_type_str)

        parts: List[sql.Composable] = [sql.Identifier(field_name), sql.SQL(" "), column_type]
        if not is_optional and field_name not in meta["primary_key"]:
            parts.append(sql.SQL(" NOT NULL"))
        parts.extend(self._column_default(field_name, field_info, sql_type_str, schema_name))
        return sql.Composed(parts)

    @staticmethod
    def _constraints(meta: Dict[str, Any]) -> List[sql.Composed]:
        constraints = []
        if meta["primary_key"]:
            constraints.append(sql.SQL("PRIMARY KEY ({})").format(
                sql.SQL(", ").join(sql.Identifier(col) for col in meta["primary_key"])
            ))

        for fk_column, fk_reference in meta["foreign_keys"].items():
            match = FK_PATTERN.match(fk_reference)
            if not match:
                raise ValueError(f"Malformed foreign key reference {fk_reference!r} on {fk_column}")
            ref_schema, ref_table, ref_column = match.groups()
            constraints.append(
                sql.SQL("FOREIGN KEY ({}) REFERENCES {} ({}) ON DELETE CASCADE").format(
                    sql.Identifier(fk_column),
                    ddl_utils.qualified(ref_schema, ref_table),
                    sql.Identifier(ref_column),
                )
            )
        return constraints

    # =========================================================================
    # TABLES AND INDEXES
    # =========================================================================

    def generate_table(self, model: Type[BaseModel]) -> sql.Composed:
        """CREATE TABLE IF NOT EXISTS for one model."""
        meta = self.get_model_metadata(model)
        if not meta["table"]:
            raise ValueError(f"Model {model.__name__} missing __sql_table__ attribute")

        logger.debug(f"Generating table {meta['schema']}.{meta['table']} from {model.__name__}")

        columns = [
            self._column(field_name, field_info, meta)
            for field_name, field_info in model.model_fields.items()
        ]
        return sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(
            ddl_utils.qualified(meta["schema"], meta["table"]),
            sql.SQL(", ").join(columns + self._constraints(meta)),
        )

    def generate_indexes(self, model: Type[BaseModel]) -> List[sql.Composed]:
        meta = self.get_model_metadata(model)
        result = []

        for idx_def in meta["indexes"]:
            spec = _index_spec(idx_def)
            if spec is None:
                continue
            name, columns, where, unique = spec
            result.append(ddl_utils.create_index(
                meta["schema"], meta["table"], columns,
                name=name, unique=unique, where=where,
            ))
        return result

    # =========================================================================
    # COMPLETE SCHEMA
    # =========================================================================

    def generate_all(self) -> List[sql.Composed]:
        """
        Complete DDL for the schema store.

        Tables are emitted in foreign key order:
            data_models -> model_entities -> model_fields -> model_relations
            data_models -> chat_messages
        """
        models = store_models()
        touched = [m for m in models if "updated_at" in m.model_fields]

        # Tables are generated first so self.enums is filled before the
        # enum statements are placed ahead of them.
        tables: List[sql.Composed] = []
        for model in models:
            tables.append(self.generate_table(model))
            if model.__doc__:
                summary = model.__doc__.strip().splitlines()[0]
                tables.append(ddl_utils.comment_on_table(
                    self.schema_name, self.get_model_metadata(model)["table"], summary
                ))

        statements = ddl_utils.create_schema(
            self.schema_name, comment="Data model schemas authored in SDL"
        )
        statements.append(ddl_utils.set_search_path(self.schema_name))
        for enum_name, enum_class in self.enums.items():
            statements.append(ddl_utils.create_enum(
                self.schema_name, enum_name, [member.value for member in enum_class]
            ))
        statements.extend(tables)

        for model in models:
            statements.extend(self.generate_indexes(model))

        statements.append(ddl_utils.touch_function(self.schema_name))
        for model in touched:
            statements.extend(ddl_utils.touch_trigger(
                self.schema_name, self.get_model_metadata(model)["table"]
            ))

        logger.info(f"Generated {len(statements)} DDL statements for schema {self.schema_name}")
        return statements


def store_models() -> List[Type[BaseModel]]:
    """Store models in foreign key order."""
    from core.models import ChatMessage, DataModel, ModelEntity, ModelField, ModelRelation

    return [DataModel, ModelEntity, ModelField, ModelRelation, ChatMessage]


def _index_spec(idx_def: Any) -> Optional[tuple]:
    """Normalize an __sql_indexes__ entry to (name, columns, where, unique)."""
    if isinstance(idx_def, tuple):
        name = idx_def[0]
        columns = idx_def[1] if len(idx_def) > 1 else []
        where = idx_def[2] if len(idx_def) > 2 else None
        unique = False
    elif isinstance(idx_def, dict):
        name = idx_def.get("name")
        columns = idx_def.get("columns", [])
        where = idx_def.get("partial_where")
        unique = idx_def.get("unique", False)
    else:
        return None

    if not name or not columns:
        return None
    return name, [columns] if isinstance(columns, str) else list(columns), where, unique


def _is_undefined(value: Any) -> bool:
    """Pydantic marks required fields with PydanticUndefined."""
    return type(value).__name__ == "PydanticUndefinedType"


__all__ = ['PydanticToSQL', 'store_models']
