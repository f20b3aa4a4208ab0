# ============================================================================
# SCHEMA PROJECTION REPOSITORY
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Domain - Entity, field and relation persistence
# PURPOSE: Database access for model_entities, model_fields, model_relations
# CREATED: 15 OCT 2026
# ============================================================================
"""
Schema Projection Repository

Writes and reads the normalized projection of one data model.

Write methods take the caller's connection so that a full replace
(delete + inserts) runs inside the caller's transaction. Deletes go
bottom-up: relations, then fields, then entities.
"""

from typing import Any, Dict, Optional

from psycopg import AsyncConnection, sql
from psycopg.rows import dict_row
from psycopg.types.json import Json

from core.models import ModelEntity, ModelField, ModelRelation, PersistedSchema
from infrastructure.base_repository import BaseRepository
from .database import TABLE_MODEL_ENTITIES, TABLE_MODEL_FIELDS, TABLE_MODEL_RELATIONS

# Must be the first statement of its transaction
SNAPSHOT_READ = sql.SQL("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ, READ ONLY")


class SchemaRepository(BaseRepository):
    """Repository for the entity/field/relation projection."""

    # =========================================================================
    # WRITE (caller's transaction)
    # =========================================================================

    async def delete_projection(self, conn: AsyncConnection, data_model_id: int) -> Dict[str, int]:
        """
        Delete every relation, field and entity of a data model.

        Returns:
            Row counts per table
        """
        counts: Dict[str, int] = {}
        with self._error_context("projection delete", data_model_id):
            result = await conn.execute(
                sql.SQL("DELETE FROM {} WHERE data_model_id = %s").format(TABLE_MODEL_RELATIONS),
                (data_model_id,),
            )
            counts["relations"] = result.rowcount

            result = await conn.execute(
                sql.SQL("""
                    DELETE FROM {fields} WHERE entity_id IN (
                        SELECT id FROM {entities} WHERE data_model_id = %s
                    )
                """).format(fields=TABLE_MODEL_FIELDS, entities=TABLE_MODEL_ENTITIES),
                (data_model_id,),
            )
            counts["fields"] = result.rowcount

            result = await conn.execute(
                sql.SQL("DELETE FROM {} WHERE data_model_id = %s").format(TABLE_MODEL_ENTITIES),
                (data_model_id,),
            )
            counts["entities"] = result.rowcount

        self.logger.debug(f"Deleted projection of data model {data_model_id}: {counts}")
        return counts

    async def insert_entity(self, conn: AsyncConnection, entity: ModelEntity) -> ModelEntity:
        """Insert an entity and set its generated id."""
        with self._error_context("entity insert", entity.name):
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    sql.SQL("""
                        INSERT INTO {} (
                            data_model_id, name, description, position, created_at, updated_at
                        ) VALUES (
                            %(data_model_id)s, %(name)s, %(description)s, %(position)s,
                            %(created_at)s, %(updated_at)s
                        )
                        RETURNING id
                    """).format(TABLE_MODEL_ENTITIES),
                    {
                        "data_model_id": entity.data_model_id,
                        "name": entity.name,
                        "description": entity.description,
                        "position": entity.position,
                        "created_at": entity.created_at,
                        "updated_at": entity.updated_at,
                    },
                )
                row = await cur.fetchone()
        entity.id = row["id"]
        return entity

    async def insert_field(self, conn: AsyncConnection, field: ModelField) -> ModelField:
        """Insert a field and set its generated id."""
        with self._error_context("field insert", field.name):
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    sql.SQL("""
                        INSERT INTO {} (
                            entity_id, name, field_type, is_array, referenced_field,
                            enum_values, is_primary, is_unique, is_index, is_nullable,
                            default_value, position, created_at, updated_at
                        ) VALUES (
                            %(entity_id)s, %(name)s, %(field_type)s, %(is_array)s,
                            %(referenced_field)s, %(enum_values)s, %(is_primary)s,
                            %(is_unique)s, %(is_index)s, %(is_nullable)s,
                            %(default_value)s, %(position)s, %(created_at)s, %(updated_at)s
                        )
                        RETURNING id
                    """).format(TABLE_MODEL_FIELDS),
                    {
                        "entity_id": field.entity_id,
                        "name": field.name,
                        "field_type": field.field_type,
                        "is_array": field.is_array,
                        "referenced_field": field.referenced_field,
                        "enum_values": Json(field.enum_values),
                        "is_primary": field.is_primary,
                        "is_unique": field.is_unique,
                        "is_index": field.is_index,
                        "is_nullable": field.is_nullable,
                        "default_value": field.default_value,
                        "position": field.position,
                        "created_at": field.created_at,
                        "updated_at": field.updated_at,
                    },
                )
                row = await cur.fetchone()
        field.id = row["id"]
        return field

    async def insert_relation(self, conn: AsyncConnection, relation: ModelRelation) -> ModelRelation:
        """Insert a relation and set its generated id."""
        with self._error_context("relation insert", relation.name):
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    sql.SQL("""
                        INSERT INTO {} (
                            data_model_id, name, relation_type,
                            from_entity_id, to_entity_id, from_field_id, to_field_id,
                            cardinality, is_nullable, created_at
                        ) VALUES (
                            %(data_model_id)s, %(name)s, %(relation_type)s,
                            %(from_entity_id)s, %(to_entity_id)s, %(from_field_id)s, %(to_field_id)s,
                            %(cardinality)s, %(is_nullable)s, %(created_at)s
                        )
                        RETURNING id
                    """).format(TABLE_MODEL_RELATIONS),
                    {
                        "data_model_id": relation.data_model_id,
                        "name": relation.name,
                        "relation_type": relation.relation_type.value,
                        "from_entity_id": relation.from_entity_id,
                        "to_entity_id": relation.to_entity_id,
                        "from_field_id": relation.from_field_id,
                        "to_field_id": relation.to_field_id,
                        "cardinality": relation.cardinality.value,
                        "is_nullable": relation.is_nullable,
                        "created_at": relation.created_at,
                    },
                )
                row = await cur.fetchone()
        relation.id = row["id"]
        return relation

    # =========================================================================
    # READ
    # =========================================================================

    async def load(
        self, data_model_id: int, conn: Optional[AsyncConnection] = None
    ) -> PersistedSchema:
        """
        Load the full projection of a data model.

        Uses conn when given, so a caller can read its own uncommitted writes.
        Otherwise the three SELECTs share one REPEATABLE READ, READ ONLY
        transaction and see a single snapshot, even while a concurrent save
        replaces the projection between them.
        """
        if conn is not None:
            return await self._load(conn, data_model_id)
        async with self.pool.connection() as own_conn:
            async with own_conn.transaction():
                await own_conn.execute(SNAPSHOT_READ)
                return await self._load(own_conn, data_model_id)

    async def _load(self, conn: AsyncConnection, data_model_id: int) -> PersistedSchema:
        with self._error_context("projection load", data_model_id):
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    sql.SQL("""
                        SELECT * FROM {} WHERE data_model_id = %s ORDER BY position, id
                    """).format(TABLE_MODEL_ENTITIES),
                    (data_model_id,),
                )
                entity_rows = await cur.fetchall()

                await cur.execute(
                    sql.SQL("""
                        SELECT f.* FROM {fields} f
                        JOIN {entities} e ON e.id = f.entity_id
                        WHERE e.data_model_id = %s
                        ORDER BY f.entity_id, f.position, f.id
                    """).format(fields=TABLE_MODEL_FIELDS, entities=TABLE_MODEL_ENTITIES),
                    (data_model_id,),
                )
                field_rows = await cur.fetchall()

                await cur.execute(
                    sql.SQL("""
                        SELECT * FROM {} WHERE data_model_id = %s ORDER BY id
                    """).format(TABLE_MODEL_RELATIONS),
                    (data_model_id,),
                )
                relation_rows = await cur.fetchall()

        return PersistedSchema(
            data_model_id=data_model_id,
            entities=[ModelEntity(**row) for row in entity_rows],
            fields=[self._row_to_field(row) for row in field_rows],
            relations=[ModelRelation(**row) for row in relation_rows],
        )

    def _row_to_field(self, row: Dict[str, Any]) -> ModelField:
        """Convert database row to ModelField; enum_values arrives decoded from JSONB."""
        data = dict(row)
        data["enum_values"] = data.get("enum_values") or []
        return ModelField(**data)


__all__ = ["SchemaRepository"]
