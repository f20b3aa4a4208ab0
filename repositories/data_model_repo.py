# ============================================================================
# DATA MODEL REPOSITORY
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Domain - DataModel CRUD operations
# PURPOSE: Database access for the data_models table
# CREATED: 15 OCT 2026
# ============================================================================
"""
DataModel Repository

Metadata and ownership records. The schema synchronizer also uses
get_for_update() to lock a model row for the length of its transaction.
All SQL uses psycopg sql.SQL composition for injection safety.
"""

from typing import Any, Dict, List, Optional

from psycopg import AsyncConnection, sql
from psycopg.rows import dict_row

from core.models import DataModel
from infrastructure.base_repository import BaseRepository
from .database import TABLE_DATA_MODELS


class DataModelRepository(BaseRepository):
    """Repository for DataModel records."""

    async def create(self, model: DataModel) -> DataModel:
        """Insert a data model and return it with its generated id."""
        with self._error_context("data model create", model.name):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("""
                        INSERT INTO {} (
                            name, version, description, db_type, owner_id,
                            created_at, updated_at
                        ) VALUES (
                            %(name)s, %(version)s, %(description)s, %(db_type)s, %(owner_id)s,
                            %(created_at)s, %(updated_at)s
                        )
                        RETURNING id
                    """).format(TABLE_DATA_MODELS),
                    {
                        "name": model.name,
                        "version": model.version,
                        "description": model.description,
                        "db_type": model.db_type.value,
                        "owner_id": model.owner_id,
                        "created_at": model.created_at,
                        "updated_at": model.updated_at,
                    },
                )
                row = await result.fetchone()

        model.id = row["id"]
        self._log_operation(True, "Created data model", model.id, {"name": model.name})
        return model

    async def get(self, data_model_id: int) -> Optional[DataModel]:
        """Get a data model by id."""
        with self._error_context("data model get", data_model_id):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("SELECT * FROM {} WHERE id = %s").format(TABLE_DATA_MODELS),
                    (data_model_id,),
                )
                row = await result.fetchone()
        return self._row_to_model(row) if row else None

    async def list_for_owner(self, owner_id: str, limit: int = 100) -> List[DataModel]:
        """List data models owned by a principal, newest first."""
        with self._error_context("data model list", owner_id):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("""
                        SELECT * FROM {}
                        WHERE owner_id = %s
                        ORDER BY created_at DESC, id DESC
                        LIMIT %s
                    """).format(TABLE_DATA_MODELS),
                    (owner_id, limit),
                )
                rows = await result.fetchall()
        return [self._row_to_model(row) for row in rows]

    async def get_for_update(
        self, conn: AsyncConnection, data_model_id: int
    ) -> Optional[DataModel]:
        """
        Read a data model and lock its row.

        Must run inside a transaction on conn; the lock is held until that
        transaction ends, which serialises concurrent schema saves.
        """
        with self._error_context("data model lock", data_model_id):
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    sql.SQL("SELECT * FROM {} WHERE id = %s FOR UPDATE").format(
                        TABLE_DATA_MODELS
                    ),
                    (data_model_id,),
                )
                row = await cur.fetchone()
        return self._row_to_model(row) if row else None

    async def touch(self, conn: AsyncConnection, data_model_id: int) -> None:
        """Bump updated_at; the table trigger sets the timestamp."""
        with self._error_context("data model touch", data_model_id):
            await conn.execute(
                sql.SQL("UPDATE {} SET updated_at = NOW() WHERE id = %s").format(
                    TABLE_DATA_MODELS
                ),
                (data_model_id,),
            )

    def _row_to_model(self, row: Dict[str, Any]) -> DataModel:
        """Convert database row to DataModel."""
        return DataModel(
            id=row["id"],
            name=row["name"],
            version=row["version"],
            description=row.get("description") or "",
            db_type=row["db_type"],
            owner_id=row["owner_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


__all__ = ["DataModelRepository"]
