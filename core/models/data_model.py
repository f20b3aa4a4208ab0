# ============================================================================
# CLAUDE CONTEXT - DATA MODEL
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core model - Owner record of a persisted schema
# PURPOSE: Data model metadata and ownership
# LAST_REVIEWED: 15 OCT 2026
# EXPORTS: DataModel
# DEPENDENCIES: pydantic
# ============================================================================
"""
DataModel Model

A DataModel owns one normalized schema projection (entities, fields,
relations). The synchronizer locks this row while it replaces the
projection, so it also serialises concurrent saves of the same model.
"""

from datetime import datetime, timezone
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field

from core.contracts import DbType


class DataModel(BaseModel):
    """
    Data model metadata.

    Maps to: sdlapp.data_models
    """

    # SQL DDL METADATA
    __sql_table__: ClassVar[str] = "data_models"
    __sql_schema__: ClassVar[str] = "sdlapp"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {}
    __sql_indexes__: ClassVar[List[tuple]] = [
        ("idx_data_models_owner", ["owner_id"]),
    ]

    # Identity (generated by the store)
    id: Optional[int] = Field(default=None)

    name: str = Field(..., max_length=255)
    version: str = Field(default="1", max_length=64)
    description: str = Field(default="")
    db_type: DbType = Field(default=DbType.SQL)

    # Principal that created the model; only it may replace the schema
    owner_id: str = Field(..., max_length=128)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": False}

    def is_owned_by(self, principal_id: Optional[str]) -> bool:
        """Check whether a principal owns this data model."""
        return principal_id is not None and principal_id == self.owner_id


__all__ = ["DataModel"]
