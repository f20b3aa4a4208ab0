# ============================================================================
# CLAUDE CONTEXT - SCHEMA PROJECTION MODELS
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core model - Normalized schema as stored in PostgreSQL
# PURPOSE: Entity, field and relation records plus the loaded aggregate
# LAST_REVIEWED: 17 OCT 2026
# EXPORTS: ModelEntity, ModelField, ModelRelation, PersistedSchema
# DEPENDENCIES: pydantic, sdl
# ============================================================================
"""
Schema Projection Models

The stored projection of a parsed schema. Every record is destroyed and
recreated on each schema replace; nothing here is patched in place.

Dependency order (deletes run bottom-up, inserts top-down):
    data_models <- model_entities <- model_fields <- model_relations
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field

from core.config import get_defaults
from core.contracts import Cardinality, RelationType, ScalarKind
from sdl.types import (
    Entity,
    EntityRefType,
    EnumType,
    FieldModifiers,
    FieldType,
    ScalarType,
    Schema,
    SchemaField,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ModelEntity(BaseModel):
    """
    One entity of a data model.

    Maps to: sdlapp.model_entities
    """

    __sql_table__: ClassVar[str] = "model_entities"
    __sql_schema__: ClassVar[str] = "sdlapp"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "data_model_id": "sdlapp.data_models(id)",
    }
    __sql_indexes__: ClassVar[List[Any]] = [
        ("idx_model_entities_data_model", ["data_model_id"]),
        {"name": "idx_unique_model_entities_name", "columns": ["data_model_id", "name"], "unique": True},
    ]

    id: Optional[int] = Field(default=None)
    data_model_id: int
    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(default=None)
    position: int = Field(default=0, description="Declaration order in the source")

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": False}


class ModelField(BaseModel):
    """
    One field of an entity.

    field_type holds the base type token: a scalar kind ("string", "ID"),
    "enum", or the target entity name for references.

    Maps to: sdlapp.model_fields
    """

    __sql_table__: ClassVar[str] = "model_fields"
    __sql_schema__: ClassVar[str] = "sdlapp"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "entity_id": "sdlapp.model_entities(id)",
    }
    __sql_indexes__: ClassVar[List[Any]] = [
        ("idx_model_fields_entity", ["entity_id"]),
        {"name": "idx_unique_model_fields_name", "columns": ["entity_id", "name"], "unique": True},
    ]

    id: Optional[int] = Field(default=None)
    entity_id: int
    name: str = Field(..., max_length=255)

    # Type
    field_type: str = Field(..., max_length=255)
    is_array: bool = Field(default=False)
    referenced_field: Optional[str] = Field(default=None, max_length=255)
    enum_values: List[str] = Field(default_factory=list)

    # Modifiers
    is_primary: bool = Field(default=False)
    is_unique: bool = Field(default=False)
    is_index: bool = Field(default=False)
    is_nullable: bool = Field(default=True)
    default_value: Optional[str] = Field(default=None)

    position: int = Field(default=0, description="Declaration order within the entity")

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": False}

    @classmethod
    def from_schema_field(
        cls,
        entity_id: int,
        schema_field: SchemaField,
        position: int = 0,
    ) -> "ModelField":
        """Build a record from a parsed field."""
        field_type = schema_field.type
        modifiers = schema_field.modifiers
        return cls(
            entity_id=entity_id,
            name=schema_field.name,
            field_type=field_type.base_name,
            is_array=field_type.is_array,
            referenced_field=(
                field_type.target_field if isinstance(field_type, EntityRefType) else None
            ),
            enum_values=list(field_type.values) if isinstance(field_type, EnumType) else [],
            is_primary=modifiers.is_primary,
            is_unique=modifiers.is_unique,
            is_index=modifiers.is_index,
            is_nullable=modifiers.is_nullable,
            default_value=modifiers.default_value,
            position=position,
        )

    def to_field_type(self) -> FieldType:
        """Rebuild the in-memory type descriptor."""
        if self.field_type == "enum":
            return EnumType(values=tuple(self.enum_values), is_array=self.is_array)
        kind = ScalarKind.from_token(self.field_type)
        if kind is not None:
            return ScalarType(kind=kind, is_array=self.is_array)
        return EntityRefType(
            target_entity=self.field_type,
            target_field=self.referenced_field,
            is_array=self.is_array,
        )

    def to_schema_field(self) -> SchemaField:
        """Rebuild the in-memory field."""
        return SchemaField(
            name=self.name,
            type=self.to_field_type(),
            modifiers=FieldModifiers(
                is_primary=self.is_primary,
                is_unique=self.is_unique,
                is_index=self.is_index,
                is_nullable=self.is_nullable and not self.is_primary,
                default_value=self.default_value,
            ),
        )


class ModelRelation(BaseModel):
    """
    Persisted relation between two fields.

    Maps to: sdlapp.model_relations
    """

    __sql_table__: ClassVar[str] = "model_relations"
    __sql_schema__: ClassVar[str] = "sdlapp"
    __sql_primary_key__: ClassVar[List[str]] = ["id"]
    __sql_serial_columns__: ClassVar[List[str]] = ["id"]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
        "data_model_id": "sdlapp.data_models(id)",
        "from_entity_id": "sdlapp.model_entities(id)",
        "to_entity_id": "sdlapp.model_entities(id)",
        "from_field_id": "sdlapp.model_fields(id)",
        "to_field_id": "sdlapp.model_fields(id)",
    }
    __sql_indexes__: ClassVar[List[Any]] = [
        ("idx_model_relations_data_model", ["data_model_id"]),
    ]

    id: Optional[int] = Field(default=None)
    data_model_id: int
    name: str = Field(..., max_length=512)
    relation_type: RelationType = Field(default=RelationType.FOREIGN_KEY)
    from_entity_id: int
    to_entity_id: int
    from_field_id: int
    to_field_id: int
    cardinality: Cardinality
    is_nullable: bool = Field(default=True)

    created_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": False}


class PersistedSchema(BaseModel):
    """
    The full projection of one data model, as loaded or as just written.

    Not a table.
    """

    data_model_id: int
    entities: List[ModelEntity] = Field(default_factory=list)
    fields: List[ModelField] = Field(default_factory=list)
    relations: List[ModelRelation] = Field(default_factory=list)

    def fields_for(self, entity_id: int) -> List[ModelField]:
        """Fields of one entity in declaration order."""
        return sorted(
            (f for f in self.fields if f.entity_id == entity_id),
            key=lambda f: (f.position, f.id or 0),
        )

    def to_schema(self) -> Schema:
        """
        Rebuild the in-memory schema.

        Relations are not read back: they are implied by the reference
        fields, exactly as when the text was parsed.
        """
        entities: Dict[str, Entity] = {}
        for record in sorted(self.entities, key=lambda e: (e.position, e.id or 0)):
            entity = Entity(name=record.name)
            for field_record in self.fields_for(record.id):
                entity.add_field(field_record.to_schema_field())
            entities[entity.name] = entity
        return Schema(
            entities=entities,
            identifier_field=get_defaults().schema.identifier_field,
        )


__all__ = ["ModelEntity", "ModelField", "ModelRelation", "PersistedSchema"]
