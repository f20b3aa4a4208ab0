# ============================================================================
# TEST FIXTURES - IN-MEMORY SCHEMA STORE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Tests - Shared fakes
# PURPOSE: Transactional in-memory stand-ins for the pool and repositories
# CREATED: 18 OCT 2026
# ============================================================================
"""
Shared fixtures.

FakePool.connection().transaction() snapshots the store on entry and
restores it when the block raises, which is what PostgreSQL does for the
real repositories. No database, no I/O.
"""

import copy
from contextlib import asynccontextmanager
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from core.config import reset_defaults
from core.models import (
    ChatMessage,
    DataModel,
    ModelEntity,
    ModelField,
    ModelRelation,
    PersistedSchema,
)
from services.schema_service import SchemaService


# ============================================================================
# FAKE STORAGE
# ============================================================================

class FakeStore:
    """Rows of the store tables."""

    def __init__(self):
        self.models: Dict[int, DataModel] = {}
        self.entities: List[ModelEntity] = []
        self.fields: List[ModelField] = []
        self.relations: List[ModelRelation] = []
        self.touched: List[int] = []
        self.messages: List[ChatMessage] = []
        self.next_id = 1

    def new_id(self) -> int:
        value = self.next_id
        self.next_id += 1
        return value

    def add_model(self, owner_id: str = "alice", name: str = "Shop") -> DataModel:
        model = DataModel(id=self.new_id(), name=name, owner_id=owner_id)
        self.models[model.id] = model
        return model


class FakeConnection:
    """Connection whose transaction() rolls the store back on error."""

    def __init__(self, store: FakeStore):
        self.store = store
        self.execute = AsyncMock()

    @asynccontextmanager
    async def transaction(self):
        snapshot = copy.deepcopy(
            (self.store.entities, self.store.fields, self.store.relations, self.store.touched)
        )
        try:
            yield self
        except BaseException:
            (
                self.store.entities,
                self.store.fields,
                self.store.relations,
                self.store.touched,
            ) = snapshot
            raise


class FakePool:
    """Stands in for psycopg_pool.AsyncConnectionPool."""

    def __init__(self, store: FakeStore):
        self.store = store
        self.connections_opened = 0

    @asynccontextmanager
    async def connection(self):
        self.connections_opened += 1
        yield FakeConnection(self.store)


# ============================================================================
# FAKE REPOSITORIES
# ============================================================================

class FakeDataModelRepository:
    def __init__(self, store: FakeStore):
        self.store = store

    async def create(self, model: DataModel) -> DataModel:
        model.id = self.store.new_id()
        self.store.models[model.id] = model
        return model

    async def get(self, data_model_id: int) -> Optional[DataModel]:
        return self.store.models.get(data_model_id)

    async def list_for_owner(self, owner_id: str, limit: int = 100) -> List[DataModel]:
        return [m for m in self.store.models.values() if m.owner_id == owner_id][:limit]

    async def get_for_update(self, conn, data_model_id: int) -> Optional[DataModel]:
        return self.store.models.get(data_model_id)

    async def touch(self, conn, data_model_id: int) -> None:
        self.store.touched.append(data_model_id)


class FakeSchemaRepository:
    """
    In-memory projection writes.

    fail_on_entity=N makes the Nth insert_entity call raise,
    fail_on_field=N the Nth insert_field call.
    """

    def __init__(
        self,
        store: FakeStore,
        fail_on_entity: Optional[int] = None,
        fail_on_field: Optional[int] = None,
    ):
        self.store = store
        self.fail_on_entity = fail_on_entity
        self.fail_on_field = fail_on_field
        self.entity_inserts = 0
        self.field_inserts = 0

    async def delete_projection(self, conn, data_model_id: int) -> Dict[str, int]:
        store = self.store
        entity_ids = {e.id for e in store.entities if e.data_model_id == data_model_id}
        before = (len(store.relations), len(store.fields), len(store.entities))
        store.relations = [r for r in store.relations if r.data_model_id != data_model_id]
        store.fields = [f for f in store.fields if f.entity_id not in entity_ids]
        store.entities = [e for e in store.entities if e.data_model_id != data_model_id]
        return {
            "relations": before[0] - len(store.relations),
            "fields": before[1] - len(store.fields),
            "entities": before[2] - len(store.entities),
        }

    async def insert_entity(self, conn, entity: ModelEntity) -> ModelEntity:
        self.entity_inserts += 1
        if self.fail_on_entity == self.entity_inserts:
            raise RuntimeError("connection lost")
        entity.id = self.store.new_id()
        self.store.entities.append(entity)
        return entity

    async def insert_field(self, conn, field: ModelField) -> ModelField:
        self.field_inserts += 1
        if self.fail_on_field == self.field_inserts:
            raise RuntimeError("deadlock detected")
        field.id = self.store.new_id()
        self.store.fields.append(field)
        return field

    async def insert_relation(self, conn, relation: ModelRelation) -> ModelRelation:
        relation.id = self.store.new_id()
        self.store.relations.append(relation)
        return relation

    async def load(self, data_model_id: int, conn=None) -> PersistedSchema:
        entities = [e for e in self.store.entities if e.data_model_id == data_model_id]
        entity_ids = {e.id for e in entities}
        return PersistedSchema(
            data_model_id=data_model_id,
            entities=copy.deepcopy(entities),
            fields=copy.deepcopy([f for f in self.store.fields if f.entity_id in entity_ids]),
            relations=copy.deepcopy(
                [r for r in self.store.relations if r.data_model_id == data_model_id]
            ),
        )


class FakeChatRepository:
    def __init__(self, store: FakeStore):
        self.store = store

    async def add(self, message: ChatMessage) -> ChatMessage:
        message.id = self.store.new_id()
        self.store.messages.append(message)
        return message

    async def list_for_model(self, data_model_id: int, limit: int = 200) -> List[ChatMessage]:
        return [m for m in self.store.messages if m.data_model_id == data_model_id][:limit]


def build_service(store: FakeStore) -> SchemaService:
    """SchemaService over the in-memory store."""
    svc = SchemaService(FakePool(store))
    svc.data_model_repo = FakeDataModelRepository(store)
    svc.schema_repo = FakeSchemaRepository(store)
    svc.chat_repo = FakeChatRepository(store)
    return svc


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def _reset_config():
    """Drop cached configuration so env overrides do not leak between tests."""
    reset_defaults()
    yield
    reset_defaults()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def service(store) -> SchemaService:
    return build_service(store)
