# ============================================================================
# SCHEMA ROUTES TESTS
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Tests - HTTP surface of the schema service
# PURPOSE: Verify status codes and bodies of api/schema_routes.py
# CREATED: 18 OCT 2026
# ============================================================================
"""
Schema Routes Tests

Uses FastAPI TestClient over a real SchemaService wired to the in-memory
store from conftest.py.

Run with:
    pytest tests/test_schema_routes.py -v
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.schema_routes import router, set_schema_services
from core.config import reset_defaults


BLOG = """\
entity User {
  id: ID @primary
  posts: Post[]
}

entity Post {
  id: ID @primary
  author: User
}
"""

ALICE = {"X-Principal-Id": "alice"}


# ============================================================================
# FIXTURES
# ============================================================================

def _make_test_app(schema_service, drafter=None):
    """Create a test FastAPI app with schema routes and the given service."""
    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    set_schema_services(schema_service, drafter=drafter)
    return app


@pytest.fixture
def client(service):
    yield TestClient(_make_test_app(service))
    set_schema_services(None)


@pytest.fixture
def drafting_client(service):
    """Build clients whose routes use the given drafter."""
    def build(drafter):
        return TestClient(_make_test_app(service, drafter=drafter))
    yield build
    set_schema_services(None)


# ============================================================================
# SDL ENDPOINTS
# ============================================================================

class TestSdlEndpoints:
    """POST /sdl/validate and /sdl/format."""

    def test_validate_valid(self, client):
        resp = client.post("/api/v1/sdl/validate", json={"text": BLOG})

        assert resp.status_code == 200
        data = resp.json()
        assert data["is_valid"] is True
        assert set(data["entities"]) == {"User", "Post"}
        assert len(data["relations"]) == 2

    def test_validate_reports_errors_with_200(self, client):
        resp = client.post("/api/v1/sdl/validate", json={"text": "entity A {\n  b: B\n}"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["is_valid"] is False
        assert data["errors"] == [{"line": 2, "message": 'Unknown type "B"', "kind": "type"}]

    def test_format(self, client):
        resp = client.post("/api/v1/sdl/format", json={"text": "entity A { id:ID   @primary }"})

        assert resp.status_code == 200
        assert resp.json() == {"text": "entity A {\n  id: ID @primary\n}\n"}

    def test_format_invalid(self, client):
        resp = client.post("/api/v1/sdl/format", json={"text": "entity A { b: B }"})

        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["message"] == "Schema is invalid"
        assert detail["details"][0]["line"] == 1

    def test_format_respects_size_limit(self, client, monkeypatch):
        monkeypatch.setenv("SDL_MAX_SOURCE_BYTES", "16")
        reset_defaults()

        resp = client.post("/api/v1/sdl/format", json={"text": "entity A {\n  id: ID @primary\n}\n"})

        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["details"][0]["line"] == 0
        assert "the limit is 16" in detail["details"][0]["message"]

    def test_missing_text_is_422(self, client):
        resp = client.post("/api/v1/sdl/validate", json={})
        assert resp.status_code == 422


# ============================================================================
# DATA MODEL ENDPOINTS
# ============================================================================

class TestDataModelEndpoints:
    """/data-models CRUD."""

    def test_create_get_list(self, client):
        resp = client.post(
            "/api/v1/data-models",
            json={"name": "Shop", "description": "orders"},
            headers=ALICE,
        )
        assert resp.status_code == 201
        created = resp.json()
        assert created["owner_id"] == "alice"
        assert created["db_type"] == "SQL"

        resp = client.get(f"/api/v1/data-models/{created['id']}", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["name"] == "Shop"

        resp = client.get("/api/v1/data-models", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["count"] == 1

    def test_create_requires_principal(self, client):
        resp = client.post("/api/v1/data-models", json={"name": "Shop"})
        assert resp.status_code == 401

    def test_create_rejects_empty_name(self, client):
        resp = client.post("/api/v1/data-models", json={"name": ""}, headers=ALICE)
        assert resp.status_code == 422

    def test_get_other_owner(self, client, store):
        model = store.add_model(owner_id="bob")

        resp = client.get(f"/api/v1/data-models/{model.id}", headers=ALICE)

        assert resp.status_code == 403


# ============================================================================
# STORED SCHEMA ENDPOINTS
# ============================================================================

class TestSchemaEndpoints:
    """GET/PUT /data-models/{id}/schema."""

    def test_put_then_get(self, client, store):
        model = store.add_model()

        resp = client.put(
            f"/api/v1/data-models/{model.id}/schema",
            json={"text": BLOG},
            headers=ALICE,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["data_model_id"] == model.id
        assert [e["name"] for e in data["entities"]] == ["User", "Post"]
        assert len(data["relations"]) == 2
        assert data["skipped_relations"] == []

        resp = client.get(f"/api/v1/data-models/{model.id}/schema", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["text"] == BLOG

    def test_put_without_principal(self, client, store):
        model = store.add_model()

        resp = client.put(f"/api/v1/data-models/{model.id}/schema", json={"text": BLOG})

        assert resp.status_code == 401

    def test_put_unknown_model(self, client):
        resp = client.put("/api/v1/data-models/999/schema", json={"text": BLOG}, headers=ALICE)
        assert resp.status_code == 404

    def test_put_not_owner(self, client, store):
        model = store.add_model(owner_id="bob")

        resp = client.put(
            f"/api/v1/data-models/{model.id}/schema",
            json={"text": BLOG},
            headers=ALICE,
        )

        assert resp.status_code == 403
        assert store.entities == []

    def test_put_invalid_schema(self, client, store):
        model = store.add_model()

        resp = client.put(
            f"/api/v1/data-models/{model.id}/schema",
            json={"text": "entity A {\n  id: ID\n  b: Missing\n}"},
            headers=ALICE,
        )

        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["details"][0]["line"] == 3
        assert detail["details"][0]["kind"] == "type"
        assert store.entities == []

    def test_put_storage_failure(self, client, service, store):
        model = store.add_model()
        service.schema_repo.fail_on_entity = 1

        resp = client.put(
            f"/api/v1/data-models/{model.id}/schema",
            json={"text": BLOG},
            headers=ALICE,
        )

        assert resp.status_code == 500
        assert store.entities == []

    def test_get_empty_schema(self, client, store):
        model = store.add_model()

        resp = client.get(f"/api/v1/data-models/{model.id}/schema", headers=ALICE)

        assert resp.status_code == 200
        assert resp.json()["text"] == ""


# ============================================================================
# DRAFTING AND CHAT
# ============================================================================

async def _two_entity_drafter(instructions, current_text):
    return "entity A {\n  id: ID @primary\n  b: B\n}\n\nentity B {\n  id: ID @primary\n}\n"


async def _offline_drafter(instructions, current_text):
    raise ConnectionError("generator offline")


class TestDraftEndpoints:
    """POST /data-models/{id}/draft and GET /data-models/{id}/chat."""

    def test_draft_saves_and_records(self, drafting_client, store):
        model = store.add_model()
        client = drafting_client(_two_entity_drafter)

        resp = client.post(
            f"/api/v1/data-models/{model.id}/draft",
            json={"instructions": "two entities"},
            headers=ALICE,
        )
        assert resp.status_code == 200
        assert [e["name"] for e in resp.json()["entities"]] == ["A", "B"]

        resp = client.get(f"/api/v1/data-models/{model.id}/chat", headers=ALICE)
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 2
        assert [m["sender"] for m in data["messages"]] == ["user", "ai"]
        assert data["messages"][0]["content"] == "two entities"
        assert data["messages"][1]["schema_text"].startswith("entity A {")

    def test_draft_without_drafter_is_503(self, client, store):
        model = store.add_model()

        resp = client.post(
            f"/api/v1/data-models/{model.id}/draft",
            json={"instructions": "anything"},
            headers=ALICE,
        )

        assert resp.status_code == 503
        assert store.messages == []

    def test_drafter_failure_is_502(self, drafting_client, store):
        model = store.add_model()
        client = drafting_client(_offline_drafter)

        resp = client.post(
            f"/api/v1/data-models/{model.id}/draft",
            json={"instructions": "anything"},
            headers=ALICE,
        )

        assert resp.status_code == 502
        assert store.messages[-1].content == "Draft failed: generator offline"

    def test_empty_instructions_are_422(self, drafting_client, store):
        model = store.add_model()
        client = drafting_client(_two_entity_drafter)

        resp = client.post(
            f"/api/v1/data-models/{model.id}/draft",
            json={"instructions": ""},
            headers=ALICE,
        )

        assert resp.status_code == 422

    def test_chat_requires_owner(self, client, store):
        model = store.add_model(owner_id="bob")

        resp = client.get(f"/api/v1/data-models/{model.id}/chat", headers=ALICE)

        assert resp.status_code == 403


# ============================================================================
# WIRING
# ============================================================================

class TestWiring:
    """Service injection and the application shell."""

    def test_503_when_service_missing(self):
        app = _make_test_app(None)
        client = TestClient(app)

        resp = client.post("/api/v1/sdl/validate", json={"text": ""})

        assert resp.status_code == 503

    def test_health(self):
        from main import app

        client = TestClient(app)
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
