# ============================================================================
# CLAUDE CONTEXT - SCHEMA ROUTES
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - Data model and SDL HTTP endpoints
# PURPOSE: HTTP API for validating, formatting and saving SDL schemas
# CREATED: 18 OCT 2026
# ============================================================================
"""
Schema Routes

HTTP endpoints over SchemaService. The acting principal arrives in the
X-Principal-Id header; authentication itself happens upstream.

Endpoints:
- POST /api/v1/sdl/validate                  - Parse SDL, report errors
- POST /api/v1/sdl/format                    - Canonical formatting
- POST /api/v1/data-models                   - Create data model
- GET  /api/v1/data-models                   - List own data models
- GET  /api/v1/data-models/{id}              - Get data model
- GET  /api/v1/data-models/{id}/schema       - Stored schema as SDL
- PUT  /api/v1/data-models/{id}/schema       - Replace stored schema
- POST /api/v1/data-models/{id}/draft        - Draft from instructions and save
- GET  /api/v1/data-models/{id}/chat         - Drafting conversation
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel, Field

from core.contracts import DbType
from sdl import Diagnostic
from services.schema_service import (
    DraftFailure,
    Forbidden,
    InvalidSchema,
    NotFound,
    PersistenceFailure,
    SchemaServiceError,
    Unauthenticated,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["schema"])


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

_schema_service = None
_drafter = None


def set_schema_services(schema_service, drafter=None):
    """Called by main.py at startup to inject the schema service and drafter."""
    global _schema_service, _drafter
    _schema_service = schema_service
    _drafter = drafter


def _get_schema_service():
    """Get the schema service, raising 503 if not initialized."""
    if _schema_service is None:
        raise HTTPException(503, "Schema service not initialized")
    return _schema_service


def _get_drafter():
    """Get the schema drafter, raising 503 if none is configured."""
    if _drafter is None:
        raise HTTPException(503, "Schema drafter not configured")
    return _drafter


# ============================================================================
# REQUEST / RESPONSE MODELS
# ============================================================================

class SchemaTextRequest(BaseModel):
    """SDL source text."""
    text: str


class DraftRequest(BaseModel):
    """Natural-language change request for the drafter."""
    instructions: str = Field(..., min_length=1)


class DataModelCreate(BaseModel):
    """Request body for data model creation."""
    name: str = Field(..., min_length=1, max_length=255)
    version: str = Field(default="1", max_length=64)
    description: str = ""
    db_type: DbType = DbType.SQL


class DataModelResponse(BaseModel):
    """Data model metadata."""
    id: int
    name: str
    version: str
    description: str
    db_type: DbType
    owner_id: str
    created_at: datetime
    updated_at: datetime


# ============================================================================
# ERROR MAPPING
# ============================================================================

def _details(errors: List[Diagnostic]) -> List[Dict[str, Any]]:
    return [e.to_dict() for e in errors]


def _to_http(error: SchemaServiceError) -> HTTPException:
    """Translate a service exception into the matching HTTP error."""
    if isinstance(error, Unauthenticated):
        return HTTPException(401, str(error))
    if isinstance(error, NotFound):
        return HTTPException(404, str(error))
    if isinstance(error, Forbidden):
        return HTTPException(403, str(error))
    if isinstance(error, InvalidSchema):
        return HTTPException(400, {"message": str(error), "details": _details(error.errors)})
    if isinstance(error, PersistenceFailure):
        return HTTPException(500, str(error))
    if isinstance(error, DraftFailure):
        return HTTPException(502, str(error))
    return HTTPException(500, "Schema service error")


def _model_response(model) -> Dict[str, Any]:
    return DataModelResponse(**model.model_dump()).model_dump(mode="json")


# ============================================================================
# SDL (NO PERSISTENCE)
# ============================================================================

@router.post("/sdl/validate")
async def validate_sdl(request: SchemaTextRequest):
    """Parse SDL and return entities, relations and line-positioned errors."""
    svc = _get_schema_service()
    return svc.validate_text(request.text).to_dict()


@router.post("/sdl/format")
async def format_sdl(request: SchemaTextRequest):
    """Return the canonical formatting of valid SDL."""
    svc = _get_schema_service()
    text, schema = svc.format_text(request.text)
    if text is None:
        raise HTTPException(400, {"message": "Schema is invalid", "details": _details(schema.errors)})
    return {"text": text}


# ============================================================================
# DATA MODELS
# ============================================================================

@router.post("/data-models", status_code=201)
async def create_data_model(
    request: DataModelCreate,
    x_principal_id: Optional[str] = Header(default=None),
):
    """Create an empty data model owned by the caller."""
    svc = _get_schema_service()
    try:
        model = await svc.create_data_model(
            x_principal_id,
            name=request.name,
            version=request.version,
            description=request.description,
            db_type=request.db_type,
        )
    except SchemaServiceError as e:
        raise _to_http(e)
    return _model_response(model)


@router.get("/data-models")
async def list_data_models(x_principal_id: Optional[str] = Header(default=None)):
    """List data models owned by the caller."""
    svc = _get_schema_service()
    try:
        models = await svc.list_data_models(x_principal_id)
    except SchemaServiceError as e:
        raise _to_http(e)
    return {"data_models": [_model_response(m) for m in models], "count": len(models)}


@router.get("/data-models/{data_model_id}")
async def get_data_model(
    data_model_id: int,
    x_principal_id: Optional[str] = Header(default=None),
):
    """Get one data model."""
    svc = _get_schema_service()
    try:
        model = await svc.get_data_model(data_model_id, x_principal_id)
    except SchemaServiceError as e:
        raise _to_http(e)
    return _model_response(model)


# ============================================================================
# STORED SCHEMA
# ============================================================================

@router.get("/data-models/{data_model_id}/schema")
async def get_schema(
    data_model_id: int,
    x_principal_id: Optional[str] = Header(default=None),
):
    """Stored schema rendered as canonical SDL, plus its projection."""
    svc = _get_schema_service()
    try:
        text, persisted = await svc.get_schema(data_model_id, x_principal_id)
    except SchemaServiceError as e:
        raise _to_http(e)
    return {
        "data_model_id": data_model_id,
        "text": text,
        "entities": [e.model_dump(mode="json") for e in persisted.entities],
        "fields": [f.model_dump(mode="json") for f in persisted.fields],
        "relations": [r.model_dump(mode="json") for r in persisted.relations],
    }


@router.put("/data-models/{data_model_id}/schema")
async def replace_schema(
    data_model_id: int,
    request: SchemaTextRequest,
    x_principal_id: Optional[str] = Header(default=None),
):
    """
    Replace the stored schema with the parse of the given SDL.

    All-or-nothing: on any error the previous schema is left untouched.
    """
    svc = _get_schema_service()
    try:
        result = await svc.replace_schema(data_model_id, request.text, x_principal_id)
    except SchemaServiceError as e:
        if isinstance(e, PersistenceFailure):
            logger.error(f"Schema save failed for data model {data_model_id}: {e}")
        raise _to_http(e)
    return result.to_dict()


# ============================================================================
# DRAFTING
# ============================================================================

@router.post("/data-models/{data_model_id}/draft")
async def draft_schema(
    data_model_id: int,
    request: DraftRequest,
    x_principal_id: Optional[str] = Header(default=None),
):
    """
    Ask the drafter for a new schema and save it.

    A draft that does not parse is rejected with 400 and leaves the stored
    schema untouched. Either way the exchange is kept in the chat history.
    """
    svc = _get_schema_service()
    drafter = _get_drafter()
    try:
        result = await svc.apply_draft(
            data_model_id, drafter, request.instructions, x_principal_id
        )
    except SchemaServiceError as e:
        raise _to_http(e)
    return result.to_dict()


@router.get("/data-models/{data_model_id}/chat")
async def get_chat_history(
    data_model_id: int,
    x_principal_id: Optional[str] = Header(default=None),
):
    """Drafting conversation of a data model, oldest first."""
    svc = _get_schema_service()
    try:
        messages = await svc.get_chat_history(data_model_id, x_principal_id)
    except SchemaServiceError as e:
        raise _to_http(e)
    return {
        "data_model_id": data_model_id,
        "messages": [m.to_dict() for m in messages],
        "count": len(messages),
    }
