# ============================================================================
# SDL ENGINE - MAIN APPLICATION
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - FastAPI application entry point
# PURPOSE: HTTP service for authoring and storing data model schemas
# CREATED: 18 OCT 2026
# ============================================================================
"""
SDL Engine Main Application

FastAPI application that:
1. Validates and formats SDL text
2. Stores parsed schemas as normalized entity/field/relation rows
3. Drafts schemas through an external text generator (optional)
4. Manages the database connection pool

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from __version__ import __version__, BUILD_DATE, EPOCH
from api.schema_routes import router as schema_router, set_schema_services
from core.config import get_defaults
from infrastructure.drafter_client import HttpSchemaDrafter
from repositories.database import init_pool, close_pool
from services import SchemaService

# Configure logging using our structured logging system
from core.logging import configure_logging, get_logger

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Initializes services on startup, cleans up on shutdown.
    """
    logger.info(f"Starting SDL Engine v{__version__} (Epoch {EPOCH}, Build {BUILD_DATE})")

    # Optional: Bootstrap schema on startup (for development)
    if os.environ.get("AUTO_BOOTSTRAP_SCHEMA", "").lower() == "true":
        logger.info("Auto-bootstrap enabled, deploying schema...")
        from infrastructure import DatabaseInitializer
        result = DatabaseInitializer().initialize_all(dry_run=False)
        if result.success:
            logger.info("Schema bootstrap completed successfully")
        else:
            logger.warning(f"Schema bootstrap had issues: {result.errors}")

    pool = await init_pool()
    logger.info("Database pool initialized")

    drafter = None
    if get_defaults().drafter.url:
        drafter = HttpSchemaDrafter()
        logger.info("Schema drafter configured")
    else:
        logger.info("SDL_DRAFTER_URL not set, drafting endpoints disabled")

    set_schema_services(SchemaService(pool), drafter=drafter)
    logger.info("Schema service initialized")

    yield

    logger.info("Shutting down SDL Engine...")
    set_schema_services(None)
    await close_pool()
    logger.info("SDL Engine stopped")


app = FastAPI(
    title="SDL Engine",
    description="Schema-definition-language parsing and data model storage",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "*").split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schema_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "SDL Engine",
        "version": __version__,
        "epoch": EPOCH,
        "build_date": BUILD_DATE,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok", "version": __version__}


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
