# ============================================================================
# API MODULE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - FastAPI routes
# PURPOSE: HTTP API for data models and SDL schemas
# CREATED: 18 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for the SDL engine.
"""

from .schema_routes import router, set_schema_services

__all__ = [
    "router",
    "set_schema_services",
]
