# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Infrastructure - Database deployment and repository base
# PURPOSE: Schema deployment and shared repository patterns
# CREATED: 16 OCT 2026
# ============================================================================
"""
Infrastructure module for the SDL engine.

Provides:
- DatabaseInitializer: Bootstrap database schema from Pydantic models
- PostgreSQLRepository: Sync connection handling for CLI tooling
- BaseRepository / RepositoryError: Shared async repository patterns
- HttpSchemaDrafter: Client for the external schema drafting endpoint

Usage:
    from infrastructure import DatabaseInitializer

    initializer = DatabaseInitializer()
    result = initializer.initialize_all()
"""

from infrastructure.base_repository import (
    BaseRepository,
    RepositoryError,
)
from infrastructure.database_initializer import (
    DatabaseInitializer,
    InitializationResult,
    StepResult,
)
from infrastructure.drafter_client import DrafterError, HttpSchemaDrafter
from infrastructure.postgresql import PostgreSQLRepository

__all__ = [
    # Repository base
    'BaseRepository',
    'RepositoryError',
    # Database Initialization
    'DatabaseInitializer',
    'InitializationResult',
    'StepResult',
    # PostgreSQL
    'PostgreSQLRepository',
    # Schema drafting
    'HttpSchemaDrafter',
    'DrafterError',
]
