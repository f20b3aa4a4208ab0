# ============================================================================
# BASE REPOSITORY - ERROR HANDLING PATTERNS
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Infrastructure - Base repository patterns
# PURPOSE: Common error handling and logging for all repositories
# CREATED: 15 OCT 2026
# ============================================================================
"""
Base Repository Patterns

Base class that provides common infrastructure for the PostgreSQL
repositories:
- Consistent error handling with context managers
- Standardized logging

Storage-specific repositories extend this with their queries.
"""

import logging
from abc import ABC
from contextlib import contextmanager
from typing import Any, Dict, Optional

from psycopg_pool import AsyncConnectionPool


class RepositoryError(Exception):
    """Base exception for repository operations."""

    def __init__(self, message: str, operation: str = None, entity_id: str = None):
        self.operation = operation
        self.entity_id = entity_id
        super().__init__(message)


class BaseRepository(ABC):
    """
    Abstract base repository with common patterns.

    Provides:
    - Error context manager for consistent error handling
    - Standardized logging

    Subclasses implement storage-specific operations.
    """

    def __init__(self, pool: AsyncConnectionPool):
        self.pool = pool
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[Any] = None):
        """
        Context manager for consistent error handling.

        Wraps repository operations with standardized logging. Driver
        exceptions are logged with context and re-raised as
        RepositoryError; the original is kept as __cause__.

        Args:
            operation: Human-readable description of the operation
            entity_id: Optional entity ID for context

        Example:
            with self._error_context("entity insert", data_model_id):
                await conn.execute(...)
        """
        try:
            yield
        except RepositoryError:
            raise
        except Exception as e:
            error_msg = f"{operation} failed"
            if entity_id is not None:
                error_msg += f" for {entity_id}"
            error_msg += f": {e}"
            self.logger.error(error_msg)
            raise RepositoryError(
                error_msg,
                operation=operation,
                entity_id=str(entity_id) if entity_id is not None else None,
            ) from e

    def _log_operation(
        self,
        success: bool,
        operation: str,
        entity_id: Any,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log operation result with consistent formatting.

        Format:
            Success: "operation: entity_id | details"
            Failure: "operation failed: entity_id | details"
        """
        entity_id = str(entity_id)
        short_id = entity_id[:16] + "..." if len(entity_id) > 16 else entity_id

        if success:
            msg = f"{operation}: {short_id}"
        else:
            msg = f"{operation} failed: {short_id}"

        if details:
            msg += f" | {details}"

        if success:
            self.logger.info(msg)
        else:
            self.logger.warning(msg)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "BaseRepository",
    "RepositoryError",
]
