# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for SDL parsing and schema synchronization
# CREATED: 14 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for the SDL engine and the schema store.
These can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class SchemaDefaults:
    """
    Defaults for SDL parsing.

    Controls relation targets and input size limits.
    """
    # Field name a relation targets when the target entity declares no ID field
    identifier_field: str = "id"

    # Largest SDL document accepted by the service layer
    max_source_bytes: int = 256 * 1024  # 256 KB

    @classmethod
    def from_env(cls) -> "SchemaDefaults":
        """Create from environment variables."""
        return cls(
            identifier_field=os.getenv("SDL_IDENTIFIER_FIELD", "id"),
            max_source_bytes=int(os.getenv("SDL_MAX_SOURCE_BYTES", 256 * 1024)),
        )


@dataclass(frozen=True)
class DatabaseDefaults:
    """
    Defaults for the schema store.

    Controls pool sizing and the replace transaction timeout.
    """
    schema_name: str = "sdlapp"

    # Pool sizing
    pool_min_size: int = 2
    pool_max_size: int = 10

    # A replace that exceeds this is rolled back by PostgreSQL
    statement_timeout_ms: int = 30000

    @classmethod
    def from_env(cls) -> "DatabaseDefaults":
        """Create from environment variables."""
        return cls(
            pool_min_size=int(os.getenv("DB_POOL_MIN_SIZE", 2)),
            pool_max_size=int(os.getenv("DB_POOL_MAX_SIZE", 10)),
            statement_timeout_ms=int(os.getenv("SCHEMA_SYNC_TIMEOUT_MS", 30000)),
        )


@dataclass(frozen=True)
class DrafterDefaults:
    """
    Defaults for the external schema drafter.

    Drafting endpoints answer 503 while url is unset.
    """
    url: Optional[str] = None
    timeout_s: float = 60.0

    # Chat messages returned per data model
    history_limit: int = 200

    @classmethod
    def from_env(cls) -> "DrafterDefaults":
        """Create from environment variables."""
        return cls(
            url=os.getenv("SDL_DRAFTER_URL") or None,
            timeout_s=float(os.getenv("SDL_DRAFTER_TIMEOUT_S", 60.0)),
            history_limit=int(os.getenv("SDL_CHAT_HISTORY_LIMIT", 200)),
        )


@dataclass
class Defaults:
    """Container for all default configurations."""
    schema: SchemaDefaults = field(default_factory=SchemaDefaults)
    database: DatabaseDefaults = field(default_factory=DatabaseDefaults)
    drafter: DrafterDefaults = field(default_factory=DrafterDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            schema=SchemaDefaults.from_env(),
            database=DatabaseDefaults.from_env(),
            drafter=DrafterDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SchemaDefaults",
    "DatabaseDefaults",
    "DrafterDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
