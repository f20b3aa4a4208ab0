# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 14 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the SDL engine.
"""

from core.config.defaults import (
    SchemaDefaults,
    DatabaseDefaults,
    DrafterDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "SchemaDefaults",
    "DatabaseDefaults",
    "DrafterDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
