# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the service core.
"""

from core.config.defaults import (
    RelationalStoreConfig,
    DocumentStoreConfig,
    ServerConfig,
    SeedingDefaults,
    HealthDefaults,
    AppConfig,
    get_config,
    reset_config,
)

__all__ = [
    "RelationalStoreConfig",
    "DocumentStoreConfig",
    "ServerConfig",
    "SeedingDefaults",
    "HealthDefaults",
    "AppConfig",
    "get_config",
    "reset_config",
]
