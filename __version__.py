# ============================================================================
# VERSION - INDIEC API
# ============================================================================
"""
Version information for the INDIEC API service core.

This is the single source of truth for the application version.
Updated manually for each release.
"""
__version__ = "1.0.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-19"

API_NAME = "INDIEC API"
CODENAME = "Hybrid Store Bootstrap"
