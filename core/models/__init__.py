# ============================================================================
# MODELS PACKAGE
# ============================================================================
# STATUS: Core - Pydantic models
# PURPOSE: Export reference data models
# CREATED: 19 OCT 2026
# ============================================================================

from core.models.reference import (
    ReferenceEntity,
    Status,
    Sex,
    Role,
    Genre,
    Country,
    REFERENCE_MODELS,
    get_reference_model,
)

__all__ = [
    "ReferenceEntity",
    "Status",
    "Sex",
    "Role",
    "Genre",
    "Country",
    "REFERENCE_MODELS",
    "get_reference_model",
]
