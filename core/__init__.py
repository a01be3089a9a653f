# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export contracts, errors and models
# CREATED: 19 OCT 2026
# ============================================================================

from core.contracts import LifecyclePhase, SeedGate, StopTrigger, StoreKind, StoreState
from core.errors import (
    LifecycleError,
    FilesystemError,
    StoreConnectionError,
    SeedError,
    ShutdownError,
    VerificationWarning,
)

__all__ = [
    # Enums
    "LifecyclePhase",
    "SeedGate",
    "StopTrigger",
    "StoreKind",
    "StoreState",
    # Errors
    "LifecycleError",
    "FilesystemError",
    "StoreConnectionError",
    "SeedError",
    "ShutdownError",
    "VerificationWarning",
]
