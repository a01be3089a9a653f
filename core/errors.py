# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# STATUS: Foundation - Lifecycle exception hierarchy
# PURPOSE: Separate fatal startup errors from contained, non-fatal ones
# CREATED: 19 OCT 2026
# ============================================================================
"""
Lifecycle Errors

Fatal (propagate out of LifecycleOrchestrator.start()):
- FilesystemError: upload directory cannot be created
- StoreConnectionError: a store is unreachable during startup

Contained (logged where they occur, never propagate past the orchestrator):
- SeedError: count or bulk-insert failure while seeding reference data
- ShutdownError: a store failed to close (turns the exit code to 1)
- VerificationWarning: no tables found after seeding
"""

from typing import Optional


class LifecycleError(Exception):
    """Base class for all lifecycle errors."""

    fatal: bool = False

    def __init__(self, message: str, *, store: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.store = store

    def to_dict(self) -> dict:
        result = {"error": type(self).__name__, "message": self.message}
        if self.store:
            result["store"] = self.store
        return result


class FilesystemError(LifecycleError):
    """Upload directory could not be created."""

    fatal = True


class StoreConnectionError(LifecycleError, ConnectionError):
    """A store could not be reached within its driver's timeout."""

    fatal = True


class SeedError(LifecycleError):
    """Reference data could not be counted or inserted."""

    def __init__(self, message: str, *, entity: Optional[str] = None, store: Optional[str] = None):
        super().__init__(message, store=store)
        self.entity = entity

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity:
            result["entity"] = self.entity
        return result


class ShutdownError(LifecycleError):
    """A store failed to release its connections."""


class VerificationWarning(UserWarning):
    """Post-seed verification found nothing to verify."""


__all__ = [
    "LifecycleError",
    "FilesystemError",
    "StoreConnectionError",
    "SeedError",
    "ShutdownError",
    "VerificationWarning",
]
