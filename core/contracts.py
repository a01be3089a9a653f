# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums for stores and lifecycle
# PURPOSE: Define store/lifecycle states and their transition rules
# CREATED: 19 OCT 2026
# ============================================================================
"""
Base contracts for the hybrid-store service core.

These enums are shared by the store handles, the health aggregator
and the lifecycle orchestrator.
"""

from enum import Enum
from typing import Dict, FrozenSet


# ============================================================================
# STORE ENUMS
# ============================================================================

class StoreKind(str, Enum):
    """The two heterogeneous persistent stores."""
    RELATIONAL = "relational"    # PostgreSQL - reference and transactional data
    DOCUMENT = "document"        # MongoDB - secondary / unstructured data


class StoreState(str, Enum):
    """
    Store handle connection states.

    State transitions:
        DISCONNECTED -> CONNECTING -> CONNECTED -> CLOSING -> CLOSED
                     -> CLOSED (close before connect)

    A failed connect returns to the state held before the attempt.
    CLOSED is terminal.
    """
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"
    CLOSED = "closed"

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions)."""
        return self is StoreState.CLOSED


# ============================================================================
# LIFECYCLE ENUMS
# ============================================================================

class LifecyclePhase(str, Enum):
    """
    Orchestrator phases.

    State transitions:
        IDLE -> PREPARING_FILESYSTEM -> CONNECTING_STORES -> SEEDING
             -> VERIFYING -> SERVING -> SHUTTING_DOWN -> STOPPED

    SHUTTING_DOWN can be entered from any non-terminal phase once stop
    is requested. A fatal startup error jumps straight to STOPPED.
    """
    IDLE = "idle"
    PREPARING_FILESYSTEM = "preparing_filesystem"
    CONNECTING_STORES = "connecting_stores"
    SEEDING = "seeding"
    VERIFYING = "verifying"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"

    def is_terminal(self) -> bool:
        return self is LifecyclePhase.STOPPED

    def can_transition_to(self, target: "LifecyclePhase") -> bool:
        """Check a transition against the phase table."""
        return target in _PHASE_TRANSITIONS[self]


_STARTUP_ORDER = [
    LifecyclePhase.IDLE,
    LifecyclePhase.PREPARING_FILESYSTEM,
    LifecyclePhase.CONNECTING_STORES,
    LifecyclePhase.SEEDING,
    LifecyclePhase.VERIFYING,
    LifecyclePhase.SERVING,
]

_PHASE_TRANSITIONS: Dict[LifecyclePhase, FrozenSet[LifecyclePhase]] = {}
for _index, _phase in enumerate(_STARTUP_ORDER):
    _next = {LifecyclePhase.SHUTTING_DOWN, LifecyclePhase.STOPPED}
    if _index + 1 < len(_STARTUP_ORDER):
        _next.add(_STARTUP_ORDER[_index + 1])
    _PHASE_TRANSITIONS[_phase] = frozenset(_next)
_PHASE_TRANSITIONS[LifecyclePhase.SHUTTING_DOWN] = frozenset({LifecyclePhase.STOPPED})
_PHASE_TRANSITIONS[LifecyclePhase.STOPPED] = frozenset()


class StopTrigger(str, Enum):
    """Event sources that can request shutdown."""
    SIGTERM = "SIGTERM"
    SIGINT = "SIGINT"
    UNCAUGHT_EXCEPTION = "uncaught_exception"
    UNHANDLED_REJECTION = "unhandled_rejection"
    STARTUP_FAILURE = "startup_failure"
    REQUESTED = "requested"

    @property
    def is_error(self) -> bool:
        """True for triggers that come from a runtime failure."""
        return self in (StopTrigger.UNCAUGHT_EXCEPTION, StopTrigger.UNHANDLED_REJECTION)


class SeedGate(str, Enum):
    """Idempotency gate policy for reference data."""
    ANCHOR = "anchor"      # one count on the first set gates every set
    PER_SET = "per_set"    # each set is gated by its own count
