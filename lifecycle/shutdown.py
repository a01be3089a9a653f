# ============================================================================
# SHUTDOWN STATE
# ============================================================================
# STATUS: Core - Process-wide shutdown guard
# PURPOSE: Atomic test-and-set so the shutdown path runs exactly once
# CREATED: 19 OCT 2026
# ============================================================================
"""
Shutdown State

Process-wide flag guarding entry into the shutdown path:

    {in_progress: False, completed: False}   created at process start
    {in_progress: True,  completed: False}   first trigger wins
    {in_progress: True,  completed: True}    stores drained

Triggers arrive from signal handlers, sys.excepthook, threading.excepthook
and the event loop's exception handler, so the test-and-set is guarded by
a threading.Lock rather than relying on the event loop being the only
caller.
"""

import threading
from typing import Dict, Optional


class ShutdownState:
    """Lock-guarded shutdown flag."""

    def __init__(self):
        self._lock = threading.Lock()
        self._in_progress = False
        self._completed = False
        self._trigger: Optional[str] = None

    def try_begin(self, trigger: Optional[str] = None) -> bool:
        """
        Atomically claim the shutdown path.

        Returns:
            True for the first caller only
        """
        with self._lock:
            if self._in_progress:
                return False
            self._in_progress = True
            self._trigger = trigger
            return True

    def mark_completed(self) -> None:
        with self._lock:
            self._in_progress = True
            self._completed = True

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def trigger(self) -> Optional[str]:
        """What claimed the shutdown path, if anything has."""
        return self._trigger

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "in_progress": self._in_progress,
                "completed": self._completed,
                "trigger": self._trigger,
            }


# ============================================================================
# GLOBAL INSTANCE
# ============================================================================

_shutdown_state: Optional[ShutdownState] = None
_instance_lock = threading.Lock()


def get_shutdown_state() -> ShutdownState:
    """Get the process-wide shutdown state."""
    global _shutdown_state
    with _instance_lock:
        if _shutdown_state is None:
            _shutdown_state = ShutdownState()
        return _shutdown_state


def reset_shutdown_state() -> None:
    """Reset the process-wide state (for testing)."""
    global _shutdown_state
    with _instance_lock:
        _shutdown_state = None


__all__ = [
    "ShutdownState",
    "get_shutdown_state",
    "reset_shutdown_state",
]
