# ============================================================================
# STORE HANDLE BASE
# ============================================================================
# STATUS: Core - Connection lifecycle for one persistent store
# PURPOSE: Connect/close/status state machine shared by both stores
# CREATED: 19 OCT 2026
# ============================================================================
"""
Store Handle

Wraps connect/close/status for one persistent store. Concrete drivers
implement `_open()`, `_close()` and `_ping()`; the base class owns the
state machine:

    DISCONNECTED -> CONNECTING -> CONNECTED -> CLOSING -> CLOSED

- connect(): a failure restores the previous state and records last_error
- close(): idempotent; never-connected handles go straight to CLOSED
- status(): snapshot, never blocks, never raises

Handles are owned by the LifecycleOrchestrator; nothing else should call
connect() or close().

Usage:
    async with RelationalStore(config) as store:
        count = await store.count_tables()
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.contracts import StoreKind, StoreState
from core.errors import ShutdownError, StoreConnectionError
from core.logging import log_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorInfo:
    """Last error observed on a handle."""
    operation: str
    error_type: str
    message: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_exception(cls, operation: str, e: BaseException) -> "ErrorInfo":
        return cls(operation=operation, error_type=type(e).__name__, message=str(e))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "error_type": self.error_type,
            "message": self.message,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class StoreStatus:
    """Point-in-time snapshot of a handle."""
    name: str
    kind: StoreKind
    state: StoreState
    last_error: Optional[ErrorInfo] = None
    target: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.state is StoreState.CONNECTED

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "name": self.name,
            "kind": self.kind.value,
            "state": self.state.value,
            "connected": self.connected,
        }
        if self.target:
            result["target"] = self.target
        if self.last_error:
            result["last_error"] = self.last_error.to_dict()
        return result


class StoreHandle(ABC):
    """
    Base class for the relational and document store handles.

    Subclasses implement the driver calls; this class guarantees the
    state transitions around them.
    """

    kind: StoreKind

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.kind.value
        self._state = StoreState.DISCONNECTED
        self._last_error: Optional[ErrorInfo] = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Driver hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _open(self) -> None:
        """Establish the transport. Raise on failure."""

    @abstractmethod
    async def _close(self) -> None:
        """Release the transport."""

    @abstractmethod
    async def _ping(self) -> None:
        """Round-trip to the server. Raise on failure."""

    @property
    def target(self) -> Optional[str]:
        """Credential-free description of what this handle connects to."""
        return None

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def last_error(self) -> Optional[ErrorInfo]:
        return self._last_error

    @property
    def is_connected(self) -> bool:
        return self._state is StoreState.CONNECTED

    def status(self) -> StoreStatus:
        """Current state snapshot."""
        return StoreStatus(
            name=self.name,
            kind=self.kind,
            state=self._state,
            last_error=self._last_error,
            target=self.target,
        )

    async def connect(self) -> None:
        """
        Connect to the store.

        Relies on the driver's own retry/timeout policy.

        Raises:
            StoreConnectionError: transport could not be established, or
                the handle is already CLOSED.
        """
        async with self._lock:
            with log_context(store=self.name, operation="connect"):
                if self._state is StoreState.CONNECTED:
                    logger.debug(f"Store '{self.name}' already connected")
                    return
                if self._state.is_terminal():
                    raise StoreConnectionError(
                        f"Store '{self.name}' is closed and cannot reconnect",
                        store=self.name,
                    )

                previous = self._state
                self._state = StoreState.CONNECTING
                try:
                    await self._open()
                except Exception as e:
                    self._state = previous
                    self._last_error = ErrorInfo.from_exception("connect", e)
                    raise StoreConnectionError(
                        f"Could not connect to {self.name} store: {e}",
                        store=self.name,
                    ) from e

                self._state = StoreState.CONNECTED
                self._last_error = None
                logger.info(f"Store '{self.name}' connected")

    async def close(self) -> None:
        """
        Close the store. Safe to call in any state.

        Raises:
            ShutdownError: the driver failed while releasing. The handle
                is CLOSED regardless.
        """
        async with self._lock:
            with log_context(store=self.name, operation="close"):
                if self._state is StoreState.CLOSED:
                    return
                if self._state is not StoreState.CONNECTED:
                    self._state = StoreState.CLOSED
                    logger.debug(f"Store '{self.name}' closed before connecting")
                    return

                self._state = StoreState.CLOSING
                try:
                    await self._close()
                except Exception as e:
                    self._last_error = ErrorInfo.from_exception("close", e)
                    raise ShutdownError(
                        f"Error closing {self.name} store: {e}",
                        store=self.name,
                    ) from e
                finally:
                    self._state = StoreState.CLOSED

                logger.info(f"Store '{self.name}' closed")

    async def ping(self) -> None:
        """
        Liveness probe against the server.

        Raises:
            StoreConnectionError: the handle is not connected or the
                round-trip failed.
        """
        if self._state is not StoreState.CONNECTED:
            raise StoreConnectionError(
                f"Store '{self.name}' is {self._state.value}",
                store=self.name,
            )
        await self._ping()

    async def __aenter__(self) -> "StoreHandle":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} state={self._state.value}>"


__all__ = [
    "ErrorInfo",
    "StoreStatus",
    "StoreHandle",
]
