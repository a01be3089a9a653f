# ============================================================================
# PROCESS HOOKS TESTS
# ============================================================================
# STATUS: Tests - Signal and error channels
# PURPOSE: Verify each external trigger reaches request_stop()
# CREATED: 19 OCT 2026
# ============================================================================
"""
Process Hooks Tests

The orchestrator is a MagicMock; only the routing of triggers is checked.

Run with:
    pytest tests/test_hooks.py -v
"""

import asyncio
import sys
import threading
from unittest.mock import MagicMock

from core.contracts import StopTrigger
from lifecycle import ProcessHooks
from lifecycle.hooks import classify_loop_exception


# ============================================================================
# CLASSIFICATION
# ============================================================================

class TestClassifyLoopException:

    def test_unobserved_task_failure(self):
        context = {"message": "Task exception was never retrieved", "exception": ValueError()}
        assert classify_loop_exception(context) == StopTrigger.UNHANDLED_REJECTION

    def test_callback_failure(self):
        context = {"message": "Exception in callback", "exception": ValueError()}
        assert classify_loop_exception(context) == StopTrigger.UNCAUGHT_EXCEPTION

    def test_empty_context(self):
        assert classify_loop_exception({}) == StopTrigger.UNCAUGHT_EXCEPTION


# ============================================================================
# CHANNELS
# ============================================================================

class TestChannels:

    def test_signal(self):
        orchestrator = MagicMock()
        hooks = ProcessHooks(orchestrator, MagicMock())

        hooks.on_signal(StopTrigger.SIGTERM)

        orchestrator.request_stop.assert_called_once_with(StopTrigger.SIGTERM)

    def test_uncaught_exception(self):
        orchestrator = MagicMock()
        hooks = ProcessHooks(orchestrator, MagicMock())
        error = ValueError("boom")

        hooks.on_uncaught_exception(ValueError, error, None)

        orchestrator.request_stop.assert_called_once_with(StopTrigger.UNCAUGHT_EXCEPTION, error)

    def test_keyboard_interrupt_is_sigint(self):
        orchestrator = MagicMock()
        hooks = ProcessHooks(orchestrator, MagicMock())

        hooks.on_uncaught_exception(KeyboardInterrupt, KeyboardInterrupt(), None)

        orchestrator.request_stop.assert_called_once_with(StopTrigger.SIGINT)

    def test_loop_exception(self):
        orchestrator = MagicMock()
        hooks = ProcessHooks(orchestrator, MagicMock())
        error = RuntimeError("lost")

        hooks.on_loop_exception(None, {"message": "Task exception was never retrieved", "exception": error})

        orchestrator.request_stop.assert_called_once_with(StopTrigger.UNHANDLED_REJECTION, error)

    def test_thread_exception(self):
        orchestrator = MagicMock()
        hooks = ProcessHooks(orchestrator, MagicMock())
        error = RuntimeError("worker died")

        def fail():
            raise error

        previous = threading.excepthook
        threading.excepthook = hooks.on_thread_exception
        try:
            thread = threading.Thread(target=fail, name="worker")
            thread.start()
            thread.join()
        finally:
            threading.excepthook = previous

        orchestrator.request_stop.assert_called_once_with(StopTrigger.UNCAUGHT_EXCEPTION, error)


# ============================================================================
# INSTALL / UNINSTALL
# ============================================================================

class TestInstall:

    def test_install_and_restore(self):
        orchestrator = MagicMock()
        previous_excepthook = sys.excepthook
        previous_threading_hook = threading.excepthook

        async def run():
            loop = asyncio.get_running_loop()
            hooks = ProcessHooks(orchestrator, loop)
            hooks.install()
            installed = (sys.excepthook, threading.excepthook, loop.get_exception_handler())
            hooks.uninstall()
            restored = loop.get_exception_handler()
            return hooks, installed, restored

        hooks, installed, restored = asyncio.run(run())

        assert installed[0] == hooks.on_uncaught_exception
        assert installed[1] == hooks.on_thread_exception
        assert installed[2] == hooks.on_loop_exception
        assert restored is None
        assert sys.excepthook is previous_excepthook
        assert threading.excepthook is previous_threading_hook

    def test_unobserved_task_failure_reaches_orchestrator(self):
        orchestrator = MagicMock()

        async def run():
            loop = asyncio.get_running_loop()
            hooks = ProcessHooks(orchestrator, loop)
            hooks.install()
            try:
                loop.call_exception_handler({
                    "message": "Task exception was never retrieved",
                    "exception": ValueError("lost"),
                })
            finally:
                hooks.uninstall()

        asyncio.run(run())

        trigger, error = orchestrator.request_stop.call_args[0]
        assert trigger == StopTrigger.UNHANDLED_REJECTION
        assert isinstance(error, ValueError)
