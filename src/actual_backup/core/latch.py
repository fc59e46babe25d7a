#!/usr/bin/env python3
"""
Shutdown Latch and Interrupt Listener

The latch makes the acquisition teardown a one-shot action no matter how many
exit paths race for it. The listener turns SIGINT/SIGTERM into a cancellation
request on the latch; it never touches pipeline internals itself.
"""

import logging
import signal
import threading
from types import FrameType
from typing import Any

from .errors import BackupInterrupted

logger = logging.getLogger(__name__)


class ShutdownLatch:
    """Single-use guard shared by the pipeline and the interrupt listener."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tripped = False
        self._cancel_reason: str | None = None

    @property
    def is_set(self) -> bool:
        """True once the shutdown path has started."""
        return self._tripped

    @property
    def cancel_requested(self) -> bool:
        """True once an interrupt asked the run to stop."""
        return self._cancel_reason is not None

    @property
    def cancel_reason(self) -> str | None:
        return self._cancel_reason

    def request_cancel(self, reason: str) -> bool:
        """
        Record that the run should stop.

        Plain attribute writes only, so this is safe to call from a signal handler.

        Returns:
            True for the first request, False if cancellation was already requested
        """
        if self._cancel_reason is not None:
            return False
        self._cancel_reason = reason
        return True

    def trip(self) -> bool:
        """
        Enter the shutdown path.

        Returns:
            True for exactly one caller; every later caller gets False
        """
        with self._lock:
            if self._tripped:
                return False
            self._tripped = True
            return True


class InterruptListener:
    """
    Installs SIGINT/SIGTERM handlers for the duration of a run.

    The first interrupt requests cancellation and raises BackupInterrupted into
    whatever the main thread is doing, which unwinds the pipeline into its
    cleanup path. Interrupts arriving after that are only logged, so repeated
    Ctrl+C cannot break cleanup apart.
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, latch: ShutdownLatch):
        self.latch = latch
        self.signals_received: list[str] = []
        self._previous_handlers: dict[int, Any] = {}

    def __enter__(self) -> "InterruptListener":
        for signum in self.SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, self.handle_signal)
        return self

    def __exit__(self, *exc_info: object) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def handle_signal(self, signum: int, frame: FrameType | None) -> None:
        """Signal handler: request cancellation, interrupting the run at most once."""
        name = signal.Signals(signum).name
        self.signals_received.append(name)

        first_request = self.latch.request_cancel(f"Received {name}")
        if not first_request:
            logger.warning(f"Received {name} again; shutdown already in progress")
            return

        if self.latch.is_set:
            logger.warning(f"Received {name} during cleanup; finishing cleanup before exit")
            return

        logger.warning(f"Received {name}. Attempting graceful shutdown...")
        raise BackupInterrupted(f"Backup interrupted by {name}")
