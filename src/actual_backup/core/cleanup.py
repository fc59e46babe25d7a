#!/usr/bin/env python3
"""
Cleanup Coordination

Runs on every exit path of a backup run: releases the acquisition
connection through the shutdown latch and deletes the temporary workspace.
Failures here are logged and reported, never raised.
"""

import logging

from .acquisition import AcquisitionAdapter
from .errors import CleanupError
from .latch import ShutdownLatch
from .workspace import WorkspaceManager

logger = logging.getLogger(__name__)


class CleanupCoordinator:
    """
    Performs end-of-run cleanup at most once.

    The connection teardown is gated by the shutdown latch; workspace removal
    is idempotent on its own.
    """

    def __init__(self, latch: ShutdownLatch, adapter: AcquisitionAdapter, workspace_manager: WorkspaceManager):
        """
        Initialize cleanup coordinator.

        Args:
            latch: Latch shared with the interrupt listener
            adapter: Acquisition adapter whose teardown must run exactly once
            workspace_manager: Owner of the workspace to delete
        """
        self.latch = latch
        self.adapter = adapter
        self.workspace_manager = workspace_manager
        self._errors: list[str] | None = None

    @property
    def has_run(self) -> bool:
        return self._errors is not None

    def run(self) -> list[str]:
        """
        Tear down the connection and remove the workspace.

        Returns:
            Messages for every non-fatal cleanup failure (empty when clean).
            Calls after the first return the first call's result.
        """
        if self._errors is not None:
            logger.debug("Cleanup already performed")
            return list(self._errors)

        # Trip first: once set, interrupts no longer raise into this method
        won_latch = self.latch.trip()
        errors: list[str] = []
        self._errors = errors

        try:
            self.shutdown_connection(won_latch)
        except CleanupError as e:
            logger.error(str(e))
            errors.append(str(e))

        try:
            self.workspace_manager.remove()
        except CleanupError as e:
            logger.error(str(e))
            errors.append(str(e))

        return list(errors)

    def shutdown_connection(self, won_latch: bool) -> bool:
        """
        Call the adapter's teardown if this caller won the latch.

        Args:
            won_latch: Result of tripping the shutdown latch

        Returns:
            True if teardown was performed by this call

        Raises:
            CleanupError: If the adapter's teardown raised
        """
        if not won_latch:
            logger.info("Connection shutdown already performed")
            return False

        logger.info("Shutting down Actual server connection...")
        try:
            self.adapter.teardown()
        except Exception as e:
            raise CleanupError(f"Error during connection shutdown: {e}") from e

        logger.info("Connection shut down.")
        return True
