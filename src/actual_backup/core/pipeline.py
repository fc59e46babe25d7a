#!/usr/bin/env python3
"""
Backup Pipeline

Drives one backup run through workspace creation, acquisition, artifact
location and archiving, and routes every exit (success, failure or operator
interrupt) through the cleanup coordinator.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from .acquisition import AcquisitionAdapter, AcquisitionSettings
from .archive import ArchiveBuilder
from .cleanup import CleanupCoordinator
from .config import ServerConfig
from .errors import AcquisitionError, BackupError, BackupInterrupted
from .latch import ShutdownLatch
from .locator import locate_artifact
from .models import Archive, BackupReport, BackupRequest, RunState
from .workspace import WorkspaceManager

logger = logging.getLogger(__name__)


class BackupRun:
    """
    A single, non-reusable backup run.

    Steps run strictly in order. Before each step starts the shutdown latch is
    consulted, so no new step begins once an interrupt was requested.
    """

    def __init__(
        self,
        request: BackupRequest,
        server: ServerConfig,
        adapter: AcquisitionAdapter,
        latch: ShutdownLatch | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize backup run.

        Args:
            request: Validated backup request
            server: Server URL and credential for the adapter
            adapter: Acquisition adapter used to download the budget
            latch: Shutdown latch shared with an InterruptListener, if any
            clock: Timestamp source for archive naming (defaults to datetime.now)
        """
        self.request = request
        self.server = server
        self.adapter = adapter
        self.latch = latch or ShutdownLatch()

        self.workspace_manager = WorkspaceManager(request.backup_dir)
        self.archive_builder = ArchiveBuilder(request.backup_dir, clock=clock or datetime.now)
        self.cleanup = CleanupCoordinator(self.latch, adapter, self.workspace_manager)

        self.state = RunState.INITIALIZING
        self.state_history: list[RunState] = [RunState.INITIALIZING]
        self._executed = False

    def _transition(self, state: RunState) -> None:
        logger.debug(f"Run state: {self.state.value} -> {state.value}")
        self.state_history.append(state)
        self.state = state

    def _check_cancelled(self) -> None:
        """Refuse to start another step once shutdown was requested."""
        if self.latch.cancel_requested:
            raise BackupInterrupted(f"Backup interrupted: {self.latch.cancel_reason}")
        if self.latch.is_set:
            raise BackupInterrupted("Backup interrupted: shutdown already in progress")

    def _start_step(self, state: RunState) -> None:
        self._check_cancelled()
        self._transition(state)

    def execute(self) -> BackupReport:
        """
        Run the backup and clean up afterwards.

        Returns:
            BackupReport whose state is COMPLETED, FAILED or INTERRUPTED

        Raises:
            RuntimeError: If the run was already executed
        """
        if self._executed:
            raise RuntimeError("A BackupRun can only be executed once")
        self._executed = True

        start_time = time.monotonic()
        archive: Archive | None = None
        error: BackupError | None = None

        cleanup_errors: list[str] = []
        try:
            try:
                archive = self._run_steps()
            except BackupInterrupted as e:
                error = e
            except KeyboardInterrupt:
                self.latch.request_cancel("Received KeyboardInterrupt")
                error = BackupInterrupted("Backup interrupted by KeyboardInterrupt")
            except BackupError as e:
                error = e
            except Exception as e:
                logger.error(f"Unexpected error during {self.state.value}: {e}")
                error = BackupError(f"Unexpected error during {self.state.value}: {e}")
                error.__cause__ = e
            finally:
                cleanup_errors = self._run_cleanup()
        except (BackupInterrupted, KeyboardInterrupt) as e:
            # The interrupt landed between the steps and the cleanup entry
            self.latch.request_cancel(f"Received {type(e).__name__}")
            if error is None and isinstance(e, BackupInterrupted):
                error = e
            elif error is None:
                error = BackupInterrupted("Backup interrupted by KeyboardInterrupt")
            cleanup_errors = self._run_cleanup()

        failed_in = next(state for state in reversed(self.state_history) if state != RunState.CLEANING_UP)

        if error is None and self.latch.cancel_requested:
            # Interrupt arrived after the last step; the run still counts as interrupted
            error = BackupInterrupted(f"Backup interrupted: {self.latch.cancel_reason}")

        if error is None:
            final_state = RunState.COMPLETED
        elif isinstance(error, BackupInterrupted):
            final_state = RunState.INTERRUPTED
        else:
            final_state = RunState.FAILED
        self._transition(final_state)

        if error is not None:
            logger.info(f"Backup {final_state.value} during {failed_in.value}: {error}")

        return BackupReport(
            state=final_state,
            archive=archive if final_state == RunState.COMPLETED else None,
            error=error,
            cleanup_errors=cleanup_errors,
            state_history=list(self.state_history),
            execution_time_seconds=time.monotonic() - start_time,
        )

    def _run_steps(self) -> Archive:
        self._check_cancelled()
        workspace = self.workspace_manager.create()

        self._start_step(RunState.ACQUIRING_DATA)
        self._acquire(workspace.path)
        self.workspace_manager.mark_populated()

        self._start_step(RunState.LOCATING_ARTIFACT)
        artifact = locate_artifact(workspace.path)

        self._start_step(RunState.ARCHIVING)
        return self.archive_builder.build(artifact, self.request.backup_filename)

    def _acquire(self, workspace_path: Path) -> None:
        """Initialize the adapter and download, wrapping failures as AcquisitionError."""
        settings = AcquisitionSettings(
            workspace_path=workspace_path,
            server_url=self.server.url or "",
            password=self.server.password or "",
        )

        try:
            logger.info("Initializing Actual API...")
            self.adapter.initialize(settings)
            logger.info("API initialized successfully.")

            self._check_cancelled()

            logger.info(f"Downloading budget for sync ID: {self.request.sync_id}...")
            self.adapter.download(self.request.sync_id)
            logger.info("Budget downloaded successfully.")
        except (BackupInterrupted, AcquisitionError):
            raise
        except Exception as e:
            raise AcquisitionError(f"Error during Actual API operation: {e}") from e

    def _run_cleanup(self) -> list[str]:
        """
        Enter CLEANING_UP and run the cleanup coordinator.

        The listener raises at most one interrupt per run, and none once the
        latch is tripped, so a single retry always reaches the coordinator.
        """
        for attempt in range(2):
            try:
                if self.state_history[-1] != RunState.CLEANING_UP:
                    self._transition(RunState.CLEANING_UP)
                self.state = RunState.CLEANING_UP
                return self.cleanup.run()
            except (BackupInterrupted, KeyboardInterrupt) as e:
                # Interrupt landed before the shutdown path began; nothing was torn down yet
                self.latch.request_cancel(f"Received {type(e).__name__}")
                logger.warning(f"Interrupted before cleanup started (attempt {attempt + 1}); retrying")
        return self.cleanup.run()
