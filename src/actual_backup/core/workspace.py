#!/usr/bin/env python3
"""
Workspace Management

Creates and removes the per-run temporary directory the remote budget is
downloaded into. The workspace lives inside the backup directory so the
finished archive is a sibling of it, never a child.
"""

import logging
import os
import shutil
import uuid
from pathlib import Path

from .errors import CleanupError, FilesystemError
from .models import Workspace, WorkspaceState

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = ".actual-backup-"
MAX_NAME_ATTEMPTS = 100


class WorkspaceManager:
    """
    Owns the temporary workspace of a single run.

    Each manager creates at most one workspace. The directory name carries a
    random suffix, so leftovers from earlier runs never collide with it.
    """

    def __init__(self, backup_dir: Path):
        """
        Initialize workspace manager.

        Args:
            backup_dir: Verified destination directory of the run
        """
        self.backup_dir = backup_dir
        self.workspace: Workspace | None = None

    @property
    def path(self) -> Path | None:
        """Root path of the workspace, or None before creation."""
        return self.workspace.path if self.workspace else None

    def create(self) -> Workspace:
        """
        Create the workspace directory.

        Returns:
            The new Workspace in CREATED state

        Raises:
            FilesystemError: If the directory cannot be created or is not writable
        """
        if self.workspace is not None:
            raise RuntimeError(f"Workspace already created: {self.workspace.path}")

        for _ in range(MAX_NAME_ATTEMPTS):
            # Record the path before the directory exists, so an interrupt
            # arriving right after mkdir still leaves it visible to remove()
            path = self.backup_dir / f"{WORKSPACE_PREFIX}{uuid.uuid4().hex[:12]}"
            self.workspace = Workspace(path=path)
            try:
                path.mkdir(mode=0o700)
                break
            except FileExistsError:
                self.workspace = None
                continue
            except PermissionError as e:
                self.workspace = None
                raise FilesystemError(
                    f"Permission denied creating workspace in {self.backup_dir}",
                    reason=FilesystemError.PERMISSION_DENIED,
                    path=self.backup_dir,
                ) from e
            except OSError as e:
                self.workspace = None
                raise FilesystemError(
                    f"Failed to create workspace in {self.backup_dir}: {e}",
                    reason=FilesystemError.INVALID_PATH,
                    path=self.backup_dir,
                ) from e
        else:
            raise FilesystemError(
                f"Could not find a free workspace name in {self.backup_dir}",
                reason=FilesystemError.INVALID_PATH,
                path=self.backup_dir,
            )

        if not os.access(path, os.W_OK | os.X_OK):
            raise FilesystemError(
                f"Workspace is not writable: {path}",
                reason=FilesystemError.PERMISSION_DENIED,
                path=path,
            )

        logger.info(f"Created workspace: {path}")
        return self.workspace

    def mark_populated(self) -> None:
        """Record that acquisition wrote into the workspace."""
        if self.workspace is not None:
            self.workspace.state = WorkspaceState.POPULATED

    def remove(self) -> bool:
        """
        Delete the workspace recursively.

        Removing a workspace that was never created or is already gone counts
        as success.

        Returns:
            True if a directory was deleted, False if there was nothing to delete

        Raises:
            CleanupError: If the directory exists but could not be deleted
        """
        if self.workspace is None or self.workspace.state == WorkspaceState.REMOVED:
            return False

        path = self.workspace.path
        if not path.exists():
            logger.debug(f"Workspace already gone: {path}")
            self.workspace.state = WorkspaceState.REMOVED
            return False

        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            # Entries vanished while walking the tree; retry whatever is left
            if path.exists():
                try:
                    shutil.rmtree(path)
                except OSError as e:
                    raise CleanupError(f"Failed to remove workspace {path}: {e}") from e
        except OSError as e:
            raise CleanupError(f"Failed to remove workspace {path}: {e}") from e

        self.workspace.state = WorkspaceState.REMOVED
        logger.info(f"Removed workspace: {path}")
        return True
