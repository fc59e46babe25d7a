#!/usr/bin/env python3
"""
Core Data Models for Actual Budget Backups

Data structures shared by the backup pipeline steps.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .errors import BackupError


class RunState(Enum):
    """Lifecycle states of a single backup run."""

    INITIALIZING = "initializing"
    ACQUIRING_DATA = "acquiring_data"
    LOCATING_ARTIFACT = "locating_artifact"
    ARCHIVING = "archiving"
    CLEANING_UP = "cleaning_up"
    COMPLETED = "completed"
    FAILED = "failed"
    INTERRUPTED = "interrupted"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.FAILED, RunState.INTERRUPTED)


class WorkspaceState(Enum):
    """Lifecycle states of a temporary workspace."""

    CREATED = "created"
    POPULATED = "populated"
    REMOVED = "removed"


@dataclass(frozen=True)
class BackupRequest:
    """
    Validated input for one backup run.

    Built once by the argument resolver and never mutated afterwards.
    """

    sync_id: str
    backup_dir: Path
    backup_filename: str | None = None


@dataclass
class Workspace:
    """Temporary directory exclusively owned by one run."""

    path: Path
    state: WorkspaceState = WorkspaceState.CREATED


@dataclass(frozen=True)
class Archive:
    """The zip file produced by a successful run."""

    path: Path
    created_at: datetime
    artifact_name: str
    files_archived: int
    size_bytes: int


@dataclass
class BackupReport:
    """Outcome of one backup run."""

    state: RunState
    archive: Archive | None = None
    error: BackupError | None = None
    cleanup_errors: list[str] = field(default_factory=list)
    state_history: list[RunState] = field(default_factory=list)
    execution_time_seconds: float | None = None

    @property
    def success(self) -> bool:
        return self.state == RunState.COMPLETED

    def raise_for_status(self) -> None:
        """Re-raise the primary error of a run that did not complete."""
        if self.error is not None:
            raise self.error
