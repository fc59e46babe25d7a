"""
Core Backup Package

Everything that makes up a backup run apart from the remote service itself.

This package provides:
- Argument resolution and environment configuration
- Workspace creation and removal
- Artifact location and archive building
- The shutdown latch, interrupt listener and cleanup coordination
- The BackupRun pipeline tying the steps together
"""

from .acquisition import AcquisitionAdapter, AcquisitionSettings
from .archive import ArchiveBuilder, default_archive_name
from .cleanup import CleanupCoordinator
from .config import Config, Environment, ServerConfig
from .errors import (
    AcquisitionError,
    AmbiguousArtifactError,
    ArchiveError,
    ArtifactLocationError,
    ArtifactNotFoundError,
    BackupError,
    BackupInterrupted,
    CleanupError,
    ConfigurationError,
    FilesystemError,
)
from .latch import InterruptListener, ShutdownLatch
from .locator import locate_artifact
from .models import Archive, BackupReport, BackupRequest, RunState, Workspace, WorkspaceState
from .pipeline import BackupRun
from .resolver import resolve_backup_dir, resolve_backup_request
from .workspace import WorkspaceManager

__all__ = [
    "AcquisitionAdapter",
    "AcquisitionError",
    "AcquisitionSettings",
    "AmbiguousArtifactError",
    "Archive",
    "ArchiveBuilder",
    "ArchiveError",
    "ArtifactLocationError",
    "ArtifactNotFoundError",
    "BackupError",
    "BackupInterrupted",
    "BackupReport",
    "BackupRequest",
    "BackupRun",
    "CleanupCoordinator",
    "CleanupError",
    # Configuration
    "Config",
    "ConfigurationError",
    "Environment",
    "FilesystemError",
    "InterruptListener",
    "RunState",
    "ServerConfig",
    "ShutdownLatch",
    "Workspace",
    "WorkspaceManager",
    "WorkspaceState",
    "default_archive_name",
    "locate_artifact",
    "resolve_backup_dir",
    "resolve_backup_request",
]
