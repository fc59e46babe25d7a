#!/usr/bin/env python3
"""
Error Hierarchy for Backup Runs

Every failure a backup run can report derives from BackupError. All kinds are
fatal except CleanupError, which is only ever logged.
"""

from pathlib import Path


class BackupError(Exception):
    """Base exception for backup related failures."""


class ConfigurationError(BackupError):
    """Raised when a required flag or environment value is missing or invalid."""


class FilesystemError(BackupError):
    """
    Raised when a directory cannot be created or written to.

    Attributes:
        reason: "permission-denied" or "invalid-path"
        path: The path that failed, when known
    """

    PERMISSION_DENIED = "permission-denied"
    INVALID_PATH = "invalid-path"

    def __init__(self, message: str, reason: str = INVALID_PATH, path: Path | None = None):
        super().__init__(message)
        self.reason = reason
        self.path = path


class AcquisitionError(BackupError):
    """Raised when the remote data could not be authenticated against or downloaded."""


class ArtifactLocationError(BackupError):
    """Raised when the workspace does not hold exactly one artifact directory."""


class ArtifactNotFoundError(ArtifactLocationError):
    """Raised when acquisition left no directory in the workspace."""


class AmbiguousArtifactError(ArtifactLocationError):
    """Raised when acquisition left more than one directory in the workspace."""

    def __init__(self, message: str, candidates: list[str]):
        super().__init__(message)
        self.candidates = candidates


class ArchiveError(BackupError):
    """Raised when the archive could not be written."""


class CleanupError(BackupError):
    """Raised when workspace removal or connection teardown fails. Never fatal."""


class BackupInterrupted(BackupError):
    """Raised into the pipeline when the operator interrupts the run."""


__all__ = [
    "AcquisitionError",
    "AmbiguousArtifactError",
    "ArchiveError",
    "ArtifactLocationError",
    "ArtifactNotFoundError",
    "BackupError",
    "BackupInterrupted",
    "CleanupError",
    "ConfigurationError",
    "FilesystemError",
]
