#!/usr/bin/env python3
"""
Argument Resolution

Turns raw CLI values plus environment configuration into a validated
BackupRequest. Identifier and environment checks happen before anything
touches the filesystem, so a configuration failure leaves no state behind.
"""

import errno
import logging
import os
from pathlib import Path

from .config import Config
from .errors import ConfigurationError, FilesystemError
from .models import BackupRequest

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_DIR = "backup"


def resolve_backup_request(
    sync_id: str | None,
    backup_dir: str | None,
    backup_filename: str | None,
    config: Config,
) -> BackupRequest:
    """
    Validate inputs and prepare the destination directory.

    Args:
        sync_id: Sync ID of the remote budget
        backup_dir: Destination directory (defaults to "backup")
        backup_filename: Optional archive file name overriding automatic naming
        config: Loaded configuration holding the server URL and credential

    Returns:
        BackupRequest with an absolute, writable backup directory

    Raises:
        ConfigurationError: If the sync ID, server URL or credential is missing
        FilesystemError: If the destination cannot be created or written to
    """
    errors = []
    if not sync_id or not sync_id.strip():
        errors.append("A sync ID is required (--sync-id)")
    errors.extend(config.validate())
    if backup_filename is not None:
        errors.extend(_validate_backup_filename(backup_filename))

    if errors:
        raise ConfigurationError("; ".join(errors))

    resolved_dir = resolve_backup_dir(backup_dir or DEFAULT_BACKUP_DIR)

    return BackupRequest(
        sync_id=(sync_id or "").strip(),
        backup_dir=resolved_dir,
        backup_filename=backup_filename,
    )


def resolve_backup_dir(backup_dir: str | Path) -> Path:
    """
    Resolve the backup directory to an absolute path, creating it if needed.

    Args:
        backup_dir: Directory as given on the command line

    Returns:
        Absolute path of a directory the process can write to

    Raises:
        FilesystemError: With reason "permission-denied" or "invalid-path"
    """
    resolved = Path(backup_dir).expanduser().resolve()

    try:
        resolved.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise FilesystemError(
            f'Permission denied creating backup directory "{backup_dir}" (resolved to "{resolved}")',
            reason=FilesystemError.PERMISSION_DENIED,
            path=resolved,
        ) from e
    except FileExistsError as e:
        raise FilesystemError(
            f'Backup path "{resolved}" exists but is not a directory',
            reason=FilesystemError.INVALID_PATH,
            path=resolved,
        ) from e
    except OSError as e:
        if e.errno in (errno.EACCES, errno.EPERM, errno.EROFS):
            reason = FilesystemError.PERMISSION_DENIED
        else:
            reason = FilesystemError.INVALID_PATH
        raise FilesystemError(
            f'Cannot create backup directory "{backup_dir}" (resolved to "{resolved}"): {e.strerror or e}',
            reason=reason,
            path=resolved,
        ) from e

    if not os.access(resolved, os.W_OK | os.X_OK):
        raise FilesystemError(
            f'Permission denied: backup directory "{resolved}" is not writable',
            reason=FilesystemError.PERMISSION_DENIED,
            path=resolved,
        )

    logger.info(f"Using verified backup directory: {resolved}")
    return resolved


def _validate_backup_filename(backup_filename: str) -> list[str]:
    """Check that an explicit archive name is a bare file name."""
    if not backup_filename.strip():
        return ["--backup-filename must not be empty"]
    if backup_filename in (".", ".."):
        return [f"--backup-filename is not a valid file name: {backup_filename!r}"]
    separators = {"/", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in backup_filename for sep in separators):
        return [f"--backup-filename must be a file name, not a path: {backup_filename!r}"]
    return []
