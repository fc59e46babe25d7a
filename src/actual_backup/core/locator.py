#!/usr/bin/env python3
"""
Artifact Location

Finds the budget directory the acquisition step wrote into the workspace.
Exactly one directory is accepted; anything else is an error and is never
resolved by picking a candidate.
"""

import logging
from pathlib import Path

from .errors import AmbiguousArtifactError, ArtifactNotFoundError, FilesystemError

logger = logging.getLogger(__name__)


def locate_artifact(workspace_path: Path) -> Path:
    """
    Return the single directory inside the workspace.

    Args:
        workspace_path: Root of the populated workspace

    Returns:
        Path of the artifact directory

    Raises:
        ArtifactNotFoundError: If the workspace holds no directory
        AmbiguousArtifactError: If the workspace holds more than one directory
        FilesystemError: If the workspace cannot be read
    """
    try:
        candidates = sorted(entry for entry in workspace_path.iterdir() if entry.is_dir())
    except FileNotFoundError as e:
        raise ArtifactNotFoundError(f"Workspace does not exist: {workspace_path}") from e
    except PermissionError as e:
        raise FilesystemError(
            f"Permission denied reading workspace {workspace_path}",
            reason=FilesystemError.PERMISSION_DENIED,
            path=workspace_path,
        ) from e
    except OSError as e:
        raise FilesystemError(
            f"Failed to read workspace {workspace_path}: {e}",
            reason=FilesystemError.INVALID_PATH,
            path=workspace_path,
        ) from e

    if not candidates:
        raise ArtifactNotFoundError(f"No budget directory found in workspace {workspace_path}")

    if len(candidates) > 1:
        names = [candidate.name for candidate in candidates]
        raise AmbiguousArtifactError(
            f"Expected one budget directory in workspace {workspace_path}, found {len(names)}: {', '.join(names)}",
            candidates=names,
        )

    artifact = candidates[0]
    logger.info(f"Located budget directory: {artifact.name}")
    return artifact
