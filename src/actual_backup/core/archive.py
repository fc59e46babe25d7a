#!/usr/bin/env python3
"""
Archive Builder

Packages a downloaded budget directory into a zip file in the backup
directory. The zip is written under a temporary name and renamed into place
only once it is complete, so a half-written file never looks like a backup.
"""

import logging
import os
import tempfile
import zipfile
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

from .errors import ArchiveError
from .models import Archive

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".partial"


def default_archive_name(artifact_name: str, run_date: date) -> str:
    """
    Build the automatic archive name.

    Args:
        artifact_name: Name of the budget directory
        run_date: Date the archive is created

    Returns:
        File name in the form "YYYY-MM-DD <artifact_name>.zip"
    """
    return f"{run_date.strftime('%Y-%m-%d')} {artifact_name}.zip"


class ArchiveBuilder:
    """
    Creates the backup zip for one run.

    The archive root holds the budget directory's contents directly, not
    nested under the directory's own name.
    """

    def __init__(self, backup_dir: Path, clock: Callable[[], datetime] = datetime.now):
        """
        Initialize archive builder.

        Args:
            backup_dir: Destination directory for the archive
            clock: Source of the creation timestamp used for naming
        """
        self.backup_dir = backup_dir
        self.clock = clock

    def get_archivable_entries(self, artifact_path: Path) -> list[Path]:
        """
        Get files and empty directories to include in the archive.

        Args:
            artifact_path: Budget directory to archive

        Returns:
            Sorted list of paths inside artifact_path
        """
        entries = []
        for path in sorted(artifact_path.rglob("*")):
            if path.is_file():
                entries.append(path)
            elif path.is_dir() and not any(path.iterdir()):
                entries.append(path)
        return entries

    def build(self, artifact_path: Path, backup_filename: str | None = None) -> Archive:
        """
        Compress the artifact directory into the backup directory.

        Args:
            artifact_path: Budget directory located in the workspace
            backup_filename: Explicit archive name, used verbatim when given

        Returns:
            Archive describing the written file

        Raises:
            ArchiveError: If the archive could not be written
        """
        creation_time = self.clock()
        archive_name = backup_filename or default_archive_name(artifact_path.name, creation_time.date())
        archive_path = self.backup_dir / archive_name

        try:
            entries = self.get_archivable_entries(artifact_path)
        except OSError as e:
            raise ArchiveError(f"Failed to read budget directory {artifact_path}: {e}") from e

        if archive_path.exists():
            logger.warning(f"Replacing existing archive: {archive_path}")

        partial_path: Path | None = None
        try:
            fd, partial_name = tempfile.mkstemp(
                prefix=f".{archive_name}.", suffix=PARTIAL_SUFFIX, dir=self.backup_dir
            )
            os.close(fd)
            partial_path = Path(partial_name)

            with zipfile.ZipFile(partial_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for entry in entries:
                    # Use relative path within the budget directory
                    arcname = entry.relative_to(artifact_path).as_posix()
                    zf.write(entry, arcname=arcname)

            os.replace(partial_path, archive_path)
            partial_path = None
            size_bytes = archive_path.stat().st_size

        except (OSError, zipfile.BadZipFile, ValueError) as e:
            raise ArchiveError(f"Failed to create archive {archive_path}: {e}") from e

        finally:
            # Clean up partial archive if it exists
            if partial_path is not None:
                partial_path.unlink(missing_ok=True)

        archive = Archive(
            path=archive_path,
            created_at=creation_time,
            artifact_name=artifact_path.name,
            files_archived=sum(1 for entry in entries if entry.is_file()),
            size_bytes=size_bytes,
        )

        logger.info(
            f"Created archive: {archive_path} ({archive.files_archived} files, {archive.size_bytes:,} bytes)"
        )
        return archive
