"""
Actual Backup - Dated Archives of Actual Budget Data

Downloads a budget from an Actual sync server and packages it into a zip
archive named after the day it was taken, cleaning up every temporary file
on the way out, even when interrupted.

Packages:
- core: Backup pipeline, configuration, errors and data models
- actual: Actual sync server client and acquisition adapter
- cli: Command-line interface (actual-backup)

Example Usage:
    from actual_backup.actual import ActualBudgetAdapter
    from actual_backup.core import BackupRun, resolve_backup_request
"""

__version__ = "1.0.0"
