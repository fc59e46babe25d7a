#!/usr/bin/env python3
"""
Main CLI Entry Point for Actual Backup

Downloads one Actual budget and writes it to a dated zip archive.
"""

import logging
import sys

import click

from .. import __version__
from ..actual import ActualBudgetAdapter
from ..core.config import Config
from ..core.errors import BackupError
from ..core.latch import InterruptListener, ShutdownLatch
from ..core.pipeline import BackupRun
from ..core.resolver import DEFAULT_BACKUP_DIR, resolve_backup_request

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--sync-id", "-s", help="Actual Budget Sync ID (UUID). Required.")
@click.option(
    "--backup-dir",
    "-d",
    default=DEFAULT_BACKUP_DIR,
    show_default=True,
    help="Directory to save the backup files",
)
@click.option(
    "--backup-filename",
    "-f",
    help="Archive file name (default: 'YYYY-MM-DD <budget>.zip')",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="actual-backup")
def main(sync_id: str | None, backup_dir: str, backup_filename: str | None, debug: bool) -> None:
    """
    Back up an Actual budget to a dated zip archive.

    Reads the server URL and password from the SERVER_URL and SERVER_PASSWORD
    environment variables.

    Examples:
      actual-backup --sync-id 1cfdbb80-6274-49bf-b0c2-737235a4c81f
      actual-backup -s 1cfdbb80-6274-49bf-b0c2-737235a4c81f -d /srv/backups -f latest.zip
    """
    try:
        config = Config.from_environment()
    except BackupError as e:
        raise click.ClickException(str(e)) from e

    if debug:
        config.debug = True
    config.setup_logging()
    logger.debug(f"Configuration: {config.to_dict()}")

    try:
        request = resolve_backup_request(sync_id, backup_dir, backup_filename, config)
    except BackupError as e:
        raise click.ClickException(str(e)) from e

    logger.info(f"Using sync ID: {request.sync_id}")

    latch = ShutdownLatch()
    adapter = ActualBudgetAdapter(timeout=config.server.timeout)
    backup_run = BackupRun(request, config.server, adapter, latch=latch)

    try:
        with InterruptListener(latch):
            report = backup_run.execute()
    except BackupError as e:
        raise click.ClickException(str(e)) from e

    if not report.success or report.archive is None:
        raise click.ClickException(str(report.error))

    if report.cleanup_errors:
        logger.warning(f"Backup succeeded with {len(report.cleanup_errors)} cleanup problem(s)")

    click.echo(f"✅ Backup created: {report.archive.path}")


def run(args: list[str] | None = None) -> None:
    """Console entry point. Every failure, usage errors included, exits with status 1."""
    try:
        rv = main.main(args=args, prog_name="actual-backup", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(EXIT_FAILURE)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(EXIT_FAILURE)

    sys.exit(rv if isinstance(rv, int) else 0)


if __name__ == "__main__":
    run()
