#!/usr/bin/env python3
"""
Actual Budget Acquisition Adapter

Downloads a budget from an Actual sync server into the run's workspace as a
single directory holding db.sqlite and metadata.json.
"""

import json
import logging
import re
import uuid
import zipfile
from datetime import date
from io import BytesIO
from pathlib import Path, PurePosixPath

from ..core.acquisition import AcquisitionAdapter, AcquisitionSettings
from ..core.config import DEFAULT_TIMEOUT_SECONDS
from ..core.errors import AcquisitionError
from .client import ActualServerClient, ActualServerError, RemoteBudgetFile

logger = logging.getLogger(__name__)

DATABASE_FILE = "db.sqlite"
METADATA_FILE = "metadata.json"


def budget_id_from_name(name: str) -> str:
    """
    Derive a local budget directory name from the budget's display name.

    Non-alphanumeric characters become "-" and a short random suffix keeps
    budgets with the same name apart, e.g. "My Finances" -> "My-Finances-7a1809d".
    """
    slug = re.sub(r"[^A-Za-z0-9]", "-", name) or "budget"
    return f"{slug}-{uuid.uuid4().hex[:7]}"


class ActualBudgetAdapter(AcquisitionAdapter):
    """
    Acquisition adapter backed by the Actual sync server HTTP API.

    Only unencrypted budgets are supported.
    """

    def __init__(self, timeout: int = DEFAULT_TIMEOUT_SECONDS):
        """
        Initialize adapter.

        Args:
            timeout: HTTP timeout in seconds for every server request
        """
        self.timeout = timeout
        self.client: ActualServerClient | None = None
        self.workspace_path: Path | None = None

    def initialize(self, settings: AcquisitionSettings) -> None:
        """Open a session and log in to the sync server."""
        if not settings.workspace_path.is_dir():
            raise AcquisitionError(f"Workspace does not exist: {settings.workspace_path}")

        self.workspace_path = settings.workspace_path
        self.client = ActualServerClient(settings.server_url, timeout=self.timeout)

        logger.info(f"Target server URL: {self.client.base_url}")
        try:
            self.client.login(settings.password)
        except ActualServerError as e:
            raise AcquisitionError(str(e)) from e

    def download(self, sync_id: str) -> Path:
        """
        Download and extract the budget whose group ID equals sync_id.

        Returns:
            The budget directory created inside the workspace
        """
        client, workspace_path = self.client, self.workspace_path
        if client is None or workspace_path is None:
            raise AcquisitionError("Adapter used before initialize()")

        try:
            remote_file = self._find_budget_file(client, sync_id)
            logger.info(f"Found budget '{remote_file.name}' (file ID {remote_file.file_id})")
            content = client.download_user_file(remote_file.file_id)
        except ActualServerError as e:
            raise AcquisitionError(str(e)) from e

        budget_dir = self._new_budget_dir(workspace_path, remote_file.name)
        self._extract_budget(content, budget_dir)
        self._update_metadata(budget_dir, remote_file)

        logger.info(f"Budget written to {budget_dir.name}")
        return budget_dir

    def teardown(self) -> None:
        """Close the HTTP session. A no-op if initialize() never ran."""
        if self.client is None:
            logger.debug("No Actual server session to close")
            return

        client, self.client = self.client, None
        client.close()

    def _find_budget_file(self, client: ActualServerClient, sync_id: str) -> RemoteBudgetFile:
        files = [f for f in client.list_user_files() if not f.deleted]
        matches = [f for f in files if f.group_id == sync_id]

        if not matches:
            raise AcquisitionError(f"No budget with sync ID {sync_id} found on the server ({len(files)} available)")

        remote_file = matches[0]
        if remote_file.encrypt_key_id:
            raise AcquisitionError(f"Budget {sync_id} is end-to-end encrypted, which is not supported")
        return remote_file

    def _new_budget_dir(self, workspace_path: Path, name: str) -> Path:
        budget_dir = workspace_path / budget_id_from_name(name)
        while budget_dir.exists():
            budget_dir = workspace_path / budget_id_from_name(name)
        return budget_dir

    def _extract_budget(self, content: bytes, budget_dir: Path) -> None:
        """Unzip the downloaded budget, refusing members that escape budget_dir."""
        try:
            with zipfile.ZipFile(BytesIO(content)) as zip_ref:
                file_list = zip_ref.namelist()
                for member in file_list:
                    member_path = PurePosixPath(member)
                    if member_path.is_absolute() or ".." in member_path.parts:
                        raise AcquisitionError(f"Refusing unsafe path in downloaded budget: {member}")

                if DATABASE_FILE not in file_list:
                    raise AcquisitionError(f"Downloaded budget has no {DATABASE_FILE}")

                budget_dir.mkdir()
                zip_ref.extractall(budget_dir)
                logger.debug(f"Extracted {len(file_list)} files into {budget_dir}")

        except zipfile.BadZipFile as e:
            raise AcquisitionError(f"Downloaded budget is not a valid zip file: {e}") from e
        except OSError as e:
            raise AcquisitionError(f"Failed to write budget into {budget_dir}: {e}") from e

    def _update_metadata(self, budget_dir: Path, remote_file: RemoteBudgetFile) -> None:
        """Record where the budget came from, as the Actual client does after a download."""
        metadata_path = budget_dir / METADATA_FILE
        if not metadata_path.exists():
            logger.warning(f"Downloaded budget has no {METADATA_FILE}")
            return

        try:
            with open(metadata_path, encoding="utf-8") as f:
                metadata = json.load(f)
        except (OSError, ValueError) as e:
            raise AcquisitionError(f"Invalid {METADATA_FILE} in downloaded budget: {e}") from e

        if not isinstance(metadata, dict):
            raise AcquisitionError(f"Invalid {METADATA_FILE} in downloaded budget")

        metadata.update(
            {
                "id": budget_dir.name,
                "cloudFileId": remote_file.file_id,
                "groupId": remote_file.group_id,
                "lastUploaded": date.today().isoformat(),
            }
        )

        with open(metadata_path, "w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)
