#!/usr/bin/env python3
"""
Data Acquisition Contract

Interface the backup pipeline uses to fetch a remote budget into a workspace.
The pipeline treats every failure raised through this interface as an opaque
AcquisitionError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class AcquisitionSettings:
    """Everything an adapter needs before it can download."""

    workspace_path: Path
    server_url: str
    password: str = field(repr=False)


class AcquisitionAdapter(ABC):
    """
    Abstract base class for remote budget acquisition.

    Lifecycle: initialize() once, then download(), then teardown(). The
    teardown is invoked at most once by the cleanup path and must be safe to
    call when initialize() never ran or failed.
    """

    @abstractmethod
    def initialize(self, settings: AcquisitionSettings) -> None:
        """
        Authenticate and prepare for downloads into settings.workspace_path.

        Args:
            settings: Workspace location and server credentials
        """
        pass

    @abstractmethod
    def download(self, sync_id: str) -> Path:
        """
        Download the budget identified by sync_id.

        On success the workspace holds exactly one new top-level directory
        with the exported data.

        Args:
            sync_id: Sync ID of the remote budget

        Returns:
            Path of the directory that was written
        """
        pass

    @abstractmethod
    def teardown(self) -> None:
        """Release network and session resources."""
        pass
