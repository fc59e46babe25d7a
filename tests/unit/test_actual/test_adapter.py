#!/usr/bin/env python3
"""
Unit tests for the Actual acquisition adapter.

The server client is mocked; downloads are synthetic zip payloads.
"""

import json
import re
from datetime import date
from unittest.mock import patch

import pytest

from actual_backup.actual.adapter import ActualBudgetAdapter, budget_id_from_name
from actual_backup.actual.client import ActualServerError, RemoteBudgetFile
from actual_backup.core.acquisition import AcquisitionSettings
from actual_backup.core.errors import AcquisitionError
from tests.fixtures.budget_files import FILE_ID, SYNC_ID, make_budget_zip


@pytest.fixture
def server_client():
    with patch("actual_backup.actual.adapter.ActualServerClient") as client_cls:
        instance = client_cls.return_value
        instance.base_url = "http://actual.test:5006"
        instance.list_user_files.return_value = [
            RemoteBudgetFile(file_id=FILE_ID, group_id=SYNC_ID, name="My Finances"),
        ]
        instance.download_user_file.return_value = make_budget_zip()
        yield instance


@pytest.fixture
def settings(temp_dir):
    workspace = temp_dir / "workspace"
    workspace.mkdir()
    return AcquisitionSettings(workspace_path=workspace, server_url="http://actual.test:5006", password="secret")


@pytest.fixture
def adapter(server_client, settings):
    adapter = ActualBudgetAdapter(timeout=5)
    adapter.initialize(settings)
    return adapter


@pytest.mark.unit
@pytest.mark.actual
class TestBudgetIdFromName:
    """Test budget_id_from_name()."""

    def test_slug_and_suffix(self):
        budget_id = budget_id_from_name("My Finances")

        assert re.fullmatch(r"My-Finances-[0-9a-f]{7}", budget_id)

    def test_punctuation_replaced(self):
        assert budget_id_from_name("Home & Co.").startswith("Home---Co--")

    def test_empty_name(self):
        assert budget_id_from_name("").startswith("budget-")


@pytest.mark.unit
@pytest.mark.actual
class TestActualBudgetAdapter:
    """Test initialize/download/teardown against a mocked server client."""

    def test_initialize_logs_in(self, adapter, server_client):
        server_client.login.assert_called_once_with("secret")

    def test_initialize_login_failure(self, server_client, settings):
        server_client.login.side_effect = ActualServerError("Authentication failed: invalid password")

        with pytest.raises(AcquisitionError, match="invalid password"):
            ActualBudgetAdapter().initialize(settings)

    def test_initialize_requires_workspace(self, server_client, temp_dir):
        settings = AcquisitionSettings(workspace_path=temp_dir / "missing", server_url="http://x", password="p")

        with pytest.raises(AcquisitionError, match="Workspace does not exist"):
            ActualBudgetAdapter().initialize(settings)

    def test_download_writes_single_budget_directory(self, adapter, server_client, settings):
        budget_dir = adapter.download(SYNC_ID)

        assert budget_dir.parent == settings.workspace_path
        assert [p.name for p in settings.workspace_path.iterdir()] == [budget_dir.name]
        assert re.fullmatch(r"My-Finances-[0-9a-f]{7}", budget_dir.name)
        assert (budget_dir / "db.sqlite").is_file()
        server_client.download_user_file.assert_called_once_with(FILE_ID)

    def test_download_updates_metadata(self, adapter):
        budget_dir = adapter.download(SYNC_ID)

        metadata = json.loads((budget_dir / "metadata.json").read_text())
        assert metadata["id"] == budget_dir.name
        assert metadata["cloudFileId"] == FILE_ID
        assert metadata["groupId"] == SYNC_ID
        assert metadata["lastUploaded"] == date.today().isoformat()
        assert metadata["budgetName"] == "My Finances"

    def test_unknown_sync_id(self, adapter):
        with pytest.raises(AcquisitionError, match="No budget with sync ID"):
            adapter.download("not-a-real-id")

    def test_deleted_budget_is_not_found(self, adapter, server_client):
        server_client.list_user_files.return_value = [
            RemoteBudgetFile(file_id=FILE_ID, group_id=SYNC_ID, name="My Finances", deleted=True),
        ]

        with pytest.raises(AcquisitionError, match="No budget with sync ID"):
            adapter.download(SYNC_ID)

    def test_encrypted_budget_is_rejected(self, adapter, server_client):
        server_client.list_user_files.return_value = [
            RemoteBudgetFile(file_id=FILE_ID, group_id=SYNC_ID, name="My Finances", encrypt_key_id="key-1"),
        ]

        with pytest.raises(AcquisitionError, match="encrypted"):
            adapter.download(SYNC_ID)

    def test_server_error_during_download(self, adapter, server_client):
        server_client.download_user_file.side_effect = ActualServerError("GET failed (HTTP 500)")

        with pytest.raises(AcquisitionError, match="HTTP 500"):
            adapter.download(SYNC_ID)

    def test_corrupt_download(self, adapter, server_client, settings):
        server_client.download_user_file.return_value = b"not a zip"

        with pytest.raises(AcquisitionError, match="not a valid zip"):
            adapter.download(SYNC_ID)

        assert list(settings.workspace_path.iterdir()) == []

    def test_download_without_database(self, adapter, server_client, settings):
        server_client.download_user_file.return_value = make_budget_zip(include_db=False)

        with pytest.raises(AcquisitionError, match="db.sqlite"):
            adapter.download(SYNC_ID)

        assert list(settings.workspace_path.iterdir()) == []

    def test_unsafe_member_is_refused(self, adapter, server_client, settings):
        server_client.download_user_file.return_value = make_budget_zip(extra_members={"../escape.txt": b"x"})

        with pytest.raises(AcquisitionError, match="unsafe path"):
            adapter.download(SYNC_ID)

        assert not (settings.workspace_path.parent / "escape.txt").exists()

    def test_download_before_initialize(self):
        with pytest.raises(AcquisitionError, match="before initialize"):
            ActualBudgetAdapter().download(SYNC_ID)

    def test_teardown_closes_client_once(self, adapter, server_client):
        adapter.teardown()
        adapter.teardown()

        server_client.close.assert_called_once()

    def test_teardown_without_initialize_is_noop(self):
        ActualBudgetAdapter().teardown()
