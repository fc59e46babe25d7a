#!/usr/bin/env python3
"""
Actual Sync Server Client

Minimal HTTP client for the endpoints a budget download needs: password
login, listing the user's budget files, and downloading one of them.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-ACTUAL-TOKEN"
FILE_ID_HEADER = "X-ACTUAL-FILE-ID"


class ActualServerError(RuntimeError):
    """Raised when the sync server rejects a request or returns an unexpected payload."""


@dataclass(frozen=True)
class RemoteBudgetFile:
    """A budget file as listed by the sync server."""

    file_id: str
    group_id: str | None
    name: str
    encrypt_key_id: str | None = None
    deleted: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RemoteBudgetFile":
        """Create from a /sync/list-user-files entry."""
        return cls(
            file_id=str(data["fileId"]),
            group_id=data.get("groupId"),
            name=str(data.get("name") or ""),
            encrypt_key_id=data.get("encryptKeyId"),
            deleted=bool(data.get("deleted", False)),
        )


class ActualServerClient:
    """HTTP session against one Actual sync server."""

    def __init__(self, server_url: str, timeout: int = 30):
        """
        Initialize client.

        Args:
            server_url: Base URL of the sync server
            timeout: Request timeout in seconds
        """
        self.base_url = server_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    @property
    def is_authenticated(self) -> bool:
        return TOKEN_HEADER in self.session.headers

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ActualServerError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            raise ActualServerError(f"{method} {path} failed (HTTP {response.status_code}): {detail}")
        return response

    def _json_data(self, response: requests.Response) -> Any:
        """Unwrap the {"status": "ok", "data": ...} envelope used by the server."""
        try:
            payload = response.json()
        except ValueError as e:
            raise ActualServerError(f"Invalid JSON from {response.url}") from e

        if not isinstance(payload, dict) or payload.get("status") != "ok":
            reason = payload.get("reason") if isinstance(payload, dict) else None
            raise ActualServerError(f"Server returned an error: {reason or 'unknown error'}")
        return payload.get("data")

    def login(self, password: str) -> None:
        """
        Log in with the server password and remember the session token.

        Raises:
            ActualServerError: If the password is rejected or the server is unreachable
        """
        response = self._request(
            "POST",
            "/account/login",
            json={"loginMethod": "password", "password": password},
        )
        data = self._json_data(response)
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ActualServerError("Authentication failed: invalid password")

        self.session.headers[TOKEN_HEADER] = token
        logger.debug("Authenticated with Actual server")

    def list_user_files(self) -> list[RemoteBudgetFile]:
        """List the budget files visible to the logged-in user."""
        data = self._json_data(self._request("GET", "/sync/list-user-files"))
        if not isinstance(data, list):
            raise ActualServerError("Unexpected response listing budget files")

        files = []
        for entry in data:
            if not isinstance(entry, dict) or "fileId" not in entry:
                logger.debug(f"Skipping malformed file entry: {entry!r}")
                continue
            files.append(RemoteBudgetFile.from_dict(entry))
        return files

    def download_user_file(self, file_id: str) -> bytes:
        """
        Download a budget file.

        Returns:
            The zipped budget as raw bytes
        """
        response = self._request("GET", "/sync/download-user-file", headers={FILE_ID_HEADER: file_id})
        return response.content

    def close(self) -> None:
        """Close the HTTP session and forget the token."""
        self.session.headers.pop(TOKEN_HEADER, None)
        self.session.close()


def _error_detail(response: requests.Response) -> str:
    """Best-effort error text from a failed response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        detail = str(payload.get("reason") or payload.get("error") or "").strip()
        if detail:
            return detail
    return (response.text or "").strip() or "No error payload returned"
