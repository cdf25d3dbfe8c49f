from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from inbox_priority.errors import AuthRequiredError


# Triage needs to flip UNREAD/INBOX labels, so readonly is not enough.
SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]

UNREAD_LABEL = "UNREAD"
INBOX_LABEL = "INBOX"


@dataclass(frozen=True)
class GmailClientConfig:
    # Path to OAuth client credentials downloaded from Google Cloud Console.
    credentials_path: Path
    # Token cache will be created here after first login.
    token_path: Path
    # Gmail userId, "me" refers to the authenticated user.
    user_id: str = "me"


class GmailClient:
    def __init__(self, cfg: GmailClientConfig):
        self._cfg = cfg
        self._creds: Optional[Credentials] = None
        self._service = None

    def connect(self) -> None:
        """
        Create an authenticated Gmail API service client.

        A missing or unrefreshable token raises AuthRequiredError; signing in
        goes through /api/secrets/oauth.
        """
        creds = None

        if self._cfg.token_path.exists():
            creds = Credentials.from_authorized_user_file(str(self._cfg.token_path), SCOPES)

        if not creds or not creds.valid:
            if not (creds and creds.expired and creds.refresh_token):
                raise AuthRequiredError("No valid Gmail token. Sign in again.")
            try:
                creds.refresh(Request())
            except RefreshError as exc:
                raise AuthRequiredError(f"Gmail token refresh failed: {exc}") from exc

            # Save the refreshed credentials for the next run.
            self._cfg.token_path.write_text(creds.to_json(), encoding="utf-8")

        self._creds = creds
        self._service = build("gmail", "v1", credentials=creds)

    @property
    def service(self):
        if self._service is None:
            raise RuntimeError("GmailClient is not connected. Call connect() first.")
        return self._service

    def list_messages(self, query: str = "", max_results: int = 10) -> List[str]:
        """
        List message IDs matching a Gmail search query.
        Example query: 'is:unread in:inbox after:1700000000'
        """
        resp = (
            self.service.users()
            .messages()
            .list(userId=self._cfg.user_id, q=query, maxResults=max_results)
            .execute()
        )
        msgs = resp.get("messages", [])
        return [m["id"] for m in msgs]

    def get_message(self, message_id: str, fmt: str = "full") -> Dict[str, Any]:
        """
        Fetch a full message resource.
        fmt: 'full' | 'metadata' | 'minimal' | 'raw'
        """
        return (
            self.service.users()
            .messages()
            .get(userId=self._cfg.user_id, id=message_id, format=fmt)
            .execute()
        )

    def modify_labels(
        self,
        message_id: str,
        *,
        add: Optional[List[str]] = None,
        remove: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        body = {"addLabelIds": add or [], "removeLabelIds": remove or []}
        return (
            self.service.users()
            .messages()
            .modify(userId=self._cfg.user_id, id=message_id, body=body)
            .execute()
        )

    def mark_read(self, message_id: str) -> None:
        self.modify_labels(message_id, remove=[UNREAD_LABEL])

    def mark_unread(self, message_id: str) -> None:
        self.modify_labels(message_id, add=[UNREAD_LABEL])

    def archive(self, message_id: str) -> None:
        self.modify_labels(message_id, remove=[INBOX_LABEL])

    def unarchive(self, message_id: str) -> None:
        self.modify_labels(message_id, add=[INBOX_LABEL])
