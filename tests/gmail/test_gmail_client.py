from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from inbox_priority.errors import AuthRequiredError
from inbox_priority.gmail.client import GmailClient, GmailClientConfig


def _client(tmp_path) -> GmailClient:
    return GmailClient(
        GmailClientConfig(
            credentials_path=tmp_path / "credentials.json",
            token_path=tmp_path / "gmail_token.json",
        )
    )


def test_connect_without_token_requires_auth(tmp_path) -> None:
    with pytest.raises(AuthRequiredError):
        _client(tmp_path).connect()


@pytest.mark.parametrize(
    "method,body",
    [
        ("mark_read", {"addLabelIds": [], "removeLabelIds": ["UNREAD"]}),
        ("mark_unread", {"addLabelIds": ["UNREAD"], "removeLabelIds": []}),
        ("archive", {"addLabelIds": [], "removeLabelIds": ["INBOX"]}),
        ("unarchive", {"addLabelIds": ["INBOX"], "removeLabelIds": []}),
    ],
)
def test_label_changes(tmp_path, method: str, body: dict) -> None:
    client = _client(tmp_path)
    service = MagicMock()
    client._service = service

    getattr(client, method)("m1")

    service.users().messages().modify.assert_called_with(userId="me", id="m1", body=body)
