# src/inbox_priority/app/inbox.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from inbox_priority.config.paths import CREDENTIALS_PATH, TOKEN_PATH
from inbox_priority.errors import AuthRequiredError
from inbox_priority.gmail.client import GmailClient, GmailClientConfig
from inbox_priority.models import Email, EmailBody, default_analysis
from inbox_priority.parsing.parser import extract_body_from_payload, header_map, split_sender
from inbox_priority.pipeline.scope import build_unread_query
from inbox_priority.scoring.analyzer import EmailAnalyzer
from inbox_priority.scoring.ranking import rank_emails

logger = logging.getLogger(__name__)


def load_gmail_config() -> GmailClientConfig:
    if not CREDENTIALS_PATH.exists():
        raise RuntimeError(
            f"Missing Gmail credentials at {CREDENTIALS_PATH}. "
            "Did you configure INBOX_PRIORITY_SECRETS_DIR?"
        )
    return GmailClientConfig(
        credentials_path=CREDENTIALS_PATH,
        token_path=TOKEN_PATH,
        user_id="me",
    )


def connect_gmail() -> GmailClient:
    """Connected client for request handlers; raises AuthRequiredError when signed out."""
    if not TOKEN_PATH.exists():
        raise AuthRequiredError("No Gmail token stored.")
    try:
        cfg = load_gmail_config()
    except RuntimeError as exc:
        raise AuthRequiredError(str(exc)) from exc
    client = GmailClient(cfg)
    client.connect()
    return client


def email_from_message(msg: Dict[str, Any]) -> Email:
    payload = msg.get("payload", {})
    headers = header_map(payload)

    from_raw = headers.get("from") or "Unknown"
    from_email, from_name = split_sender(from_raw)
    date = headers.get("date") or datetime.now(timezone.utc).isoformat()

    return Email(
        id=msg["id"],
        thread_id=msg.get("threadId", ""),
        from_email=from_email,
        from_name=from_name,
        subject=headers.get("subject") or "(No Subject)",
        snippet=msg.get("snippet", ""),
        date=date,
    )


def fetch_unread(client: GmailClient, scope: str, *, max_results: int = 50) -> List[Email]:
    query = build_unread_query(scope)
    message_ids = client.list_messages(query=query, max_results=max_results)
    logger.info("Found %d unread messages for scope=%s", len(message_ids), scope)

    emails: List[Email] = []
    for mid in message_ids:
        msg = client.get_message(mid, fmt="full")
        emails.append(email_from_message(msg))
    return emails


def fetch_ranked_inbox(
    client: GmailClient,
    analyzer: Optional[EmailAnalyzer],
    scope: str,
    *,
    max_results: int = 50,
) -> List[Email]:
    emails = fetch_unread(client, scope, max_results=max_results)
    if analyzer is None:
        analyzed = [e.with_analysis(default_analysis(e.snippet)) for e in emails]
    else:
        analyzed = analyzer.analyze_emails(emails)
    return rank_emails(analyzed)


def fetch_body(client: GmailClient, message_id: str) -> EmailBody:
    msg = client.get_message(message_id, fmt="full")
    return extract_body_from_payload(msg.get("payload", {}))
