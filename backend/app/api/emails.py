from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.app.deps import get_analyzer, get_gmail, get_settings
from inbox_priority.app.inbox import fetch_body, fetch_ranked_inbox
from inbox_priority.config.settings import Settings
from inbox_priority.errors import AuthRequiredError
from inbox_priority.gmail.client import GmailClient
from inbox_priority.pipeline.scope import DEFAULT_SCOPE, SCOPES
from inbox_priority.scoring.analyzer import EmailAnalyzer

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/emails")
def list_emails(
    scope: str = Query(DEFAULT_SCOPE, alias="range"),
    gmail: GmailClient = Depends(get_gmail),
    analyzer: Optional[EmailAnalyzer] = Depends(get_analyzer),
    settings: Settings = Depends(get_settings),
) -> list[dict[str, Any]]:
    if scope not in SCOPES:
        raise HTTPException(status_code=400, detail=f"Unknown range: {scope}")
    try:
        emails = fetch_ranked_inbox(gmail, analyzer, scope, max_results=settings.max_results)
    except AuthRequiredError:
        raise
    except Exception as exc:
        logger.exception("Error fetching emails: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to fetch emails") from exc
    return [email.to_dict() for email in emails]


@router.get("/emails/{message_id}/body")
def email_body(message_id: str, gmail: GmailClient = Depends(get_gmail)) -> dict[str, str]:
    try:
        body = fetch_body(gmail, message_id)
    except Exception as exc:
        logger.exception("Error fetching email body message_id=%s: %s", message_id, exc)
        raise HTTPException(status_code=500, detail="Failed to fetch email body") from exc
    return {"text": body.text, "html": body.html}


def _label_action(
    message_id: str,
    run: Callable[[str], None],
    failure: str,
) -> dict[str, bool]:
    try:
        run(message_id)
    except Exception as exc:
        logger.exception("%s message_id=%s: %s", failure, message_id, exc)
        raise HTTPException(status_code=500, detail=failure) from exc
    logger.info("Label change ok message_id=%s", message_id)
    return {"success": True}


@router.post("/emails/{message_id}/read")
def mark_read(message_id: str, gmail: GmailClient = Depends(get_gmail)) -> dict[str, bool]:
    return _label_action(message_id, gmail.mark_read, "Failed to mark email as read")


@router.post("/emails/{message_id}/unread")
def mark_unread(message_id: str, gmail: GmailClient = Depends(get_gmail)) -> dict[str, bool]:
    return _label_action(message_id, gmail.mark_unread, "Failed to mark email as unread")


@router.post("/emails/{message_id}/archive")
def archive(message_id: str, gmail: GmailClient = Depends(get_gmail)) -> dict[str, bool]:
    return _label_action(message_id, gmail.archive, "Failed to archive email")


@router.post("/emails/{message_id}/unarchive")
def unarchive(message_id: str, gmail: GmailClient = Depends(get_gmail)) -> dict[str, bool]:
    return _label_action(message_id, gmail.unarchive, "Failed to unarchive email")
