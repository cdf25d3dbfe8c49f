from __future__ import annotations

import base64
import re
from typing import Dict, Optional, Tuple

from inbox_priority.models import EmailBody


def _decode(data: str) -> str:
    return base64.urlsafe_b64decode(data).decode("utf-8", errors="replace")


def _find_part(part: dict, mime_type: str) -> Optional[str]:
    # Depth-first search through multipart payloads.
    if part.get("mimeType") == mime_type and part.get("body", {}).get("data"):
        return _decode(part["body"]["data"])
    for child in part.get("parts", []) or []:
        found = _find_part(child, mime_type)
        if found:
            return found
    return None


def extract_body_from_payload(payload: dict) -> EmailBody:
    """
    Extract plain text and HTML bodies from a Gmail message payload.
    A single-part message lands in whichever slot its mime type names.
    """
    text = _find_part(payload, "text/plain") or ""
    html = _find_part(payload, "text/html") or ""

    if not text and not html and payload.get("body", {}).get("data"):
        raw = _decode(payload["body"]["data"])
        if payload.get("mimeType") == "text/html":
            html = raw
        else:
            text = raw

    return EmailBody(text=text, html=html)


def header_map(payload: dict) -> Dict[str, str]:
    # Header names are case-insensitive; normalize once.
    return {h["name"].lower(): h["value"] for h in payload.get("headers", [])}


_SENDER_RE = re.compile(r"^(.+?)\s*<(.+)>$")


def split_sender(raw: str) -> Tuple[str, str]:
    """Split 'Name <addr>' into (address, display name)."""
    match = _SENDER_RE.match(raw.strip())
    if not match:
        return raw, raw
    return match.group(2), match.group(1).replace('"', "").strip()
