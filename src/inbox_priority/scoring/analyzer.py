"""
Urgency scoring through the OpenAI Responses API.

The model is asked for a strict JSON object per message. Anything that goes
wrong (HTTP error, empty output, bad JSON, out-of-range score) is turned into
the default analysis for that message; scoring failures never reach the list.
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from openai import OpenAI

from inbox_priority.config.settings import Settings
from inbox_priority.errors import ScoringError
from inbox_priority.models import CATEGORIES, Email, EmailAnalysis, default_analysis

logger = logging.getLogger(__name__)

ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "urgency_score": {"type": "integer", "minimum": 1, "maximum": 5},
        "is_urgent": {"type": "boolean"},
        "action_item": {"type": "string"},
        "summary": {"type": "string"},
        "suggested_due": {"type": ["string", "null"]},
        "category": {"type": "string", "enum": list(CATEGORIES)},
    },
    "required": [
        "urgency_score",
        "is_urgent",
        "action_item",
        "summary",
        "suggested_due",
        "category",
    ],
}

SYSTEM_PROMPT = (
    "You triage a personal inbox. Score how urgently the recipient has to act on one email "
    "and return ONLY JSON that matches the provided schema.\n"
    "urgency_score: 1-5, 5 = most urgent. is_urgent: true if score >= 4.\n"
    "action_item: the action the recipient needs to take, one sentence.\n"
    "summary: 2-3 sentences on what the email is about.\n"
    "suggested_due: ISO date if a deadline is stated, otherwise null.\n"
    "Urgency signals: explicit deadlines, ASAP/urgent/EOD wording, someone waiting on a reply, "
    "time-sensitive requests, billing or payment problems.\n"
    "School signals: permission slips, report cards, early dismissal, messages from a school.\n"
    "Unsubscribe signals: marketing, newsletters, promotional content."
)


def parse_analysis(raw: str) -> EmailAnalysis:
    """
    Turn model output into a complete EmailAnalysis or raise ScoringError.
    Tolerates a ```json fence around the object.
    """
    text = raw.strip()
    if text.startswith("```"):
        text = text.strip("`").strip()
        if text.lower().startswith("json"):
            text = text[4:].strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ScoringError(f"Model output is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ScoringError("Model output is not a JSON object.")

    score = data.get("urgency_score")
    if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
        raise ScoringError(f"Invalid urgency_score: {score!r}")

    action_item = data.get("action_item")
    summary = data.get("summary")
    if not isinstance(action_item, str) or not isinstance(summary, str):
        raise ScoringError("Missing action_item or summary.")

    category = data.get("category")
    if category not in CATEGORIES:
        category = "normal"

    due = data.get("suggested_due")
    return EmailAnalysis(
        urgency_score=score,
        action_item=action_item.strip(),
        summary=summary.strip(),
        category=category,
        suggested_due=due.strip() if isinstance(due, str) and due.strip() else None,
    )


class EmailAnalyzer:
    def __init__(self, client: OpenAI, *, model: str, max_workers: int = 8):
        self._client = client
        self._model = model
        self._max_workers = max_workers

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailAnalyzer":
        if not settings.openai_api_key:
            raise ScoringError("OPENAI_API_KEY is not configured.")
        return cls(OpenAI(api_key=settings.openai_api_key), model=settings.openai_model)

    def analyze_email(self, email: Email) -> EmailAnalysis:
        try:
            resp = self._client.responses.create(
                model=self._model,
                input=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": (
                            f"From: {email.from_name} <{email.from_email}>\n"
                            f"Subject: {email.subject}\n"
                            f"Body: {email.snippet}\n"
                        ),
                    },
                ],
                text={
                    "format": {
                        "type": "json_schema",
                        "name": "email_analysis",
                        "schema": ANALYSIS_SCHEMA,
                        "strict": True,
                    }
                },
            )
        except Exception as exc:
            raise ScoringError(f"{type(exc).__name__}: {exc}") from exc

        output_text = getattr(resp, "output_text", None)
        if not output_text:
            raise ScoringError("OpenAI response was empty.")
        return parse_analysis(output_text)

    def analyze_or_default(self, email: Email) -> Email:
        try:
            analysis = self.analyze_email(email)
        except ScoringError as exc:
            logger.warning("Scoring failed for message_id=%s: %s", email.id, exc)
            analysis = default_analysis(email.snippet)
        return email.with_analysis(analysis)

    def analyze_emails(self, emails: List[Email]) -> List[Email]:
        """Score every message concurrently; output keeps input order."""
        if not emails:
            return []
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(emails))) as pool:
            return list(pool.map(self.analyze_or_default, emails))


def build_analyzer(settings: Settings) -> Optional[EmailAnalyzer]:
    """Return None when no API key is configured; callers fall back to defaults."""
    try:
        return EmailAnalyzer.from_settings(settings)
    except ScoringError as exc:
        logger.warning("Scoring disabled: %s", exc)
        return None
