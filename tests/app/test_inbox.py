from __future__ import annotations

import base64

from inbox_priority.app.inbox import email_from_message, fetch_body, fetch_ranked_inbox
from inbox_priority.models import EmailAnalysis


def _b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def _message(mid: str, sender: str = '"Ada Lovelace" <ada@example.com>', subject: str | None = "Hello") -> dict:
    headers = [{"name": "From", "value": sender}, {"name": "Date", "value": "Mon, 19 Oct 2026 09:00:00 +0000"}]
    if subject is not None:
        headers.append({"name": "Subject", "value": subject})
    return {
        "id": mid,
        "threadId": f"t-{mid}",
        "snippet": f"snippet {mid}",
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": headers,
            "parts": [
                {"mimeType": "text/plain", "body": {"data": _b64(f"plain {mid}")}},
                {"mimeType": "text/html", "body": {"data": _b64(f"<p>html {mid}</p>")}},
            ],
        },
    }


class FakeGmail:
    def __init__(self, messages):
        self.messages = {m["id"]: m for m in messages}
        self.queries = []

    def list_messages(self, query: str = "", max_results: int = 10):
        self.queries.append((query, max_results))
        return list(self.messages)[:max_results]

    def get_message(self, message_id: str, fmt: str = "full"):
        return self.messages[message_id]


class ScoreBySubject:
    def __init__(self, scores):
        self.scores = scores

    def analyze_emails(self, emails):
        return [
            e.with_analysis(EmailAnalysis(urgency_score=self.scores[e.id], action_item="", summary=""))
            for e in emails
        ]


def test_email_from_message_splits_sender() -> None:
    email = email_from_message(_message("m1"))

    assert email.from_email == "ada@example.com"
    assert email.from_name == "Ada Lovelace"
    assert email.subject == "Hello"
    assert email.thread_id == "t-m1"


def test_email_from_message_defaults() -> None:
    email = email_from_message(_message("m1", sender="bare@example.com", subject=None))

    assert email.from_email == "bare@example.com"
    assert email.from_name == "bare@example.com"
    assert email.subject == "(No Subject)"


def test_fetch_ranked_inbox_scores_and_sorts() -> None:
    gmail = FakeGmail([_message("a"), _message("b"), _message("c")])
    analyzer = ScoreBySubject({"a": 2, "b": 5, "c": 2})

    emails = fetch_ranked_inbox(gmail, analyzer, "7d", max_results=50)

    assert [e.id for e in emails] == ["b", "a", "c"]
    query, max_results = gmail.queries[0]
    assert query.startswith("is:unread in:inbox after:")
    assert max_results == 50


def test_fetch_ranked_inbox_without_analyzer_uses_default_analysis() -> None:
    gmail = FakeGmail([_message("a")])

    (email,) = fetch_ranked_inbox(gmail, None, "today")

    assert email.analysis.urgency_score == 2
    assert email.analysis.summary == "snippet a"


def test_fetch_body_returns_text_and_html() -> None:
    body = fetch_body(FakeGmail([_message("m1")]), "m1")

    assert body.text == "plain m1"
    assert body.html == "<p>html m1</p>"
