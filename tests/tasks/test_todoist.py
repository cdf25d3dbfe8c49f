from __future__ import annotations

import json

import httpx
import pytest

from inbox_priority.errors import TaskCreationError
from inbox_priority.models import EmailAnalysis, TaskDraft
from inbox_priority.tasks.todoist import TodoistClient, email_to_task, priority_for_score


@pytest.mark.parametrize("score,priority", [(5, 4), (4, 3), (3, 2), (1, 2), (0, 2)])
def test_priority_for_score(score: int, priority: int) -> None:
    assert priority_for_score(score) == priority


def test_email_to_task_uses_analysis_and_links_message(email_factory) -> None:
    email = email_factory("m42", 5)

    task = email_to_task(email)

    assert task.title == "Subject m42"
    assert task.priority == 4
    assert task.description.startswith("Handle m42")
    assert task.description.endswith("https://mail.google.com/mail/u/0/#inbox/m42")
    assert task.due_string is None


def test_email_to_task_prefers_explicit_due_over_suggestion(email_factory) -> None:
    email = email_factory("m1", 4)
    email = email.with_analysis(
        EmailAnalysis(
            urgency_score=4,
            action_item="Sign form",
            summary="",
            suggested_due="2026-10-21",
        )
    )

    assert email_to_task(email).due_string == "2026-10-21"
    assert email_to_task(email, due_string="today").due_string == "today"
    assert email_to_task(email, due_string="").due_string is None


def test_email_without_analysis_gets_generic_task(email_factory) -> None:
    task = email_to_task(email_factory("m2"))

    assert task.priority == 2
    assert task.description.startswith("Review this email")


def test_create_task_posts_to_todoist() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "123", "content": "Pay"})

    client = TodoistClient("secret", transport=httpx.MockTransport(handler))
    task_id = client.create_task(TaskDraft(title="Pay", description="desc", priority=3))

    assert task_id == "123"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"] == {"content": "Pay", "description": "desc", "priority": 3}


def test_create_task_raises_on_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="Forbidden")

    client = TodoistClient("secret", transport=httpx.MockTransport(handler))

    with pytest.raises(TaskCreationError) as excinfo:
        client.create_task(TaskDraft(title="Pay", description="", priority=2))
    assert excinfo.value.status_code == 403
