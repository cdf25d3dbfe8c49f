from __future__ import annotations

import logging
from typing import Optional

import httpx

from inbox_priority.errors import TaskCreationError
from inbox_priority.models import Email, TaskDraft

logger = logging.getLogger(__name__)

TODOIST_TASKS_URL = "https://api.todoist.com/rest/v2/tasks"
GMAIL_MESSAGE_URL = "https://mail.google.com/mail/u/0/#inbox/{message_id}"


def priority_for_score(score: int) -> int:
    # Todoist priorities run the other way round: 4 is p1.
    if score >= 5:
        return 4
    if score == 4:
        return 3
    return 2


def email_to_task(email: Email, due_string: Optional[str] = None) -> TaskDraft:
    analysis = email.analysis
    action_item = analysis.action_item if analysis and analysis.action_item else "Review this email"
    description = (
        f"{action_item}\n\n---\n"
        f"Open email: {GMAIL_MESSAGE_URL.format(message_id=email.id)}"
    )
    due = due_string if due_string is not None else (analysis.suggested_due if analysis else None)
    return TaskDraft(
        title=email.subject,
        description=description,
        priority=priority_for_score(email.urgency_score),
        due_string=due or None,
    )


class TodoistClient:
    def __init__(self, api_token: str, *, transport: Optional[httpx.BaseTransport] = None):
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }
        self._transport = transport

    def create_task(self, task: TaskDraft) -> str:
        """Create a task and return its Todoist id."""
        payload = {
            "content": task.title,
            "description": task.description,
            "priority": task.priority,
        }
        if task.due_string:
            payload["due_string"] = task.due_string

        try:
            with httpx.Client(timeout=30.0, transport=self._transport) as client:
                resp = client.post(TODOIST_TASKS_URL, headers=self._headers, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Todoist rejected task: status=%s body=%s", exc.response.status_code, exc.response.text[:500])
            raise TaskCreationError(
                f"Todoist API error: {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TaskCreationError(f"Todoist request failed: {exc}") from exc

        task_id = resp.json().get("id")
        if not task_id:
            raise TaskCreationError("Todoist response is missing the task id.")
        return str(task_id)
