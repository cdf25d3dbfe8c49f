from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from inbox_priority.dashboard.api_client import DashboardApiClient
from inbox_priority.errors import AuthRequiredError, RemoteCallError
from inbox_priority.models import TaskDraft


def _client(handler) -> DashboardApiClient:
    return DashboardApiClient("http://testserver", transport=httpx.MockTransport(handler))


async def _call(handler, method: str, *args):
    async with _client(handler) as client:
        return await getattr(client, method)(*args)


def test_list_unread_parses_emails_and_passes_range() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(
            200,
            json=[
                {
                    "id": "m1",
                    "threadId": "t1",
                    "from": "ada@example.com",
                    "fromName": "Ada",
                    "subject": "Invoice overdue",
                    "snippet": "Please pay",
                    "date": "Mon, 19 Oct 2026 09:00:00 +0000",
                    "analysis": {
                        "urgency_score": 5,
                        "is_urgent": True,
                        "action_item": "Pay invoice",
                        "summary": "Overdue invoice.",
                        "suggested_due": "2026-10-20",
                        "category": "urgent",
                    },
                }
            ],
        )

    emails = asyncio.run(_call(handler, "list_unread", "30d"))

    assert seen["url"] == "http://testserver/api/emails?range=30d"
    assert emails[0].id == "m1"
    assert emails[0].analysis.urgency_score == 5
    assert emails[0].is_urgent


def test_action_posts_to_matching_route() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json={"success": True})

    asyncio.run(_call(handler, "set_read", "m1"))
    asyncio.run(_call(handler, "unarchive", "m2"))

    assert seen == [("POST", "/api/emails/m1/read"), ("POST", "/api/emails/m2/unarchive")]


def test_unauthorized_maps_to_auth_required() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Unauthorized"})

    with pytest.raises(AuthRequiredError):
        asyncio.run(_call(handler, "archive", "m1"))


def test_server_error_maps_to_remote_call_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "Failed to archive email"})

    with pytest.raises(RemoteCallError) as excinfo:
        asyncio.run(_call(handler, "archive", "m1"))

    assert excinfo.value.status_code == 500
    assert str(excinfo.value) == "Failed to archive email"


def test_network_error_maps_to_remote_call_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteCallError):
        asyncio.run(_call(handler, "set_unread", "m1"))


def test_create_task_sends_draft_and_returns_id() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "987"})

    task = TaskDraft(title="Pay invoice", description="d", priority=4, due_string="tomorrow")

    assert asyncio.run(_call(handler, "create_task", task)) == "987"
    assert seen["body"] == {
        "title": "Pay invoice",
        "description": "d",
        "priority": 4,
        "due_string": "tomorrow",
    }
