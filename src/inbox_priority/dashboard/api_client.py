from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from inbox_priority.config.settings import Settings
from inbox_priority.errors import AuthRequiredError, RemoteCallError
from inbox_priority.models import Email, EmailBody, TaskDraft

logger = logging.getLogger(__name__)


class DashboardApiClient:
    """MailGateway implementation that talks to the inbox-priority backend."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "DashboardApiClient":
        return cls(settings.api_base_url, **kwargs)

    async def __aenter__(self) -> "DashboardApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Request failed %s %s: %s", method, path, exc)
            raise RemoteCallError(f"{method} {path} failed: {exc}") from exc

        if resp.status_code == 401:
            raise AuthRequiredError("Backend reports no authenticated session.")
        if resp.is_error:
            detail = _error_detail(resp)
            logger.error("Request failed %s %s status=%s detail=%s", method, path, resp.status_code, detail)
            raise RemoteCallError(detail, status_code=resp.status_code)
        return resp.json()

    async def list_unread(self, scope: str) -> List[Email]:
        data = await self._request("GET", "/api/emails", params={"range": scope})
        return [Email.from_dict(item) for item in data]

    async def get_body(self, message_id: str) -> EmailBody:
        data = await self._request("GET", f"/api/emails/{message_id}/body")
        return EmailBody(text=data.get("text") or "", html=data.get("html") or "")

    async def set_read(self, message_id: str) -> None:
        await self._request("POST", f"/api/emails/{message_id}/read")

    async def set_unread(self, message_id: str) -> None:
        await self._request("POST", f"/api/emails/{message_id}/unread")

    async def archive(self, message_id: str) -> None:
        await self._request("POST", f"/api/emails/{message_id}/archive")

    async def unarchive(self, message_id: str) -> None:
        await self._request("POST", f"/api/emails/{message_id}/unarchive")

    async def create_task(self, task: TaskDraft) -> str:
        data = await self._request("POST", "/api/tasks", json=task.to_dict())
        return str(data["id"])


def _error_detail(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(payload, dict):
        return str(payload.get("error") or payload.get("detail") or payload)
    return str(payload)
