from __future__ import annotations

from enum import Enum
from typing import List, Protocol

from inbox_priority.models import Email, EmailBody, TaskDraft


class MailAction(str, Enum):
    MARK_READ = "mark_read"
    MARK_UNREAD = "mark_unread"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"

    @property
    def inverse(self) -> "MailAction":
        return _INVERSE[self]

    @property
    def past_tense(self) -> str:
        return _PAST_TENSE[self]


_INVERSE = {
    MailAction.MARK_READ: MailAction.MARK_UNREAD,
    MailAction.MARK_UNREAD: MailAction.MARK_READ,
    MailAction.ARCHIVE: MailAction.UNARCHIVE,
    MailAction.UNARCHIVE: MailAction.ARCHIVE,
}

_PAST_TENSE = {
    MailAction.MARK_READ: "Marked as read",
    MailAction.MARK_UNREAD: "Marked as unread",
    MailAction.ARCHIVE: "Archived",
    MailAction.UNARCHIVE: "Moved to inbox",
}


class MailGateway(Protocol):
    """Remote side of the dashboard. Every method may raise RemoteCallError or AuthRequiredError."""

    async def list_unread(self, scope: str) -> List[Email]: ...
    async def get_body(self, message_id: str) -> EmailBody: ...
    async def set_read(self, message_id: str) -> None: ...
    async def set_unread(self, message_id: str) -> None: ...
    async def archive(self, message_id: str) -> None: ...
    async def unarchive(self, message_id: str) -> None: ...
    async def create_task(self, task: TaskDraft) -> str: ...


async def perform(gateway: MailGateway, action: MailAction, message_id: str) -> None:
    if action is MailAction.MARK_READ:
        await gateway.set_read(message_id)
    elif action is MailAction.MARK_UNREAD:
        await gateway.set_unread(message_id)
    elif action is MailAction.ARCHIVE:
        await gateway.archive(message_id)
    elif action is MailAction.UNARCHIVE:
        await gateway.unarchive(message_id)
    else:
        raise ValueError(f"Unsupported action: {action}")
