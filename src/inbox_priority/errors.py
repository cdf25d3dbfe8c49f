from __future__ import annotations


class InboxPriorityError(Exception):
    """Base class for errors raised by inbox_priority."""


class AuthRequiredError(InboxPriorityError):
    """No usable mailbox session; the user has to sign in again."""


class RemoteCallError(InboxPriorityError):
    """A call to the mail provider, the task tracker or the backend failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ScoringError(InboxPriorityError):
    """The language model call or its JSON payload was unusable."""


class TaskCreationError(RemoteCallError):
    """The task tracker rejected or failed to create a task."""
