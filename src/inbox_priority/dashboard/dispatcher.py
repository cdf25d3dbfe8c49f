"""
Mutation dispatcher: remote side effects plus the optimistic list updates
and timed undo that follow them.

Timeline for a single action:

    remote call ok -> wait REMOVE_DELAY (transition) -> remove from store,
    arm pending undo (UNDO_WINDOW_SECONDS) -> undo() or expiry

A failed remote call never touches the store.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from inbox_priority.dashboard.gateway import MailAction, MailGateway, perform
from inbox_priority.dashboard.notifications import UNDO_WINDOW_SECONDS, NotificationCenter
from inbox_priority.dashboard.store import PendingUndo, SessionStore
from inbox_priority.dashboard.timers import Scheduler, TimerHandle
from inbox_priority.errors import RemoteCallError
from inbox_priority.tasks.todoist import email_to_task

logger = logging.getLogger(__name__)

REMOVE_DELAY = 0.3
FORWARD_ACTIONS = (MailAction.MARK_READ, MailAction.ARCHIVE)


@dataclass
class BulkResult:
    action: MailAction
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class TaskBatchResult:
    created: Dict[str, str] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class MutationDispatcher:
    def __init__(
        self,
        gateway: MailGateway,
        store: SessionStore,
        notifications: NotificationCenter,
        scheduler: Scheduler,
        *,
        on_removed: Optional[Callable[[str], None]] = None,
    ):
        self._gateway = gateway
        self._store = store
        self._notifications = notifications
        self._scheduler = scheduler
        self._removals: Dict[str, TimerHandle] = {}
        # Called with each id once it has left the snapshot.
        self._on_removed = on_removed or (lambda message_id: None)

    # --- Single item ---

    async def apply_action(self, action: MailAction, message_id: str) -> None:
        """
        Run action remotely, then remove the message after the transition delay.
        Raises RemoteCallError (after posting an error notification) on failure.
        """
        if action not in FORWARD_ACTIONS:
            raise ValueError(f"apply_action only supports {FORWARD_ACTIONS}, got {action}")

        try:
            await perform(self._gateway, action, message_id)
        except RemoteCallError as exc:
            logger.error("Action failed type=%s message_id=%s err=%s", action.value, message_id, exc)
            self._notifications.error(f"Failed to {_verb(action)}")
            raise

        self._schedule_removal(action, message_id)

    def _schedule_removal(self, action: MailAction, message_id: str) -> None:
        generation = self._store.generation
        previous = self._removals.pop(message_id, None)
        if previous is not None:
            previous.cancel()

        def remove() -> None:
            self._removals.pop(message_id, None)
            if self._store.generation != generation:
                # A refresh replaced the list during the transition.
                return
            self._remove_with_undo(action, message_id)

        self._removals[message_id] = self._scheduler.call_later(REMOVE_DELAY, remove)

    def _remove_with_undo(self, action: MailAction, message_id: str) -> None:
        removed = self._store.remove(message_id)
        self._on_removed(message_id)
        if removed is None:
            return
        email, index = removed

        entry = PendingUndo(email=email, index=index, inverse=action.inverse)
        entry.timer = self._scheduler.call_later(
            UNDO_WINDOW_SECONDS, lambda: self._store.discard_undo(entry)
        )
        self._store.arm_undo(entry)
        self._notifications.show(action.past_tense, undo_id=message_id)
        logger.info("Removed message_id=%s index=%d action=%s", message_id, index, action.value)

    # --- Undo ---

    async def undo(self, message_id: str) -> bool:
        """
        Reverse a recent removal. Returns False when there is nothing to undo.
        On failure the message stays removed and RemoteCallError propagates.
        """
        entry = self._store.pending_undo(message_id)
        if entry is None:
            return False

        generation = self._store.generation
        self._notifications.dismiss_undo(message_id)
        try:
            await perform(self._gateway, entry.inverse, message_id)
        except RemoteCallError as exc:
            logger.error("Undo failed message_id=%s err=%s", message_id, exc)
            self._notifications.error("Failed to undo")
            raise

        if self._store.pending_undo(message_id) is entry:
            self._store.take_undo(message_id)
        # The remote side is restored; put it back unless a refresh already did.
        if self._store.generation == generation and self._store.get(message_id) is None:
            self._store.reinsert(entry.email, entry.index)
        return True

    # --- Bulk ---

    async def apply_bulk(self, action: MailAction, message_ids: Iterable[str]) -> BulkResult:
        """
        Fire every per-id call at once and apply the outcome in one step.

        Succeeded ids are removed even when others fail, while the notification
        reports the batch as failed. Bulk removals carry no undo. An error other
        than RemoteCallError is re-raised, after the succeeded ids are removed.
        """
        if action not in FORWARD_ACTIONS:
            raise ValueError(f"apply_bulk only supports {FORWARD_ACTIONS}, got {action}")

        result = BulkResult(action=action)
        ids = list(dict.fromkeys(message_ids))
        if not ids:
            return result

        outcomes = await asyncio.gather(
            *(perform(self._gateway, action, mid) for mid in ids),
            return_exceptions=True,
        )

        unexpected: Optional[BaseException] = None
        for mid, outcome in zip(ids, outcomes):
            if isinstance(outcome, BaseException):
                result.failed[mid] = str(outcome)
                if not isinstance(outcome, RemoteCallError) and unexpected is None:
                    unexpected = outcome
            else:
                result.succeeded.append(mid)

        # The server already applied these, so the snapshot follows before any re-raise.
        self._store.remove_many(result.succeeded)
        for mid in result.succeeded:
            self._on_removed(mid)
        if unexpected is not None:
            raise unexpected

        if result.ok:
            count = len(result.succeeded)
            self._notifications.show(f"{action.past_tense}: {count} email{'s' if count != 1 else ''}")
        else:
            logger.error(
                "Bulk action partially failed type=%s failed=%d succeeded=%d",
                action.value,
                len(result.failed),
                len(result.succeeded),
            )
            self._notifications.error(f"Failed to {_verb(action)} some emails")
        return result

    # --- Tasks ---

    async def bulk_add_task(self, message_ids: Iterable[str]) -> TaskBatchResult:
        """
        Create one task per message concurrently, each with its suggested due date.
        Messages stay in the list; one notification covers the batch.
        """
        result = TaskBatchResult()
        emails = [self._store.get(mid) for mid in dict.fromkeys(message_ids)]
        emails = [email for email in emails if email is not None]
        if not emails:
            return result

        outcomes = await asyncio.gather(
            *(self._gateway.create_task(email_to_task(email)) for email in emails),
            return_exceptions=True,
        )

        unexpected: Optional[BaseException] = None
        for email, outcome in zip(emails, outcomes):
            if isinstance(outcome, BaseException):
                result.failed[email.id] = str(outcome)
                if not isinstance(outcome, RemoteCallError) and unexpected is None:
                    unexpected = outcome
            else:
                result.created[email.id] = outcome
        if unexpected is not None:
            raise unexpected

        if result.ok:
            count = len(result.created)
            self._notifications.show(f"Added {count} task{'s' if count != 1 else ''} to Todoist!")
        else:
            logger.error(
                "Bulk task creation partially failed failed=%d created=%d",
                len(result.failed),
                len(result.created),
            )
            self._notifications.error("Failed to create some tasks")
        return result

    async def add_task(self, message_id: str, due_string: Optional[str] = None) -> Optional[str]:
        """Create a Todoist task for a message; the message stays in the list."""
        email = self._store.get(message_id)
        if email is None:
            return None
        try:
            task_id = await self._gateway.create_task(email_to_task(email, due_string))
        except RemoteCallError as exc:
            logger.error("Task creation failed message_id=%s err=%s", message_id, exc)
            self._notifications.error("Failed to create task")
            raise
        self._notifications.show("Added to Todoist!")
        return task_id

    # --- Teardown ---

    def close(self) -> None:
        for timer in self._removals.values():
            timer.cancel()
        self._removals.clear()
        self._store.clear_undo()
        self._notifications.close()


def _verb(action: MailAction) -> str:
    return {
        MailAction.MARK_READ: "mark as read",
        MailAction.MARK_UNREAD: "mark as unread",
        MailAction.ARCHIVE: "archive",
        MailAction.UNARCHIVE: "unarchive",
    }[action]
