"""
Session/list store for the dashboard.

Owns the ranked list snapshot, the multi-select selection set and the
pending-undo entries. Every mutation of those goes through this class; the
dispatcher and the gesture controller only call its methods.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from inbox_priority.dashboard.gateway import MailAction, MailGateway
from inbox_priority.dashboard.timers import TimerHandle
from inbox_priority.errors import AuthRequiredError, RemoteCallError
from inbox_priority.models import Email
from inbox_priority.pipeline.scope import DEFAULT_SCOPE, validate_scope
from inbox_priority.scoring.ranking import rank_emails

logger = logging.getLogger(__name__)


@dataclass
class PendingUndo:
    email: Email
    index: int
    inverse: MailAction
    timer: Optional[TimerHandle] = None

    def cancel(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class SessionStore:
    def __init__(self, gateway: MailGateway, *, scope: str = DEFAULT_SCOPE):
        self._gateway = gateway
        self._emails: List[Email] = []
        self._selection: set[str] = set()
        self._pending: Dict[str, PendingUndo] = {}
        self.scope = validate_scope(scope)
        self.is_loading = False
        self.error: Optional[str] = None
        # Bumped on every successful load; lets deferred work detect a refresh.
        self.generation = 0

    # --- Read-only views ---

    @property
    def snapshot(self) -> Tuple[Email, ...]:
        return tuple(self._emails)

    @property
    def ids(self) -> List[str]:
        return [e.id for e in self._emails]

    @property
    def urgent_count(self) -> int:
        return sum(1 for e in self._emails if e.is_urgent)

    def __len__(self) -> int:
        return len(self._emails)

    def get(self, message_id: str) -> Optional[Email]:
        for email in self._emails:
            if email.id == message_id:
                return email
        return None

    def index_of(self, message_id: str) -> Optional[int]:
        for idx, email in enumerate(self._emails):
            if email.id == message_id:
                return idx
        return None

    # --- Load ---

    async def load(self, scope: Optional[str] = None) -> bool:
        """
        Replace the snapshot with a fresh, ranked fetch.
        Returns False (previous snapshot kept, error set) when the fetch fails.
        """
        scope = validate_scope(scope or self.scope)
        self.is_loading = True
        self.error = None
        try:
            fetched = await self._gateway.list_unread(scope)
        except AuthRequiredError:
            self.error = "Session expired. Please sign in again."
            raise
        except RemoteCallError as exc:
            logger.error("Failed to load emails scope=%s: %s", scope, exc)
            self.error = "Failed to load emails"
            return False
        finally:
            self.is_loading = False

        self.scope = scope
        self._emails = rank_emails(fetched)
        self._selection.clear()
        self.clear_undo()
        self.generation += 1
        logger.info("Loaded %d emails scope=%s", len(self._emails), scope)
        return True

    # --- Local mutations ---

    def remove(self, message_id: str) -> Optional[Tuple[Email, int]]:
        idx = self.index_of(message_id)
        if idx is None:
            return None
        email = self._emails.pop(idx)
        self._selection.discard(message_id)
        return email, idx

    def remove_many(self, message_ids: Iterable[str]) -> List[Email]:
        """Drop several ids in one step."""
        doomed = set(message_ids)
        removed = [e for e in self._emails if e.id in doomed]
        self._emails = [e for e in self._emails if e.id not in doomed]
        self._selection -= doomed
        return removed

    def reinsert(self, email: Email, index: int) -> int:
        index = max(0, min(index, len(self._emails)))
        self._emails.insert(index, email)
        return index

    # --- Selection ---

    @property
    def selection(self) -> FrozenSet[str]:
        return frozenset(self._selection)

    def is_selected(self, message_id: str) -> bool:
        return message_id in self._selection

    def select(self, message_id: str) -> bool:
        if self.index_of(message_id) is None:
            return False
        self._selection.add(message_id)
        return True

    def toggle(self, message_id: str) -> bool:
        """Flip membership; returns the new membership."""
        if message_id in self._selection:
            self._selection.discard(message_id)
            return False
        return self.select(message_id)

    def clear_selection(self) -> None:
        self._selection.clear()

    # --- Pending undo ---

    def arm_undo(self, entry: PendingUndo) -> None:
        stale = self._pending.pop(entry.email.id, None)
        if stale is not None:
            stale.cancel()
        self._pending[entry.email.id] = entry

    def pending_undo(self, message_id: str) -> Optional[PendingUndo]:
        return self._pending.get(message_id)

    def take_undo(self, message_id: str) -> Optional[PendingUndo]:
        entry = self._pending.pop(message_id, None)
        if entry is not None:
            entry.cancel()
        return entry

    def discard_undo(self, entry: PendingUndo) -> None:
        # Only drop the entry if it has not been superseded meanwhile.
        message_id = entry.email.id
        if self._pending.get(message_id) is entry:
            del self._pending[message_id]
            entry.timer = None
            logger.debug("Undo window expired message_id=%s", message_id)

    def clear_undo(self) -> None:
        for entry in self._pending.values():
            entry.cancel()
        self._pending.clear()
