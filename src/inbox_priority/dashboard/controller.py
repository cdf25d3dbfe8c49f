from __future__ import annotations

import logging
from typing import List, Optional

from inbox_priority.config.settings import Settings
from inbox_priority.dashboard.api_client import DashboardApiClient
from inbox_priority.dashboard.dispatcher import BulkResult, MutationDispatcher, TaskBatchResult
from inbox_priority.dashboard.gateway import MailAction, MailGateway
from inbox_priority.dashboard.gestures import GestureController, GestureOutcome, PullToRefresh
from inbox_priority.dashboard.notifications import NotificationCenter
from inbox_priority.dashboard.store import SessionStore
from inbox_priority.dashboard.timers import LoopScheduler, Scheduler
from inbox_priority.errors import RemoteCallError
from inbox_priority.models import EmailBody
from inbox_priority.pipeline.scope import DEFAULT_SCOPE

logger = logging.getLogger(__name__)


class Dashboard:
    """
    Single owner of the dashboard state.

    Wires the store, dispatcher, notifications and gesture machines together
    and is handed to whatever renders them.
    """

    def __init__(
        self,
        gateway: MailGateway,
        *,
        scheduler: Optional[Scheduler] = None,
        scope: str = DEFAULT_SCOPE,
    ):
        self.scheduler = scheduler or LoopScheduler()
        self.gateway = gateway
        self.store = SessionStore(gateway, scope=scope)
        self.notifications = NotificationCenter(self.scheduler)
        self.gestures = GestureController(self.store, self.scheduler)
        self.dispatcher = MutationDispatcher(
            gateway,
            self.store,
            self.notifications,
            self.scheduler,
            on_removed=self.gestures.forget,
        )
        self.pull = PullToRefresh()

    @classmethod
    def from_settings(cls, settings: Settings, *, scheduler: Optional[Scheduler] = None) -> "Dashboard":
        """Dashboard backed by the inbox-priority API at settings.api_base_url."""
        return cls(DashboardApiClient.from_settings(settings), scheduler=scheduler)

    async def refresh(self, scope: Optional[str] = None) -> bool:
        try:
            loaded = await self.store.load(scope)
        finally:
            self.pull.finish()
        if loaded:
            # Selection never survives a reload.
            self.gestures.exit_selection()
        return loaded

    async def pull_released(self) -> bool:
        if not self.pull.release():
            return False
        return await self.refresh()

    async def release(self, message_id: str) -> Optional[GestureOutcome]:
        """Finish a touch on an item and run whatever it committed to."""
        outcome = self.gestures.touch_end(message_id)
        if outcome is not None and outcome.kind == "action" and outcome.action is not None:
            try:
                await self.dispatcher.apply_action(outcome.action, message_id)
            except RemoteCallError:
                self.gestures.revert(message_id)
        return outcome

    async def tap(self, message_id: str) -> Optional[EmailBody]:
        """Click on an item: toggle it while selecting, otherwise open its body."""
        if self.gestures.multi_select:
            self.gestures.toggle(message_id)
            return None
        try:
            return await self.body(message_id)
        except RemoteCallError as exc:
            logger.warning("Failed to load body message_id=%s: %s", message_id, exc)
            self.notifications.error("Failed to load email")
            return None

    async def act(self, action: MailAction, message_id: str) -> bool:
        """Button-driven variant of a swipe."""
        try:
            await self.dispatcher.apply_action(action, message_id)
        except RemoteCallError:
            return False
        return True

    async def bulk(self, action: MailAction) -> BulkResult:
        try:
            return await self.dispatcher.apply_bulk(action, self._selected_ids())
        finally:
            self.gestures.exit_selection()

    async def bulk_add_task(self) -> TaskBatchResult:
        try:
            return await self.dispatcher.bulk_add_task(self._selected_ids())
        finally:
            self.gestures.exit_selection()

    def _selected_ids(self) -> List[str]:
        # Snapshot order, so notifications and calls follow the visible list.
        selected = self.store.selection
        return [mid for mid in self.store.ids if mid in selected]

    async def undo(self, message_id: str) -> bool:
        try:
            restored = await self.dispatcher.undo(message_id)
        except RemoteCallError:
            return False
        if restored:
            self.gestures.forget(message_id)
        return restored

    async def add_task(self, message_id: str, due_string: Optional[str] = None) -> Optional[str]:
        try:
            return await self.dispatcher.add_task(message_id, due_string)
        except RemoteCallError:
            return None

    async def body(self, message_id: str) -> EmailBody:
        return await self.gateway.get_body(message_id)

    def close(self) -> None:
        self.dispatcher.close()
        self.gestures.reset()

    async def aclose(self) -> None:
        self.close()
        if isinstance(self.gateway, DashboardApiClient):
            await self.gateway.aclose()
