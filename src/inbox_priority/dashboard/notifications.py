from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from inbox_priority.dashboard.timers import Scheduler, TimerHandle

NotificationKind = Literal["success", "error"]

UNDO_WINDOW_SECONDS = 5.0
PLAIN_WINDOW_SECONDS = 3.0


@dataclass(frozen=True)
class Notification:
    message: str
    kind: NotificationKind = "success"
    # Set when the notification carries an undo affordance.
    undo_id: Optional[str] = None

    @property
    def duration(self) -> float:
        return UNDO_WINDOW_SECONDS if self.undo_id else PLAIN_WINDOW_SECONDS


class NotificationCenter:
    """Holds at most one transient notification; a new one supersedes the old."""

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._timer: Optional[TimerHandle] = None
        self.current: Optional[Notification] = None

    def show(
        self,
        message: str,
        kind: NotificationKind = "success",
        *,
        undo_id: Optional[str] = None,
    ) -> Notification:
        self._cancel_timer()
        note = Notification(message=message, kind=kind, undo_id=undo_id)
        self.current = note
        self._timer = self._scheduler.call_later(note.duration, lambda: self._expire(note))
        return note

    def error(self, message: str) -> Notification:
        return self.show(message, "error")

    def dismiss(self) -> None:
        self._cancel_timer()
        self.current = None

    def dismiss_undo(self, message_id: str) -> None:
        """Drop the undo offer for message_id if it is the one on screen."""
        if self.current is not None and self.current.undo_id == message_id:
            self.dismiss()

    def close(self) -> None:
        self.dismiss()

    def _expire(self, note: Notification) -> None:
        if self.current is note:
            self.current = None
            self._timer = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
