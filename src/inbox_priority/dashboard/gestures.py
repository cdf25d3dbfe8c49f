"""
Gesture state machines for the message list.

Per item:

    idle --touch_start--> pressed
    pressed --horizontal move > MOVE_SLOP--> swiping(offset)
    pressed --vertical move > MOVE_SLOP--> idle              (scroll)
    pressed --touch_end--> idle                              (tap: open)
    pressed --LONG_PRESS_SECONDS elapse--> selected          (armed press fires at once;
                                                              list enters multi-select,
                                                              release is a no-op)
    swiping --touch_end, |offset| >= SWIPE_THRESHOLD--> dismissing (mark_read / archive)
    swiping --touch_end, below threshold--> idle             (snap back)
    dismissing --revert--> idle

In multi-select mode swipes and long presses are off; a tap toggles
membership in the store's selection set.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Literal, Optional

from inbox_priority.dashboard.gateway import MailAction
from inbox_priority.dashboard.store import SessionStore
from inbox_priority.dashboard.timers import Scheduler, TimerHandle

LONG_PRESS_SECONDS = 0.5
MOVE_SLOP = 10.0
SWIPE_THRESHOLD = 100.0
DRAG_RESISTANCE = 0.6

PULL_THRESHOLD = 80.0
PULL_RESISTANCE = 0.5


class GestureState(str, Enum):
    IDLE = "idle"
    PRESSED = "pressed"
    SWIPING = "swiping"
    SELECTED = "selected"
    DISMISSING = "dismissing"


OutcomeKind = Literal["action", "open", "toggle"]


@dataclass(frozen=True)
class GestureOutcome:
    kind: OutcomeKind
    message_id: str
    action: Optional[MailAction] = None


@dataclass
class _Touch:
    state: GestureState
    start_x: float
    start_y: float
    offset: float = 0.0
    timer: Optional[TimerHandle] = None

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class GestureController:
    def __init__(self, store: SessionStore, scheduler: Scheduler):
        self._store = store
        self._scheduler = scheduler
        self._touches: Dict[str, _Touch] = {}
        self.multi_select = False

    # --- Queries ---

    def state_of(self, message_id: str) -> GestureState:
        if self.multi_select and self._store.is_selected(message_id):
            return GestureState.SELECTED
        touch = self._touches.get(message_id)
        return touch.state if touch else GestureState.IDLE

    def offset_of(self, message_id: str) -> float:
        touch = self._touches.get(message_id)
        if touch is None or touch.state not in (GestureState.SWIPING, GestureState.DISMISSING):
            return 0.0
        return touch.offset

    def display_offset(self, message_id: str) -> float:
        return self.offset_of(message_id) * DRAG_RESISTANCE

    # --- Touch input ---

    def touch_start(self, message_id: str, x: float, y: float) -> None:
        current = self._touches.get(message_id)
        if current is not None and current.state is GestureState.DISMISSING:
            return
        self._drop(message_id)

        touch = _Touch(state=GestureState.PRESSED, start_x=x, start_y=y)
        if not self.multi_select:
            touch.timer = self._scheduler.call_later(
                LONG_PRESS_SECONDS, lambda: self._fire_long_press(message_id, touch)
            )
        self._touches[message_id] = touch

    def touch_move(self, message_id: str, x: float, y: float) -> None:
        touch = self._touches.get(message_id)
        if touch is None:
            return

        dx = x - touch.start_x
        dy = y - touch.start_y

        if touch.state is GestureState.PRESSED:
            if abs(dx) > MOVE_SLOP and not self.multi_select:
                touch.cancel_timer()
                touch.state = GestureState.SWIPING
                touch.offset = dx
            elif abs(dx) > MOVE_SLOP or abs(dy) > MOVE_SLOP:
                self._drop(message_id)
        elif touch.state is GestureState.SWIPING:
            touch.offset = dx

    def touch_end(self, message_id: str) -> Optional[GestureOutcome]:
        touch = self._touches.get(message_id)
        if touch is None:
            return None

        if touch.state is GestureState.SWIPING:
            if abs(touch.offset) >= SWIPE_THRESHOLD:
                touch.state = GestureState.DISMISSING
                action = MailAction.MARK_READ if touch.offset > 0 else MailAction.ARCHIVE
                return GestureOutcome(kind="action", message_id=message_id, action=action)
            self._drop(message_id)
            return None

        if touch.state is GestureState.PRESSED:
            self._drop(message_id)
            if self.multi_select:
                self.toggle(message_id)
                return GestureOutcome(kind="toggle", message_id=message_id)
            return GestureOutcome(kind="open", message_id=message_id)

        return None

    def touch_cancel(self, message_id: str) -> None:
        touch = self._touches.get(message_id)
        if touch is not None and touch.state is not GestureState.DISMISSING:
            self._drop(message_id)

    def revert(self, message_id: str) -> None:
        """Snap a dismissing item back after its action failed."""
        self._drop(message_id)

    def forget(self, message_id: str) -> None:
        self._drop(message_id)

    # --- Multi-select ---

    def enter_selection(self, message_id: str) -> None:
        self._store.clear_selection()
        if self._store.select(message_id):
            self.multi_select = True

    def toggle(self, message_id: str) -> bool:
        selected = self._store.toggle(message_id)
        if not self._store.selection:
            self.exit_selection()
        return selected

    def exit_selection(self) -> None:
        self.multi_select = False
        self._store.clear_selection()
        self.reset()

    def reset(self) -> None:
        for touch in self._touches.values():
            touch.cancel_timer()
        self._touches.clear()

    # --- Internals ---

    def _fire_long_press(self, message_id: str, touch: _Touch) -> None:
        if self._touches.get(message_id) is touch and touch.state is GestureState.PRESSED:
            # The finger is still down; dropping the touch makes its release a no-op.
            touch.timer = None
            self._drop(message_id)
            self.enter_selection(message_id)

    def _drop(self, message_id: str) -> None:
        touch = self._touches.pop(message_id, None)
        if touch is not None:
            touch.cancel_timer()


class PullToRefresh:
    """Pull down from the top of the list past PULL_THRESHOLD to refresh."""

    def __init__(self) -> None:
        self._start_y: Optional[float] = None
        self.distance = 0.0
        self.refreshing = False

    @property
    def display_distance(self) -> float:
        return self.distance * PULL_RESISTANCE

    def start(self, y: float, *, at_top: bool) -> None:
        if self.refreshing or not at_top:
            self._start_y = None
            return
        self._start_y = y
        self.distance = 0.0

    def move(self, y: float) -> None:
        if self._start_y is None:
            return
        self.distance = max(0.0, y - self._start_y)

    def release(self) -> bool:
        """True when the pull should trigger a refresh."""
        triggered = self._start_y is not None and self.distance >= PULL_THRESHOLD
        self._start_y = None
        self.distance = 0.0
        if triggered:
            self.refreshing = True
        return triggered

    def finish(self) -> None:
        self.refreshing = False
