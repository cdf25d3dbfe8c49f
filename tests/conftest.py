from __future__ import annotations

import heapq
import itertools
from typing import Callable, Dict, List, Optional, Set, Tuple

import pytest

from inbox_priority.errors import RemoteCallError
from inbox_priority.models import Email, EmailAnalysis, EmailBody, TaskDraft


class ManualTimer:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler: time only moves when a test calls advance()."""

    def __init__(self) -> None:
        self._now = 0.0
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, ManualTimer, Callable[[], None]]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer()
        heapq.heappush(self._queue, (self._now + delay, next(self._seq), timer, callback))
        return timer

    def advance(self, seconds: float) -> None:
        deadline = self._now + seconds
        while self._queue and self._queue[0][0] <= deadline:
            due, _, timer, callback = heapq.heappop(self._queue)
            self._now = due
            if not timer.cancelled:
                callback()
        self._now = deadline

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer, _ in self._queue if not timer.cancelled)


class FakeGateway:
    """In-memory MailGateway; failures are configured per (method, message_id)."""

    def __init__(self, emails: Optional[List[Email]] = None) -> None:
        self.emails = list(emails or [])
        self.calls: List[Tuple[str, str]] = []
        self.failures: Set[Tuple[str, str]] = set()
        self.fail_list = False
        self.tasks: List[TaskDraft] = []
        self.bodies: Dict[str, EmailBody] = {}

    def fail(self, method: str, message_id: str) -> None:
        self.failures.add((method, message_id))

    def _record(self, method: str, message_id: str) -> None:
        self.calls.append((method, message_id))
        if (method, message_id) in self.failures:
            raise RemoteCallError(f"{method} failed for {message_id}", status_code=500)

    async def list_unread(self, scope: str) -> List[Email]:
        self.calls.append(("list_unread", scope))
        if self.fail_list:
            raise RemoteCallError("Failed to fetch emails", status_code=500)
        return list(self.emails)

    async def get_body(self, message_id: str) -> EmailBody:
        self._record("get_body", message_id)
        return self.bodies.get(message_id, EmailBody(text="", html=""))

    async def set_read(self, message_id: str) -> None:
        self._record("set_read", message_id)

    async def set_unread(self, message_id: str) -> None:
        self._record("set_unread", message_id)

    async def archive(self, message_id: str) -> None:
        self._record("archive", message_id)

    async def unarchive(self, message_id: str) -> None:
        self._record("unarchive", message_id)

    async def create_task(self, task: TaskDraft) -> str:
        self._record("create_task", task.title)
        self.tasks.append(task)
        return f"task-{len(self.tasks)}"


def make_email(message_id: str, score: Optional[int] = None, **overrides) -> Email:
    analysis = None
    if score is not None:
        analysis = EmailAnalysis(
            urgency_score=score,
            action_item=f"Handle {message_id}",
            summary=f"Summary of {message_id}",
        )
    fields = dict(
        id=message_id,
        thread_id=f"t-{message_id}",
        from_email=f"{message_id.lower()}@example.com",
        from_name=f"Sender {message_id}",
        subject=f"Subject {message_id}",
        snippet=f"Snippet {message_id}",
        date="Mon, 19 Oct 2026 09:00:00 +0000",
        analysis=analysis,
    )
    fields.update(overrides)
    return Email(**fields)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def email_factory() -> Callable[..., Email]:
    return make_email


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
