from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Literal, Optional

Category = Literal["urgent", "school", "unsubscribe_candidate", "normal"]
CATEGORIES: tuple[str, ...] = ("urgent", "school", "unsubscribe_candidate", "normal")

URGENT_THRESHOLD = 4


@dataclass(frozen=True)
class EmailAnalysis:
    urgency_score: int
    action_item: str
    summary: str
    category: Category = "normal"
    suggested_due: Optional[str] = None

    @property
    def is_urgent(self) -> bool:
        # Derived, never trusted from the model output.
        return self.urgency_score >= URGENT_THRESHOLD

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["is_urgent"] = self.is_urgent
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmailAnalysis":
        return cls(
            urgency_score=int(data["urgency_score"]),
            action_item=str(data.get("action_item") or ""),
            summary=str(data.get("summary") or ""),
            category=data.get("category") or "normal",
            suggested_due=data.get("suggested_due") or None,
        )


def default_analysis(snippet: str) -> EmailAnalysis:
    """Substitute used whenever scoring fails for a message."""
    return EmailAnalysis(
        urgency_score=2,
        action_item="Review email",
        summary=snippet[:200],
        category="normal",
        suggested_due=None,
    )


@dataclass(frozen=True)
class Email:
    id: str
    thread_id: str
    from_email: str
    from_name: str
    subject: str
    snippet: str
    date: str
    analysis: Optional[EmailAnalysis] = None

    @property
    def urgency_score(self) -> int:
        return self.analysis.urgency_score if self.analysis else 0

    @property
    def is_urgent(self) -> bool:
        return bool(self.analysis and self.analysis.is_urgent)

    def with_analysis(self, analysis: EmailAnalysis) -> "Email":
        return replace(self, analysis=analysis)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "threadId": self.thread_id,
            "from": self.from_email,
            "fromName": self.from_name,
            "subject": self.subject,
            "snippet": self.snippet,
            "date": self.date,
            "analysis": self.analysis.to_dict() if self.analysis else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Email":
        analysis = data.get("analysis")
        return cls(
            id=str(data["id"]),
            thread_id=str(data.get("threadId") or ""),
            from_email=str(data.get("from") or ""),
            from_name=str(data.get("fromName") or data.get("from") or ""),
            subject=str(data.get("subject") or ""),
            snippet=str(data.get("snippet") or ""),
            date=str(data.get("date") or ""),
            analysis=EmailAnalysis.from_dict(analysis) if analysis else None,
        )


@dataclass(frozen=True)
class EmailBody:
    text: str
    html: str


@dataclass(frozen=True)
class TaskDraft:
    title: str
    description: str
    # Todoist scale: 4 is the highest priority.
    priority: int
    due_string: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
