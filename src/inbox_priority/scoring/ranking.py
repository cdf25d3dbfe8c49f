from __future__ import annotations

from typing import Iterable, List

from inbox_priority.models import Email


def rank_emails(emails: Iterable[Email]) -> List[Email]:
    """Most urgent first; sorted() is stable so ties keep fetch order."""
    return sorted(emails, key=lambda e: e.urgency_score, reverse=True)
