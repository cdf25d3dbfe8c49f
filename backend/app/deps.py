from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException

from inbox_priority.app.inbox import connect_gmail
from inbox_priority.config.settings import Settings, load_settings
from inbox_priority.gmail.client import GmailClient
from inbox_priority.scoring.analyzer import EmailAnalyzer, build_analyzer
from inbox_priority.tasks.todoist import TodoistClient


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def get_gmail() -> GmailClient:
    # AuthRequiredError propagates to the 401 handler in main.
    return connect_gmail()


def get_analyzer(settings: Settings = Depends(get_settings)) -> Optional[EmailAnalyzer]:
    return build_analyzer(settings)


def get_task_client(settings: Settings = Depends(get_settings)) -> TodoistClient:
    if not settings.todoist_api_token:
        raise HTTPException(status_code=500, detail="TODOIST_API_TOKEN is not configured.")
    return TodoistClient(settings.todoist_api_token)
