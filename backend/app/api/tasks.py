from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from backend.app.deps import get_task_client
from inbox_priority.errors import TaskCreationError
from inbox_priority.models import TaskDraft
from inbox_priority.tasks.todoist import TodoistClient

logger = logging.getLogger(__name__)

router = APIRouter()


class TaskRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    priority: int = Field(default=2, ge=1, le=4)
    due_string: Optional[str] = None


@router.post("/tasks")
def create_task(payload: TaskRequest, todoist: TodoistClient = Depends(get_task_client)) -> dict[str, str]:
    task = TaskDraft(
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        due_string=payload.due_string or None,
    )
    try:
        task_id = todoist.create_task(task)
    except TaskCreationError as exc:
        logger.error("Error creating Todoist task: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to create task") from exc
    logger.info("Created Todoist task id=%s", task_id)
    return {"id": task_id}
