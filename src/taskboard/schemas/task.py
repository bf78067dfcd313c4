"""Pydantic schemas for tasks.

- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT to modify a task (every field optional)
- TaskRead: what the API returns
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from taskboard.db.models import TaskStatus

# task_order is a signed 64-bit column
BIGINT_MIN = -(2**63)
BIGINT_MAX = 2**63 - 1


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None


class TaskUpdate(BaseModel):
    """Partial update: only fields present and non-null are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    order: Optional[int] = Field(None, ge=BIGINT_MIN, le=BIGINT_MAX)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class TaskRead(BaseModel):
    id: int
    title: str
    description: Optional[str]
    status: TaskStatus
    order: Optional[int]
    creator_name: str
    created_at: datetime

    model_config = {"from_attributes": True}
