"""Task schemas."""
from typing import Optional

from src.models.enums import TaskPriority
from src.schemas.common import CamelModel


class TaskCreate(CamelModel):
    """Schema for creating a task."""

    contact_id: str
    title: str = ""
    notes: Optional[str] = None
    due_date: Optional[int] = None
    priority: TaskPriority = TaskPriority.MEDIUM


class TaskUpdate(CamelModel):
    """Schema for updating a task.

    Only the fields present in the payload are applied.
    """

    title: Optional[str] = None
    notes: Optional[str] = None
    due_date: Optional[int] = None
    completed: Optional[bool] = None
    priority: Optional[TaskPriority] = None


class Task(CamelModel):
    """A stored task."""

    id: str
    contact_id: str
    title: str
    notes: Optional[str] = None
    due_date: Optional[int] = None
    completed: bool = False
    priority: TaskPriority = TaskPriority.MEDIUM
    created_at: int
    updated_at: int
