"""Pydantic schemas package."""
from src.schemas.common import (
    CamelModel,
    ErrorResponse,
    HealthResponse,
    OkResponse,
    Page,
)
from src.schemas.contact import Contact, ContactCreate
from src.schemas.task import Task, TaskCreate, TaskUpdate

__all__ = [
    "CamelModel",
    "Contact",
    "ContactCreate",
    "ErrorResponse",
    "HealthResponse",
    "OkResponse",
    "Page",
    "Task",
    "TaskCreate",
    "TaskUpdate",
]
