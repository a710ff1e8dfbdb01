# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Task API endpoints."""

from fastapi import APIRouter, Depends, Query, status

from src.api.deps import get_backend, get_settings
from src.config import Settings
from src.models.enums import SortOrder
from src.schemas.common import OkResponse, Page
from src.schemas.task import Task, TaskCreate, TaskUpdate
from src.services.query_service import ListQuery
from src.services.simulator import SimulatedBackend

router = APIRouter()


@router.get("", response_model=Page[Task])
async def list_tasks(
    contact_id: str | None = Query(None, alias="contactId"),
    completed: bool | None = None,
    q: str = "",
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, alias="pageSize"),
    backend: SimulatedBackend = Depends(get_backend),
    app_settings: Settings = Depends(get_settings),
) -> Page:
    """List tasks, optionally for one contact or completion state."""
    query = ListQuery(
        q=q,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size or app_settings.default_page_size,
        filters={"contact_id": contact_id, "completed": completed},
    )
    return await backend.list_tasks(query)


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    backend: SimulatedBackend = Depends(get_backend),
) -> Task:
    """Create a new task for a contact."""
    return await backend.create_task(data)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    backend: SimulatedBackend = Depends(get_backend),
) -> Task:
    """Get a specific task."""
    return await backend.get_task(task_id)


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    backend: SimulatedBackend = Depends(get_backend),
) -> Task:
    """Update the fields present in the request body."""
    return await backend.update_task(task_id, data)


@router.delete("/{task_id}", response_model=OkResponse)
async def delete_task(
    task_id: str,
    backend: SimulatedBackend = Depends(get_backend),
) -> OkResponse:
    """Delete a task."""
    await backend.delete_task(task_id)
    return OkResponse()
