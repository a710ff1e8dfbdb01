# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Contact API endpoints."""

from fastapi import APIRouter, Depends, Query, status

from src.api.deps import get_backend, get_settings
from src.config import Settings
from src.models.enums import SortOrder
from src.schemas.common import OkResponse, Page
from src.schemas.contact import Contact, ContactCreate
from src.services.query_service import ListQuery
from src.services.simulator import SimulatedBackend

router = APIRouter()


@router.get("", response_model=Page[Contact])
async def list_contacts(
    q: str = "",
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, alias="pageSize"),
    tag: str | None = None,
    backend: SimulatedBackend = Depends(get_backend),
    app_settings: Settings = Depends(get_settings),
) -> Page:
    """List contacts with search, sorting and pagination."""
    query = ListQuery(
        q=q,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size or app_settings.default_page_size,
        filters={"tag": tag},
    )
    return await backend.list_contacts(query)


@router.post("", response_model=Contact, status_code=status.HTTP_201_CREATED)
async def create_contact(
    data: ContactCreate,
    backend: SimulatedBackend = Depends(get_backend),
) -> Contact:
    """Create a new contact."""
    return await backend.create_contact(data)


@router.get("/{contact_id}", response_model=Contact)
async def get_contact(
    contact_id: str,
    backend: SimulatedBackend = Depends(get_backend),
) -> Contact:
    """Get a specific contact."""
    return await backend.get_contact(contact_id)


@router.delete("/{contact_id}", response_model=OkResponse)
async def delete_contact(
    contact_id: str,
    backend: SimulatedBackend = Depends(get_backend),
) -> OkResponse:
    """Delete a contact and all of its tasks."""
    await backend.delete_contact(contact_id)
    return OkResponse()
