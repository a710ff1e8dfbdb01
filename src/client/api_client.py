# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""HTTP client for the contacts and tasks API."""

import logging
from typing import Any

import httpx
from pydantic.alias_generators import to_camel

from src.models.enums import SortOrder
from src.schemas.common import Page
from src.schemas.contact import Contact, ContactCreate
from src.schemas.task import Task, TaskCreate, TaskUpdate
from src.services.errors import (
    NotFoundError,
    ServiceError,
    TransientError,
    ValidationError,
    strip_code,
)
from src.services.query_service import ListQuery

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def query_params(query: ListQuery) -> dict[str, Any]:
    """Translate a ListQuery into the API's camelCase query parameters."""
    params: dict[str, Any] = {
        "sortOrder": SortOrder(query.sort_order).value,
        "page": query.page,
        "pageSize": query.page_size,
    }
    if query.q:
        params["q"] = query.q
    if query.sort_by:
        params["sortBy"] = query.sort_by
    for name, value in query.filters.items():
        if value is None:
            continue
        params[to_camel(name)] = str(value).lower() if isinstance(value, bool) else value
    return params


def error_from_response(response: httpx.Response) -> ServiceError:
    """Map an error response to the matching ServiceError."""
    try:
        message = response.json().get("message") or ""
    except ValueError:
        message = ""
    message = strip_code(message) or f"HTTP {response.status_code}"
    if response.status_code == 400:
        return ValidationError(message)
    if response.status_code == 404:
        return NotFoundError(message)
    return TransientError(message)


class ApiClient:
    """Thin async wrapper over the REST endpoints.

    Raises ValidationError for 400, NotFoundError for 404 and
    TransientError for every other failure, including network errors.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Server root URL
            http_client: Preconfigured client, e.g. with an ASGI transport
            timeout: Request timeout in seconds for the default client
        """
        self.base_url = base_url
        self.timeout = timeout
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, f"{API_PREFIX}{path}", **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransientError(f"network error: {e}") from e
        if response.is_success:
            return response.json()
        raise error_from_response(response)

    # -------------------------- contacts --------------------------
    async def list_contacts(self, query: ListQuery) -> Page[Contact]:
        data = await self._request("GET", "/contacts", params=query_params(query))
        return Page[Contact].model_validate(data)

    async def get_contact(self, contact_id: str) -> Contact:
        data = await self._request("GET", f"/contacts/{contact_id}")
        return Contact.model_validate(data)

    async def create_contact(self, data: ContactCreate) -> Contact:
        body = data.model_dump(by_alias=True, mode="json", exclude_none=True)
        return Contact.model_validate(await self._request("POST", "/contacts", json=body))

    async def delete_contact(self, contact_id: str) -> bool:
        data = await self._request("DELETE", f"/contacts/{contact_id}")
        return bool(data.get("ok"))

    # -------------------------- tasks --------------------------
    async def list_tasks(self, query: ListQuery) -> Page[Task]:
        data = await self._request("GET", "/tasks", params=query_params(query))
        return Page[Task].model_validate(data)

    async def get_task(self, task_id: str) -> Task:
        data = await self._request("GET", f"/tasks/{task_id}")
        return Task.model_validate(data)

    async def create_task(self, data: TaskCreate) -> Task:
        body = data.model_dump(by_alias=True, mode="json", exclude_none=True)
        return Task.model_validate(await self._request("POST", "/tasks", json=body))

    async def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        body = data.model_dump(by_alias=True, mode="json", exclude_unset=True)
        return Task.model_validate(
            await self._request("PATCH", f"/tasks/{task_id}", json=body)
        )

    async def delete_task(self, task_id: str) -> bool:
        data = await self._request("DELETE", f"/tasks/{task_id}")
        return bool(data.get("ok"))
