# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the HTTP client."""

import json

import httpx
import pytest
import respx
from httpx import Response

from src.client.api_client import ApiClient, query_params
from src.client.retry import RetryPolicy, with_retry
from src.models.enums import SortOrder
from src.schemas.contact import ContactCreate
from src.schemas.task import TaskUpdate
from src.services.errors import NotFoundError, TransientError, ValidationError
from src.services.query_service import ListQuery

BASE_URL = "http://crm.test"

CONTACT = {
    "id": "C00001",
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@x.com",
    "phone": "",
    "company": "",
    "city": "",
    "state": "",
    "tags": [],
    "createdAt": 1700000000000,
    "lastActivityAt": 1700000000000,
}

TASK = {
    "id": "T00001",
    "contactId": "C00001",
    "title": "Call",
    "completed": True,
    "priority": "medium",
    "createdAt": 1700000000000,
    "updatedAt": 1700000001000,
}


async def no_sleep(seconds):
    return None


class TestQueryParams:
    def test_camel_case_and_booleans(self):
        params = query_params(
            ListQuery(
                q="ada",
                sort_by="lastActivityAt",
                sort_order=SortOrder.ASC,
                page=2,
                page_size=25,
                filters={"contact_id": "C00001", "completed": False, "tag": None},
            )
        )

        assert params == {
            "q": "ada",
            "sortBy": "lastActivityAt",
            "sortOrder": "asc",
            "page": 2,
            "pageSize": 25,
            "contactId": "C00001",
            "completed": "false",
        }

    def test_defaults_omit_empty_values(self):
        params = query_params(ListQuery())
        assert params == {"sortOrder": "desc", "page": 1, "pageSize": 50}


class TestApiClient:
    """Tests for status code mapping."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_list_contacts(self):
        route = respx.route(method="GET", host="crm.test", path="/api/v1/contacts").mock(
            return_value=Response(
                200,
                json={"data": [CONTACT], "total": 1, "page": 1, "pageSize": 50, "hasNext": False},
            )
        )

        async with ApiClient(BASE_URL) as client:
            page = await client.list_contacts(ListQuery(q="ada"))

        assert page.total == 1
        assert page.data[0].first_name == "Ada"
        assert route.calls.last.request.url.params["q"] == "ada"

    @respx.mock
    @pytest.mark.asyncio
    async def test_retry_after_service_unavailable(self):
        route = respx.get(f"{BASE_URL}/api/v1/contacts/C00001").mock(
            side_effect=[
                Response(503, json={"message": "TransientError: simulated network failure"}),
                Response(200, json=CONTACT),
            ]
        )

        async with ApiClient(BASE_URL) as client:
            contact = await with_retry(
                lambda: client.get_contact("C00001"), RetryPolicy(), sleep=no_sleep
            )

        assert contact.id == "C00001"
        assert route.call_count == 2

    @respx.mock
    @pytest.mark.asyncio
    async def test_bad_request_is_validation_error(self):
        respx.post(f"{BASE_URL}/api/v1/contacts").mock(
            return_value=Response(400, json={"message": "ValidationError: email already exists"})
        )

        async with ApiClient(BASE_URL) as client:
            with pytest.raises(ValidationError) as exc_info:
                await client.create_contact(
                    ContactCreate(first_name="Ada", last_name="L", email="ada@x.com")
                )

        assert exc_info.value.message == "email already exists"

    @respx.mock
    @pytest.mark.asyncio
    async def test_not_found(self):
        respx.delete(f"{BASE_URL}/api/v1/tasks/T00009").mock(
            return_value=Response(404, json={"message": "NotFoundError: task not found"})
        )

        async with ApiClient(BASE_URL) as client:
            with pytest.raises(NotFoundError, match="task not found"):
                await client.delete_task("T00009")

    @respx.mock
    @pytest.mark.asyncio
    async def test_other_status_is_transient(self):
        respx.get(f"{BASE_URL}/api/v1/tasks/T00001").mock(return_value=Response(500, text="boom"))

        async with ApiClient(BASE_URL) as client:
            with pytest.raises(TransientError, match="HTTP 500"):
                await client.get_task("T00001")

    @respx.mock
    @pytest.mark.asyncio
    async def test_network_error_is_transient(self):
        respx.get(f"{BASE_URL}/api/v1/tasks/T00001").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        async with ApiClient(BASE_URL) as client:
            with pytest.raises(TransientError, match="network error"):
                await client.get_task("T00001")

    @respx.mock
    @pytest.mark.asyncio
    async def test_update_sends_only_set_fields(self):
        route = respx.patch(f"{BASE_URL}/api/v1/tasks/T00001").mock(
            return_value=Response(200, json=TASK)
        )

        async with ApiClient(BASE_URL) as client:
            task = await client.update_task("T00001", TaskUpdate(completed=True))

        assert task.completed is True
        assert json.loads(route.calls.last.request.content) == {"completed": True}

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        client = ApiClient(BASE_URL)
        await client.close()
        await client.close()
